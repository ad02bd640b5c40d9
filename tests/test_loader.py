"""Tests for the startup pipeline."""

from unittest.mock import patch

import pytest

from opensearch_helper.config import Config
from opensearch_helper.loader import build_registry, resolve_engines
from opensearch_helper.registry import RegistryValidationError

from conftest import icon_response, mock_http_client


def make_config(**favicon) -> Config:
    return Config(
        favicon=favicon,
        engines=[
            {
                "short_name": "go",
                "url": {"template": "https://pkg.go.dev/search?q={searchTerms}"},
                "image": {"favicon_domain": "go.dev"},
            },
            {
                "short_name": "pypi",
                "url": {"template": "https://pypi.org/search/?q={searchTerms}"},
            },
        ],
    )


@patch("opensearch_helper.http_utils.httpx.Client")
def test_build_registry_embeds_favicons(mock_client):
    client = mock_http_client(mock_client, response=icon_response(b"\x00\x01"))

    registry = build_registry(make_config())

    assert [d.short_name for d in registry] == ["go", "pypi"]
    assert all(d.image.data == "data:image/x-icon;base64,AAE=" for d in registry)
    requested = [call.args[0] for call in client.get.call_args_list]
    assert requested == [
        "https://icons.duckduckgo.com/ip3/go.dev.ico",
        "https://icons.duckduckgo.com/ip3/pypi.org.ico",
    ]


@patch("opensearch_helper.http_utils.httpx.Client")
def test_favicon_failure_rejects_everything(mock_client):
    mock_http_client(mock_client, response=icon_response(status_code=500))

    with pytest.raises(RegistryValidationError) as exc_info:
        build_registry(make_config())

    assert exc_info.value.short_name == "go"


@patch("opensearch_helper.http_utils.httpx.Client")
def test_favicons_disabled(mock_client):
    registry = build_registry(make_config(enabled=False))

    assert len(registry) == 2
    mock_client.assert_not_called()


@patch("opensearch_helper.http_utils.httpx.Client")
def test_fetch_override(mock_client):
    resolutions = resolve_engines(make_config(enabled=True), fetch_favicons=False)

    assert all(resolution.ok for resolution in resolutions)
    mock_client.assert_not_called()


@patch("opensearch_helper.http_utils.httpx.Client")
def test_custom_service_and_user_agent(mock_client):
    client = mock_http_client(mock_client, response=icon_response())

    resolve_engines(
        make_config(service_url="https://icons.example/{domain}.png", user_agent="TestAgent/1.0")
    )

    assert client.get.call_args_list[0].args[0] == "https://icons.example/go.dev.png"
    assert client.get.call_args_list[0].kwargs["headers"]["User-Agent"] == "TestAgent/1.0"


def test_no_engines():
    assert len(build_registry(Config(), fetch_favicons=False)) == 0

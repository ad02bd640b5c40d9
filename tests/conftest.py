"""Shared fixtures for opensearch-helper tests."""

import logging
from unittest.mock import Mock

import httpx
import pytest

from opensearch_helper.descriptor import Image, QueryURL, SearchDescriptor
from opensearch_helper.registry import DescriptorRegistry


def make_descriptor(short_name: str = "test", **kwargs) -> SearchDescriptor:
    """Build a valid descriptor, overriding any field via kwargs."""
    fields = {
        "short_name": short_name,
        "description": f"Search {short_name}",
        "query_url": QueryURL(template="https://pkg.go.dev/search?q={searchTerms}"),
        "image": Image(width=16, height=16),
    }
    fields.update(kwargs)
    return SearchDescriptor(**fields)


def icon_response(
    content: bytes = b"\x00\x01",
    status_code: int = 200,
    content_type: str | None = "image/x-icon",
    url: str = "https://icons.duckduckgo.com/ip3/go.dev.ico",
) -> httpx.Response:
    """Build a real httpx response as returned by the favicon service."""
    headers = {"content-type": content_type} if content_type else {}
    return httpx.Response(
        status_code,
        content=content,
        headers=headers,
        request=httpx.Request("GET", url),
    )


def mock_http_client(mock_client: Mock, response=None, side_effect=None) -> Mock:
    """Wire a patched httpx.Client so that ``get`` returns or raises."""
    mock_client_instance = Mock()
    if side_effect is not None:
        mock_client_instance.get.side_effect = side_effect
    else:
        mock_client_instance.get.return_value = response
    mock_client.return_value.__enter__.return_value = mock_client_instance
    mock_client.return_value.__exit__.return_value = False
    return mock_client_instance


@pytest.fixture
def descriptor() -> SearchDescriptor:
    return make_descriptor()


@pytest.fixture
def registry() -> DescriptorRegistry:
    return DescriptorRegistry([make_descriptor("test")])


@pytest.fixture(autouse=True)
def reset_loggers():
    """Drop handlers the CLI attaches to streams that CliRunner closes."""
    yield
    for name in ("opensearch_helper", "werkzeug"):
        logging.getLogger(name).handlers.clear()

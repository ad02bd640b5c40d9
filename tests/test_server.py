"""Tests for the HTTP dispatcher."""

import ssl
from unittest.mock import Mock, patch

import pytest

from opensearch_helper.config import ConfigError, ServerConfig
from opensearch_helper.registry import DescriptorRegistry
from opensearch_helper.renderers import RenderError
from opensearch_helper.server import base_url, build_ssl_context, create_app, run_server

from conftest import make_descriptor


@pytest.fixture
def client(registry):
    app = create_app(registry)
    app.config["TESTING"] = True
    return app.test_client()


class TestDescriptorRoute:
    """Test GET /descriptor/<short_name>."""

    def test_known_engine(self, client):
        response = client.get("/descriptor/test")

        assert response.status_code == 200
        assert response.mimetype == "application/opensearchdescription+xml"
        assert b"<ShortName>test</ShortName>" in response.data
        assert b'xmlns="http://a9.com/-/spec/opensearch/1.1/"' in response.data
        assert b'xmlns:moz="http://www.mozilla.org/2006/browser/search/"' in response.data

    def test_unknown_engine_is_not_found(self, client):
        response = client.get("/descriptor/missing")
        assert response.status_code == 404

    def test_quoted_short_name(self):
        app = create_app(DescriptorRegistry([make_descriptor("Search Go packages")]))

        response = app.test_client().get("/descriptor/Search%20Go%20packages")

        assert response.status_code == 200
        assert b"<ShortName>Search Go packages</ShortName>" in response.data

    @patch("opensearch_helper.server.render_descriptor_xml")
    def test_render_failure_is_server_error(self, mock_render, client):
        mock_render.side_effect = RenderError("boom")

        response = client.get("/descriptor/test")

        assert response.status_code == 500
        assert b"failed to generate XML" in response.data

    def test_post_not_allowed(self, client):
        assert client.post("/descriptor/test").status_code == 405


class TestIndexRoute:
    """Test GET /."""

    def test_discovery_page(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.mimetype == "text/html"
        assert b'href="/descriptor/test"' in response.data

    def test_links_resolve(self):
        """Every advertised descriptor link is served."""
        names = ["a b", "c", "/x", "a//b", "go/pkg"]
        registry = DescriptorRegistry([make_descriptor(name) for name in names])
        client = create_app(registry).test_client()

        html = client.get("/").data.decode("utf-8")

        paths = [
            "/descriptor/a%20b",
            "/descriptor/c",
            "/descriptor/%2Fx",
            "/descriptor/a%2F%2Fb",
            "/descriptor/go%2Fpkg",
        ]
        for name, path in zip(names, paths):
            assert f'href="{path}"' in html
            response = client.get(path)
            assert response.status_code == 200
            assert f"<ShortName>{name}</ShortName>".encode() in response.data

    def test_empty_registry(self):
        response = create_app(DescriptorRegistry()).test_client().get("/")

        assert response.status_code == 200
        assert b"<link" not in response.data
        assert b"<img" not in response.data

    @patch("opensearch_helper.server.render_discovery_page")
    def test_render_failure_is_server_error(self, mock_render, client):
        mock_render.side_effect = RenderError("bad template")

        response = client.get("/")

        assert response.status_code == 500
        assert b"failed to execute template" in response.data
        # The server keeps serving other requests
        assert client.get("/descriptor/test").status_code == 200


class TestBaseURL:
    """Test base_url()."""

    def test_http(self):
        assert base_url(ServerConfig()) == "http://localhost:5030"

    def test_https(self, tmp_path):
        config = ServerConfig(
            port=8443,
            tls_enabled=True,
            tls_cert_file=tmp_path / "cert.pem",
            tls_key_file=tmp_path / "key.pem",
        )
        assert base_url(config) == "https://localhost:8443"

    def test_ipv6_host(self):
        assert base_url(ServerConfig(host="::1", port=8080)) == "http://[::1]:8080"


class TestSSLContext:
    """Test build_ssl_context()."""

    def test_missing_files_is_config_error(self, tmp_path):
        config = ServerConfig(
            tls_enabled=True,
            tls_cert_file=tmp_path / "missing-cert.pem",
            tls_key_file=tmp_path / "missing-key.pem",
        )
        with pytest.raises(ConfigError, match="TLS"):
            build_ssl_context(config)

    @patch("opensearch_helper.server.ssl.SSLContext.load_cert_chain")
    def test_protocol_versions(self, mock_load, tmp_path):
        config = ServerConfig(
            tls_enabled=True,
            tls_cert_file=tmp_path / "cert.pem",
            tls_key_file=tmp_path / "key.pem",
        )

        context = build_ssl_context(config)

        assert context.minimum_version == ssl.TLSVersion.TLSv1_2
        assert context.maximum_version == ssl.TLSVersion.TLSv1_3
        cipher_names = {cipher["name"] for cipher in context.get_ciphers()}
        assert "ECDHE-RSA-AES256-GCM-SHA384" in cipher_names
        assert not any("CBC" in name or name.startswith("AES") for name in cipher_names)


class TestRunServer:
    """Test run_server() wiring without binding a real socket."""

    @patch("opensearch_helper.server.webbrowser.open")
    @patch("opensearch_helper.server.make_server")
    def test_opens_browser_after_bind(self, mock_make_server, mock_open, registry):
        calls = []
        server = Mock()
        mock_make_server.side_effect = lambda *a, **kw: calls.append("bind") or server
        mock_open.side_effect = lambda url: calls.append("browser")
        server.serve_forever.side_effect = lambda: calls.append("serve")

        run_server(create_app(registry), ServerConfig(port=5031))

        assert calls == ["bind", "browser", "serve"]
        mock_open.assert_called_once_with("http://localhost:5031")
        assert mock_make_server.call_args.kwargs["threaded"] is True
        assert mock_make_server.call_args.kwargs["ssl_context"] is None
        server.server_close.assert_called_once()

    @patch("opensearch_helper.server.webbrowser.open")
    @patch("opensearch_helper.server.make_server")
    def test_browser_disabled(self, mock_make_server, mock_open, registry):
        run_server(create_app(registry), ServerConfig(), open_browser=False)

        mock_open.assert_not_called()
        mock_make_server.return_value.serve_forever.assert_called_once()

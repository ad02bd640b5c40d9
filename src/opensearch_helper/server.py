"""HTTP dispatcher serving the discovery page and the XML descriptors.

Routes:
    GET /                            discovery page (text/html)
    GET /descriptor/<short_name>     OpenSearch description document
"""

import logging
import ssl
import webbrowser

from flask import Flask, Response, abort
from werkzeug.routing import PathConverter
from werkzeug.serving import make_server

from .config import ConfigError, ServerConfig
from .constants import OPENSEARCH_CONTENT_TYPE, TLS_CIPHERS
from .registry import DescriptorRegistry
from .renderers import RenderError, render_descriptor_xml, render_discovery_page

logger = logging.getLogger(__name__)


class ShortNameConverter(PathConverter):
    """Like the path converter, but also matches names starting with a slash."""

    regex = ".+?"
    part_isolating = False


def create_app(registry: DescriptorRegistry) -> Flask:
    """
    Create the Flask application for a loaded registry.

    Args:
        registry: Validated, read-only registry of search engines

    Returns:
        Flask application
    """
    app = Flask(__name__)
    # Short names may contain "//" or start with "/"; keep them intact.
    app.url_map.merge_slashes = False
    app.url_map.converters["short_name"] = ShortNameConverter

    @app.route("/", methods=["GET"])
    def index():
        try:
            body = render_discovery_page(registry)
        except RenderError as e:
            logger.error(f"Failed to render discovery page: {e}")
            return Response("failed to execute template", status=500, mimetype="text/plain")
        return Response(body, status=200, mimetype="text/html")

    @app.route("/descriptor/<short_name:short_name>", methods=["GET"])
    def descriptor(short_name: str):
        engine = registry.find_by_short_name(short_name)
        if engine is None:
            logger.info(f"Unknown search engine requested: {short_name!r}")
            abort(404, description=f"No search engine named {short_name!r}")

        try:
            body = render_descriptor_xml(engine)
        except RenderError as e:
            logger.error(f"Failed to render descriptor {short_name!r}: {e}")
            return Response("failed to generate XML", status=500, mimetype="text/plain")
        return Response(body, status=200, mimetype=OPENSEARCH_CONTENT_TYPE)

    return app


def base_url(server_config: ServerConfig) -> str:
    """Return the URL of the discovery page, e.g. http://localhost:5030."""
    scheme = "https" if server_config.tls_enabled else "http"
    host = server_config.host
    if ":" in host:
        host = f"[{host}]"
    return f"{scheme}://{host}:{server_config.port}"


def build_ssl_context(server_config: ServerConfig) -> ssl.SSLContext:
    """
    Build the server TLS context: TLS 1.2 to 1.3, ECDHE/AEAD ciphers only.

    Raises:
        ConfigError: If the certificate or key cannot be loaded
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.maximum_version = ssl.TLSVersion.TLSv1_3
    context.set_ciphers(":".join(TLS_CIPHERS))

    try:
        context.load_cert_chain(
            certfile=str(server_config.tls_cert_file),
            keyfile=str(server_config.tls_key_file),
        )
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"Failed to load TLS certificate/key: {e}") from e

    return context


def run_server(app: Flask, server_config: ServerConfig, open_browser: bool = True) -> None:
    """
    Serve the application until interrupted.

    The socket is bound before the browser is opened, so the discovery page
    is reachable by the time the browser asks for it. Each request runs in
    its own thread.

    Args:
        app: Application from create_app
        server_config: Host, port and TLS settings
        open_browser: Open the discovery page in the default browser
    """
    ssl_context = build_ssl_context(server_config) if server_config.tls_enabled else None

    server = make_server(
        server_config.host,
        server_config.port,
        app,
        threaded=True,
        ssl_context=ssl_context,
    )

    url = base_url(server_config)
    logger.info(f"Serving search engines on {url}")

    if open_browser:
        webbrowser.open(url)

    try:
        server.serve_forever()
    finally:
        server.server_close()

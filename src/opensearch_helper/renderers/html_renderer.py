"""HTML renderer for the discovery page.

The discovery page carries one <link rel="search"> per engine so the browser
offers to add it, followed by a visible list of the engines.
"""

import logging
from typing import Any
from urllib.parse import quote

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from ..constants import OPENSEARCH_CONTENT_TYPE
from ..descriptor import SearchDescriptor, display_name
from ..registry import DescriptorRegistry
from .base import RenderError

logger = logging.getLogger(__name__)

DISCOVERY_TEMPLATE = "discovery.html"

_environment = Environment(
    loader=PackageLoader("opensearch_helper", "templates"),
    autoescape=select_autoescape(["html"]),
)


def descriptor_path(short_name: str) -> str:
    """Return the URL path of a descriptor's XML document."""
    return f"/descriptor/{quote(short_name, safe='')}"


def _engine_context(descriptor: SearchDescriptor) -> dict[str, Any]:
    image = descriptor.image if descriptor.image and descriptor.image.data else None
    return {
        "name": display_name(descriptor),
        "href": descriptor_path(descriptor.short_name),
        "image": image,
    }


def render_discovery_page(registry: DescriptorRegistry) -> bytes:
    """
    Render the discovery page for all registered engines.

    Args:
        registry: Engines to list, in display order

    Returns:
        UTF-8 encoded HTML

    Raises:
        RenderError: If the template cannot be loaded or rendered
    """
    try:
        template = _environment.get_template(DISCOVERY_TEMPLATE)
        html = template.render(
            engines=[_engine_context(descriptor) for descriptor in registry],
            content_type=OPENSEARCH_CONTENT_TYPE,
        )
    except TemplateError as e:
        raise RenderError(f"failed to execute template: {e}") from e

    return html.encode("utf-8")

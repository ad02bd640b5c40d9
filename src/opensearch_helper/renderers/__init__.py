"""Renderers for the discovery page and the OpenSearch descriptors.

Renderers only read descriptors; they never touch the network.
"""

from .base import RenderError
from .html_renderer import descriptor_path, render_discovery_page
from .xml_renderer import render_descriptor_xml

__all__ = ["RenderError", "descriptor_path", "render_descriptor_xml", "render_discovery_page"]

"""XML renderer for OpenSearch 1.1 description documents."""

import xml.etree.ElementTree as ET

from ..constants import MOZILLA_NAMESPACE, OPENSEARCH_NAMESPACE
from ..descriptor import SearchDescriptor, joined_tags
from .base import RenderError


def _text_element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = text
    return element


def build_descriptor_element(descriptor: SearchDescriptor) -> ET.Element:
    """Build the <OpenSearchDescription> element tree for a descriptor."""
    # Namespaces are written as plain attributes so the default namespace
    # stays unprefixed in the output.
    root = ET.Element(
        "OpenSearchDescription",
        {"xmlns": OPENSEARCH_NAMESPACE, "xmlns:moz": MOZILLA_NAMESPACE},
    )

    _text_element(root, "ShortName", descriptor.short_name)
    if descriptor.long_name:
        _text_element(root, "LongName", descriptor.long_name)
    _text_element(root, "Description", descriptor.description)
    _text_element(root, "Tags", joined_tags(descriptor))

    if descriptor.query_url is not None:
        ET.SubElement(
            root,
            "Url",
            {
                "template": descriptor.query_url.template,
                "type": descriptor.query_url.mime_type,
                "method": descriptor.query_url.method,
            },
        )

    if descriptor.image is not None and descriptor.image.data:
        attrs = {"width": str(descriptor.image.width), "height": str(descriptor.image.height)}
        if descriptor.image.mime_type:
            attrs["type"] = descriptor.image.mime_type
        image = ET.SubElement(root, "Image", attrs)
        image.text = descriptor.image.data

    if descriptor.developer:
        _text_element(root, "Developer", descriptor.developer)
    if descriptor.input_encoding:
        _text_element(root, "InputEncoding", descriptor.input_encoding)

    return root


def render_descriptor_xml(descriptor: SearchDescriptor) -> bytes:
    """
    Serialize a descriptor as an indented OpenSearch description document.

    Args:
        descriptor: Descriptor to serialize

    Returns:
        UTF-8 encoded XML, including the XML declaration

    Raises:
        RenderError: If the descriptor cannot be serialized
    """
    try:
        root = build_descriptor_element(descriptor)
        ET.indent(root, space="  ")
        return ET.tostring(root, encoding="UTF-8", xml_declaration=True)
    except (TypeError, ValueError) as e:
        raise RenderError(f"failed to generate XML: {e}") from e

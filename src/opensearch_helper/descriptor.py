"""OpenSearch description model.

A SearchDescriptor holds the fields of one OpenSearch 1.1 description
document. Behaviour that only steers how the helper builds a descriptor
(such as where to look up its favicon) lives in IconSource and is never
serialised.
"""

import logging
from dataclasses import dataclass, field

from .constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_DEVELOPER_LENGTH,
    MAX_LONG_NAME_LENGTH,
    MAX_TAGS_LENGTH,
)

logger = logging.getLogger(__name__)


class DescriptorValidationError(ValueError):
    """Raised when a descriptor violates an OpenSearch constraint."""


# ============================================================================
# Model
# ============================================================================


@dataclass(frozen=True)
class QueryURL:
    """The <Url> element: where the browser sends a search."""

    template: str  # Contains {searchTerms}, substituted by the browser
    mime_type: str = "text/html"
    method: str = "get"


@dataclass(frozen=True)
class Image:
    """The <Image> element: an icon URL or an embedded data URL."""

    width: int
    height: int
    mime_type: str = ""
    data: str = ""


@dataclass(frozen=True)
class IconSource:
    """Where to look up a descriptor's favicon.

    When ``domain`` is unset the host of the query URL template is used.
    """

    domain: str | None = None


@dataclass(frozen=True)
class SearchDescriptor:
    """One search engine entry."""

    short_name: str
    query_url: QueryURL | None
    long_name: str = ""
    description: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    image: Image | None = None
    developer: str = ""
    input_encoding: str = ""


# ============================================================================
# Operations
# ============================================================================


def display_name(descriptor: SearchDescriptor) -> str:
    """Return the long name if set, otherwise the short name."""
    if descriptor.long_name:
        return descriptor.long_name
    return descriptor.short_name


def joined_tags(descriptor: SearchDescriptor) -> str:
    """Return the tags as serialised: a single space-separated string."""
    return " ".join(descriptor.tags)


def _validate_query_url(query_url: QueryURL | None) -> None:
    if query_url is None or not query_url.template:
        raise DescriptorValidationError("failed to validate URL: no template was supplied")


def _validate_image(image: Image | None) -> None:
    if image is None:
        return
    if image.width <= 0:
        raise DescriptorValidationError("failed to validate Image: no width supplied for the image")
    if image.height <= 0:
        raise DescriptorValidationError(
            "failed to validate Image: no height was supplied for the image"
        )


def validate(descriptor: SearchDescriptor, resolution_error: str | None = None) -> None:
    """
    Validate a descriptor against the OpenSearch constraints.

    Checks run in a fixed order and stop at the first violation:
    the favicon resolution error (if any), the short name, text field
    lengths, the query URL, then the image dimensions.

    Args:
        descriptor: Descriptor to validate
        resolution_error: Error recorded while resolving the favicon

    Raises:
        DescriptorValidationError: On the first violation found
    """
    if resolution_error:
        raise DescriptorValidationError(resolution_error)

    if not descriptor.short_name:
        raise DescriptorValidationError("no 'ShortName' was supplied")

    if len(descriptor.long_name) > MAX_LONG_NAME_LENGTH:
        raise DescriptorValidationError(
            f"supplied 'LongName' was longer than {MAX_LONG_NAME_LENGTH} characters"
        )
    if len(descriptor.description) > MAX_DESCRIPTION_LENGTH:
        raise DescriptorValidationError(
            f"supplied 'Description' was longer than {MAX_DESCRIPTION_LENGTH} characters"
        )
    if len(joined_tags(descriptor)) > MAX_TAGS_LENGTH:
        raise DescriptorValidationError(
            f"total length of supplied 'Tags' was greater than {MAX_TAGS_LENGTH} characters"
        )
    if len(descriptor.developer) > MAX_DEVELOPER_LENGTH:
        raise DescriptorValidationError(
            f"supplied 'Developer' was longer than {MAX_DEVELOPER_LENGTH} characters"
        )

    _validate_query_url(descriptor.query_url)
    _validate_image(descriptor.image)

    logger.debug(f"Descriptor '{descriptor.short_name}' is valid")

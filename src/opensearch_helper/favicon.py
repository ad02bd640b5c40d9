"""Favicon resolver - embed a search engine's icon into its descriptor.

The icon is fetched once from a third-party favicon service and stored in
the descriptor as a base64 data URL, so the browser never has to fetch it.
Failures never raise; they are returned in FaviconResolution.error and only
become fatal when the descriptor is validated.
"""

import base64
import logging
from dataclasses import dataclass, replace
from urllib.parse import urlparse

from .constants import (
    DEFAULT_FAVICON_SERVICE_URL,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_ICON_MIME_TYPE,
    DEFAULT_ICON_SIZE,
)
from .descriptor import IconSource, Image, SearchDescriptor
from .http_utils import FetchErrorKind, fetch_bytes

logger = logging.getLogger(__name__)

_FAILURE_WORDING = {
    FetchErrorKind.TIMEOUT: "favicon service timed out",
    FetchErrorKind.STATUS: "favicon service returned an error",
    FetchErrorKind.TRANSPORT: "favicon service unreachable",
    FetchErrorKind.INVALID_URL: "invalid favicon URL",
}


class FaviconError(Exception):
    """Raised when the favicon domain cannot be determined."""


@dataclass(frozen=True)
class FaviconResolution:
    """
    Outcome of resolving the favicon of one descriptor.

    On failure ``descriptor`` is the unchanged input and ``error`` says why.
    """

    descriptor: SearchDescriptor
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def icon_domain(descriptor: SearchDescriptor, source: IconSource | None = None) -> str:
    """
    Determine the domain whose favicon should be fetched.

    Args:
        descriptor: Descriptor to look up
        source: Optional icon lookup override

    Returns:
        The override domain if one is configured, otherwise the host of the
        query URL template

    Raises:
        FaviconError: If the template cannot be parsed or has no host
    """
    if source is not None and source.domain:
        return source.domain

    template = descriptor.query_url.template if descriptor.query_url else ""

    try:
        hostname = urlparse(template).hostname
    except ValueError as e:
        raise FaviconError(
            f"failed to parse URL template {template!r} to grab favicon: {e}"
        ) from e

    if not hostname:
        raise FaviconError(f"URL template {template!r} has no host to grab favicon for")

    return hostname


def favicon_url(domain: str, service_url: str = DEFAULT_FAVICON_SERVICE_URL) -> str:
    """Build the favicon service URL for a domain (e.g. .../ip3/go.dev.ico)."""
    return service_url.format(domain=domain)


def resolve_favicon(
    descriptor: SearchDescriptor,
    source: IconSource | None = None,
    *,
    service_url: str = DEFAULT_FAVICON_SERVICE_URL,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    user_agent: str | None = None,
) -> FaviconResolution:
    """
    Fetch the descriptor's favicon and embed it as a data URL.

    This is a single blocking request without retries.

    Args:
        descriptor: Descriptor whose icon should be resolved
        source: Optional icon lookup override
        service_url: Favicon service URL template with a {domain} placeholder
        timeout: Request timeout in seconds
        user_agent: Custom user agent string

    Returns:
        FaviconResolution with the updated descriptor, or the unchanged
        descriptor and the error message
    """
    try:
        domain = icon_domain(descriptor, source)
    except FaviconError as e:
        logger.warning(f"{descriptor.short_name}: {e}")
        return FaviconResolution(descriptor=descriptor, error=str(e))

    url = favicon_url(domain, service_url)
    logger.info(f"Fetching favicon for '{descriptor.short_name}' from {url}")

    result = fetch_bytes(url, timeout=timeout, user_agent=user_agent)
    if not result.ok:
        reason = _FAILURE_WORDING[result.error_kind]
        error = f"failed to retrieve favicon URL {url!r}: {reason} ({result.detail})"
        logger.warning(f"{descriptor.short_name}: {error}")
        return FaviconResolution(descriptor=descriptor, error=error)

    contents = result.content
    content_type = result.content_type or DEFAULT_ICON_MIME_TYPE
    encoded = base64.b64encode(contents).decode("ascii")

    image = descriptor.image or Image(width=DEFAULT_ICON_SIZE, height=DEFAULT_ICON_SIZE)
    image = replace(image, mime_type=content_type, data=f"data:{content_type};base64,{encoded}")

    logger.debug(
        f"Embedded {len(contents)} byte favicon ({content_type}) for '{descriptor.short_name}'"
    )
    return FaviconResolution(descriptor=replace(descriptor, image=image))

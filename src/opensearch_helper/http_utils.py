"""HTTP utilities for fetching small resources such as favicons."""

from dataclasses import dataclass
from enum import Enum

import httpx

from .constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_USER_AGENT


class FetchErrorKind(Enum):
    """Why a fetch failed."""

    TIMEOUT = "timeout"
    STATUS = "status"
    TRANSPORT = "transport"
    INVALID_URL = "invalid_url"


@dataclass(frozen=True)
class FetchResult:
    """
    Body of a successful GET, or the reason it failed.

    ``detail`` is a short, human readable description of the failure
    ("HTTP 404", "connection refused", ...).
    """

    content: bytes = b""
    content_type: str | None = None
    error_kind: FetchErrorKind | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None


def fetch_bytes(
    url: str,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    user_agent: str | None = None,
) -> FetchResult:
    """
    GET a URL and return its body, following redirects.

    Never raises for network or HTTP failures; non-2xx statuses are failures.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds
        user_agent: Custom user agent string (default from constants)

    Returns:
        FetchResult with the body and content type, or the failure kind
    """
    headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}

    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return FetchResult(
                content=response.content,
                content_type=response.headers.get("content-type"),
            )

    except httpx.TimeoutException:
        return FetchResult(
            error_kind=FetchErrorKind.TIMEOUT,
            detail=f"no response within {timeout}s",
        )

    except httpx.HTTPStatusError as e:
        return FetchResult(
            error_kind=FetchErrorKind.STATUS,
            detail=f"HTTP {e.response.status_code}",
        )

    except httpx.InvalidURL as e:
        return FetchResult(error_kind=FetchErrorKind.INVALID_URL, detail=str(e))

    except httpx.HTTPError as e:
        # Connect, TLS, read and redirect failures
        return FetchResult(
            error_kind=FetchErrorKind.TRANSPORT,
            detail=str(e) or type(e).__name__,
        )

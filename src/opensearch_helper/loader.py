"""Startup pipeline: configuration to a validated registry.

Engines are built from the configuration, their favicons are resolved one
after another, and the whole set is validated before anything is served.
"""

import logging

from .config import Config
from .favicon import FaviconResolution, resolve_favicon
from .registry import DescriptorRegistry

logger = logging.getLogger(__name__)


def resolve_engines(config: Config, fetch_favicons: bool | None = None) -> list[FaviconResolution]:
    """
    Build every configured engine and resolve its favicon.

    Args:
        config: Loaded configuration
        fetch_favicons: Override ``config.favicon.enabled``

    Returns:
        One resolution per engine, in configuration order
    """
    if fetch_favicons is None:
        fetch_favicons = config.favicon.enabled

    resolutions = []
    for engine in config.engines:
        descriptor, source = engine.to_descriptor()
        if fetch_favicons:
            resolution = resolve_favicon(
                descriptor,
                source,
                service_url=config.favicon.service_url,
                timeout=config.favicon.timeout,
                user_agent=config.favicon.user_agent,
            )
        else:
            resolution = FaviconResolution(descriptor=descriptor)
        resolutions.append(resolution)

    return resolutions


def build_registry(config: Config, fetch_favicons: bool | None = None) -> DescriptorRegistry:
    """
    Build the registry served by the application.

    Args:
        config: Loaded configuration
        fetch_favicons: Override ``config.favicon.enabled``

    Returns:
        Validated registry

    Raises:
        RegistryValidationError: If any engine is invalid; nothing is loaded
    """
    if not config.engines:
        logger.warning("No search engines configured")

    return DescriptorRegistry.load(resolve_engines(config, fetch_favicons))

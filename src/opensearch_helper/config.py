"""Configuration management for opensearch-helper.

Configuration is read from TOML files, then environment variables, then
command-line overrides. The search engines themselves are listed as
``[[engines]]`` tables.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .constants import (
    DEFAULT_FAVICON_SERVICE_URL,
    DEFAULT_HOST,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_ICON_SIZE,
    DEFAULT_PORT,
    DEFAULT_USER_AGENT,
    MAX_PORT,
)
from .descriptor import IconSource, Image, QueryURL, SearchDescriptor

logger = logging.getLogger(__name__)

ENV_PREFIX = "OPENSEARCH_HELPER_"


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""


# ============================================================================
# Sections
# ============================================================================


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default=DEFAULT_HOST, description="Host to listen on")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=MAX_PORT, description="Port to listen on")
    tls_enabled: bool = Field(default=False, description="Serve over HTTPS")
    tls_cert_file: Path | None = Field(default=None, description="TLS certificate file")
    tls_key_file: Path | None = Field(default=None, description="TLS private key file")
    open_browser: bool = Field(
        default=True,
        description="Open the discovery page in the default browser on startup",
    )

    @model_validator(mode="after")
    def check_tls_files(self) -> "ServerConfig":
        """TLS needs both a certificate and a key."""
        if self.tls_enabled:
            if not self.tls_cert_file:
                raise ValueError("tls_enabled was set, but tls_cert_file was empty")
            if not self.tls_key_file:
                raise ValueError("tls_enabled was set, but tls_key_file was empty")
        return self


class FaviconConfig(BaseModel):
    """Favicon resolution configuration."""

    enabled: bool = Field(default=True, description="Fetch and embed favicons at startup")
    service_url: str = Field(
        default=DEFAULT_FAVICON_SERVICE_URL,
        description="Favicon service URL with a {domain} placeholder",
    )
    timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0, description="Request timeout")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="Custom user agent string")

    @field_validator("service_url")
    @classmethod
    def check_service_url(cls, v: str) -> str:
        if "{domain}" not in v:
            raise ValueError("service_url must contain a {domain} placeholder")
        return v

    @field_validator("user_agent", mode="before")
    @classmethod
    def validate_user_agent(cls, v):
        """Ensure user_agent is never None - use default if missing."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_USER_AGENT
        return v


class EngineURLConfig(BaseModel):
    """Query URL of a search engine."""

    template: str = Field(description="URL template containing {searchTerms}")
    type: str = Field(default="text/html", description="MIME type of the results")
    method: str = Field(default="get", description="HTTP method")


class EngineImageConfig(BaseModel):
    """Icon of a search engine."""

    width: int = Field(default=DEFAULT_ICON_SIZE, description="Icon width in pixels")
    height: int = Field(default=DEFAULT_ICON_SIZE, description="Icon height in pixels")
    type: str = Field(default="", description="Icon MIME type")
    url: str = Field(default="", description="Icon URL, replaced when the favicon is fetched")
    favicon_domain: str | None = Field(
        default=None,
        description="Domain to fetch the favicon for (default: host of the URL template)",
    )


class EngineConfig(BaseModel):
    """
    One search engine.

    Length limits are not enforced here; they are checked when the
    descriptor is validated so that all OpenSearch rules live in one place.
    """

    short_name: str = Field(description="Short name, also the URL path segment")
    long_name: str = Field(default="", description="Preferred display name")
    description: str = Field(default="", description="Human readable description")
    tags: list[str] = Field(default_factory=list, description="Search tags")
    url: EngineURLConfig
    image: EngineImageConfig | None = Field(default_factory=EngineImageConfig)
    developer: str = Field(default="", description="Author of the description")
    input_encoding: str = Field(default="", description="Character encoding of queries")

    def to_descriptor(self) -> tuple[SearchDescriptor, IconSource]:
        """
        Build the descriptor and its icon lookup settings.

        Returns:
            Tuple of (descriptor, icon source)
        """
        image = None
        source = IconSource()
        if self.image is not None:
            image = Image(
                width=self.image.width,
                height=self.image.height,
                mime_type=self.image.type,
                data=self.image.url,
            )
            source = IconSource(domain=self.image.favicon_domain or None)

        descriptor = SearchDescriptor(
            short_name=self.short_name,
            long_name=self.long_name,
            description=self.description,
            tags=tuple(self.tags),
            query_url=QueryURL(
                template=self.url.template,
                mime_type=self.url.type,
                method=self.url.method,
            ),
            image=image,
            developer=self.developer,
            input_encoding=self.input_encoding,
        )
        return descriptor, source


class Config(BaseSettings):
    """Main configuration for opensearch-helper."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    favicon: FaviconConfig = Field(default_factory=FaviconConfig)
    engines: list[EngineConfig] = Field(default_factory=list)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File contents are passed as init kwargs; environment wins over them.
        return (env_settings, init_settings)

    def with_server_overrides(self, **overrides: Any) -> "Config":
        """
        Return a copy with server settings replaced, dropping ``None`` values.

        Raises:
            ConfigError: If the resulting server settings are invalid
        """
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        try:
            server = ServerConfig(**{**self.server.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigError(f"Invalid server configuration: {e}") from e
        return self.model_copy(update={"server": server})

    @classmethod
    def from_toml_file(cls, path: Path) -> "Config":
        """
        Import configuration from a single TOML file.

        Args:
            path: Path to the TOML file

        Returns:
            Config object
        """
        return cls(**_read_toml(path))


# ============================================================================
# Loading
# ============================================================================


def get_config_paths() -> list[Path]:
    """
    Get configuration file paths in order of precedence (lowest to highest).

    Returns:
        List of existing config file paths
    """
    candidates = [
        # 1. Package default config
        Path(__file__).parent / "default_config.toml",
        # 2. System-wide config
        Path("/etc/opensearch-helper/config.toml"),
        # 3. User config in ~/.config
        Path.home() / ".config" / "opensearch-helper" / "config.toml",
        # 4. Current directory config
        Path.cwd() / ".opensearch-helper.toml",
    ]
    return [path for path in candidates if path.exists()]


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e
    logger.debug(f"Loaded config from {path}")
    return data


def _merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Tables are merged key by key; any other value (including the engines
    list) is replaced outright.

    Args:
        base: Base configuration
        override: Configuration to override base with

    Returns:
        Merged configuration
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def load_config(
    extra_paths: list[Path] | None = None,
    include_defaults: bool = True,
) -> Config:
    """
    Load configuration from files and the environment.

    Configuration is loaded in this order (later sources override earlier):
    1. Package default config
    2. System-wide config (/etc/opensearch-helper/config.toml)
    3. User config (~/.config/opensearch-helper/config.toml)
    4. Current directory config (.opensearch-helper.toml)
    5. ``extra_paths``, in order
    6. Environment variables (OPENSEARCH_HELPER_SERVER__PORT=8080, ...)

    Args:
        extra_paths: Additional config files, e.g. from --config
        include_defaults: Whether to read the standard locations (1-4)

    Returns:
        Merged configuration

    Raises:
        ConfigError: If a file cannot be read or the result is invalid
    """
    paths = get_config_paths() if include_defaults else []
    if extra_paths:
        paths.extend(extra_paths)

    config_data: dict[str, Any] = {}
    for path in paths:
        config_data = _merge_configs(config_data, _read_toml(path))

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

"""Constants and default values used across the application."""

# OpenSearch Constants
OPENSEARCH_NAMESPACE = "http://a9.com/-/spec/opensearch/1.1/"
MOZILLA_NAMESPACE = "http://www.mozilla.org/2006/browser/search/"
OPENSEARCH_CONTENT_TYPE = "application/opensearchdescription+xml"

# Field limits from the OpenSearch 1.1 description format
MAX_LONG_NAME_LENGTH = 48
MAX_DESCRIPTION_LENGTH = 1024
MAX_TAGS_LENGTH = 256  # Combined length of the space-joined tags
MAX_DEVELOPER_LENGTH = 64

# Favicon Constants
DEFAULT_FAVICON_SERVICE_URL = "https://icons.duckduckgo.com/ip3/{domain}.ico"
DEFAULT_ICON_MIME_TYPE = "image/x-icon"
DEFAULT_ICON_SIZE = 16  # Width and height in pixels

# HTTP Constants
DEFAULT_HTTP_TIMEOUT = 5.0  # Favicon request timeout in seconds
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; OpenSearchHelper/0.1; "
    "+https://github.com/opensearch-helper/opensearch-helper)"
)

# Server Constants
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5030
MAX_PORT = 65535

# TLS cipher allowlist (OpenSSL names), ECDHE key exchange with AEAD ciphers only.
# TLS 1.3 suites are always enabled by OpenSSL and are not listed here.
TLS_CIPHERS = [
    "ECDHE-ECDSA-AES128-GCM-SHA256",
    "ECDHE-ECDSA-AES256-GCM-SHA384",
    "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-ECDSA-CHACHA20-POLY1305",
    "ECDHE-RSA-CHACHA20-POLY1305",
]

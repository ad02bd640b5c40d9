"""opensearch-helper - advertise search engine shortcuts to a browser via OpenSearch."""

__version__ = "0.1.0"

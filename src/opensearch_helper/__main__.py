"""Allow running as ``python -m opensearch_helper``."""

from .cli import main

main()

"""Descriptor registry - the ordered set of search engines being served.

The registry is filled once at startup and is read-only afterwards, so it
is shared across request threads without locking.
"""

import logging
from collections.abc import Iterable, Iterator

from .descriptor import DescriptorValidationError, SearchDescriptor, validate
from .favicon import FaviconResolution

logger = logging.getLogger(__name__)


class RegistryValidationError(Exception):
    """Raised when a descriptor in the registry fails validation."""

    def __init__(self, short_name: str, cause: DescriptorValidationError):
        self.short_name = short_name
        self.cause = cause
        super().__init__(f"search engine validation failed for {short_name!r}: {cause}")


def validate_all(resolutions: Iterable[FaviconResolution]) -> None:
    """
    Validate every descriptor, stopping at the first failure.

    Args:
        resolutions: Descriptors paired with their favicon resolution error

    Raises:
        RegistryValidationError: Wrapping the first failure, with the short
            name of the offending descriptor
    """
    for resolution in resolutions:
        try:
            validate(resolution.descriptor, resolution.error)
        except DescriptorValidationError as e:
            raise RegistryValidationError(resolution.descriptor.short_name, e) from e


class DescriptorRegistry:
    """
    Ordered collection of search descriptors.

    Insertion order is kept and decides the order on the discovery page.
    Duplicate short names are allowed; lookups return the first match.

    Example:
        registry = DescriptorRegistry.load(resolutions)
        descriptor = registry.find_by_short_name("go")
    """

    def __init__(self, descriptors: Iterable[SearchDescriptor] = ()):
        self._descriptors: list[SearchDescriptor] = list(descriptors)

    @classmethod
    def load(cls, resolutions: Iterable[FaviconResolution]) -> "DescriptorRegistry":
        """
        Validate resolved descriptors and build a registry from them.

        The set is accepted or rejected as a whole.

        Raises:
            RegistryValidationError: If any descriptor fails validation
        """
        resolutions = list(resolutions)
        validate_all(resolutions)
        logger.info(f"Loaded {len(resolutions)} search engine(s)")
        return cls(resolution.descriptor for resolution in resolutions)

    def validate_all(self) -> None:
        """Validate every registered descriptor (see module-level validate_all)."""
        validate_all(FaviconResolution(descriptor) for descriptor in self._descriptors)

    def find_by_short_name(self, short_name: str) -> SearchDescriptor | None:
        """
        Find a descriptor by exact, case-sensitive short name.

        Returns:
            The first matching descriptor, or None if there is none
        """
        for descriptor in self._descriptors:
            if descriptor.short_name == short_name:
                return descriptor
        return None

    def __iter__(self) -> Iterator[SearchDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

"""Base interface for metadata resolvers.

Resolvers turn a raw scanner record into a complete attribution record by
reading additional metadata from disk.
"""

from abc import ABC, abstractmethod

from oss_attribution.models import AttributionRecord, RawScanRecord


class ManifestNotFoundError(FileNotFoundError):
    """Raised when a scanned package's package.json cannot be located."""

    def __init__(self, package_name: str) -> None:
        super().__init__(f"{package_name}: unable to locate package.json")
        self.package_name = package_name


class BaseResolver(ABC):
    """Abstract base class for metadata resolvers.

    Resolvers should be async-compatible so a batch of packages can be
    resolved concurrently.
    """

    @abstractmethod
    async def resolve(self, raw: RawScanRecord) -> AttributionRecord:
        """Resolve attribution metadata for a scanned package.

        Args:
            raw: Record produced by a scanner.

        Returns:
            The normalized AttributionRecord.

        Raises:
            ManifestNotFoundError: If the package's manifest cannot be found.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the resolver name for logging/debugging."""
        ...

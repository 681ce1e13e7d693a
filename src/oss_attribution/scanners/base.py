"""Base interface for dependency scanners.

Scanners enumerate the packages installed in a project directory and
report the license metadata each package declares.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from oss_attribution.models import RawScanRecord


class BaseScanner(ABC):
    """Abstract base class for dependency scanners.

    Attributes:
        base_dir: Project directory being scanned.
    """

    def __init__(self, base_dir: Path) -> None:
        """Initialize the scanner.

        Args:
            base_dir: Project directory containing the installed dependencies.
        """
        self.base_dir = base_dir

    @abstractmethod
    def scan(self) -> dict[str, RawScanRecord]:
        """Scan the project and collect its installed packages.

        Returns:
            Mapping of ``name@version`` to the package's raw record. The
            project's own package is included.

        Raises:
            FileNotFoundError: If the project manifest does not exist.
            ValueError: If the project manifest is invalid.
        """
        ...

    @classmethod
    @abstractmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if this scanner can handle the given project directory.

        Args:
            path: Directory to check.

        Returns:
            True if this scanner can process the directory, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's project type."""
        ...

"""Base interface for output reporters.

Reporters generate formatted output (plain text, JSON) from resolved
attribution records.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from oss_attribution.models import AttributionRecord


class BaseReporter(ABC):
    """Abstract base class for output reporters.

    Reporters take resolved attribution records and generate formatted
    output documents.
    """

    @abstractmethod
    def render(self, records: list[AttributionRecord]) -> str:
        """Render attribution records to formatted output.

        Args:
            records: Resolved attribution records.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, records: list[AttributionRecord], output_path: Path) -> None:
        """Render and write output to a file.

        The parent directory is created if needed. Line endings are written
        exactly as rendered.

        Args:
            records: Resolved attribution records.
            output_path: Path to write the output file.
        """
        content = self.render(records)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8", newline="")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, like "text" or "json"."""
        ...

    @property
    @abstractmethod
    def default_filename(self) -> str:
        """Return the file name written into the output directory."""
        ...

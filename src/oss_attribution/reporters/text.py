"""Plain-text reporter for the human-readable attribution document.

This module renders one block per package with a Jinja2 entry template and
joins the blocks with a line of asterisks, optionally below a user-supplied
header.
"""

import os
from importlib.resources import files
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, Template

from oss_attribution.models import AttributionRecord
from oss_attribution.reporters.base import BaseReporter

HEADER_FILENAME = "header.txt"

SEPARATOR = "*" * 30


def _blank_none(value: Any) -> Any:
    """Render missing values as empty strings."""
    return "" if value is None else value


class TextReporter(BaseReporter):
    """Reporter that generates the attribution text document.

    Attributes:
        template: Jinja2 template rendering a single record.
        header: Optional text placed above the entries.
        line_separator: Line ending used throughout the document.
    """

    def __init__(
        self,
        template_path: Optional[Path] = None,
        header: Optional[str] = None,
        line_separator: str = os.linesep,
    ) -> None:
        """Initialize the text reporter.

        Args:
            template_path: Optional path to a custom Jinja2 entry template.
                If not provided, uses the default bundled template.
            header: Optional header text, e.g. the contents of header.txt.
            line_separator: Line ending, the platform's by default.
        """
        self.header = header
        self.line_separator = line_separator

        env_options: dict[str, Any] = {
            "autoescape": False,
            "newline_sequence": line_separator,
            "finalize": _blank_none,
        }
        if template_path:
            env = Environment(loader=FileSystemLoader(template_path.parent), **env_options)
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template(Environment(**env_options))

    @classmethod
    def from_output_dir(cls, output_dir: Path, **kwargs: Any) -> "TextReporter":
        """Create a reporter using ``<output_dir>/header.txt`` if it exists.

        Args:
            output_dir: Output directory that may contain a header file.
            **kwargs: Passed through to the constructor.

        Returns:
            Configured TextReporter.
        """
        header_path = output_dir / HEADER_FILENAME
        if header_path.is_file():
            kwargs["header"] = header_path.read_bytes().decode("utf-8")
        return cls(**kwargs)

    def _load_default_template(self, env: Environment) -> Template:
        """Load the bundled entry template from package resources."""
        template_content = (
            files("oss_attribution.templates")
            .joinpath("attribution_entry.txt.j2")
            .read_text(encoding="utf-8")
        )
        return env.from_string(template_content)

    def render(self, records: list[AttributionRecord]) -> str:
        """Render the attribution document.

        Ignored and unnamed records are left out; the rest are ordered by
        lowercase package name.

        Args:
            records: Resolved attribution records.

        Returns:
            The attribution text.
        """
        entries = sorted(
            (record for record in records if not record.ignore and record.name),
            key=lambda record: record.name.lower(),
        )
        eol = self.line_separator
        blocks = [self.template.render(record=record) for record in entries]
        document = f"{eol}{eol}{SEPARATOR}{eol}{eol}".join(blocks)

        if self.header is not None:
            document = f"{self.header}{eol}{eol}{document}"
        return document

    @property
    def format_name(self) -> str:
        return "text"

    @property
    def default_filename(self) -> str:
        return "attribution.txt"

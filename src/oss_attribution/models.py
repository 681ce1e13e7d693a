"""Core data models for oss_attribution.

This module defines the records passed between the scanner, the metadata
resolver, the merge/override engine and the reporters.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

# JSON key -> AttributionRecord attribute
_JSON_FIELDS = {
    "name": "name",
    "version": "version",
    "authors": "authors",
    "url": "url",
    "license": "license",
    "licenseText": "license_text",
    "ignore": "ignore",
}


@dataclass(frozen=True)
class RawScanRecord:
    """Immutable package record produced by a scanner.

    Attributes:
        name: Package name (e.g., "rxjs" or "@angular/core").
        version: Installed version string (e.g., "6.6.3").
        licenses: Declared license identifier or expression.
        source_dir: Base directory the package was scanned from.
        license_file: Optional path to the package's license file.
        repository: Optional normalized repository URL.
    """

    name: str
    version: str
    licenses: str
    source_dir: Path
    license_file: Optional[Path] = None
    repository: Optional[str] = None

    @property
    def key(self) -> str:
        """Return the ``name@version`` identity used while merging scans."""
        return f"{self.name}@{self.version}"


@dataclass
class AttributionRecord:
    """Normalized attribution information for one package.

    Attributes:
        name: Package name.
        version: Package version.
        authors: Author attribution, or None if the manifest declares none.
        url: Repository URL.
        license: License identifier or expression.
        license_text: Full license text, empty if unavailable.
        ignore: True to leave the package out of the attribution document.
    """

    name: str
    version: str = ""
    authors: Optional[str] = None
    url: Optional[str] = None
    license: str = ""
    license_text: str = ""
    ignore: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape written to licenseInfos.json."""
        return {key: getattr(self, attr) for key, attr in _JSON_FIELDS.items()}

    def with_overrides(self, fields: dict[str, Any]) -> "AttributionRecord":
        """Return a copy with user-supplied fields merged on top.

        Args:
            fields: Partial record keyed by JSON field names
                (e.g., ``{"license": "MIT", "licenseText": "..."}``).

        Returns:
            New AttributionRecord; override values win on conflict.
        """
        changes = {}
        for key, value in fields.items():
            attr = _JSON_FIELDS.get(key)
            if attr is None:
                logger.warning("Ignoring unknown override field '%s' for %s", key, self.name)
                continue
            changes[attr] = value
        return replace(self, **changes)


@dataclass
class BatchResult:
    """Outcome of resolving a batch of scanned packages.

    Attributes:
        records: Successfully resolved records, in input order.
        errors: One message per package that could not be resolved.
    """

    records: list[AttributionRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

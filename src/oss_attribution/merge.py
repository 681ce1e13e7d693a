"""Merging of per-directory scans and application of user overrides.

Scans of several base directories are combined into one candidate set,
the project's own package is removed from it, and after resolution the
records are deduplicated by name and patched with the entries of the
optional overrides.json file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from oss_attribution.models import AttributionRecord, RawScanRecord
from oss_attribution.scanners.npm import package_identity, read_manifest

logger = logging.getLogger(__name__)

OVERRIDES_FILENAME = "overrides.json"


def merge_scan_results(results: list[dict[str, RawScanRecord]]) -> dict[str, RawScanRecord]:
    """Combine per-directory scan results into one mapping.

    Args:
        results: One ``name@version`` mapping per scanned directory, in
            scan order.

    Returns:
        Combined mapping. On key collision the later directory's record
        replaces the earlier one.
    """
    merged: dict[str, RawScanRecord] = {}
    for result in results:
        merged.update(result)
    return merged


def read_project_identity(base_dir: Path) -> str:
    """Return the ``name@version`` identity of the project in a directory.

    The identity matches the key the scanner gives the project's own record,
    including for manifests without a name or version.

    Raises:
        FileNotFoundError: If the directory has no package.json.
        ValueError: If the package.json is invalid.
    """
    manifest = read_manifest(base_dir / "package.json")
    name, version = package_identity(base_dir, manifest)
    return f"{name}@{version}"


def exclude_top_level(
    merged: dict[str, RawScanRecord], project_key: str
) -> dict[str, RawScanRecord]:
    """Drop the top-level project from the candidate packages.

    The exclusion is global: the project is removed even when another
    scanned directory lists it as a dependency.

    Args:
        merged: Combined scan results.
        project_key: ``name@version`` of the top-level project.

    Returns:
        A new mapping without the project's entry.
    """
    if project_key in merged:
        logger.debug("Excluding top-level project %s", project_key)
    return {key: raw for key, raw in merged.items() if key != project_key}


def dedupe_by_name(records: list[AttributionRecord]) -> list[AttributionRecord]:
    """Keep one record per package name.

    The last record for a name wins, placed where the name first appeared.
    """
    by_name: dict[str, AttributionRecord] = {}
    for record in records:
        if record.name in by_name:
            logger.debug(
                "Replacing %s@%s with %s@%s",
                record.name,
                by_name[record.name].version,
                record.name,
                record.version,
            )
        by_name[record.name] = record
    return list(by_name.values())


def load_overrides(output_dir: Path) -> Optional[dict[str, dict[str, Any]]]:
    """Load user overrides from ``<output_dir>/overrides.json``.

    Args:
        output_dir: Output directory that may contain the overrides file.

    Returns:
        Mapping of package name to partial record, or None if the file
        does not exist.

    Raises:
        ValueError: If the file is not valid JSON or not an object of objects.
    """
    overrides_path = output_dir / OVERRIDES_FILENAME
    if not overrides_path.is_file():
        return None

    try:
        with open(overrides_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {overrides_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {overrides_path}")
    for name, fields in data.items():
        if not isinstance(fields, dict):
            raise ValueError(
                f"Override for '{name}' in {overrides_path} must be a JSON object"
            )

    logger.info("Using overrides from %s for %s", overrides_path, ", ".join(data))
    return data


def apply_overrides(
    records: list[AttributionRecord],
    overrides: Optional[dict[str, dict[str, Any]]],
) -> list[AttributionRecord]:
    """Apply user overrides to resolved records.

    Each override is shallow-merged onto the record with the same name.
    Overrides naming a package that was not resolved add a new record,
    which lets users list packages the scanner cannot see.

    Args:
        records: Resolved records.
        overrides: Mapping of package name to partial record, or None.

    Returns:
        New list of records with the overrides applied.
    """
    if not overrides:
        return list(records)

    result = list(records)
    index = {record.name: i for i, record in enumerate(result)}

    for name, fields in overrides.items():
        if name in index:
            position = index[name]
            result[position] = result[position].with_overrides(fields)
        else:
            logger.info("Override for %s matches no resolved package, adding it", name)
            result.append(AttributionRecord(name=name).with_overrides(fields))

    return result

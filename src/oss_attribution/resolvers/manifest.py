"""Resolver reading attribution metadata from installed package manifests.

For each scanned package, this resolver locates the package's own
package.json under the scanned project, derives the author attribution from
it, and reads the package's license file.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Optional

from oss_attribution.models import AttributionRecord, RawScanRecord
from oss_attribution.resolvers.base import BaseResolver, ManifestNotFoundError
from oss_attribution.scanners.npm import read_manifest

logger = logging.getLogger(__name__)

LICENSE_NAME_PATTERN = re.compile(r"license", re.IGNORECASE)


def format_author(author: Any) -> str:
    """Format a package.json person entry for attribution.

    Plain strings are used verbatim. Objects render as
    ``"<name> <<contact>>"`` where contact is the first of email, homepage
    and url that is present, or just ``"<name>"`` without any contact.

    Args:
        author: A person entry from ``author``, ``contributors`` or
            ``maintainers``.

    Returns:
        The formatted attribution string.
    """
    if isinstance(author, str):
        return author
    if not isinstance(author, dict):
        return str(author)

    name = author.get("name") or ""
    contact = author.get("email") or author.get("homepage") or author.get("url")
    if contact:
        return f"{name} <{contact}>"
    return name


def _format_people(people: Any) -> str:
    if not isinstance(people, list):
        people = [people]
    return ", ".join(format_author(person) for person in people)


def collect_authors(manifest: dict[str, Any]) -> Optional[str]:
    """Derive the authors string for a package.

    Precedence is first match wins: ``author``, then ``contributors``, then
    ``maintainers``. Empty values fall through to the next source.

    Args:
        manifest: Parsed package.json of the package.

    Returns:
        The attribution string, or None if the manifest names nobody.
    """
    author = manifest.get("author")
    if author:
        formatted = format_author(author)
        if formatted:
            return formatted

    for field_name in ("contributors", "maintainers"):
        people = manifest.get(field_name)
        if people:
            formatted = _format_people(people)
            if formatted:
                return formatted

    return None


class ManifestResolver(BaseResolver):
    """Resolve attribution records from package.json files on disk.

    Manifest lookup first tries ``<source_dir>/node_modules/<name>/package.json``
    and falls back to a recursive search for
    ``**/node_modules/<name>/package.json`` under the source directory.
    """

    @property
    def name(self) -> str:
        return "manifest"

    async def resolve(self, raw: RawScanRecord) -> AttributionRecord:
        """Resolve one scanned package.

        Filesystem work is blocking, so it runs in a worker thread to keep
        the event loop free for other resolutions.

        Args:
            raw: Record produced by a scanner.

        Returns:
            AttributionRecord for the package.

        Raises:
            ManifestNotFoundError: If no manifest can be located.
            ValueError: If the located manifest is not valid JSON.
        """
        return await asyncio.to_thread(self._resolve_sync, raw)

    def locate_manifest(self, raw: RawScanRecord) -> Path:
        """Find the package.json of a scanned package.

        The source directory's own package.json is the last candidate, for
        scanned projects other than the top-level one.

        Args:
            raw: Record produced by a scanner.

        Returns:
            Path to the package's manifest.

        Raises:
            ManifestNotFoundError: If no candidate manifest is found.
        """
        default_path = raw.source_dir / "node_modules" / raw.name / "package.json"
        if default_path.is_file():
            return default_path

        logger.debug("%s not at %s, searching %s", raw.name, default_path, raw.source_dir)
        matches = sorted(raw.source_dir.glob(f"**/node_modules/{raw.name}/package.json"))
        for match in matches:
            if match.is_file():
                return match

        # Another scanned project listed as a package of its own scan
        project_path = raw.source_dir / "package.json"
        if project_path.is_file():
            try:
                if read_manifest(project_path).get("name") == raw.name:
                    return project_path
            except ValueError as e:
                logger.debug("Ignoring %s: %s", project_path, e)

        raise ManifestNotFoundError(raw.name)

    def _resolve_sync(self, raw: RawScanRecord) -> AttributionRecord:
        logger.debug("processing %s", raw.key)

        manifest = read_manifest(self.locate_manifest(raw))

        logger.debug("processing %s for authors and licenseText", manifest.get("name", raw.name))

        authors = collect_authors(manifest)
        try:
            license_text = self._read_license_text(raw.license_file)
        except OSError as e:
            logger.warning("Could not read license file for %s: %s", raw.key, e)
            authors = ""
            license_text = ""

        return AttributionRecord(
            name=raw.name,
            version=raw.version,
            authors=authors,
            url=raw.repository,
            license=raw.licenses,
            license_text=license_text,
            ignore=False,
        )

    def _read_license_text(self, license_file: Optional[Path]) -> str:
        """Read the license text if the file exists and is named like a license.

        Line endings are kept as stored. Bytes that are not UTF-8 are replaced
        rather than failing the record.
        """
        if (
            license_file is None
            or not license_file.exists()
            or not LICENSE_NAME_PATTERN.search(license_file.name)
        ):
            return ""
        return license_file.read_bytes().decode("utf-8", errors="replace")

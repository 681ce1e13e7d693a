"""Scanner for installed npm dependency trees.

This scanner reads a project's package.json and walks the production
dependency graph through the installed node_modules directories, the same
way Node resolves ``require()`` calls.
"""

import json
import logging
import re
from collections import deque
from pathlib import Path
from typing import Any, Iterator, Optional

from license_expression import ExpressionError, combine_expressions, get_spdx_licensing

from oss_attribution.models import RawScanRecord
from oss_attribution.scanners.base import BaseScanner

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

UNKNOWN_LICENSE = "UNKNOWN"

# Filenames considered license files, matched case-insensitively
LICENSE_FILE_PATTERN = re.compile(r"^(licen[cs]e|copying)", re.IGNORECASE)

# "user/repo" shorthand accepted by npm for GitHub repositories
_SHORTHAND_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")

_HOST_PREFIXES = {
    "github:": "https://github.com/",
    "gitlab:": "https://gitlab.com/",
    "bitbucket:": "https://bitbucket.org/",
}


def read_manifest(path: Path) -> dict[str, Any]:
    """Read and parse a package.json file.

    Args:
        path: Path to the manifest.

    Returns:
        Parsed manifest object.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        ValueError: If the manifest is not a valid JSON object.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Manifest not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return data


def normalize_repository(repository: Any) -> Optional[str]:
    """Normalize a package.json ``repository`` field to a browsable URL.

    Handles the string and ``{"url": ...}`` forms, ``git+`` prefixes,
    ``.git`` suffixes, ``git://`` and ``git@host:path`` remotes, and the
    ``github:user/repo`` / ``user/repo`` shorthands.

    Args:
        repository: Raw value of the manifest field.

    Returns:
        Normalized URL, or None if the field is missing or empty.
    """
    if isinstance(repository, dict):
        repository = repository.get("url")
    if not isinstance(repository, str) or not repository.strip():
        return None

    url = repository.strip()

    for prefix, base in _HOST_PREFIXES.items():
        if url.startswith(prefix):
            url = base + url[len(prefix):]
            break
    else:
        if _SHORTHAND_PATTERN.match(url):
            url = f"https://github.com/{url}"

    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    elif url.startswith("ssh://git@"):
        url = "https://" + url[len("ssh://git@"):]
    elif url.startswith("git@"):
        host, _, path = url[len("git@"):].partition(":")
        url = f"https://{host}/{path}"

    url = url.rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def declared_license(manifest: dict[str, Any]) -> str:
    """Extract the declared license identifier from a manifest.

    Supports the modern ``license`` string, the deprecated
    ``license: {"type": ...}`` object, and the deprecated ``licenses`` array,
    which is combined into a single SPDX ``OR`` expression.

    Args:
        manifest: Parsed package.json.

    Returns:
        License identifier or expression, or "UNKNOWN" if none is declared.
    """
    license_field = manifest.get("license")
    if isinstance(license_field, dict):
        license_field = license_field.get("type")
    if isinstance(license_field, str) and license_field.strip():
        return license_field.strip()

    licenses = manifest.get("licenses")
    if isinstance(licenses, (str, dict)):
        licenses = [licenses]
    if not isinstance(licenses, list):
        return UNKNOWN_LICENSE

    identifiers = []
    for entry in licenses:
        if isinstance(entry, dict):
            entry = entry.get("type")
        if isinstance(entry, str) and entry.strip():
            identifiers.append(entry.strip())

    if not identifiers:
        return UNKNOWN_LICENSE
    if len(identifiers) == 1:
        return identifiers[0]

    try:
        return str(combine_expressions(identifiers, relation="OR", licensing=SPDX))
    except ExpressionError:
        logger.debug("Could not combine licenses %s into an expression", identifiers)
        return " OR ".join(identifiers)


def package_identity(package_dir: Path, manifest: dict[str, Any]) -> tuple[str, str]:
    """Return the ``(name, version)`` of an installed package.

    A manifest without a name is named after its directory, and a missing
    version is empty.
    """
    return manifest.get("name") or package_dir.name, manifest.get("version") or ""


def find_license_file(package_dir: Path) -> Optional[Path]:
    """Find the license file shipped in a package directory.

    Args:
        package_dir: Installed package directory.

    Returns:
        Path to the first matching file in name order, or None.
    """
    try:
        candidates = sorted(
            entry
            for entry in package_dir.iterdir()
            if entry.is_file() and LICENSE_FILE_PATTERN.match(entry.name)
        )
    except OSError as e:
        logger.warning("Could not list %s: %s", package_dir, e)
        return None
    return candidates[0] if candidates else None


class NpmScanner(BaseScanner):
    """Scanner for npm projects with an installed node_modules tree.

    Only production dependencies are collected: ``dependencies`` and
    ``optionalDependencies`` are followed transitively, ``devDependencies``
    are never followed. The project's own package is reported too, so
    callers can recognize and exclude it.
    """

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if the directory looks like an npm project.

        Args:
            path: Directory to check.

        Returns:
            True if the directory contains a package.json file.
        """
        return (path / "package.json").is_file()

    @property
    def source_name(self) -> str:
        return "npm"

    def scan(self) -> dict[str, RawScanRecord]:
        """Walk the installed production dependency tree.

        Returns:
            Mapping of ``name@version`` to raw records, the project itself
            included. When the same identity is installed more than once,
            the first one reached wins.

        Raises:
            FileNotFoundError: If the project has no package.json.
            ValueError: If the project's package.json is invalid.
        """
        root_manifest = read_manifest(self.base_dir / "package.json")

        records: dict[str, RawScanRecord] = {}
        visited = {self.base_dir.resolve()}
        queue = deque([(self.base_dir, root_manifest)])

        while queue:
            package_dir, manifest = queue.popleft()
            record = self._build_record(package_dir, manifest)
            records.setdefault(record.key, record)

            for dep_name, optional in self._runtime_dependencies(manifest):
                dep_dir = self._find_installed(dep_name, package_dir)
                if dep_dir is None:
                    if optional:
                        logger.debug("Optional dependency %s is not installed", dep_name)
                    else:
                        logger.warning(
                            "Dependency %s of %s is not installed",
                            dep_name,
                            record.name,
                        )
                    continue

                real_dir = dep_dir.resolve()
                if real_dir in visited:
                    continue
                visited.add(real_dir)

                try:
                    dep_manifest = read_manifest(dep_dir / "package.json")
                except ValueError as e:
                    logger.warning("Skipping %s: %s", dep_name, e)
                    continue
                queue.append((dep_dir, dep_manifest))

        logger.info("Found %d packages in %s", len(records), self.base_dir)
        return records

    def _runtime_dependencies(self, manifest: dict[str, Any]) -> Iterator[tuple[str, bool]]:
        """Yield ``(name, optional)`` for each runtime dependency."""
        optional = manifest.get("optionalDependencies") or {}
        for name in manifest.get("dependencies") or {}:
            if name not in optional:
                yield name, False
        for name in optional:
            yield name, True

    def _find_installed(self, name: str, from_dir: Path) -> Optional[Path]:
        """Locate an installed package the way Node's resolver does.

        Looks in ``<dir>/node_modules/<name>`` starting at ``from_dir`` and
        moving up through its ancestors, stopping at the base directory.

        Args:
            name: Package name, scoped names included.
            from_dir: Directory of the package declaring the dependency.

        Returns:
            Installed package directory, or None if not found.
        """
        current = from_dir
        while True:
            candidate = current / "node_modules" / name
            if (candidate / "package.json").is_file():
                return candidate
            if current == self.base_dir or current.parent == current:
                return None
            current = current.parent

    def _build_record(self, package_dir: Path, manifest: dict[str, Any]) -> RawScanRecord:
        name, version = package_identity(package_dir, manifest)
        return RawScanRecord(
            name=name,
            version=version,
            licenses=declared_license(manifest),
            source_dir=self.base_dir,
            license_file=find_license_file(package_dir),
            repository=normalize_repository(manifest.get("repository")),
        )

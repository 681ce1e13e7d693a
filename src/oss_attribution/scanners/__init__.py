"""Dependency scanners for installed project trees.

This module provides scanners for enumerating the packages installed in a
project directory.
"""

from pathlib import Path

from oss_attribution.scanners.base import BaseScanner
from oss_attribution.scanners.npm import NpmScanner

__all__ = [
    "BaseScanner",
    "NpmScanner",
    "get_scanner",
]

# Registry of available scanners in priority order
_SCANNERS: list[type[BaseScanner]] = [
    NpmScanner,
]


def get_scanner(path: Path) -> BaseScanner:
    """Get the appropriate scanner for a project directory.

    Args:
        path: Project base directory.

    Returns:
        Scanner instance configured for the given directory.

    Raises:
        ValueError: If no scanner can handle the given directory.
    """
    for scanner_cls in _SCANNERS:
        if scanner_cls.can_handle(path):
            return scanner_cls(path)

    raise ValueError(
        f'directory at "{path}" does not look like an NPM project '
        f"(no package.json found)"
    )

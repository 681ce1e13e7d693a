"""Metadata resolvers for scanned packages.

This module provides resolvers that turn raw scanner records into
attribution records, individually or as a concurrent batch.
"""

from oss_attribution.resolvers.base import BaseResolver, ManifestNotFoundError
from oss_attribution.resolvers.batch import BatchResolver
from oss_attribution.resolvers.manifest import ManifestResolver, collect_authors, format_author

__all__ = [
    "BaseResolver",
    "BatchResolver",
    "ManifestNotFoundError",
    "ManifestResolver",
    "collect_authors",
    "format_author",
]

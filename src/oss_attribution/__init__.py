"""OSS Attribution - third-party attribution generator for npm projects.

This package scans a project's installed production dependencies and
generates a license attribution document plus a machine-readable record.
"""

__version__ = "0.1.0"

from oss_attribution.models import (
    AttributionRecord,
    BatchResult,
    RawScanRecord,
)

__all__ = [
    "__version__",
    "AttributionRecord",
    "BatchResult",
    "RawScanRecord",
]

"""Concurrent batch resolution of scanned packages.

This module runs a resolver over every scanned package with a bounded
number of resolutions in flight, collecting per-package failures instead
of letting the first one abort the batch.
"""

import asyncio
import logging
import os
from typing import Optional

from oss_attribution.models import AttributionRecord, BatchResult, RawScanRecord
from oss_attribution.resolvers.base import BaseResolver, ManifestNotFoundError
from oss_attribution.resolvers.manifest import ManifestResolver

logger = logging.getLogger(__name__)


def default_concurrency() -> int:
    """Return the default concurrency limit (one slot per CPU)."""
    return os.cpu_count() or 1


class BatchResolver:
    """Resolve many packages concurrently with a concurrency limit.

    Attributes:
        resolver: Resolver applied to each package.
        concurrency: Maximum number of resolutions in flight.
    """

    def __init__(
        self,
        resolver: Optional[BaseResolver] = None,
        concurrency: Optional[int] = None,
    ) -> None:
        """Initialize the batch resolver.

        Args:
            resolver: Optional resolver to use. Defaults to ManifestResolver.
            concurrency: Optional concurrency limit. Defaults to the CPU count.

        Raises:
            ValueError: If concurrency is less than 1.
        """
        self.resolver = resolver or ManifestResolver()
        self.concurrency = concurrency or default_concurrency()
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")

    async def resolve_batch(self, raws: list[RawScanRecord]) -> BatchResult:
        """Resolve all packages, collecting failures per package.

        All resolutions settle before results are assembled, so a failure
        never cancels the others.

        Args:
            raws: Scanned packages to resolve.

        Returns:
            BatchResult with the resolved records in input order and one
            error message per package that failed.
        """
        logger.info(
            "Starting batch resolution of %d packages (concurrency %d)",
            len(raws),
            self.concurrency,
        )
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded(raw: RawScanRecord) -> AttributionRecord:
            async with semaphore:
                return await self.resolver.resolve(raw)

        results = await asyncio.gather(
            *(_bounded(raw) for raw in raws), return_exceptions=True
        )

        batch = BatchResult()
        for raw, result in zip(raws, results):
            if isinstance(result, ManifestNotFoundError):
                logger.error("%s", result)
                batch.errors.append(str(result))
            elif isinstance(result, Exception):
                logger.error("Exception resolving %s: %s", raw.key, result)
                batch.errors.append(f"{raw.name}: {result}")
            else:
                batch.records.append(result)

        logger.info(
            "Batch resolution complete: %d/%d successful",
            len(batch.records),
            len(raws),
        )
        return batch

"""Chunked concurrent processing of async work items."""

import asyncio
import math
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from catalog_import.config import BATCH_SIZE
from catalog_import.logging_config import get_logger
from catalog_import.metrics import RunMetrics

__all__ = ["BatchProcessor"]

logger = get_logger("batch")

T = TypeVar("T")


class BatchProcessor:
    """Runs an async callback over items in fixed-size sequential chunks.

    Items inside a chunk run concurrently; the next chunk starts only after
    the whole chunk finished. An exception escaping the callback fails the
    chunk and is re-raised, so callbacks that need per-item resilience must
    catch their own errors.
    """

    def __init__(self, chunk_size: int = BATCH_SIZE, metrics: Optional[RunMetrics] = None):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.metrics = metrics

    def chunks(self, items: Sequence[T]) -> List[Sequence[T]]:
        """Split items into consecutive chunks; the last one may be shorter."""
        return [items[i:i + self.chunk_size] for i in range(0, len(items), self.chunk_size)]

    async def process_batch(
        self,
        items: Sequence[T],
        processor: Callable[[T], Awaitable[Any]],
        label: str,
    ) -> List[Any]:
        """Process all items and return the callback results in item order.

        Args:
            items: Work items
            processor: Async callback invoked once per item
            label: Name used in logs and timings

        Raises:
            Exception: Whatever a callback raised; later chunks are not started
        """
        operation = f"Batch Processing: {label}"
        if self.metrics:
            self.metrics.start(operation)

        chunks = self.chunks(items)
        total = math.ceil(len(items) / self.chunk_size)
        results: List[Any] = []

        try:
            for index, chunk in enumerate(chunks, start=1):
                try:
                    results.extend(await asyncio.gather(*(processor(item) for item in chunk)))
                except Exception as e:
                    logger.error(f"Batch processing failed for {label} (chunk {index}/{total}): {e}")
                    if self.metrics:
                        self.metrics.count_error()
                    raise
                logger.info(f"Processed batch {index} of {total} ({len(chunk)} items) for {label}")
        finally:
            if self.metrics:
                duration = self.metrics.end(operation)
                logger.debug(f"{operation} completed in {duration * 1000:.2f}ms")

        return results

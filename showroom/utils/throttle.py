"""
Batched, rate-limited execution of Shopify calls.

Shopify's REST Admin API allows a small burst of calls per store, so
per-item writes are issued a few at a time with a short pause between
batches. Each item's outcome is captured independently.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY_MS = 100


@dataclass
class BatchItemResult:
    """Outcome of one item in a throttled batch."""
    item: Any
    success: bool
    result: Any = None
    error: Optional[str] = None


def run_in_batches(
    items: Iterable[Any],
    func: Callable[[Any], Any],
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay_ms: int = DEFAULT_BATCH_DELAY_MS,
    label: str = 'item'
) -> List[BatchItemResult]:
    """
    Call ``func`` for every item, ``batch_size`` calls at a time.

    A failing call never stops the rest of the batch; its exception is
    logged and recorded on the returned result. Results keep input order.

    Args:
        items: Items to process
        func: Callable applied to each item
        batch_size: Number of concurrent calls per batch
        delay_ms: Pause between batches in milliseconds
        label: Name used in log lines

    Returns:
        List of BatchItemResult, one per item
    """
    items = list(items)
    batch_size = max(1, batch_size)
    results: List[BatchItemResult] = []

    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]

        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            futures = [executor.submit(func, item) for item in batch]

        for item, future in zip(batch, futures):
            try:
                results.append(BatchItemResult(item=item, success=True, result=future.result()))
            except Exception as e:
                logger.error('Failed to process %s %r: %s', label, item, e)
                results.append(BatchItemResult(item=item, success=False, error=str(e)))

        # Rate limiting between batches
        if start + batch_size < len(items) and delay_ms:
            time.sleep(delay_ms / 1000)

    return results

"""
Sequential multi-item operations (multi-upload, multi-delete).

Items run one at a time. The first failure stops the batch: earlier successes
are kept (there is no rollback) and later items are never attempted.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Optional, TypeVar

from .client import PaperlessError

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


@dataclass
class BatchResult(Generic[ItemT, ResultT]):
    """Outcome of a batch: what succeeded, what failed, what never ran."""

    succeeded: list[tuple[ItemT, ResultT]] = field(default_factory=list)
    failed: Optional[tuple[ItemT, Exception]] = None
    skipped: list[ItemT] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed is None


def run_batch(
    items: Iterable[ItemT],
    operation: Callable[[ItemT], ResultT],
    on_success: Optional[Callable[[ItemT, ResultT], None]] = None,
) -> BatchResult[ItemT, ResultT]:
    """
    Apply ``operation`` to each item in order, stopping at the first failure.

    Only PaperlessError and OSError (e.g. an unreadable upload source) count as
    item failures; anything else propagates.

    Args:
        items: Items to process
        operation: Called once per item
        on_success: Called right after each success, for progress reporting
    """
    result: BatchResult[ItemT, ResultT] = BatchResult()
    pending = list(items)

    for index, item in enumerate(pending):
        try:
            value = operation(item)
        except (PaperlessError, OSError) as e:
            result.failed = (item, e)
            result.skipped = pending[index + 1:]
            logger.warning(
                "Batch stopped at item %d of %d (%s): %s", index + 1, len(pending), item, e
            )
            break
        result.succeeded.append((item, value))
        if on_success is not None:
            on_success(item, value)

    return result

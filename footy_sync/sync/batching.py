"""
Batch scheduler - bounded fan-out with pacing

Splits an ordered list of competition IDs into batches of budget.batch_size,
runs every item of a batch concurrently, joins on the whole batch, then waits
budget.wait_duration before the next batch. No wait follows the last batch;
phase-boundary waits go through pace().

The sleep function is injected: workflow.sleep under Temporal (durable timer),
a recorder in tests.
"""
import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from footy_sync.sync.budget import RateLimitBudget
from footy_sync.utils.sync_logging import log

T = TypeVar("T")
R = TypeVar("R")

Sleeper = Callable[[timedelta], Awaitable[None]]


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Consecutive groups of at most `size` items; only the last may be smaller."""
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BatchScheduler:
    """Runs an activity over items in paced, concurrency-bounded batches"""

    def __init__(
        self,
        budget: RateLimitBudget,
        sleep: Sleeper,
        logger: Optional[logging.Logger] = None,
    ):
        self.budget = budget
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.waits = 0

    async def pace(self, reason: str = "phase") -> None:
        """Suspend for one pacing interval."""
        log.info(
            self.logger, "scheduler", "pacing_wait",
            f"⏳ Waiting {self.budget.wait_duration.total_seconds():.0f}s ({reason})",
            reason=reason, wait_seconds=self.budget.wait_duration.total_seconds(),
        )
        self.waits += 1
        await self._sleep(self.budget.wait_duration)

    async def run_in_batches(
        self,
        items: Sequence[int],
        activity: Callable[[int], Awaitable[R]],
        label: str = "batch",
    ) -> List[List[R]]:
        """
        Run `activity` once per item, batch by batch.

        Returns per-item results grouped in batch order. If any invocation
        fails, the rest of its batch still runs to completion, then the first
        failure propagates and no later batch starts.
        """
        batches = chunk(items, self.budget.batch_size)
        results: List[List[R]] = []

        for index, batch in enumerate(batches):
            log.info(
                self.logger, "scheduler", "batch_started",
                f"📦 {label}: batch {index + 1}/{len(batches)} ({len(batch)} items)",
                label=label, batch=index + 1, batches=len(batches), count=len(batch),
            )
            # Barrier: every item settles before the first failure is raised
            batch_results = await asyncio.gather(
                *(activity(item) for item in batch), return_exceptions=True,
            )
            failures = [r for r in batch_results if isinstance(r, BaseException)]
            if failures:
                log.error(
                    self.logger, "scheduler", "batch_failed",
                    f"❌ {label}: batch {index + 1}/{len(batches)} failed ({len(failures)}/{len(batch)} items)",
                    error=str(failures[0]), error_type=type(failures[0]).__name__,
                    label=label, batch=index + 1, batches=len(batches), failed=len(failures),
                )
                raise failures[0]
            results.append(list(batch_results))
            log.info(
                self.logger, "scheduler", "batch_completed",
                f"✅ {label}: batch {index + 1}/{len(batches)} done",
                label=label, batch=index + 1, batches=len(batches),
            )

            if index < len(batches) - 1:
                await self.pace(f"{label} batch {index + 1}/{len(batches)}")

        return results

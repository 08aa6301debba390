"""Provider rate-limit budget"""
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class RateLimitBudget:
    """
    Static pacing configuration for calls against the football data provider.

    batch_size / wait_duration must stay within max_calls_per_minute. This is
    checked by within_quota() for startup warnings only, never enforced.
    """
    max_calls_per_minute: int = 10
    batch_size: int = 8
    wait_duration: timedelta = timedelta(seconds=60)

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.wait_duration < timedelta(0):
            raise ValueError("wait_duration must not be negative")

    @property
    def calls_per_minute(self) -> float:
        """Worst-case call rate produced by back-to-back batches"""
        seconds = self.wait_duration.total_seconds()
        if seconds == 0:
            return float("inf")
        return self.batch_size * 60.0 / seconds

    def within_quota(self) -> bool:
        return self.calls_per_minute <= self.max_calls_per_minute

    @classmethod
    def from_config(cls) -> "RateLimitBudget":
        from footy_sync.utils import config

        return cls(
            max_calls_per_minute=config.MAX_CALLS_PER_MINUTE,
            batch_size=config.COMPETITIONS_PER_BATCH,
            wait_duration=timedelta(seconds=config.BATCH_WAIT_SECONDS),
        )

"""
Football Data Sync Workflow - Hourly

Pulls competitions, matches, standings and teams from the rate-limited
provider in paced batches (see SyncOrchestrator for the phase order).

RESUME MODEL:
- The run is checkpointed to MongoDB after every completed phase
- A new run first loads the checkpoint and continues from that phase,
  keeping the original run's logical hour and recorded results
- The checkpoint is cleared once the run reaches COMPLETED
- A checkpoint older than checkpoint_max_age_hours is discarded and a fresh
  run starts from ENSURE_CATALOG

The schedule starts this workflow with overlap policy SKIP,
so at most one run consumes the provider quota at a time.
"""
from temporalio import workflow
from temporalio.common import RetryPolicy
from datetime import timedelta
from dataclasses import dataclass
from typing import Optional

with workflow.unsafe.imports_passed_through():
    from footy_sync.activities import checkpoint as checkpoint_activities
    from footy_sync.activities.football import FootballSyncActivities
    from footy_sync.sync.batching import BatchScheduler
    from footy_sync.sync.budget import RateLimitBudget
    from footy_sync.sync.orchestrator import SyncActivities, SyncOrchestrator
    from footy_sync.sync.state import OrchestrationRun, resolve_run
    from footy_sync.utils.sync_logging import log


@dataclass
class SyncWorkflowInput:
    """Runtime configuration, resolved by the worker so replays never read the environment"""
    run_key: str = "football-data-sync"
    max_calls_per_minute: int = 10
    batch_size: int = 8
    batch_wait_seconds: float = 60.0
    full_refresh_hour: int = 5
    activity_max_attempts: int = 3
    activity_timeout_seconds: float = 120.0
    activity_initial_retry_seconds: float = 5.0
    checkpoint_max_age_hours: float = 24.0


CHECKPOINT_RETRY = RetryPolicy(
    maximum_attempts=3,
    initial_interval=timedelta(seconds=1),
    maximum_interval=timedelta(seconds=10),
)
CHECKPOINT_TIMEOUT = timedelta(seconds=30)


@workflow.defn
class FootballDataSyncWorkflow:
    """Phased, rate-limited sync of competitions, matches, standings and teams"""

    def __init__(self):
        self._run: Optional[OrchestrationRun] = None

    @workflow.query
    def current_phase(self) -> str:
        return self._run.phase.value if self._run else "not_started"

    @workflow.run
    async def run(self, input: Optional[SyncWorkflowInput] = None) -> dict:
        input = input or SyncWorkflowInput()

        budget = RateLimitBudget(
            max_calls_per_minute=input.max_calls_per_minute,
            batch_size=input.batch_size,
            wait_duration=timedelta(seconds=input.batch_wait_seconds),
        )
        scheduler = BatchScheduler(budget, sleep=workflow.sleep, logger=workflow.logger)

        self._run = await self._load_or_create_run(input)

        orchestrator = SyncOrchestrator(
            activities=self._activities(input),
            scheduler=scheduler,
            full_refresh_hour=input.full_refresh_hour,
            checkpoint=lambda run: self._save_checkpoint(input.run_key, run),
            logger=workflow.logger,
            clock=workflow.now,
        )
        summary = await orchestrator.run(self._run)

        await workflow.execute_activity(
            checkpoint_activities.clear_sync_run,
            input.run_key,
            start_to_close_timeout=CHECKPOINT_TIMEOUT,
            retry_policy=CHECKPOINT_RETRY,
        )
        return summary

    async def _load_or_create_run(self, input: SyncWorkflowInput) -> OrchestrationRun:
        stored = await workflow.execute_activity(
            checkpoint_activities.load_sync_run,
            input.run_key,
            start_to_close_timeout=CHECKPOINT_TIMEOUT,
            retry_policy=CHECKPOINT_RETRY,
        )
        run, discarded = resolve_run(
            stored,
            run_id=workflow.info().run_id,
            now=workflow.now(),
            max_age=timedelta(hours=input.checkpoint_max_age_hours),
        )
        if discarded:
            log.warning(workflow.logger, "sync", "checkpoint_discarded",
                        f"⚠️ Discarding checkpoint, starting a fresh run: {discarded}",
                        run_key=input.run_key, reason=discarded)
        return run

    async def _save_checkpoint(self, run_key: str, run: OrchestrationRun) -> None:
        await workflow.execute_activity(
            checkpoint_activities.save_sync_run,
            args=[run_key, run.to_document()],
            start_to_close_timeout=CHECKPOINT_TIMEOUT,
            retry_policy=CHECKPOINT_RETRY,
        )

    @staticmethod
    def _activities(input: SyncWorkflowInput) -> SyncActivities:
        """Bind each orchestrator slot to its typed activity method"""
        options = dict(
            start_to_close_timeout=timedelta(seconds=input.activity_timeout_seconds),
            retry_policy=RetryPolicy(
                maximum_attempts=input.activity_max_attempts,
                initial_interval=timedelta(seconds=input.activity_initial_retry_seconds),
                backoff_coefficient=2.0,
                maximum_interval=timedelta(
                    seconds=max(input.activity_initial_retry_seconds, input.batch_wait_seconds),
                ),
            ),
        )
        return SyncActivities(
            ensure_competition_catalog=lambda: workflow.execute_activity_method(
                FootballSyncActivities.ensure_competition_catalog, **options),
            list_competition_ids=lambda: workflow.execute_activity_method(
                FootballSyncActivities.list_competition_ids, **options),
            list_competitions_missing_current_season=lambda: workflow.execute_activity_method(
                FootballSyncActivities.list_competitions_missing_current_season, **options),
            sync_matches=lambda competition_id: workflow.execute_activity_method(
                FootballSyncActivities.sync_matches, competition_id, **options),
            sync_standings=lambda competition_id: workflow.execute_activity_method(
                FootballSyncActivities.sync_standings, competition_id, **options),
            sync_teams=lambda competition_id: workflow.execute_activity_method(
                FootballSyncActivities.sync_teams, competition_id, **options),
        )

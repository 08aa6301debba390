"""
Temporal Worker - Executes the football data sync workflow and its activities
"""
import asyncio
import logging
import sys
from dataclasses import asdict

from temporalio.client import (
    Client,
    Schedule,
    ScheduleActionStartWorkflow,
    SchedulePolicy,
    ScheduleOverlapPolicy,
    ScheduleSpec,
    ScheduleState,
)
from temporalio.service import RPCError, RPCStatusCode
from temporalio.worker import Worker

from footy_sync.activities import checkpoint
from footy_sync.activities.football import FootballSyncActivities
from footy_sync.services.sync_service import load_sync_service
from footy_sync.sync.budget import RateLimitBudget
from footy_sync.utils import config
from footy_sync.utils.sync_logging import configure_logging, log
from footy_sync.workflows import FootballDataSyncWorkflow, SyncWorkflowInput

logger = logging.getLogger("footy_sync.worker")


def build_workflow_input() -> SyncWorkflowInput:
    """Snapshot the environment configuration into the workflow input"""
    return SyncWorkflowInput(
        run_key=config.SYNC_WORKFLOW_ID,
        max_calls_per_minute=config.MAX_CALLS_PER_MINUTE,
        batch_size=config.COMPETITIONS_PER_BATCH,
        batch_wait_seconds=config.BATCH_WAIT_SECONDS,
        full_refresh_hour=config.FULL_REFRESH_HOUR,
        activity_max_attempts=config.ACTIVITY_MAX_ATTEMPTS,
        activity_timeout_seconds=config.ACTIVITY_TIMEOUT_SECONDS,
        activity_initial_retry_seconds=config.ACTIVITY_INITIAL_RETRY_SECONDS,
        checkpoint_max_age_hours=config.CHECKPOINT_MAX_AGE_HOURS,
    )


def check_budget(budget: RateLimitBudget) -> bool:
    """Warn (never fail) when the batch pacing can exceed the provider quota"""
    if budget.within_quota():
        return True
    log.warning(
        logger, "worker", "budget_exceeded",
        f"⚠️ {budget.batch_size} calls every {budget.wait_duration.total_seconds():.0f}s "
        f"can reach {budget.calls_per_minute:.1f} calls/min, above the {budget.max_calls_per_minute}/min quota",
        batch_size=budget.batch_size,
        wait_seconds=budget.wait_duration.total_seconds(),
        max_calls_per_minute=budget.max_calls_per_minute,
    )
    return False


def build_activities(football: FootballSyncActivities) -> list:
    return [
        *football.all(),
        checkpoint.load_sync_run,
        checkpoint.save_sync_run,
        checkpoint.clear_sync_run,
    ]


async def setup_schedules(client: Client) -> None:
    """Set up the hourly sync schedule (idempotent - safe to call on every startup)"""
    handle = client.get_schedule_handle(config.SYNC_SCHEDULE_ID)
    try:
        await handle.describe()
        log.info(logger, "worker", "schedule_exists", f"📅 Schedule '{config.SYNC_SCHEDULE_ID}' exists")
        return
    except RPCError as e:
        if e.status != RPCStatusCode.NOT_FOUND:
            raise

    await client.create_schedule(
        config.SYNC_SCHEDULE_ID,
        Schedule(
            action=ScheduleActionStartWorkflow(
                FootballDataSyncWorkflow.run,
                build_workflow_input(),
                id=config.SYNC_WORKFLOW_ID,
                task_queue=config.TASK_QUEUE,
            ),
            spec=ScheduleSpec(cron_expressions=[config.SYNC_SCHEDULE_CRON]),
            # A trigger that fires while a run is still in flight is dropped
            policy=SchedulePolicy(overlap=ScheduleOverlapPolicy.SKIP),
            state=ScheduleState(
                paused=config.SYNC_SCHEDULE_PAUSED,
                note="Hourly football data sync",
            ),
        ),
    )
    log.info(
        logger, "worker", "schedule_created", f"📅 Created '{config.SYNC_SCHEDULE_ID}'",
        cron=config.SYNC_SCHEDULE_CRON, paused=config.SYNC_SCHEDULE_PAUSED,
    )


async def main():
    configure_logging()

    budget = RateLimitBudget.from_config()
    check_budget(budget)

    service = load_sync_service()
    football = FootballSyncActivities(service)

    log.info(logger, "worker", "connecting", f"🔌 Connecting to Temporal at {config.TEMPORAL_HOST}")
    client = await Client.connect(config.TEMPORAL_HOST, namespace=config.TEMPORAL_NAMESPACE)

    await setup_schedules(client)

    worker = Worker(
        client,
        task_queue=config.TASK_QUEUE,
        workflows=[FootballDataSyncWorkflow],
        activities=build_activities(football),
    )

    log.info(
        logger, "worker", "started", f"🚀 Worker listening on '{config.TASK_QUEUE}'",
        workflow_input=asdict(build_workflow_input()),
    )
    await worker.run()


def cli():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Worker stopped")
    except Exception as e:
        log.error(logger, "worker", "failed", "❌ Worker failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    cli()

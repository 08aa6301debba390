#!/usr/bin/env python3
"""
Run the football data sync once, outside the hourly schedule

Refuses to start while any sync run (scheduled or manual) is still in flight
(the provider quota has one owner).

Usage:
    # Run with the configured batch size / pacing
    python scripts/run_sync_now.py

    # Override pacing for a quick local test
    python scripts/run_sync_now.py --batch-wait 5 --batch-size 4

    # Force the full-refresh standings branch
    python scripts/run_sync_now.py --full-refresh-hour -1

Watch progress:
    - Temporal UI: http://localhost:8233
    - Worker logs: docker logs -f footy-sync-worker
"""
import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from temporalio.client import Client, WorkflowFailureError
from temporalio.exceptions import WorkflowAlreadyStartedError

from footy_sync.utils import config
from footy_sync.utils.sync_logging import configure_logging, log
from footy_sync.worker import build_workflow_input
from footy_sync.workflows import FootballDataSyncWorkflow

logger = logging.getLogger("footy_sync.scripts.run_sync_now")


async def find_running_sync(client: Client) -> Optional[str]:
    query = "WorkflowType = 'FootballDataSyncWorkflow' AND ExecutionStatus = 'Running'"
    async for execution in client.list_workflows(query):
        return execution.id
    return None


async def run_sync(args: argparse.Namespace) -> int:
    workflow_input = build_workflow_input()
    if args.batch_size is not None:
        workflow_input = replace(workflow_input, batch_size=args.batch_size)
    if args.batch_wait is not None:
        workflow_input = replace(workflow_input, batch_wait_seconds=args.batch_wait)
    if args.full_refresh_hour is not None:
        hour = args.full_refresh_hour
        if hour < 0:
            # Match whatever hour the run will see
            hour = datetime.now(timezone.utc).hour
        workflow_input = replace(workflow_input, full_refresh_hour=hour)

    client = await Client.connect(config.TEMPORAL_HOST, namespace=config.TEMPORAL_NAMESPACE)

    # Scheduled runs get a timestamp suffix on the workflow ID, so check by type
    running = await find_running_sync(client)
    if running:
        log.warning(logger, "trigger", "skipped",
                    f"⏭️ Sync run '{running}' is still running, not starting another", workflow_id=running)
        return 0

    try:
        summary = await client.execute_workflow(
            FootballDataSyncWorkflow.run,
            workflow_input,
            id=config.SYNC_WORKFLOW_ID,
            task_queue=config.TASK_QUEUE,
        )
    except WorkflowAlreadyStartedError:
        log.warning(logger, "trigger", "skipped",
                    f"⏭️ Sync run '{config.SYNC_WORKFLOW_ID}' is still running, not starting another")
        return 0
    except WorkflowFailureError as e:
        log.error(logger, "trigger", "run_failed", "❌ Sync run failed; next trigger resumes from the checkpoint",
                  error=str(e.cause or e), error_type=type(e.cause or e).__name__)
        return 1

    log.info(logger, "trigger", "run_completed", "✅ Sync run complete", **summary)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Run the football data sync once",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--batch-size", type=int, default=None, help="Competitions per batch")
    parser.add_argument("--batch-wait", type=float, default=None, help="Pacing wait in seconds")
    parser.add_argument(
        "--full-refresh-hour", type=int, default=None,
        help="UTC hour of the full standings refresh (-1 = current hour)",
    )
    args = parser.parse_args()

    configure_logging()
    sys.exit(asyncio.run(run_sync(args)))


if __name__ == "__main__":
    main()

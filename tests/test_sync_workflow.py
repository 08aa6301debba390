"""
Tests for FootballDataSyncWorkflow: checkpoint load, resume, save and clear.

The temporalio.workflow module is replaced by FakeTemporal, which runs
activities in-process against a FakeSyncService and keeps checkpoints in a
dict, so the workflow code runs end to end without a Temporal server.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from temporalio.converter import DataConverter

from footy_sync.sync.state import MatchSyncResult, OrchestrationRun, Phase, StandingsSyncResult
from footy_sync.workflows import FootballDataSyncWorkflow, SyncWorkflowInput
from tests.conftest import FakeSyncService

RUN_KEY = "football-data-sync"
NOW = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)


class FakeTemporal:
    """Stands in for the temporalio.workflow module during one workflow run"""

    def __init__(self, service: FakeSyncService, stored: dict = None):
        self.service = service
        self.store = {RUN_KEY: stored} if stored else {}
        self.saved_phases = []
        self.cleared = False

        self.module = MagicMock()
        self.module.execute_activity = self.execute_activity
        self.module.execute_activity_method = self.execute_activity_method
        self.module.sleep = AsyncMock()
        self.module.now.return_value = NOW
        self.module.info.return_value.run_id = "run-2"
        self.module.logger = logging.getLogger("footy_sync.tests.workflow")

    async def execute_activity(self, fn, arg=None, *, args=(), **options):
        name = fn.__name__
        if name == "load_sync_run":
            return self.store.get(arg)
        if name == "save_sync_run":
            run_key, doc = args
            self.store[run_key] = doc
            self.saved_phases.append(doc["phase"])
            return None
        if name == "clear_sync_run":
            self.cleared = self.store.pop(arg, None) is not None
            return self.cleared
        raise AssertionError(f"unexpected activity {name}")

    async def execute_activity_method(self, fn, *args, **options):
        return await getattr(self.service, fn.__name__)(*args)

    def run(self, instance: FootballDataSyncWorkflow, workflow_input: SyncWorkflowInput = None):
        with patch("footy_sync.workflows.sync_workflow.workflow", self.module):
            return asyncio.run(instance.run(workflow_input or SyncWorkflowInput()))


def _stored(phase: Phase, started_at: datetime, logical_hour: int = 8, **fields) -> dict:
    return OrchestrationRun(
        run_id="run-1", logical_hour=logical_hour, phase=phase, started_at=started_at, **fields,
    ).to_document()


class TestFreshRun:
    def test_runs_every_phase_and_clears_checkpoint(self):
        timeline = []
        service = FakeSyncService(timeline, competition_ids=[1, 2, 3], newly_finished={2}, new_seasons={2})
        temporal = FakeTemporal(service)

        summary = temporal.run(FootballDataSyncWorkflow())

        assert temporal.saved_phases == ["bootstrap", "match_sync", "standings_sync", "team_sync_new_season"]
        assert temporal.cleared is True
        assert temporal.store == {}
        assert summary["run_id"] == "run-2"
        assert summary["resumed"] is False
        assert summary["full_refresh"] is False
        assert service.calls("sync_standings") == [2]
        assert service.calls("sync_teams") == [2]

    def test_logical_hour_comes_from_workflow_clock(self):
        service = FakeSyncService([], competition_ids=[1, 2])
        temporal = FakeTemporal(service)

        summary = temporal.run(FootballDataSyncWorkflow(), SyncWorkflowInput(full_refresh_hour=10))

        assert summary["full_refresh"] is True
        assert service.calls("sync_standings") == [1, 2]

    def test_pacing_uses_durable_timer(self):
        temporal = FakeTemporal(FakeSyncService([], competition_ids=[1]))

        temporal.run(FootballDataSyncWorkflow(), SyncWorkflowInput(batch_wait_seconds=30))

        temporal.module.sleep.assert_awaited_with(timedelta(seconds=30))

    def test_current_phase_query(self):
        instance = FootballDataSyncWorkflow()
        assert instance.current_phase() == "not_started"

        FakeTemporal(FakeSyncService([], competition_ids=[1])).run(instance)

        assert instance.current_phase() == "completed"


class TestCheckpointResume:
    def test_resumes_from_stored_phase(self):
        service = FakeSyncService([], competition_ids=[1, 5, 9], newly_finished={5})
        stored = _stored(
            Phase.STANDINGS_SYNC, NOW - timedelta(hours=1),
            competition_ids=[1, 5, 9],
            match_results=[MatchSyncResult(c, c == 5) for c in (1, 5, 9)],
            pacing_waits=1,
        )
        temporal = FakeTemporal(service, stored)

        summary = temporal.run(FootballDataSyncWorkflow())

        assert summary["resumed"] is True
        assert summary["run_id"] == "run-1"
        assert summary["pacing_waits"] == 2
        assert service.calls("ensure_competition_catalog") == []
        assert service.calls("sync_matches") == []
        assert service.calls("sync_standings") == [5]
        assert temporal.saved_phases == ["team_sync_new_season"]
        assert temporal.cleared is True

    def test_resumed_run_keeps_stored_logical_hour(self):
        service = FakeSyncService([], competition_ids=[1, 2])
        stored = _stored(
            Phase.STANDINGS_SYNC, NOW - timedelta(hours=5),
            logical_hour=5,
            competition_ids=[1, 2],
            match_results=[MatchSyncResult(1, False), MatchSyncResult(2, False)],
        )

        summary = FakeTemporal(service, stored).run(FootballDataSyncWorkflow(), SyncWorkflowInput(full_refresh_hour=5))

        assert summary["full_refresh"] is True
        assert service.calls("sync_standings") == [1, 2]

    def test_unreadable_checkpoint_starts_fresh(self):
        service = FakeSyncService([], competition_ids=[1])
        temporal = FakeTemporal(service, {"run_id": "run-1", "phase": "halftime"})

        summary = temporal.run(FootballDataSyncWorkflow())

        assert summary["resumed"] is False
        assert summary["run_id"] == "run-2"
        assert service.calls("ensure_competition_catalog") == [None]

    def test_completed_checkpoint_starts_fresh(self):
        service = FakeSyncService([], competition_ids=[1])
        temporal = FakeTemporal(service, _stored(Phase.COMPLETED, NOW - timedelta(hours=1)))

        summary = temporal.run(FootballDataSyncWorkflow())

        assert summary["run_id"] == "run-2"
        assert service.calls("ensure_competition_catalog") == [None]

    def test_stale_checkpoint_starts_fresh(self):
        service = FakeSyncService([], competition_ids=[7])
        stale = _stored(Phase.MATCH_SYNC, NOW - timedelta(hours=30), competition_ids=[1, 2])
        temporal = FakeTemporal(service, stale)

        summary = temporal.run(FootballDataSyncWorkflow(), SyncWorkflowInput(checkpoint_max_age_hours=24))

        assert summary["run_id"] == "run-2"
        assert summary["resumed"] is False
        assert service.calls("ensure_competition_catalog") == [None]
        assert service.calls("sync_matches") == [7]

    def test_failure_keeps_checkpoint(self):
        service = FakeSyncService(
            [], competition_ids=[1, 5], newly_finished={5}, fail_on={"sync_standings": {5}},
        )
        instance = FootballDataSyncWorkflow()
        temporal = FakeTemporal(service)

        with pytest.raises(RuntimeError, match="sync_standings failed for 5"):
            temporal.run(instance)

        assert temporal.cleared is False
        assert temporal.store[RUN_KEY]["phase"] == "standings_sync"
        assert temporal.store[RUN_KEY]["started_at"] == NOW.isoformat()
        assert instance.current_phase() == "standings_sync"


def test_activity_results_survive_payload_conversion():
    converter = DataConverter.default.payload_converter
    results = [MatchSyncResult(2021, True), StandingsSyncResult(2014, False)]

    payloads = converter.to_payloads(results)

    assert converter.from_payloads(payloads, [MatchSyncResult, StandingsSyncResult]) == results

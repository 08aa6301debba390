"""Test configuration: fake sync service, recording sleeper, mocked MongoDB"""
import asyncio
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Set
from unittest.mock import MagicMock, patch

import pytest

from footy_sync.sync.batching import BatchScheduler
from footy_sync.sync.budget import RateLimitBudget
from footy_sync.sync.orchestrator import SyncActivities, SyncOrchestrator
from footy_sync.sync.state import MatchSyncResult, StandingsSyncResult


class FakeSyncService:
    """
    In-memory FootballSyncService.

    Every call is appended to a shared timeline so tests can assert ordering
    against pacing waits recorded by RecordingSleeper.
    """

    def __init__(
        self,
        timeline: List[tuple],
        competition_ids: Iterable[int] = (),
        missing_season: Iterable[int] = (),
        newly_finished: Iterable[int] = (),
        new_seasons: Iterable[int] = (),
        fail_on: Optional[Dict[str, Set[int]]] = None,
    ):
        self.timeline = timeline
        self.competition_ids = list(competition_ids)
        self.missing_season = list(missing_season)
        self.newly_finished = set(newly_finished)
        self.new_seasons = set(new_seasons)
        self.fail_on = fail_on or {}

    def _record(self, name: str, competition_id: Optional[int] = None):
        self.timeline.append((name, competition_id))
        if competition_id is not None and competition_id in self.fail_on.get(name, set()):
            raise RuntimeError(f"{name} failed for {competition_id}")

    async def ensure_competition_catalog(self) -> None:
        self._record("ensure_competition_catalog")

    async def list_competition_ids(self) -> List[int]:
        self._record("list_competition_ids")
        return list(self.competition_ids)

    async def list_competitions_missing_current_season(self) -> List[int]:
        self._record("list_competitions_missing_current_season")
        return list(self.missing_season)

    async def sync_matches(self, competition_id: int) -> MatchSyncResult:
        self._record("sync_matches", competition_id)
        await asyncio.sleep(0)
        return MatchSyncResult(competition_id, competition_id in self.newly_finished)

    async def sync_standings(self, competition_id: int) -> StandingsSyncResult:
        self._record("sync_standings", competition_id)
        await asyncio.sleep(0)
        return StandingsSyncResult(competition_id, competition_id in self.new_seasons)

    async def sync_teams(self, competition_id: int) -> None:
        self._record("sync_teams", competition_id)
        await asyncio.sleep(0)

    def calls(self, name: str) -> List[int]:
        return [cid for call, cid in self.timeline if call == name]


class RecordingSleeper:
    """Stands in for workflow.sleep; records each wait on the timeline"""

    def __init__(self, timeline: List[tuple]):
        self.timeline = timeline
        self.durations: List[timedelta] = []

    async def __call__(self, duration: timedelta) -> None:
        self.durations.append(duration)
        self.timeline.append(("sleep", duration))


def activities_for(service: FakeSyncService) -> SyncActivities:
    return SyncActivities(
        ensure_competition_catalog=service.ensure_competition_catalog,
        list_competition_ids=service.list_competition_ids,
        list_competitions_missing_current_season=service.list_competitions_missing_current_season,
        sync_matches=service.sync_matches,
        sync_standings=service.sync_standings,
        sync_teams=service.sync_teams,
    )


@pytest.fixture
def timeline() -> List[tuple]:
    return []


@pytest.fixture
def sleeper(timeline) -> RecordingSleeper:
    return RecordingSleeper(timeline)


@pytest.fixture
def budget() -> RateLimitBudget:
    return RateLimitBudget(max_calls_per_minute=10, batch_size=8, wait_duration=timedelta(seconds=60))


@pytest.fixture
def make_service(timeline):
    def _make(**kwargs) -> FakeSyncService:
        return FakeSyncService(timeline, **kwargs)
    return _make


@pytest.fixture
def make_orchestrator(budget, sleeper):
    """Build an orchestrator over a fake service; checkpoints are collected in .saved"""
    def _make(service: FakeSyncService, full_refresh_hour: int = 5, batch_budget: RateLimitBudget = None):
        saved = []

        async def checkpoint(run):
            saved.append(run.to_document())

        orchestrator = SyncOrchestrator(
            activities=activities_for(service),
            scheduler=BatchScheduler(batch_budget or budget, sleep=sleeper),
            full_refresh_hour=full_refresh_hour,
            checkpoint=checkpoint,
        )
        orchestrator.saved = saved
        return orchestrator
    return _make


@pytest.fixture
def mock_mongo():
    """Patch MongoClient used by SyncMongoStore; yields the sync_runs collection mock"""
    from footy_sync.data.mongo_store import SyncMongoStore

    with patch("footy_sync.data.mongo_store.MongoClient") as mock_client:
        collection = MagicMock()
        collection.find_one.return_value = None
        collection.replace_one.return_value = MagicMock(upserted_id="football-data-sync")
        collection.delete_one.return_value = MagicMock(deleted_count=1)

        db = MagicMock()
        db.sync_runs = collection
        mock_client.return_value.__getitem__.return_value = db

        SyncMongoStore._indexes_created = False
        yield collection
        SyncMongoStore._indexes_created = False

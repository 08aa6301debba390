"""
Sync Orchestrator - phase state machine

Host-agnostic core of the hourly football data sync. Temporal drives it from
FootballDataSyncWorkflow; tests drive it directly with fake activities.

PHASES (strict order, see Phase):
1. ENSURE_CATALOG        always      upsert catalog, record ids + missing-season ids
2. BOOTSTRAP             if missing  pace → standings(missing) → pace → teams(missing)
3. MATCH_SYNC            always      pace → matches(all)
4. STANDINGS_SYNC        if any      pace → standings(candidates)
5. TEAM_SYNC_NEW_SEASON  if any      pace → teams(new season)
6. COMPLETED             terminal    summary log

After every phase the run is handed to the checkpoint callback so the next
trigger can resume from the last completed phase.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from footy_sync.sync import gate
from footy_sync.sync.batching import BatchScheduler
from footy_sync.sync.state import (
    MatchSyncResult,
    OrchestrationRun,
    Phase,
    StandingsSyncResult,
    next_phase,
)
from footy_sync.utils.sync_logging import log


@dataclass(frozen=True)
class SyncActivities:
    """Typed dispatch table from each phase's needs to the activity that serves it"""
    ensure_competition_catalog: Callable[[], Awaitable[None]]
    list_competition_ids: Callable[[], Awaitable[List[int]]]
    list_competitions_missing_current_season: Callable[[], Awaitable[List[int]]]
    sync_matches: Callable[[int], Awaitable[MatchSyncResult]]
    sync_standings: Callable[[int], Awaitable[StandingsSyncResult]]
    sync_teams: Callable[[int], Awaitable[None]]


Checkpointer = Callable[[OrchestrationRun], Awaitable[None]]


def _flatten(groups):
    return [item for group in groups for item in group]


class SyncOrchestrator:
    def __init__(
        self,
        activities: SyncActivities,
        scheduler: BatchScheduler,
        full_refresh_hour: int,
        checkpoint: Optional[Checkpointer] = None,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.activities = activities
        self.scheduler = scheduler
        self.full_refresh_hour = full_refresh_hour
        self._checkpoint = checkpoint
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._handlers: Dict[Phase, Callable[[OrchestrationRun], Awaitable[None]]] = {
            Phase.ENSURE_CATALOG: self._ensure_catalog,
            Phase.BOOTSTRAP: self._bootstrap,
            Phase.MATCH_SYNC: self._match_sync,
            Phase.STANDINGS_SYNC: self._standings_sync,
            Phase.TEAM_SYNC_NEW_SEASON: self._team_sync_new_season,
        }

    def _logical_time(self) -> Optional[str]:
        return self._clock().isoformat() if self._clock else None

    def _phase_log(self, action: str, msg: str, run: OrchestrationRun, count: int) -> None:
        log.info(
            self.logger, "sync", action, msg,
            run_id=run.run_id, phase=run.phase.value, count=count,
            logical_time=self._logical_time(),
        )

    async def run(self, run: OrchestrationRun) -> Dict[str, Any]:
        """Drive `run` from its current phase to COMPLETED and return a summary."""
        if run.resumed:
            self._phase_log("run_resumed", f"🔁 Resuming sync run at {run.phase.value}", run, len(run.competition_ids))
        else:
            self._phase_log("run_started", "⚽ Starting football data sync", run, 0)

        while not run.is_completed:
            phase = run.phase
            waits_before = self.scheduler.waits
            try:
                await self._handlers[phase](run)
            except Exception as e:
                log.error(
                    self.logger, "sync", "run_failed", f"❌ Sync run failed in {phase.value}",
                    error=str(e), error_type=type(e).__name__,
                    run_id=run.run_id, phase=phase.value, logical_time=self._logical_time(),
                )
                raise
            run.pacing_waits += self.scheduler.waits - waits_before
            run.phase = next_phase(phase)
            if not run.is_completed and self._checkpoint is not None:
                await self._checkpoint(run)

        summary = self.summarize(run)
        log.info(
            self.logger, "sync", "run_completed", "✅ Football data sync completed",
            logical_time=self._logical_time(), **summary,
        )
        return summary

    def summarize(self, run: OrchestrationRun) -> Dict[str, Any]:
        return {
            "run_id": run.run_id,
            "resumed": run.resumed,
            "full_refresh": gate.is_full_refresh(run.logical_hour, self.full_refresh_hour),
            "competitions": len(run.competition_ids),
            "bootstrapped": len(run.missing_season),
            "matches_synced": len(run.match_results),
            "standings_synced": len(run.standings_results),
            "new_seasons": len(gate.new_season_competitions(run.standings_results)),
            "pacing_waits": run.pacing_waits,
        }

    # =========================================================================
    # Phase handlers
    # =========================================================================

    async def _ensure_catalog(self, run: OrchestrationRun) -> None:
        self._phase_log("phase_started", "📚 Ensuring competition catalog", run, 0)
        await self.activities.ensure_competition_catalog()
        run.competition_ids = list(await self.activities.list_competition_ids())
        run.missing_season = list(await self.activities.list_competitions_missing_current_season())
        self._phase_log(
            "phase_completed",
            f"📚 Catalog has {len(run.competition_ids)} competitions, "
            f"{len(run.missing_season)} missing a current season",
            run, len(run.competition_ids),
        )

    async def _bootstrap(self, run: OrchestrationRun) -> None:
        if not gate.needs_bootstrap(run.missing_season):
            self._phase_log("phase_skipped", "⏭️ No competitions missing a current season", run, 0)
            return

        self._phase_log(
            "phase_started", f"🌱 Bootstrapping {len(run.missing_season)} competitions", run, len(run.missing_season),
        )
        await self.scheduler.pace("before bootstrap standings")
        await self.scheduler.run_in_batches(
            run.missing_season, self.activities.sync_standings, label="bootstrap standings",
        )
        await self.scheduler.pace("before bootstrap teams")
        await self.scheduler.run_in_batches(
            run.missing_season, self.activities.sync_teams, label="bootstrap teams",
        )
        self._phase_log("phase_completed", "🌱 Bootstrap complete", run, len(run.missing_season))

    async def _match_sync(self, run: OrchestrationRun) -> None:
        self._phase_log("phase_started", f"🗓️ Syncing matches for {len(run.competition_ids)} competitions", run, len(run.competition_ids))
        # Always paced, even when bootstrap was skipped
        await self.scheduler.pace("before match sync")
        groups = await self.scheduler.run_in_batches(
            run.competition_ids, self.activities.sync_matches, label="matches",
        )
        run.match_results = _flatten(groups)
        finished = sum(1 for r in run.match_results if r.has_newly_finished_matches)
        self._phase_log(
            "phase_completed", f"🗓️ Matches synced, {finished} competitions with newly finished matches",
            run, len(run.match_results),
        )

    async def _standings_sync(self, run: OrchestrationRun) -> None:
        full_refresh = gate.is_full_refresh(run.logical_hour, self.full_refresh_hour)
        candidates = gate.standings_candidates(
            run.competition_ids, run.match_results, run.missing_season, full_refresh,
        )
        if not candidates:
            self._phase_log("phase_skipped", "⏭️ No competitions need a standings sync", run, 0)
            return

        mode = "full refresh" if full_refresh else "incremental"
        self._phase_log("phase_started", f"📊 Syncing standings for {len(candidates)} competitions ({mode})", run, len(candidates))
        await self.scheduler.pace("before standings sync")
        groups = await self.scheduler.run_in_batches(
            candidates, self.activities.sync_standings, label="standings",
        )
        run.standings_results = _flatten(groups)
        self._phase_log("phase_completed", "📊 Standings synced", run, len(run.standings_results))

    async def _team_sync_new_season(self, run: OrchestrationRun) -> None:
        new_season = gate.new_season_competitions(run.standings_results)
        if not new_season:
            self._phase_log("phase_skipped", "⏭️ No new seasons detected", run, 0)
            return

        self._phase_log(
            "phase_started", f"🆕 New seasons detected for {len(new_season)} competitions, syncing teams", run, len(new_season),
        )
        await self.scheduler.pace("before new-season team sync")
        await self.scheduler.run_in_batches(new_season, self.activities.sync_teams, label="new-season teams")
        self._phase_log("phase_completed", "🆕 New-season teams synced", run, len(new_season))

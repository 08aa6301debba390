"""
Orchestration run state

An OrchestrationRun is the unit of work for one trigger invocation. It holds the
phase pointer plus every result a later phase needs, and is persisted after each
phase boundary so a faulted run can resume from its last completed phase.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from footy_sync.sync.errors import CheckpointError


class Phase(str, Enum):
    """Workflow phases in strict execution order"""
    ENSURE_CATALOG = "ensure_catalog"
    BOOTSTRAP = "bootstrap"
    MATCH_SYNC = "match_sync"
    STANDINGS_SYNC = "standings_sync"
    TEAM_SYNC_NEW_SEASON = "team_sync_new_season"
    COMPLETED = "completed"


PHASE_ORDER: List[Phase] = list(Phase)


def next_phase(phase: Phase) -> Phase:
    """Phase that follows `phase`. COMPLETED is terminal."""
    if phase is Phase.COMPLETED:
        raise ValueError("completed is terminal")
    return PHASE_ORDER[PHASE_ORDER.index(phase) + 1]


@dataclass
class MatchSyncResult:
    competition_id: int
    has_newly_finished_matches: bool


@dataclass
class StandingsSyncResult:
    competition_id: int
    new_season_detected: bool


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    # Naive timestamps are UTC, like workflow.now()
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass
class OrchestrationRun:
    """
    Mutable state of one sync run.

    logical_hour is captured once from the workflow clock when the run is
    created; resumed runs keep it so the full-refresh decision never changes.
    started_at bounds how long a checkpoint stays resumable. pacing_waits
    accumulates across every execution of the run.
    """
    run_id: str
    logical_hour: int
    phase: Phase = Phase.ENSURE_CATALOG
    competition_ids: List[int] = field(default_factory=list)
    missing_season: List[int] = field(default_factory=list)
    match_results: List[MatchSyncResult] = field(default_factory=list)
    standings_results: List[StandingsSyncResult] = field(default_factory=list)
    started_at: Optional[datetime] = None
    pacing_waits: int = 0
    resumed: bool = False

    @property
    def is_completed(self) -> bool:
        return self.phase is Phase.COMPLETED

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a plain dict for MongoDB / Temporal payloads"""
        return {
            "run_id": self.run_id,
            "logical_hour": self.logical_hour,
            "phase": self.phase.value,
            "competition_ids": list(self.competition_ids),
            "missing_season": list(self.missing_season),
            "match_results": [
                {"competition_id": r.competition_id, "has_newly_finished_matches": r.has_newly_finished_matches}
                for r in self.match_results
            ],
            "standings_results": [
                {"competition_id": r.competition_id, "new_season_detected": r.new_season_detected}
                for r in self.standings_results
            ],
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "pacing_waits": self.pacing_waits,
        }

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "OrchestrationRun":
        if not doc:
            raise CheckpointError("empty run document")
        try:
            return cls(
                run_id=str(doc["run_id"]),
                logical_hour=int(doc["logical_hour"]),
                phase=Phase(doc["phase"]),
                competition_ids=[int(c) for c in doc.get("competition_ids", [])],
                missing_season=[int(c) for c in doc.get("missing_season", [])],
                match_results=[
                    MatchSyncResult(int(r["competition_id"]), bool(r["has_newly_finished_matches"]))
                    for r in doc.get("match_results", [])
                ],
                standings_results=[
                    StandingsSyncResult(int(r["competition_id"]), bool(r["new_season_detected"]))
                    for r in doc.get("standings_results", [])
                ],
                started_at=_parse_timestamp(doc.get("started_at")),
                pacing_waits=int(doc.get("pacing_waits", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CheckpointError(f"malformed run document: {e}") from e


def resolve_run(
    stored: Optional[Dict[str, Any]],
    run_id: str,
    now: datetime,
    max_age: timedelta,
) -> Tuple[OrchestrationRun, Optional[str]]:
    """
    Pick the run a trigger drives: the stored checkpoint when it can be
    resumed, otherwise a fresh run starting at ENSURE_CATALOG.

    Returns (run, discard_reason). discard_reason is set when a stored
    checkpoint existed but was thrown away (unreadable or older than max_age).
    """
    fresh = OrchestrationRun(run_id=run_id, logical_hour=now.hour, started_at=now)
    if not stored:
        return fresh, None

    try:
        run = OrchestrationRun.from_document(stored)
    except CheckpointError as e:
        return fresh, str(e)

    if run.is_completed:
        return fresh, None
    if run.started_at is None:
        return fresh, f"checkpoint {run.run_id} has no start time"
    if now - run.started_at > max_age:
        return fresh, f"checkpoint {run.run_id} started {run.started_at.isoformat()}, older than {max_age}"

    run.resumed = True
    return run, None

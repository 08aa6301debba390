"""
Phase gate - pure decisions between phases

Every function here depends only on values already recorded in the run, so a
resumed or replayed run reaches the same decisions.
"""
from typing import Iterable, List, Sequence

from footy_sync.sync.state import MatchSyncResult, StandingsSyncResult


def is_full_refresh(logical_hour: int, full_refresh_hour: int) -> bool:
    return logical_hour == full_refresh_hour


def needs_bootstrap(missing_season: Sequence[int]) -> bool:
    return len(missing_season) > 0


def standings_candidates(
    competition_ids: Sequence[int],
    match_results: Iterable[MatchSyncResult],
    missing_season: Iterable[int],
    full_refresh: bool,
) -> List[int]:
    """
    Competitions whose standings must be synced this run.

    Full refresh takes every competition, otherwise only those with newly
    finished matches. Competitions bootstrapped earlier in the run are always
    removed, in both branches. Order follows competition_ids.
    """
    excluded = set(missing_season)
    if full_refresh:
        wanted = set(competition_ids)
    else:
        wanted = {r.competition_id for r in match_results if r.has_newly_finished_matches}
    return [c for c in competition_ids if c in wanted and c not in excluded]


def new_season_competitions(standings_results: Iterable[StandingsSyncResult]) -> List[int]:
    """Competitions whose latest standings result in this run reported a new season"""
    latest = {}
    for result in standings_results:
        latest[result.competition_id] = result.new_season_detected
    return [competition_id for competition_id, detected in latest.items() if detected]

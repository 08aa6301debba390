"""Football sync activities - thin Temporal wrappers around FootballSyncService"""
from temporalio import activity
from typing import List

from footy_sync.services.sync_service import FootballSyncService
from footy_sync.sync.state import MatchSyncResult, StandingsSyncResult
from footy_sync.utils.sync_logging import log


class FootballSyncActivities:
    """
    Activities bound to one service instance (built once per worker).

    Each activity logs and re-raises on failure; Temporal's retry policy
    decides whether to try again.
    """

    def __init__(self, service: FootballSyncService):
        self.service = service

    @activity.defn
    async def ensure_competition_catalog(self) -> None:
        try:
            await self.service.ensure_competition_catalog()
        except Exception as e:
            log.error(activity.logger, "football", "catalog_failed", "❌ Competition catalog sync failed",
                      error=str(e), error_type=type(e).__name__)
            raise
        log.info(activity.logger, "football", "catalog_synced", "📚 Competition catalog up to date")

    @activity.defn
    async def list_competition_ids(self) -> List[int]:
        ids = [int(c) for c in await self.service.list_competition_ids()]
        log.info(activity.logger, "football", "competitions_listed", f"📋 {len(ids)} competitions", count=len(ids))
        return ids

    @activity.defn
    async def list_competitions_missing_current_season(self) -> List[int]:
        ids = [int(c) for c in await self.service.list_competitions_missing_current_season()]
        if ids:
            log.info(activity.logger, "football", "missing_season", f"🌱 {len(ids)} competitions without a current season",
                     count=len(ids), competition_ids=ids)
        return ids

    @activity.defn
    async def sync_matches(self, competition_id: int) -> MatchSyncResult:
        try:
            result = await self.service.sync_matches(competition_id)
        except Exception as e:
            log.error(activity.logger, "football", "matches_failed", f"❌ Match sync failed for {competition_id}",
                      error=str(e), error_type=type(e).__name__, competition_id=competition_id)
            raise
        log.info(activity.logger, "football", "matches_synced", f"🗓️ Matches synced for {competition_id}",
                 competition_id=competition_id, newly_finished=result.has_newly_finished_matches)
        return result

    @activity.defn
    async def sync_standings(self, competition_id: int) -> StandingsSyncResult:
        try:
            result = await self.service.sync_standings(competition_id)
        except Exception as e:
            log.error(activity.logger, "football", "standings_failed", f"❌ Standings sync failed for {competition_id}",
                      error=str(e), error_type=type(e).__name__, competition_id=competition_id)
            raise
        log.info(activity.logger, "football", "standings_synced", f"📊 Standings synced for {competition_id}",
                 competition_id=competition_id, new_season=result.new_season_detected)
        return result

    @activity.defn
    async def sync_teams(self, competition_id: int) -> None:
        try:
            await self.service.sync_teams(competition_id)
        except Exception as e:
            log.error(activity.logger, "football", "teams_failed", f"❌ Team sync failed for {competition_id}",
                      error=str(e), error_type=type(e).__name__, competition_id=competition_id)
            raise
        log.info(activity.logger, "football", "teams_synced", f"👥 Teams synced for {competition_id}",
                 competition_id=competition_id)

    def all(self) -> list:
        """Bound activity methods for Worker(activities=...)"""
        return [
            self.ensure_competition_catalog,
            self.list_competition_ids,
            self.list_competitions_missing_current_season,
            self.sync_matches,
            self.sync_standings,
            self.sync_teams,
        ]

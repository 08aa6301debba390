"""
Football sync service contract

The provider HTTP client and the catalog persistence live outside this
package. The worker loads a concrete FootballSyncService from the dotted path
in SYNC_SERVICE_FACTORY ("package.module:callable") and wraps it in Temporal
activities. Each method must be atomic and idempotent: Temporal may retry it.
"""
import importlib
from typing import Callable, List, Optional, Protocol, runtime_checkable

from footy_sync.sync.errors import ServiceFactoryError
from footy_sync.sync.state import MatchSyncResult, StandingsSyncResult


@runtime_checkable
class FootballSyncService(Protocol):
    async def ensure_competition_catalog(self) -> None:
        """Upsert the supported competitions from the provider."""
        ...

    async def list_competition_ids(self) -> List[int]:
        """Provider IDs of every catalogued competition, in a stable order."""
        ...

    async def list_competitions_missing_current_season(self) -> List[int]:
        ...

    async def sync_matches(self, competition_id: int) -> MatchSyncResult:
        """Upsert recent/upcoming matches; report whether any just finished."""
        ...

    async def sync_standings(self, competition_id: int) -> StandingsSyncResult:
        """Upsert standings; report whether an unknown season appeared."""
        ...

    async def sync_teams(self, competition_id: int) -> None:
        ...


def load_sync_service(path: Optional[str] = None) -> FootballSyncService:
    """
    Resolve "package.module:callable" and call it to build the service.

    Raises ServiceFactoryError if the path is empty, malformed, unimportable,
    or the factory returns something that is not a FootballSyncService.
    """
    if path is None:
        from footy_sync.utils import config
        path = config.SYNC_SERVICE_FACTORY

    if not path or ":" not in path:
        raise ServiceFactoryError(
            f"SYNC_SERVICE_FACTORY must look like 'package.module:callable', got {path!r}"
        )

    module_name, _, attr = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ServiceFactoryError(f"Cannot import {module_name}: {e}") from e

    factory: Optional[Callable[[], object]] = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise ServiceFactoryError(f"{module_name} has no callable {attr!r}")

    service = factory()
    if not isinstance(service, FootballSyncService):
        raise ServiceFactoryError(f"{path} returned {type(service).__name__}, not a FootballSyncService")
    return service

"""Host-agnostic sync core: budget, batching, phase gate, orchestrator"""
from footy_sync.sync.budget import RateLimitBudget
from footy_sync.sync.batching import BatchScheduler, chunk
from footy_sync.sync.errors import CheckpointError, ServiceFactoryError, SyncError
from footy_sync.sync.orchestrator import SyncActivities, SyncOrchestrator
from footy_sync.sync.state import (
    MatchSyncResult,
    OrchestrationRun,
    Phase,
    StandingsSyncResult,
    resolve_run,
)

__all__ = [
    "RateLimitBudget",
    "BatchScheduler",
    "chunk",
    "SyncError",
    "ServiceFactoryError",
    "CheckpointError",
    "SyncActivities",
    "SyncOrchestrator",
    "MatchSyncResult",
    "OrchestrationRun",
    "Phase",
    "StandingsSyncResult",
    "resolve_run",
]

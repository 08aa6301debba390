"""
Centralized configuration for Footy Sync

All environment variables and defaults are defined here.
Import from this module instead of hardcoding values.

NOTE: Workflow code must not import this module at run time - values reach the
workflow through SyncWorkflowInput so replays never depend on the environment.
"""

import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Temporal
# =============================================================================

TEMPORAL_HOST = os.getenv("TEMPORAL_HOST", "localhost:7233")
TEMPORAL_NAMESPACE = os.getenv("TEMPORAL_NAMESPACE", "default")
TASK_QUEUE = os.getenv("TASK_QUEUE", "footy-sync")

# Fixed workflow ID - at most one sync run may be in flight
SYNC_WORKFLOW_ID = "football-data-sync"
SYNC_SCHEDULE_ID = "football-data-sync-hourly"
SYNC_SCHEDULE_CRON = os.getenv("SYNC_SCHEDULE_CRON", "0 * * * *")
SYNC_SCHEDULE_PAUSED = _env_bool("SYNC_SCHEDULE_PAUSED")

# =============================================================================
# Database Configuration (run checkpoints)
# =============================================================================

MONGODB_URI = os.getenv("MONGODB_URI") or os.getenv("MONGODB_URL", "mongodb://localhost:27017/")
MONGODB_DATABASE = os.getenv("MONGODB_DATABASE", "footy_sync")

# =============================================================================
# Provider rate limit (football-data.org free tier: 10 calls/minute)
# =============================================================================

MAX_CALLS_PER_MINUTE = int(os.getenv("MAX_CALLS_PER_MINUTE", "10"))
COMPETITIONS_PER_BATCH = int(os.getenv("COMPETITIONS_PER_BATCH", "8"))
BATCH_WAIT_SECONDS = float(os.getenv("BATCH_WAIT_SECONDS", "60"))

# UTC hour at which standings are refreshed for every competition
FULL_REFRESH_HOUR = int(os.getenv("FULL_REFRESH_HOUR", "5"))

# =============================================================================
# Activity retry policy
# =============================================================================

ACTIVITY_MAX_ATTEMPTS = int(os.getenv("ACTIVITY_MAX_ATTEMPTS", "3"))
ACTIVITY_TIMEOUT_SECONDS = float(os.getenv("ACTIVITY_TIMEOUT_SECONDS", "120"))
ACTIVITY_INITIAL_RETRY_SECONDS = float(os.getenv("ACTIVITY_INITIAL_RETRY_SECONDS", "5"))

# Checkpoints older than this are discarded instead of resumed
CHECKPOINT_MAX_AGE_HOURS = float(os.getenv("CHECKPOINT_MAX_AGE_HOURS", "24"))

# =============================================================================
# Collaborators
# =============================================================================

# "package.module:callable" returning a FootballSyncService
SYNC_SERVICE_FACTORY = os.getenv("SYNC_SERVICE_FACTORY", "")

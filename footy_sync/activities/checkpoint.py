"""Checkpoint activities - persist the sync run between phase boundaries"""
from temporalio import activity
from typing import Any, Dict, Optional

from footy_sync.utils.sync_logging import log


@activity.defn
async def load_sync_run(run_key: str) -> Optional[Dict[str, Any]]:
    """Return the last checkpointed run document for run_key, or None."""
    from footy_sync.data.mongo_store import SyncMongoStore

    doc = SyncMongoStore().load_run(run_key)
    if doc:
        log.info(activity.logger, "checkpoint", "checkpoint_loaded",
                 f"💾 Found checkpoint for {run_key} at {doc.get('phase')}",
                 run_key=run_key, phase=doc.get("phase"))
    return doc


@activity.defn
async def save_sync_run(run_key: str, run_doc: Dict[str, Any]) -> None:
    from footy_sync.data.mongo_store import SyncMongoStore

    try:
        SyncMongoStore().save_run(run_key, run_doc)
    except Exception as e:
        log.error(activity.logger, "checkpoint", "save_failed", f"❌ Failed to save checkpoint for {run_key}",
                  error=str(e), error_type=type(e).__name__, run_key=run_key)
        raise
    log.info(activity.logger, "checkpoint", "checkpoint_saved", f"💾 Checkpoint saved at {run_doc.get('phase')}",
             run_key=run_key, phase=run_doc.get("phase"))


@activity.defn
async def clear_sync_run(run_key: str) -> bool:
    from footy_sync.data.mongo_store import SyncMongoStore

    cleared = SyncMongoStore().clear_run(run_key)
    log.info(activity.logger, "checkpoint", "checkpoint_cleared", f"🧹 Checkpoint cleared for {run_key}",
             run_key=run_key, existed=cleared)
    return cleared

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo import ASCENDING, MongoClient

from footy_sync.utils import config


class SyncMongoStore:
    """
    MongoDB storage for sync run checkpoints:
    - sync_runs: one document per run key holding the OrchestrationRun of the
      last completed phase. Deleted when the run reaches COMPLETED.
    """

    # Class variable to track if indexes have been created this session
    _indexes_created = False

    def __init__(self, connection_url=None, database=None):
        if connection_url is None:
            connection_url = config.MONGODB_URI

        self.client = MongoClient(connection_url)
        self.db = self.client[database or config.MONGODB_DATABASE]
        self.sync_runs = self.db.sync_runs

        self._create_indexes()

    def _create_indexes(self):
        """Create indexes (only runs once per session)"""
        if getattr(SyncMongoStore, "_indexes_created", False):
            return
        self.sync_runs.create_index([("updated_at", ASCENDING)])
        SyncMongoStore._indexes_created = True

    # === Run checkpoints ===

    def load_run(self, run_key: str) -> Optional[Dict[str, Any]]:
        """Return the stored run document (without Mongo metadata) or None"""
        doc = self.sync_runs.find_one({"_id": run_key})
        if not doc:
            return None
        return doc.get("run")

    def save_run(self, run_key: str, run_doc: Dict[str, Any]) -> None:
        """Upsert the run document for run_key"""
        self.sync_runs.replace_one(
            {"_id": run_key},
            {
                "_id": run_key,
                "run": run_doc,
                "phase": run_doc.get("phase"),
                "updated_at": datetime.now(timezone.utc),
            },
            upsert=True,
        )

    def clear_run(self, run_key: str) -> bool:
        """Delete the run document. Returns True if one existed."""
        result = self.sync_runs.delete_one({"_id": run_key})
        return result.deleted_count > 0

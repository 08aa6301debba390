"""Storage exports"""
from footy_sync.data.mongo_store import SyncMongoStore

__all__ = ["SyncMongoStore"]

"""Service exports"""
from footy_sync.services.sync_service import FootballSyncService, load_sync_service

__all__ = ["FootballSyncService", "load_sync_service"]

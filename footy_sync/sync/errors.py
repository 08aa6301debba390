"""Sync exceptions"""


class SyncError(Exception):
    """Base class for footy-sync errors"""


class ServiceFactoryError(SyncError):
    """SYNC_SERVICE_FACTORY could not be resolved to a callable"""


class CheckpointError(SyncError):
    """A stored run document cannot be turned back into a run"""

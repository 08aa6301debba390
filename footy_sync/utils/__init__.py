"""Utils exports"""
from footy_sync.utils.sync_logging import configure_logging, log

__all__ = ["configure_logging", "log"]

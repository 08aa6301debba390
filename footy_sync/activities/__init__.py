"""Activity exports"""
from footy_sync.activities import checkpoint, football

__all__ = ["checkpoint", "football"]

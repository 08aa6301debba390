"""Footy Sync - hourly, rate-limited football data synchronization on Temporal"""

__version__ = "0.1.0"

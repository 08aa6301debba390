"""
Structured Logging for Grafana Loki

All logs are JSON with consistent, queryable fields.
Query logs by: module, action, run_id, phase, etc.

GRAFANA LOKI QUERIES
====================
# All errors
{app="footy-sync"} | json | level="ERROR"

# Phase boundaries of one run
{app="footy-sync"} | json | module="sync" action=~"phase_.*" run_id="football-data-sync"

# Pacing waits
{app="footy-sync"} | json | action="pacing_wait"

USAGE
=====
from footy_sync.utils.sync_logging import log

# In workflows (pass workflow.logger - replay safe):
log.info(workflow.logger, "sync", "phase_started", "Syncing matches",
         run_id=run_id, phase="match_sync", count=12)

# In activities (pass activity.logger):
log.error(activity.logger, "checkpoint", "save_failed", "Checkpoint save failed",
          error=str(e), error_type=type(e).__name__)
"""

import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Optional


class StructuredFormatter(logging.Formatter):
    """JSON formatter for Grafana Loki. Strips Temporal context dicts."""

    TEMPORAL_CONTEXT = re.compile(r"\s*\(\{'.+\}\)\s*$")

    def __init__(self, pretty: bool = False):
        super().__init__()
        self.pretty = pretty

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        msg = self.TEMPORAL_CONTEXT.sub("", msg)

        if getattr(record, "_structured", False):
            data = {
                "ts": self._timestamp(),
                "level": record.levelname,
                "module": record._module,
                "action": record._action,
                "msg": msg,
            }
            for key, value in record._extra.items():
                if value is not None:
                    data[key] = value

            if self.pretty:
                return self._pretty(data)
            return json.dumps(data, default=str, separators=(',', ':'))

        # Third-party log - wrap in JSON
        if self.pretty:
            return msg
        return json.dumps({
            "ts": self._timestamp(),
            "level": record.levelname,
            "module": record.name,
            "action": "log",
            "msg": msg,
        }, default=str, separators=(',', ':'))

    def _pretty(self, data: dict) -> str:
        """Human-readable format for development."""
        lvl = data["level"][0]
        mod = data["module"].upper()[:10].ljust(10)
        skip = {"ts", "level", "module", "action", "msg"}
        ctx = " ".join(f"{k}={v}" for k, v in data.items() if k not in skip)
        return f"{lvl} [{mod}] {data['action']}: {data['msg']}" + (f" | {ctx}" if ctx else "")


class StructuredLogger:
    """
    Centralized structured logging.

    All methods accept a logger (workflow.logger, activity.logger or a plain
    logging.Logger), module name, action name, message, and context fields.
    """

    def _log(self, logger, level: int, module: str, action: str, msg: str, **kwargs) -> None:
        extra = {
            "_structured": True,
            "_module": module,
            "_action": action,
            "_extra": {k: v for k, v in kwargs.items() if v is not None},
        }
        logger.log(level, msg, extra=extra)

    def info(self, logger, module: str, action: str, msg: str, **kwargs) -> None:
        """
        Log INFO level.

        Args:
            logger: workflow.logger, activity.logger or logging.Logger
            module: Source module (sync, scheduler, checkpoint, worker)
            action: Action name (phase_started, batch_completed, pacing_wait, ...)
            msg: Human-readable message
            **kwargs: Context fields (run_id, phase, count, ...)
        """
        self._log(logger, logging.INFO, module, action, msg, **kwargs)

    def warning(self, logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.WARNING, module, action, msg, **kwargs)

    def error(
        self,
        logger,
        module: str,
        action: str,
        msg: str,
        error: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs
    ) -> None:
        """Log ERROR level with the exception message and class name."""
        self._log(
            logger, logging.ERROR, module, action, msg,
            error=error, error_type=error_type, **kwargs
        )

    def debug(self, logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.DEBUG, module, action, msg, **kwargs)


# Singleton instance
log = StructuredLogger()


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logger with structured formatter. Call once at startup."""
    pretty = os.environ.get("LOG_FORMAT", "json") == "pretty"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(pretty=pretty))

    logging.basicConfig(level=level, handlers=[handler], force=True)

    # Temporal loggers
    logging.getLogger("temporalio.activity").setLevel(logging.INFO)
    logging.getLogger("temporalio.workflow").setLevel(logging.INFO)

    # Quiet noisy loggers
    logging.getLogger("temporalio.worker").setLevel(logging.WARNING)
    logging.getLogger("temporalio.client").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)

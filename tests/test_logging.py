"""Tests for structured logging"""
import json
import logging

from footy_sync.utils.sync_logging import StructuredFormatter, log


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _logger():
    logger = logging.getLogger("footy_sync.tests.logging")
    logger.handlers = []
    handler = _Capture()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, handler


def test_structured_record_as_json():
    logger, handler = _logger()

    log.info(logger, "sync", "phase_started", "Syncing matches", run_id="r1", phase="match_sync", count=9, skipped=None)

    data = json.loads(StructuredFormatter().format(handler.records[0]))
    assert data["level"] == "INFO"
    assert data["module"] == "sync"
    assert data["action"] == "phase_started"
    assert data["msg"] == "Syncing matches"
    assert data["run_id"] == "r1"
    assert data["count"] == 9
    assert "skipped" not in data


def test_error_carries_exception_fields():
    logger, handler = _logger()

    log.error(logger, "sync", "run_failed", "Run failed", error="boom", error_type="RuntimeError", phase="bootstrap")

    data = json.loads(StructuredFormatter().format(handler.records[0]))
    assert data["level"] == "ERROR"
    assert data["error"] == "boom"
    assert data["error_type"] == "RuntimeError"


def test_temporal_context_stripped():
    logger, handler = _logger()

    logger.info("Activity done ({'activity_id': '1', 'workflow_id': 'football-data-sync'})")

    data = json.loads(StructuredFormatter().format(handler.records[0]))
    assert data["msg"] == "Activity done"
    assert data["action"] == "log"


def test_pretty_format():
    logger, handler = _logger()

    log.warning(logger, "scheduler", "pacing_wait", "Waiting 60s", reason="phase")

    line = StructuredFormatter(pretty=True).format(handler.records[0])
    assert line.startswith("W [SCHEDULER ] pacing_wait: Waiting 60s")
    assert line.endswith("| reason=phase")

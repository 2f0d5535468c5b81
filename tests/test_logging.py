"""
Tests for the structured JSON logger and formatter.
"""

import json
import logging

import pytest

from landgrab_geo.logging import JSONFormatter, LogEvent, StructuredLogger, create_logger


@pytest.fixture
def structured(caplog):
    caplog.set_level(logging.DEBUG, logger="landgrab.test")
    return StructuredLogger(component="test", level=logging.DEBUG, logger_name="landgrab.test")


def rendered(caplog):
    """Records from landgrab.test rendered through JSONFormatter."""
    formatter = JSONFormatter()
    return [json.loads(formatter.format(r)) for r in caplog.records if r.name == "landgrab.test"]


class TestStructuredLogger:

    def test_info_entry(self, structured, caplog):
        structured.info(
            event=LogEvent.PATH_CLOSED,
            message="Path closed",
            metadata={"point_count": 12},
        )
        [entry] = rendered(caplog)
        assert entry["level"] == "INFO"
        assert entry["component"] == "test"
        assert entry["event"] == "path.closed"
        assert entry["message"] == "Path closed"
        assert entry["metadata"] == {"point_count": 12}
        assert "timestamp" in entry

    def test_record_message_stays_readable(self, structured, caplog):
        structured.info(event=LogEvent.SESSION_STARTED, message="Tracking session started")
        assert caplog.records[-1].getMessage() == "Tracking session started"
        assert caplog.records[-1].structured["event"] == "session.started"

    def test_metadata_omitted_when_empty(self, structured, caplog):
        structured.warning(event=LogEvent.COLLISION_WARNING, message="Close")
        [entry] = rendered(caplog)
        assert "metadata" not in entry
        assert "context" not in entry
        assert caplog.records[-1].levelno == logging.WARNING

    def test_non_json_metadata_stringified(self, structured, caplog):
        structured.debug(event=LogEvent.SAMPLE_ACCEPTED, message="ok", metadata={"level": object()})
        [entry] = rendered(caplog)
        assert entry["metadata"]["level"].startswith("<object")

    def test_error_carries_exception(self, structured, caplog):
        structured.error(
            event=LogEvent.INVALID_SAMPLE,
            message="Dropped malformed fix",
            exc_info=ValueError("latitude must be in [-90, 90]"),
        )
        [entry] = rendered(caplog)
        assert entry["level"] == "ERROR"
        assert entry["exception"] == {"type": "ValueError", "message": "latitude must be in [-90, 90]"}

    def test_below_level_skipped(self, structured, caplog):
        structured.set_level(logging.WARNING)
        structured.info(event=LogEvent.SESSION_STARTED, message="started")
        assert rendered(caplog) == []

    def test_bind_merges_context(self, structured, caplog):
        bound = structured.bind(owner_id="player-1").bind(session="s-1")
        bound.info(event=LogEvent.SESSION_STARTED, message="started")
        [entry] = rendered(caplog)
        assert entry["context"] == {"owner_id": "player-1", "session": "s-1"}
        assert structured.context == {}

    def test_create_logger(self):
        logger = create_logger("tracker", owner_id="player-1")
        assert logger.logger_name == "landgrab.tracker"
        assert logger.context == {"owner_id": "player-1"}

    def test_existing_level_kept_without_explicit_level(self):
        host = logging.getLogger("landgrab.hosted")
        host.setLevel(logging.WARNING)
        StructuredLogger(component="hosted")
        create_logger("hosted")
        assert host.level == logging.WARNING

        StructuredLogger(component="hosted", level=logging.DEBUG)
        assert host.level == logging.DEBUG

    def test_single_handler_per_logger(self):
        first = StructuredLogger(component="dup", logger_name="landgrab.dup")
        StructuredLogger(component="dup", logger_name="landgrab.dup")
        assert len(first.logger.handlers) == 1
        assert isinstance(first.logger.handlers[0].formatter, JSONFormatter)


class TestJSONFormatter:

    def test_plain_record(self):
        record = logging.LogRecord(
            name="landgrab_tracker.registry",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Territories replaced: %d",
            args=(3,),
            exc_info=None,
        )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["component"] == "landgrab_tracker.registry"
        assert entry["message"] == "Territories replaced: 3"
        assert "event" not in entry

    def test_plain_record_with_exception(self):
        try:
            raise KeyError("t-1")
        except KeyError as e:
            record = logging.LogRecord(
                name="host",
                level=logging.ERROR,
                pathname=__file__,
                lineno=1,
                msg="lookup failed",
                args=(),
                exc_info=(type(e), e, e.__traceback__),
            )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"]["type"] == "KeyError"


def test_event_names_follow_namespace():
    namespaces = {"sample", "path", "collision", "session", "config", "registry", "error"}
    for event in LogEvent:
        assert event.value.split(".")[0] in namespaces
    assert LogEvent.SAMPLE_REJECTED.value == "sample.rejected"

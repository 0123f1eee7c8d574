"""Tests for spatialview.model.log - structured log events."""
import logging
import re
from datetime import datetime

from spatialview.model.log import LogBook, LogEvent, LogLevel, emit

FORMAT_RE = re.compile(r"^\[\d{2}/\d{2}/\d{4}, \d{2}:\d{2}:\d{2}\] \[(INFO|SUCCESS|WARNING|ERROR)\] .+$")


class TestLogEvent:
    def test_format(self):
        event = LogEvent(LogLevel.SUCCESS, "Uploaded file: a.pcd", datetime(2024, 3, 7, 9, 5, 1))
        assert event.format() == "[03/07/2024, 09:05:01] [SUCCESS] Uploaded file: a.pcd"

    def test_format_matches_pattern(self):
        for level in LogLevel:
            assert FORMAT_RE.match(LogEvent(level, "message").format())

    def test_python_levels(self):
        assert LogEvent(LogLevel.SUCCESS, "x").python_level == logging.INFO
        assert LogEvent(LogLevel.ERROR, "x").python_level == logging.ERROR


class TestLogBook:
    def test_append_only_order(self, log_book):
        emit(log_book, LogLevel.INFO, "first")
        emit(log_book, LogLevel.ERROR, "second")
        assert [e.message for e in log_book.events] == ["first", "second"]
        assert len(log_book) == 2

    def test_events_is_a_snapshot(self, log_book):
        snapshot = log_book.events
        emit(log_book, LogLevel.INFO, "later")
        assert snapshot == ()

    def test_listeners_notified(self, log_book):
        seen = []
        log_book.subscribe(seen.append)
        event = emit(log_book, LogLevel.WARNING, "careful")
        assert seen == [event]

    def test_of_level(self, log_book):
        emit(log_book, LogLevel.INFO, "a")
        emit(log_book, LogLevel.SUCCESS, "b")
        emit(log_book, LogLevel.INFO, "c")
        assert [e.message for e in log_book.of_level(LogLevel.INFO)] == ["a", "c"]

    def test_mirrored_to_logging(self, log_book, caplog):
        with caplog.at_level(logging.INFO, logger="spatialview.model.log"):
            emit(log_book, LogLevel.ERROR, "broken file")
        assert "[ERROR] broken file" in caplog.text

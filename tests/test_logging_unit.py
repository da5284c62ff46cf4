"""Unit tests for structured logging."""

import json
import logging
import os
import sys
from io import StringIO
from unittest.mock import patch

import pytest

from feedwriter.config import SerializerConfig
from feedwriter.feed import RSS2Feed
from feedwriter.logging_config import (
    StructuredFormatter,
    create_build_logger,
    setup_structured_logging,
)
from feedwriter.serializer import FeedSerializer


@pytest.fixture
def log_capture():
    """Route feedwriter logs through the structured formatter into a buffer."""
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("feedwriter")
    original_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    try:
        yield buffer
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()


def _records(buffer):
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


class TestStructuredLoggingUnit:
    """Unit tests for the structured logging helpers."""

    def test_build_logger_context(self, log_capture):
        logger = create_build_logger("feed", "build-123")

        logger.info("Hello", dialect="RSS2")

        record = _records(log_capture)[-1]
        assert record["message"] == "Hello"
        assert record["level"] == "INFO"
        assert record["logger"] == "feedwriter.feed"
        assert record["build_id"] == "build-123"
        assert record["component"] == "feed"
        assert record["dialect"] == "RSS2"

    def test_generated_build_id(self):
        logger = create_build_logger("feed")

        assert logger.build_id.startswith("build_")

    def test_feed_build_is_logged_end_to_end(self, log_capture):
        """A feed build logs initialization, elements, rejections and serialization."""
        feed = RSS2Feed(build_id="build-e2e")
        item = feed.create_item().set_title("Post")
        feed.add_item(item)
        with pytest.raises(ValueError):
            item.set_date("not a date")

        FeedSerializer(SerializerConfig()).serialize(feed)

        records = _records(log_capture)
        messages = [record["message"] for record in records]
        assert "Feed initialized" in messages
        assert "Element added" in messages
        assert "Starting serializer build" in messages
        assert "Completed serializer build" in messages
        assert any(record["level"] == "WARNING" for record in records)
        assert {record["build_id"] for record in records} == {"build-e2e"}

        end = next(r for r in records if r["message"] == "Completed serializer build")
        assert end["logger"] == "feedwriter.serializer"

    def test_exception_info_is_formatted(self):
        formatter = StructuredFormatter()
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.getLogger("feedwriter").makeRecord(
                "feedwriter", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        entry = json.loads(formatter.format(record))

        assert entry["message"] == "failed"
        assert "RuntimeError: boom" in entry["exception"]

    def test_setup_structured_logging(self):
        root_logger = logging.getLogger()
        original_level = root_logger.level
        original_handlers = root_logger.handlers[:]

        try:
            setup_structured_logging("DEBUG")

            assert root_logger.level == logging.DEBUG
            assert len(root_logger.handlers) == 1
            assert isinstance(root_logger.handlers[0].formatter, StructuredFormatter)
            assert logging.getLogger("feedwriter.item").level == logging.DEBUG
        finally:
            root_logger.handlers.clear()
            root_logger.handlers.extend(original_handlers)
            root_logger.setLevel(original_level)
            for name in ("feedwriter", "feedwriter.feed", "feedwriter.item",
                         "feedwriter.serializer"):
                logging.getLogger(name).setLevel(logging.NOTSET)

    def test_setup_reads_level_from_environment(self):
        root_logger = logging.getLogger()
        original_level = root_logger.level
        original_handlers = root_logger.handlers[:]

        try:
            with patch.dict(os.environ, {"FEEDWRITER_LOG_LEVEL": "warning"}, clear=True):
                setup_structured_logging()

            assert root_logger.level == logging.WARNING
            assert logging.getLogger("feedwriter.serializer").level == logging.WARNING
        finally:
            root_logger.handlers.clear()
            root_logger.handlers.extend(original_handlers)
            root_logger.setLevel(original_level)
            for name in ("feedwriter", "feedwriter.feed", "feedwriter.item",
                         "feedwriter.serializer"):
                logging.getLogger(name).setLevel(logging.NOTSET)

import json
import logging

import pytest

from app.core.logging import (
    ContextFilter,
    LogContext,
    StructuredFormatter,
    bind_context,
    clear_context,
    get_logger,
)


class Collect(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []
        self.addFilter(ContextFilter())

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def collected():
    handler = Collect()
    logger = get_logger("tests.context")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    clear_context()
    yield logger, handler.records
    logger.removeHandler(handler)
    clear_context()


def test_context_applies_only_inside_block(collected):
    logger, records = collected

    with LogContext(user_id="u1", view="shop"):
        logger.info("inside")
    logger.info("outside")

    assert records[0].user_id == "u1"
    assert records[0].view == "shop"
    assert not hasattr(records[1], "user_id")


def test_nested_context_restores_outer_fields(collected):
    logger, records = collected
    bind_context(request_id="req-1")

    with LogContext(user_id="u1"):
        with LogContext(user_id="u2", order_id="o1"):
            logger.info("inner")
        logger.info("outer")

    assert (records[0].request_id, records[0].user_id, records[0].order_id) == ("req-1", "u2", "o1")
    assert (records[1].request_id, records[1].user_id) == ("req-1", "u1")
    assert not hasattr(records[1], "order_id")


def test_explicit_extra_wins_over_bound_context(collected):
    logger, records = collected

    with LogContext(session_id="abc"):
        logger.info("forced out", extra={"session_id": "xyz"})

    assert records[0].session_id == "xyz"


def test_structured_output_carries_context(collected):
    logger, records = collected

    with LogContext(user_id="u1"):
        logger.warning("strike")

    entry = json.loads(StructuredFormatter().format(records[0]))
    assert entry["message"] == "strike"
    assert entry["level"] == "WARNING"
    assert entry["user_id"] == "u1"
    assert "order_id" not in entry

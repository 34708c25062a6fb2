"""Structured Logging - JSONFormatter output shape and handler setup."""

import json
import logging
import sys
from uuid import uuid4

from treestore.infrastructure.observability import JSONFormatter, setup_logging


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        "treestore.test", logging.INFO, __file__, 1, msg, None, None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_base_fields():
    out = json.loads(JSONFormatter().format(_record()))
    assert out["level"] == "INFO"
    assert out["logger"] == "treestore.test"
    assert out["message"] == "hello"
    assert "timestamp" in out


def test_extra_fields_surface():
    node_id = uuid4()
    out = json.loads(JSONFormatter().format(
        _record(node_id=node_id, node_count=3, operation="copy"),
    ))
    assert out["node_id"] == str(node_id)
    assert out["node_count"] == 3
    assert out["operation"] == "copy"


def test_none_extras_are_omitted():
    out = json.loads(JSONFormatter().format(_record(parent_id=None)))
    assert "parent_id" not in out


def test_exception_is_formatted():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()
    out = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in out["exception"]


def test_setup_logging_replaces_its_own_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        first = setup_logging("DEBUG", "json")
        second = setup_logging("WARNING", "text")

        ours = [h for h in root.handlers if h.get_name() == "treestore"]
        assert ours == [second]
        assert first not in root.handlers
        assert root.level == logging.WARNING
        assert not isinstance(second.formatter, JSONFormatter)
    finally:
        root.handlers[:] = before
        root.setLevel(level)

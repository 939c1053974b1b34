"""Unit tests for DocSQLConfig and logging configuration."""

from __future__ import annotations

import io
import logging

from docsql.config import DEFAULT_CONFIG, DocSQLConfig
from docsql.compile.filter_translator import translate_filter
from docsql.logging_config import LOGGER_NAME, configure_logging
from docsql.statements.select import SelectBuilder


def test_defaults():
    assert DEFAULT_CONFIG.default_limit == 10
    assert DEFAULT_CONFIG.default_order_by == "id DESC"
    assert DEFAULT_CONFIG.id_field == "id"
    assert DEFAULT_CONFIG.log_level == "ERROR"


def test_from_env_reads_log_level():
    assert DocSQLConfig.from_env({"DOCSQL_LOG_LEVEL": "debug"}).log_level == "DEBUG"
    assert DocSQLConfig.from_env({"DOCSQL_LOG_LEVEL": "chatty"}).log_level == "ERROR"
    assert DocSQLConfig.from_env({}).log_level == "ERROR"


def test_package_logger_has_null_handler():
    import docsql  # noqa: F401

    handlers = logging.getLogger(LOGGER_NAME).handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)


def test_configure_logging_emits_fragments_and_statements():
    stream = io.StringIO()
    logger = configure_logging("DEBUG", stream=stream)
    try:
        translate_filter({"a": 1})
        SelectBuilder("users").query({"b": 2}).to_sql()
        output = stream.getvalue()
        assert "WHERE fragment" in output
        assert "SELECT SQL: SELECT * FROM users WHERE b = ?" in output
    finally:
        for handler in list(logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


def test_configure_logging_reuses_stream_handler():
    logger = configure_logging("ERROR")
    try:
        configure_logging("INFO")
        streams = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler)
        ]
        assert len(streams) == 1
        assert logger.level == logging.INFO
    finally:
        for handler in list(logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Tests for the logging helpers.

import logging

import pytest

import log


@pytest.fixture
def restore_level():
    previous = logging.getLogger(log.ROOT).level
    yield
    logging.getLogger(log.ROOT).setLevel(previous)


def test_loggers_share_the_hierarchy():
    logger = log.get_logger("compiler.synthesis")
    assert logger.name == "bladegen.compiler.synthesis"
    assert logger.propagate


@pytest.mark.parametrize("value, expected", [
    ("debug", logging.DEBUG),
    (" WARNING ", logging.WARNING),
    (logging.ERROR, logging.ERROR),
    ("loud", None),
])
def test_parse_level(value, expected):
    assert log._parse_level(value) == expected


def test_set_level_returns_previous(restore_level):
    log.set_level("ERROR")
    assert log.set_level("debug") == logging.ERROR
    assert logging.getLogger(log.ROOT).level == logging.DEBUG


def test_set_level_ignores_unknown_names(restore_level, caplog):
    log.set_level("WARNING")
    with caplog.at_level(logging.WARNING, logger=log.ROOT):
        log.set_level("loud")
    assert logging.getLogger(log.ROOT).level == logging.WARNING
    assert "loud" in caplog.text


def test_log_block_one_record_per_line(caplog):
    logger = log.get_logger("tests")
    with caplog.at_level(logging.INFO, logger=log.ROOT):
        log.log_block(logger, "Cayley table", "1 e1\ne1 1")
    assert [record.getMessage() for record in caplog.records] == [
        "Cayley table", "  1 e1", "  e1 1",
    ]


def test_log_block_respects_level(caplog):
    logger = log.get_logger("tests")
    with caplog.at_level(logging.WARNING, logger=log.ROOT):
        log.log_block(logger, "Cayley table", "1 e1")
    assert caplog.records == []


def test_console_formatter_shortens_names():
    formatter = log._ConsoleFormatter(use_color=False)
    record = logging.LogRecord(
        "bladegen.core.algebra", logging.INFO, __file__, 1, "ready", None, None,
    )
    assert formatter.format(record) == "INFO core.algebra: ready"
    assert record.name == "bladegen.core.algebra"

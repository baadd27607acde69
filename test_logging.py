"""
Test suite for logging setup.
"""
import logging
import logging.handlers

import pytest
from colorlog import ColoredFormatter

from calsync.utils import logging as calsync_logging
from calsync.utils.logging import WorkflowCommandFormatter, build_console_formatter


def make_record(level, message):
    return logging.LogRecord("calsync", level, __file__, 1, message, None, None)


def test_errors_become_workflow_commands():
    formatter = WorkflowCommandFormatter("%(message)s")
    assert formatter.format(make_record(logging.ERROR, "Missing Token")) == "::error::Missing Token"
    assert formatter.format(make_record(logging.WARNING, "50% done\nmore")) == "::warning::50%25 done%0Amore"


def test_info_stays_plain_text():
    formatter = WorkflowCommandFormatter("%(message)s")
    assert formatter.format(make_record(logging.INFO, "2024-01-01 - Standup")) == "2024-01-01 - Standup"


def test_console_formatter_choice():
    assert isinstance(build_console_formatter(True), WorkflowCommandFormatter)
    assert isinstance(build_console_formatter(False), ColoredFormatter)


@pytest.fixture
def clean_logger():
    yield calsync_logging.logger
    calsync_logging.shutdown_logging()
    calsync_logging.logger.setLevel(logging.NOTSET)


def test_setup_logging_is_idempotent_and_writes_file(clean_logger, tmp_path):
    first = calsync_logging.setup_logging(debug=True, actions=False, log_dir=str(tmp_path))
    second = calsync_logging.setup_logging(debug=False, actions=True, log_dir="")

    assert first is second
    assert first.level == logging.DEBUG
    queue_handlers = [h for h in first.handlers if isinstance(h, logging.handlers.QueueHandler)]
    assert len(queue_handlers) == 1

    first.info("hello from the test")
    calsync_logging.shutdown_logging()
    assert "hello from the test" in (tmp_path / "calsync.log").read_text(encoding="utf-8")

"""Tests for the pipeline lock and run log."""

import io
import logging
import os
import re

import pytest

from plyra_rollback.exceptions import LockError
from plyra_rollback.observability.run_log import (
    PACKAGE_LOGGER,
    SUCCESS,
    configure_run_logging,
    log_success,
)
from plyra_rollback.state.lock import PipelineLock

LINE_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}\+00:00\] \[(\w+)\] (.*)$")


class TestPipelineLock:
    """Tests for the advisory pipeline lock."""

    def test_second_holder_is_refused(self, tmp_path):
        path = tmp_path / "rollback.lock"
        with PipelineLock(path):
            with pytest.raises(LockError, match="another rollback is in progress"):
                PipelineLock(path, timeout=0).acquire()

    def test_release_allows_reacquire(self, tmp_path):
        path = tmp_path / "rollback.lock"
        first = PipelineLock(path)
        first.acquire()
        first.release()
        assert not first.held

        second = PipelineLock(path, timeout=0)
        second.acquire()
        assert second.held
        second.release()

    def test_lock_file_records_pid(self, tmp_path):
        path = tmp_path / "nested" / "rollback.lock"
        with PipelineLock(path):
            assert path.read_text().strip() == str(os.getpid())

    def test_acquire_is_idempotent(self, tmp_path):
        lock = PipelineLock(tmp_path / "rollback.lock")
        lock.acquire()
        lock.acquire()
        assert lock.held
        lock.release()
        lock.release()
        assert not lock.held


class TestRunLog:
    """Tests for the run log format and handler setup."""

    def test_file_lines_are_timestamped_and_leveled(self, tmp_path):
        log_file = tmp_path / "logs" / "rollback.log"
        configure_run_logging(log_file=log_file, stream=io.StringIO())
        logger = logging.getLogger(f"{PACKAGE_LOGGER}.test")

        logger.info("resolving")
        logger.warning("careful")
        logger.error("broken")
        log_success(logger, "done %s", "abc123")

        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.flush()
        lines = log_file.read_text().splitlines()
        parsed = [LINE_RE.match(line).groups() for line in lines]
        assert parsed == [
            ("INFO", "resolving"),
            ("WARN", "careful"),
            ("ERROR", "broken"),
            ("SUCCESS", "done abc123"),
        ]

    def test_log_file_is_appended(self, tmp_path):
        log_file = tmp_path / "rollback.log"
        log_file.write_text("[earlier] [INFO] previous run\n")
        configure_run_logging(log_file=log_file, stream=io.StringIO())
        logging.getLogger(PACKAGE_LOGGER).info("next run")
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.flush()
        lines = log_file.read_text().splitlines()
        assert lines[0] == "[earlier] [INFO] previous run"
        assert lines[1].endswith("[INFO] next run")

    def test_console_tags_non_info_levels(self):
        stream = io.StringIO()
        configure_run_logging(stream=stream)
        logger = logging.getLogger(PACKAGE_LOGGER)
        logger.info("plain")
        logger.warning("tagged")
        assert stream.getvalue().splitlines() == ["plain", "[WARN] tagged"]

    def test_level_filters_debug(self):
        stream = io.StringIO()
        configure_run_logging(level="INFO", stream=stream)
        logging.getLogger(PACKAGE_LOGGER).debug("hidden")
        assert stream.getvalue() == ""

    def test_warn_alias(self):
        stream = io.StringIO()
        configure_run_logging(level="WARN", stream=stream)
        logger = logging.getLogger(PACKAGE_LOGGER)
        logger.info("hidden")
        logger.warning("shown")
        assert stream.getvalue() == "[WARN] shown\n"

    def test_reconfigure_does_not_duplicate_handlers(self, tmp_path):
        configure_run_logging(stream=io.StringIO())
        configure_run_logging(log_file=tmp_path / "rollback.log", stream=io.StringIO())
        assert len(logging.getLogger(PACKAGE_LOGGER).handlers) == 2

    def test_success_level_sits_between_info_and_warning(self):
        assert logging.INFO < SUCCESS < logging.WARNING
        assert logging.getLevelName(SUCCESS) == "SUCCESS"

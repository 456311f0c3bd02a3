"""Tests for loguru setup."""

import sys

import pytest
from loguru import logger

from dayplan.config.settings import settings
from dayplan.core.logger import setup_logger


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_file_sink_respects_level(tmp_path):
    log_file = tmp_path / "logs" / "dayplan.log"
    setup_logger(level="warning", log_file=str(log_file))

    logger.info("[STATS] quiet line")
    logger.warning("[STATS] loud line")
    logger.remove()

    content = log_file.read_text()
    assert "loud line" in content
    assert "quiet line" not in content


def test_defaults_come_from_settings(tmp_path, monkeypatch):
    log_file = tmp_path / "from-settings.log"
    monkeypatch.setattr(settings, "log_file", str(log_file))
    monkeypatch.setattr(settings, "log_level", "DEBUG")

    setup_logger()
    logger.debug("[TASKS] debug line")
    logger.remove()

    assert "debug line" in log_file.read_text()


def test_console_only_without_log_file(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "log_file", None)
    monkeypatch.chdir(tmp_path)

    setup_logger(level="INFO")
    logger.info("console only")
    logger.remove()

    assert list(tmp_path.iterdir()) == []

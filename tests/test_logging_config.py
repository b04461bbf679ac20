"""Tests for logging setup.

Run with: pytest tests/test_logging_config.py -v
"""

from __future__ import annotations

import json

import pytest
import structlog

from release_metadata.logging_config import get_logger, setup_logging


def test_production_renders_json(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(environment="production", log_level="INFO")
    structlog.get_logger("test").info("pom_fetched", url="https://x")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "pom_fetched"
    assert record["url"] == "https://x"
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_debug(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(environment="production", log_level="INFO")
    structlog.get_logger("test").debug("pom_cache_hit")

    assert "pom_cache_hit" not in capsys.readouterr().err


def test_get_logger_returns_structlog_logger() -> None:
    logger = get_logger(__name__)
    assert hasattr(logger, "debug")

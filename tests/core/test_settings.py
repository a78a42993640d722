# tests/core/test_settings.py
from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from celine.projection.core.config import Settings
from celine.projection.core.logging import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_PROJECTION", raising=False)
        cfg = Settings(_env_file=None)

        assert cfg.default_projection == "public_fields"
        assert cfg.default_root is True
        assert cfg.max_depth == 8
        assert cfg.filtered_fields == ["password", "ssn"]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PROJECTION", "none")
        monkeypatch.setenv("MAX_DEPTH", "2")
        monkeypatch.setenv("FILTERED_FIELDS", '["token"]')

        cfg = Settings(_env_file=None)

        assert cfg.default_projection == "none"
        assert cfg.max_depth == 2
        assert cfg.filtered_fields == ["token"]

    def test_unknown_default_projection_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_projection="everything")


class TestConfigureLogging:
    def test_json_lines(self, restore_root_logger, capsys):
        configure_logging("DEBUG")

        logging.getLogger("celine.projection.test").info("hello")

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["message"] == "hello"
        assert record["levelname"] == "INFO"
        assert restore_root_logger.level == logging.DEBUG

    def test_text_output(self, restore_root_logger, capsys):
        configure_logging("info", json_output=False)

        logging.getLogger("celine.projection.test").warning("plain")

        out = capsys.readouterr().out
        assert "WARNING" in out
        assert "plain" in out

    def test_replaces_handlers(self, restore_root_logger):
        configure_logging()
        configure_logging()

        assert len(restore_root_logger.handlers) == 1

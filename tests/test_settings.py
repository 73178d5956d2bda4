"""Tests for user preferences and logging setup."""

import json
import logging

import pytest

from sprout.logger import ROOT_LOGGER, configure_logging
from sprout.settings import Settings, load_settings, save_settings


# ═══════════════════════════════════════════════════════════════════════
#  PREFERENCES
# ═══════════════════════════════════════════════════════════════════════


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.sound_enabled is True
        assert s.notifications_enabled is True
        assert s.do_not_disturb is False
        assert s.log_level == "INFO"

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "settings.json") == Settings()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        save_settings(Settings(sound_enabled=False, log_level="DEBUG"), path)
        loaded = load_settings(path)
        assert loaded.sound_enabled is False
        assert loaded.log_level == "DEBUG"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"do_not_disturb": True, "volume": 11}))
        loaded = load_settings(path)
        assert loaded.do_not_disturb is True

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert load_settings(path) == Settings()


# ═══════════════════════════════════════════════════════════════════════
#  LOGGING
# ═══════════════════════════════════════════════════════════════════════


@pytest.fixture
def sprout_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


class TestLogging:

    def test_file_handler_written(self, sprout_logger, tmp_path):
        configure_logging("DEBUG", tmp_path)
        logging.getLogger("sprout.timer.engine").debug("hello from the engine")
        for handler in sprout_logger.handlers:
            handler.flush()
        assert "hello from the engine" in (tmp_path / "sprout.log").read_text()

    def test_idempotent(self, sprout_logger, tmp_path):
        configure_logging(logging.INFO, tmp_path, console=True)
        configure_logging(logging.INFO, tmp_path, console=True)
        assert len(sprout_logger.handlers) == 2

    def test_bad_level_name_falls_back_to_info(self, sprout_logger):
        configure_logging("CHATTY")
        assert sprout_logger.level == logging.INFO

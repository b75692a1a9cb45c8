import logging

import pytest

from xyexplorer import config
from xyexplorer.logging_config import resolve_level, setup_logging


@pytest.fixture
def package_logger():
    yield logging.getLogger("xyexplorer")
    logger = logging.getLogger("xyexplorer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.mark.parametrize("level, expected", [
    ("debug", logging.DEBUG),
    (" Warning ", logging.WARNING),
    ("chatty", logging.INFO),
    (logging.ERROR, logging.ERROR),
])
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_level_defaults_to_environment_setting(monkeypatch):
    monkeypatch.setattr(config, "LOG_LEVEL_NAME", "ERROR")
    assert resolve_level(None) == logging.ERROR


def test_repeated_setup_replaces_handlers(package_logger):
    setup_logging("debug")
    setup_logging("warning")
    assert package_logger.level == logging.WARNING
    assert len(package_logger.handlers) == 1


def test_log_file_mirror(package_logger, tmp_path):
    path = tmp_path / "xyexplorer.log"
    setup_logging(logging.INFO, log_file=str(path))
    logging.getLogger("xyexplorer.model.sweep").info("Sweep started")
    for handler in package_logger.handlers:
        handler.flush()
    assert "xyexplorer.model.sweep - INFO - Sweep started" in path.read_text(encoding="utf-8")

"""
Tests for settings loading and logging setup.
"""

import logging

import pytest

from surveycore.config import CoreSettings, load_settings
from surveycore.errors import InvalidArgumentError
from surveycore.logger import setup_logging


def test_defaults():
    settings = load_settings()
    assert settings.schedule_date_format == "%d/%m/%Y"
    assert settings.default_page_size == 10
    assert settings.max_page_size == 100
    assert settings.collect_all_errors is False


def test_load_from_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        'schedule_date_format: "%Y-%m-%d"\n'
        "default_page_size: 25\n"
        "collect_all_errors: true\n"
    )

    settings = load_settings(path)

    assert settings.schedule_date_format == "%Y-%m-%d"
    assert settings.default_page_size == 25
    assert settings.collect_all_errors is True
    assert settings.max_page_size == 100


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("")
    assert load_settings(path) == CoreSettings()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml")


def test_unknown_key_rejected():
    with pytest.raises(InvalidArgumentError, match="page_sise"):
        CoreSettings.from_dict({"page_sise": 5})


def test_inconsistent_page_sizes_rejected():
    with pytest.raises(InvalidArgumentError):
        CoreSettings(default_page_size=50, max_page_size=20)


def test_setup_logging_is_idempotent():
    first = setup_logging("DEBUG", name="surveycore.test")
    second = setup_logging(logging.INFO, name="surveycore.test")
    assert first is second
    assert len(second.handlers) == 1


def test_settings_log_level_reaches_logger(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("log_level: debug\n")

    settings = load_settings(path)
    log = setup_logging(settings.log_level, name="surveycore.levels")

    assert settings.log_level == "debug"
    assert log.level == logging.DEBUG
    assert log.handlers[0].level == logging.DEBUG


def test_unknown_log_level_rejected(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("log_level: LOUD\n")
    with pytest.raises(InvalidArgumentError, match="LOUD"):
        load_settings(path)


def test_logger_module_only_exports_setup():
    """Library modules get their own loggers via logging.getLogger(__name__)."""
    import surveycore.logger as logger_module

    assert not hasattr(logger_module, "logger")

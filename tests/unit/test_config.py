"""Tests for runtime settings."""

import logging
import os
from datetime import date

import numpy as np
import polars as pl
import pytest

from tsfunk.config import (
    Settings,
    configure_logging,
    get_settings,
    load_settings,
    reset_settings,
    set_settings,
)
from tsfunk.exceptions import ConfigurationError, DegenerateRowWarning
from tsfunk.operators import rowwise_ordinal_pctrank


class TestSettings:
    """Settings validation."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.max_workers == 8
        assert settings.empty_row == "nan"
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize("workers", [0, -2, "4"])
    def test_invalid_workers(self, workers) -> None:
        with pytest.raises(ConfigurationError, match="max_workers"):
            Settings(max_workers=workers)

    def test_invalid_empty_row(self) -> None:
        with pytest.raises(ConfigurationError, match="empty_row"):
            Settings(empty_row="zero")

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ConfigurationError, match="log_level"):
            Settings(log_level="LOUD")


class TestLoadSettings:
    """YAML and environment loading."""

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "tsfunk.yaml"
        path.write_text("max_workers: 2\nempty_row: raise\n")

        settings = load_settings(path)
        assert settings.max_workers == 2
        assert settings.empty_row == "raise"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "tsfunk.yaml"
        path.write_text("max_workers: 2\n")
        monkeypatch.setenv("TSFUNK_MAX_WORKERS", "3")
        monkeypatch.setenv("TSFUNK_EMPTY_ROW", "RAISE")
        monkeypatch.setenv("TSFUNK_LOG_LEVEL", "debug")

        settings = load_settings(path)
        assert settings.max_workers == 3
        assert settings.empty_row == "raise"
        assert settings.log_level == "DEBUG"

    def test_env_non_integer_workers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TSFUNK_MAX_WORKERS", "many")
        with pytest.raises(ConfigurationError, match="TSFUNK_MAX_WORKERS"):
            load_settings()

    def test_unknown_yaml_key(self, tmp_path) -> None:
        path = tmp_path / "tsfunk.yaml"
        path.write_text("threads: 4\n")
        with pytest.raises(ConfigurationError, match="Unknown settings"):
            load_settings(path)

    def test_yaml_not_a_mapping(self, tmp_path) -> None:
        path = tmp_path / "tsfunk.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(path)

    def test_empty_yaml_uses_defaults(self, tmp_path) -> None:
        path = tmp_path / "tsfunk.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()


class TestCachedSettings:
    """get_settings / set_settings / reset_settings."""

    def test_get_settings_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_set_settings_changes(self) -> None:
        settings = set_settings(max_workers=1)
        assert settings.max_workers == 1
        assert get_settings().max_workers == 1

    def test_set_settings_applies_log_level(self) -> None:
        set_settings(Settings(log_level="DEBUG"))
        assert logging.getLogger("tsfunk").level == logging.DEBUG
        set_settings(Settings())

    def test_reset_reloads_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        set_settings(max_workers=1)
        monkeypatch.setenv("TSFUNK_MAX_WORKERS", "5")
        reset_settings()
        assert get_settings().max_workers == 5


class TestDotenv:
    """.env files are read by load_settings only."""

    @pytest.fixture
    def dotenv_dir(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / ".env").write_text("TSFUNK_MAX_WORKERS=3\n")
        monkeypatch.chdir(tmp_path)
        # Register the variable so values loaded from .env are undone on teardown
        monkeypatch.setenv("TSFUNK_MAX_WORKERS", "0")
        monkeypatch.delenv("TSFUNK_MAX_WORKERS")
        return tmp_path

    def test_implicit_settings_skip_dotenv(self, dotenv_dir) -> None:
        assert get_settings().max_workers == 8
        assert "TSFUNK_MAX_WORKERS" not in os.environ

    def test_load_settings_reads_dotenv(self, dotenv_dir) -> None:
        assert load_settings().max_workers == 3

    def test_load_settings_without_dotenv(self, dotenv_dir) -> None:
        assert load_settings(use_dotenv=False).max_workers == 8

    def test_environment_wins_over_dotenv(self, dotenv_dir, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TSFUNK_MAX_WORKERS", "2")
        assert load_settings().max_workers == 2


class TestConfigureLogging:
    """Settings drive the "tsfunk" logger through setup_logger."""

    def test_log_dir_from_env(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TSFUNK_LOG_DIR", str(tmp_path))
        assert load_settings(use_dotenv=False).log_dir == str(tmp_path)

    def test_log_dir_in_yaml(self, tmp_path) -> None:
        path = tmp_path / "tsfunk.yaml"
        path.write_text(f"log_dir: {tmp_path / 'logs'}\n")
        assert load_settings(path, use_dotenv=False).log_dir == str(tmp_path / "logs")

    def test_operator_logs_written_to_file(self, tmp_path) -> None:
        package_logger = logging.getLogger("tsfunk")
        saved = list(package_logger.handlers)
        for handler in saved:
            package_logger.removeHandler(handler)
        try:
            set_settings(Settings(log_level="INFO", log_dir=str(tmp_path)))
            df = pl.DataFrame({"Date": [date(2024, 1, 1)], "A": [1.0], "B": [np.nan]})
            with pytest.warns(DegenerateRowWarning):
                rowwise_ordinal_pctrank(df)

            for handler in package_logger.handlers:
                handler.flush()
            files = list(tmp_path.glob("logs_*.log"))
            assert len(files) == 1
            assert "single valid value" in files[0].read_text()
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
                handler.close()
            for handler in saved:
                package_logger.addHandler(handler)
            set_settings(Settings())

    def test_no_file_without_log_dir(self) -> None:
        logger = configure_logging(Settings(log_level="ERROR"))
        assert logger.name == "tsfunk"
        assert logger.level == logging.ERROR
        set_settings(Settings())

"""Shared fixtures for tsfunk tests."""

from datetime import date

import numpy as np
import polars as pl
import pytest

from tsfunk.config import reset_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from TSFUNK_* environment variables and cached settings."""
    for name in ("TSFUNK_MAX_WORKERS", "TSFUNK_EMPTY_ROW", "TSFUNK_LOG_LEVEL", "TSFUNK_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def wide_df() -> pl.DataFrame:
    """Create sample wide DataFrame without missing values."""
    return pl.DataFrame({
        "Date": pl.date_range(date(2024, 1, 1), date(2024, 1, 5), eager=True),
        "AAPL": [100.0, 102.0, 101.0, 103.0, 105.0],
        "MSFT": [200.0, 202.0, 201.0, 203.0, 205.0],
        "GOOGL": [150.0, 152.0, 151.0, 153.0, 155.0],
        "TSLA": [180.0, 100.0, 250.0, 90.0, 300.0],
    })


@pytest.fixture
def nan_df() -> pl.DataFrame:
    """Wide DataFrame with a tie, missing values, a single-value row and an empty row."""
    nan = np.nan
    return pl.DataFrame({
        "Date": pl.date_range(date(2024, 1, 1), date(2024, 1, 4), eager=True),
        "A": [5.0, 1.0, nan, nan],
        "B": [5.0, nan, 7.0, nan],
        "C": [3.0, 3.0, nan, nan],
    })


@pytest.fixture
def scenario_df() -> pl.DataFrame:
    """Two timestamps, three series: [[1, NaN, 3], [NaN, NaN, NaN]]."""
    return pl.DataFrame({
        "Date": [date(2024, 1, 1), date(2024, 1, 2)],
        "X": [1.0, np.nan],
        "Y": [np.nan, np.nan],
        "Z": [3.0, np.nan],
    })

"""Rowwise aggregate operators: means and value counts.

Means ignore NaN. Rows (or columns) without any valid value follow the
empty-row policy: "nan" yields NaN, "raise" raises EmptyRowError.
"""

from __future__ import annotations

import logging
import numbers

import numpy as np
import polars as pl

from tsfunk.config import EMPTY_ROW_POLICIES, get_settings
from tsfunk.exceptions import EmptyRowError, ValidationError
from tsfunk.matrix import is_missing, rebuild, timestamps, validate, value_columns, values

logger = logging.getLogger(__name__)


def _resolve_on_empty(on_empty: str | None) -> str:
    policy = get_settings().empty_row if on_empty is None else on_empty
    if policy not in EMPTY_ROW_POLICIES:
        raise ValidationError(f"on_empty must be one of {EMPTY_ROW_POLICIES}, got: {on_empty!r}")
    return policy


def _nan_mean(data: np.ndarray, axis: int) -> tuple[np.ndarray, np.ndarray]:
    """Mean over valid values along an axis, plus the valid counts."""
    valid = ~is_missing(data)
    counts = valid.sum(axis=axis)
    sums = np.where(valid, data, 0.0).sum(axis=axis)
    means = np.divide(sums, counts, out=np.full(sums.shape, np.nan), where=counts > 0)
    return means, counts


def row_mean(x: pl.DataFrame, on_empty: str | None = None) -> pl.DataFrame:
    """Mean of each row, ignoring NaN.

    Args:
        x: Wide DataFrame with timestamp + series columns
        on_empty: "nan" or "raise" for rows without valid values
            (default: settings.empty_row)

    Returns:
        DataFrame with the timestamp column and a single "Mean" column

    Raises:
        EmptyRowError: If a row has no valid values and on_empty="raise"

    Examples:
        >>> # rows = [(1, NaN, 3), (NaN, NaN, NaN)] => Mean = (2.0, NaN)
    """
    validate(x)
    policy = _resolve_on_empty(on_empty)

    means, counts = _nan_mean(values(x), axis=1)

    empty = np.flatnonzero(counts == 0)
    if len(empty):
        if policy == "raise":
            raise EmptyRowError("row", timestamps(x)[int(empty[0])])
        logger.info(f"row_mean: {len(empty)} row(s) without valid values set to NaN")

    return rebuild(x, means[:, None], ["Mean"])


def column_mean(x: pl.DataFrame, on_empty: str | None = None) -> pl.DataFrame:
    """Mean of each series over time, ignoring NaN.

    Args:
        x: Wide DataFrame with timestamp + series columns
        on_empty: "nan" or "raise" for series without valid values
            (default: settings.empty_row)

    Returns:
        DataFrame with columns "ID" (series label) and "Mean", one row per series

    Raises:
        EmptyRowError: If a series has no valid values and on_empty="raise"
    """
    validate(x)
    policy = _resolve_on_empty(on_empty)
    cols = value_columns(x)

    means, counts = _nan_mean(values(x), axis=0)

    empty = np.flatnonzero(counts == 0)
    if len(empty):
        if policy == "raise":
            raise EmptyRowError("column", cols[int(empty[0])])
        logger.info(f"column_mean: {len(empty)} column(s) without valid values set to NaN")

    return pl.DataFrame(
        {"ID": cols, "Mean": means},
        schema={"ID": pl.String, "Mean": pl.Float64},
    )


def _count_values(data: np.ndarray, target_value: object) -> np.ndarray:
    """Per-row count of cells equal to ``target_value``."""
    if not isinstance(target_value, (numbers.Real, np.number)):
        return np.zeros(data.shape[0], dtype=np.int64)
    return (data == target_value).sum(axis=1).astype(np.int64)


def rowwise_count(x: pl.DataFrame, target_value: object) -> pl.DataFrame:
    """Count occurrences of ``target_value`` in each row.

    Compares every cell, NaN included, by equality. NaN never equals
    anything, so counting NaN yields zeros.

    Args:
        x: Wide DataFrame with timestamp + series columns
        target_value: Value to count

    Returns:
        DataFrame with the timestamp column and one Int64 column
        named "CountOf_<target_value>"

    Examples:
        >>> # rows = [(1, 2, 1), (NaN, 1, 3)]
        >>> rowwise_count(x, 1)  # CountOf_1 = (2, 1)
    """
    validate(x)
    counts = _count_values(values(x), target_value)
    return rebuild(x, counts[:, None], [f"CountOf_{target_value}"])


def rowwise_countall(x: pl.DataFrame) -> pl.DataFrame:
    """Count every distinct value in each row, ignoring NaN.

    Returns:
        DataFrame with the timestamp column and one Int64 column
        "Var_<value>" per distinct non-NaN value of the whole table,
        in ascending order of value

    Examples:
        >>> # rows = [(1, 2, 1), (NaN, 1, 3)]
        >>> # => Var_1.0 = (2, 1), Var_2.0 = (1, 0), Var_3.0 = (0, 1)
    """
    validate(x)
    data = values(x)

    distinct = np.unique(data[~is_missing(data)])
    logger.debug(f"rowwise_countall: {len(distinct)} distinct value(s)")

    if len(distinct) == 0:
        return rebuild(x, np.empty((x.height, 0), dtype=np.int64), [])

    counts = np.column_stack([_count_values(data, float(v)) for v in distinct])
    return rebuild(x, counts, [f"Var_{float(v)}" for v in distinct])

"""Time-indexed matrix helpers for wide tables.

A time-indexed matrix is a wide polars DataFrame where:
- First column holds the timestamps (row labels)
- Remaining columns are named numeric series

NaN is the only missing-value marker. Every operator decides what is
missing through :func:`is_missing`.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import polars as pl

from tsfunk.exceptions import ShapeMismatchError, ValidationError

DEFAULT_DATE_COL = "Date"


def is_missing(values: np.ndarray | float) -> np.ndarray | bool:
    """Return True where a value is a missing observation (NaN)."""
    return np.isnan(values)


def validate(x: pl.DataFrame) -> None:
    """Check that ``x`` is a wide table with a timestamp column and numeric series.

    Raises:
        ValidationError: If ``x`` is not a DataFrame, has no columns, or holds
            a non-numeric series column.
    """
    if not isinstance(x, pl.DataFrame):
        raise ValidationError(f"Expected a polars DataFrame, got {type(x).__name__}")
    if x.width == 0:
        raise ValidationError("DataFrame has no timestamp column")

    bad = [col for col in x.columns[1:] if not x.schema[col].is_numeric()]
    if bad:
        raise ValidationError(f"Non-numeric series columns: {bad}")


def timestamps(x: pl.DataFrame) -> pl.Series:
    """Timestamp column (row labels)."""
    return x[x.columns[0]]


def value_columns(x: pl.DataFrame) -> list[str]:
    """Get value columns (all except first which is the timestamp)."""
    return x.columns[1:]


def values(x: pl.DataFrame) -> np.ndarray:
    """Value columns as a float64 matrix (rows × series)."""
    cols = value_columns(x)
    if not cols:
        return np.empty((x.height, 0), dtype=np.float64)
    return x.select(cols).to_numpy().astype(np.float64)


def from_numpy(
    ts: Sequence | pl.Series,
    data: np.ndarray | Sequence[Sequence[float]],
    columns: Sequence[str],
    date_col: str = DEFAULT_DATE_COL,
) -> pl.DataFrame:
    """Build a wide table from timestamps, a data matrix and series labels.

    Args:
        ts: Row labels, one per row of ``data``
        data: Matrix of shape (len(ts), len(columns)); NaN marks missing values
        columns: Series labels
        date_col: Name of the timestamp column

    Returns:
        Wide DataFrame with ``date_col`` followed by one float column per label

    Raises:
        ShapeMismatchError: If ``data`` does not match the labels
        ValidationError: If labels are duplicated or clash with ``date_col``
    """
    labels = list(columns)
    if len(set(labels)) != len(labels):
        raise ValidationError(f"Duplicate column labels: {labels}")
    if date_col in labels:
        raise ValidationError(f"Column label clashes with timestamp column: {date_col}")

    n_rows = len(ts)
    matrix = np.asarray(data, dtype=np.float64)
    if matrix.size == 0:
        matrix = matrix.reshape(n_rows, len(labels))
    if matrix.ndim != 2 or matrix.shape != (n_rows, len(labels)):
        raise ShapeMismatchError((n_rows, len(labels)), matrix.shape)

    return pl.DataFrame({
        date_col: ts,
        **{col: matrix[:, j] for j, col in enumerate(labels)}
    })


def rebuild(
    x: pl.DataFrame,
    result: np.ndarray,
    columns: Sequence[str] | None = None,
) -> pl.DataFrame:
    """Attach a result matrix to the timestamps of ``x``.

    Args:
        x: Input table whose timestamp column is reused
        result: Matrix with one row per row of ``x``
        columns: Output labels; defaults to the value columns of ``x``

    Raises:
        ShapeMismatchError: If ``result`` does not align with rows and labels
    """
    date_col = x.columns[0]
    labels = value_columns(x) if columns is None else list(columns)

    if result.ndim != 2 or result.shape != (x.height, len(labels)):
        raise ShapeMismatchError((x.height, len(labels)), result.shape)

    return pl.DataFrame({
        date_col: x[date_col],
        **{col: result[:, j] for j, col in enumerate(labels)}
    })

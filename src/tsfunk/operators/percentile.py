"""Rowwise percentile-rank and quantile-bucket operators.

Derivation chain per row: rank -> percentile rank -> quantile bucket.

Conventions:
- Percentile rank = rank / max rank of the row.
- A row with a single valid value has no meaningful percentile rank and
  yields NaN; a DegenerateRowWarning reports how many rows were affected.
- Quantile breakpoints are linear-interpolated quantiles at 0, 1/n, ..., 1.
  By default they are taken over the row's original values; pass
  ``breaks_on="pctrank"`` to bucket the percentile ranks instead.
"""

from __future__ import annotations

import logging
import warnings
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import polars as pl

from tsfunk.config import get_settings
from tsfunk.exceptions import DegenerateRowWarning, ValidationError
from tsfunk.matrix import is_missing, rebuild, validate, values
from tsfunk.operators.ranking import RankMethod, rank_matrix

logger = logging.getLogger(__name__)

BREAK_SOURCES = ("values", "pctrank")


def _pctrank_matrix(data: np.ndarray, method: RankMethod | str) -> np.ndarray:
    """Percentile ranks of a 2D array (rows × series).

    Returns:
        Ranks divided by each row's maximum rank; NaN for missing cells and
        for every cell of rows with fewer than two valid values
    """
    ranks = rank_matrix(data, method)
    if ranks.shape[1] == 0:
        return ranks

    valid = ~is_missing(ranks)
    n_valid = valid.sum(axis=1)

    row_max = np.where(valid, ranks, -np.inf).max(axis=1)
    usable = n_valid >= 2
    row_max = np.where(usable, row_max, np.nan)

    result = ranks / row_max[:, None]

    n_degenerate = int((n_valid == 1).sum())
    if n_degenerate:
        logger.info(f"{n_degenerate} row(s) with a single valid value set to NaN")
        warnings.warn(
            f"{n_degenerate} row(s) have a single valid value; percentile rank is NaN",
            DegenerateRowWarning,
            stacklevel=3,
        )

    return result


def rowwise_pctrank(x: pl.DataFrame, method: RankMethod | str = RankMethod.ORDINAL) -> pl.DataFrame:
    """Percentile rank within each row: rank divided by the row's maximum rank.

    Args:
        x: Wide DataFrame with timestamp + series columns
        method: Ranking strategy applied first (see RankMethod)

    Returns:
        Wide DataFrame with values in (0, 1], NaN for missing cells and for
        rows holding a single valid value

    Examples:
        >>> # row = (4, 3, 6, 10) => ordinal pct rank (0.5, 0.25, 0.75, 1.0)
    """
    validate(x)
    return rebuild(x, _pctrank_matrix(values(x), method))


def rowwise_ordinal_pctrank(x: pl.DataFrame) -> pl.DataFrame:
    """Ordinal percentile rank within each row.

    The row maximum of ordinal ranks is the row's count of valid values.
    """
    return rowwise_pctrank(x, RankMethod.ORDINAL)


def rowwise_tied_pctrank(x: pl.DataFrame) -> pl.DataFrame:
    """Tied (fractional) percentile rank within each row.

    Examples:
        >>> # (5, 5, 3) => tied ranks (2.5, 2.5, 1) => (1.0, 1.0, 0.4)
    """
    return rowwise_pctrank(x, RankMethod.TIED)


def _quantile_breaks(source: np.ndarray, n_quantiles: int) -> np.ndarray:
    """Linear-interpolated quantiles at 0, 1/n, ..., 1, safe for infinite values.

    Same interpolation as ``np.quantile`` (method="linear"), except that a
    breakpoint falling exactly on an order statistic, or next to an infinite
    neighbour, takes that value instead of computing ``inf - inf``.
    """
    ordered = np.sort(source)
    last = len(ordered) - 1

    position = last * (np.arange(n_quantiles + 1) / n_quantiles)
    lo = np.floor(position).astype(np.int64)
    hi = np.minimum(lo + 1, last)
    gamma = position - lo

    a = ordered[lo]
    b = ordered[hi]
    with np.errstate(invalid="ignore", over="ignore"):
        diff = b - a
        lerp = np.where(gamma >= 0.5, b - diff * (1 - gamma), a + diff * gamma)

    return np.select(
        [(gamma == 0) | (a == b), np.isinf(a), np.isinf(b)],
        [a, a, b],
        default=lerp,
    )


def _quantile_row(row: np.ndarray, pct_row: np.ndarray, n_quantiles: int, breaks_on: str) -> np.ndarray:
    """Assign 1-based quantile buckets to the cells of one row.

    Args:
        row: Original values of the row
        pct_row: Percentile ranks of the row; its NaN cells are left out
        n_quantiles: Number of buckets
        breaks_on: "values" or "pctrank", the series the breakpoints are taken over

    Returns:
        Array of bucket indices in 1..n_quantiles, NaN elsewhere
    """
    mask = ~is_missing(pct_row)
    result = np.full(row.shape, np.nan, dtype=np.float64)

    if not mask.any():
        return result

    source = row[mask] if breaks_on == "values" else pct_row[mask]
    breaks = _quantile_breaks(source, n_quantiles)

    # First upper breakpoint >= value
    buckets = np.searchsorted(breaks[1:], source, side="left") + 1
    result[mask] = np.minimum(buckets, n_quantiles)
    return result


def _quantiles(
    x: pl.DataFrame,
    method: RankMethod,
    n_quantiles: int,
    breaks_on: str,
) -> pl.DataFrame:
    validate(x)
    if isinstance(n_quantiles, bool) or not isinstance(n_quantiles, (int, np.integer)) or n_quantiles < 1:
        raise ValidationError(f"n_quantiles must be a positive integer, got: {n_quantiles!r}")
    if breaks_on not in BREAK_SOURCES:
        raise ValidationError(f"breaks_on must be one of {BREAK_SOURCES}, got: {breaks_on!r}")

    data = values(x)
    pct = _pctrank_matrix(data, method)
    if data.size == 0:
        return rebuild(x, pct)

    logger.debug(
        f"Bucketing {x.height}x{x.width - 1} table into {n_quantiles} quantiles "
        f"(method={method.value}, breaks_on={breaks_on})"
    )

    def bucket_row(row: np.ndarray, pct_row: np.ndarray) -> np.ndarray:
        return _quantile_row(row, pct_row, int(n_quantiles), breaks_on)

    with ThreadPoolExecutor(max_workers=get_settings().max_workers) as executor:
        results = list(executor.map(bucket_row, data, pct))

    return rebuild(x, np.array(results, dtype=np.float64).reshape(data.shape))


def rowwise_quantiles(x: pl.DataFrame, n_quantiles: int = 5, breaks_on: str = "values") -> pl.DataFrame:
    """Bucket each row's values into quantiles, ignoring NaN.

    Ordinal percentile ranks decide which cells are bucketed: missing cells
    and rows with fewer than two valid values come out NaN.

    Args:
        x: Wide DataFrame with timestamp + series columns
        n_quantiles: Number of equal-probability buckets (default: 5)
        breaks_on: "values" (default) takes breakpoints over the row's
            original values; "pctrank" over its ordinal percentile ranks

    Returns:
        Wide DataFrame of bucket indices in 1..n_quantiles

    Examples:
        >>> # row = (10, 20, 30, 40), n_quantiles=4 => (1, 2, 3, 4)
    """
    return _quantiles(x, RankMethod.ORDINAL, n_quantiles, breaks_on)


def rowwise_tiedquantiles(x: pl.DataFrame, n_quantiles: int = 5, breaks_on: str = "values") -> pl.DataFrame:
    """Bucket each row's values into quantiles using tied percentile ranks.

    Same contract as :func:`rowwise_quantiles`; with ``breaks_on="pctrank"``
    tied values share a percentile rank and therefore a bucket.
    """
    return _quantiles(x, RankMethod.TIED, n_quantiles, breaks_on)

"""Rowwise ranking operators for wide tables.

All operators rank row-wise across series at each timestamp:
- First column (timestamp) is unchanged
- Ranks are 1-based and computed over the row's valid (non-NaN) values
- NaN cells stay NaN
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

import numpy as np
import polars as pl
from scipy import stats

from tsfunk.config import get_settings
from tsfunk.exceptions import ValidationError
from tsfunk.matrix import is_missing, rebuild, validate, values

logger = logging.getLogger(__name__)


class RankMethod(str, Enum):
    """Tie-breaking strategy for rowwise ranking."""

    ORDINAL = "ordinal"  # 1234, ties by order of appearance
    COMPETITION = "competition"  # 1224
    TIED = "tied"  # 1 2.5 2.5 4
    DENSE = "dense"  # 1223


# scipy.stats.rankdata method per strategy
_SCIPY_METHODS = {
    RankMethod.ORDINAL: "ordinal",
    RankMethod.COMPETITION: "min",
    RankMethod.TIED: "average",
    RankMethod.DENSE: "dense",
}


def _resolve_method(method: RankMethod | str) -> RankMethod:
    try:
        return RankMethod(method)
    except ValueError:
        valid = [m.value for m in RankMethod]
        raise ValidationError(f"Unknown rank method: {method!r}, expected one of {valid}") from None


def _rank_row(row: np.ndarray, method: RankMethod) -> np.ndarray:
    """Rank the valid values of a single row.

    Args:
        row: 1D array of values
        method: Tie-breaking strategy

    Returns:
        Array of 1-based ranks, NaN where the input is missing
    """
    mask = ~is_missing(row)
    result = np.full(row.shape, np.nan, dtype=np.float64)

    if not mask.any():
        return result

    # ordinal uses a stable sort, so the first of equal values ranks lower
    result[mask] = stats.rankdata(row[mask], method=_SCIPY_METHODS[method])
    return result


def rank_matrix(data: np.ndarray, method: RankMethod | str) -> np.ndarray:
    """Rank every row of a 2D array (rows × series) in parallel.

    Returns:
        Float array of the same shape holding 1-based ranks
    """
    method = _resolve_method(method)
    if data.size == 0:
        return np.full(data.shape, np.nan, dtype=np.float64)

    def rank_with_method(row: np.ndarray) -> np.ndarray:
        return _rank_row(row, method)

    with ThreadPoolExecutor(max_workers=get_settings().max_workers) as executor:
        results = list(executor.map(rank_with_method, data))

    return np.array(results, dtype=np.float64).reshape(data.shape)


def rowwise_rank(x: pl.DataFrame, method: RankMethod | str = RankMethod.ORDINAL) -> pl.DataFrame:
    """Rank values across series within each row, ignoring NaN.

    Args:
        x: Wide DataFrame with timestamp + series columns
        method: Tie-breaking strategy, a RankMethod or its value
            ("ordinal", "competition", "tied", "dense")

    Returns:
        Wide DataFrame of 1-based ranks with the same shape as ``x``

    Examples:
        >>> # row = (5, 5, 3)
        >>> rowwise_rank(x, "ordinal")  # (2, 3, 1)
        >>> rowwise_rank(x, "competition")  # (2, 2, 1)
        >>> rowwise_rank(x, "tied")  # (2.5, 2.5, 1)
        >>> rowwise_rank(x, "dense")  # (2, 2, 1)
    """
    validate(x)
    method = _resolve_method(method)
    logger.debug(f"Ranking {x.height}x{x.width - 1} table with method={method.value}")

    return rebuild(x, rank_matrix(values(x), method))


def rowwise_ordinalrank(x: pl.DataFrame) -> pl.DataFrame:
    """Ordinal rank within each row.

    Equal values receive distinct consecutive ranks in the order they
    appear in the row.

    Examples:
        >>> # (5, 5, 3) => (2, 3, 1)
    """
    return rowwise_rank(x, RankMethod.ORDINAL)


def rowwise_competerank(x: pl.DataFrame) -> pl.DataFrame:
    """Competition ("1224") rank within each row.

    Tied values share the lowest of their ranks and the next distinct
    value skips ahead by the size of the tie group.
    """
    return rowwise_rank(x, RankMethod.COMPETITION)


def rowwise_tiedrank(x: pl.DataFrame) -> pl.DataFrame:
    """Fractional rank within each row; ties share the mean of their ranks."""
    return rowwise_rank(x, RankMethod.TIED)


def rowwise_denserank(x: pl.DataFrame) -> pl.DataFrame:
    """Dense ("1223") rank within each row."""
    return rowwise_rank(x, RankMethod.DENSE)

"""Rowwise statistical operators for wide time-indexed tables.

All operators work on wide DataFrames where:
- First column is the date/timestamp
- Remaining columns are series values
"""

from tsfunk.profiler import profiled

# Import raw operators with underscore prefix
from tsfunk.operators.aggregate import (
    column_mean as _column_mean,
    row_mean as _row_mean,
    rowwise_count as _rowwise_count,
    rowwise_countall as _rowwise_countall,
)
from tsfunk.operators.percentile import (
    rowwise_ordinal_pctrank as _rowwise_ordinal_pctrank,
    rowwise_pctrank as _rowwise_pctrank,
    rowwise_quantiles as _rowwise_quantiles,
    rowwise_tied_pctrank as _rowwise_tied_pctrank,
    rowwise_tiedquantiles as _rowwise_tiedquantiles,
)
from tsfunk.operators.ranking import (
    RankMethod,
    rowwise_competerank as _rowwise_competerank,
    rowwise_denserank as _rowwise_denserank,
    rowwise_ordinalrank as _rowwise_ordinalrank,
    rowwise_rank as _rowwise_rank,
    rowwise_tiedrank as _rowwise_tiedrank,
)

# Wrap all operators with profiler
# Aggregate
row_mean = profiled(_row_mean)
column_mean = profiled(_column_mean)
rowwise_count = profiled(_rowwise_count)
rowwise_countall = profiled(_rowwise_countall)

# Ranking
rowwise_rank = profiled(_rowwise_rank)
rowwise_ordinalrank = profiled(_rowwise_ordinalrank)
rowwise_competerank = profiled(_rowwise_competerank)
rowwise_tiedrank = profiled(_rowwise_tiedrank)
rowwise_denserank = profiled(_rowwise_denserank)

# Percentile / quantile
rowwise_pctrank = profiled(_rowwise_pctrank)
rowwise_ordinal_pctrank = profiled(_rowwise_ordinal_pctrank)
rowwise_tied_pctrank = profiled(_rowwise_tied_pctrank)
rowwise_quantiles = profiled(_rowwise_quantiles)
rowwise_tiedquantiles = profiled(_rowwise_tiedquantiles)

__all__ = [
    # Aggregate operators
    "row_mean",
    "column_mean",
    "rowwise_count",
    "rowwise_countall",
    # Ranking operators
    "RankMethod",
    "rowwise_rank",
    "rowwise_ordinalrank",
    "rowwise_competerank",
    "rowwise_tiedrank",
    "rowwise_denserank",
    # Percentile rank operators
    "rowwise_pctrank",
    "rowwise_ordinal_pctrank",
    "rowwise_tied_pctrank",
    # Quantile operators
    "rowwise_quantiles",
    "rowwise_tiedquantiles",
]

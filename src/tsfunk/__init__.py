"""tsfunk: rowwise statistics over wide time-indexed tables."""

from tsfunk import operators
from tsfunk.config import Settings, get_settings, load_settings, set_settings
from tsfunk.exceptions import (
    ConfigurationError,
    DegenerateRowWarning,
    EmptyRowError,
    ShapeMismatchError,
    TsFunkError,
    ValidationError,
)
from tsfunk.matrix import from_numpy, is_missing
from tsfunk.operators import (
    RankMethod,
    column_mean,
    row_mean,
    rowwise_competerank,
    rowwise_count,
    rowwise_countall,
    rowwise_denserank,
    rowwise_ordinal_pctrank,
    rowwise_ordinalrank,
    rowwise_pctrank,
    rowwise_quantiles,
    rowwise_rank,
    rowwise_tied_pctrank,
    rowwise_tiedquantiles,
    rowwise_tiedrank,
)
from tsfunk.profiler import profile

__version__ = "0.1.0"

__all__ = [
    "operators",
    "RankMethod",
    "row_mean",
    "column_mean",
    "rowwise_rank",
    "rowwise_ordinalrank",
    "rowwise_competerank",
    "rowwise_tiedrank",
    "rowwise_denserank",
    "rowwise_pctrank",
    "rowwise_ordinal_pctrank",
    "rowwise_tied_pctrank",
    "rowwise_quantiles",
    "rowwise_tiedquantiles",
    "rowwise_count",
    "rowwise_countall",
    "from_numpy",
    "is_missing",
    "Settings",
    "get_settings",
    "load_settings",
    "set_settings",
    "TsFunkError",
    "ValidationError",
    "ConfigurationError",
    "ShapeMismatchError",
    "EmptyRowError",
    "DegenerateRowWarning",
    "profile",
]

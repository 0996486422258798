"""Operator profiler for development debugging.

Example:
    >>> from tsfunk.profiler import profile
    >>> with profile():
    ...     result = rowwise_quantiles(prices, n_quantiles=4)
    # Prints profiling summary on exit
"""

from __future__ import annotations

import functools
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, TypeVar

import polars as pl

F = TypeVar("F", bound=Callable[..., Any])

_local = threading.local()


@dataclass
class ProfileRecord:
    """Single profiling record for one operator call."""

    operator: str
    duration: float  # seconds
    input_shape: tuple[int, int] | None = None


@dataclass
class Profiler:
    """Collects profiling records during a profiling session."""

    records: list[ProfileRecord] = field(default_factory=list)

    def record(
        self,
        operator: str,
        duration: float,
        input_shape: tuple[int, int] | None = None,
    ) -> None:
        """Record an operator call."""
        self.records.append(ProfileRecord(operator, duration, input_shape))

    @property
    def total_time(self) -> float:
        """Total time across all recorded operators."""
        return sum(r.duration for r in self.records)

    def summary(self) -> None:
        """Print profiling summary table to stdout."""
        if not self.records:
            print("No profiling records.")
            return

        agg: dict[str, dict] = defaultdict(lambda: {"calls": 0, "total": 0.0, "shape": None})
        for r in self.records:
            agg[r.operator]["calls"] += 1
            agg[r.operator]["total"] += r.duration
            if r.input_shape:
                agg[r.operator]["shape"] = r.input_shape

        total = self.total_time
        width = 26

        print("┌" + "─" * (width + 2) + "┬" + "─" * 7 + "┬" + "─" * 10 + "┬" + "─" * 9 + "┬" + "─" * 13 + "┐")
        print(f"│ {'Operator':<{width}} │ {'Calls':>5} │ {'Total(s)':>8} │ {'%Total':>7} │ {'Input Shape':>11} │")
        print("├" + "─" * (width + 2) + "┼" + "─" * 7 + "┼" + "─" * 10 + "┼" + "─" * 9 + "┼" + "─" * 13 + "┤")

        # Slowest first
        for op, data in sorted(agg.items(), key=lambda x: -x[1]["total"]):
            pct = (data["total"] / total * 100) if total > 0 else 0
            shape_str = f"{data['shape'][0]}×{data['shape'][1]}" if data["shape"] else ""
            print(f"│ {op:<{width}} │ {data['calls']:>5} │ {data['total']:>8.3f} │ {pct:>6.1f}% │ {shape_str:>11} │")

        print("├" + "─" * (width + 2) + "┼" + "─" * 7 + "┼" + "─" * 10 + "┼" + "─" * 9 + "┼" + "─" * 13 + "┤")
        print(f"│ {'TOTAL':<{width}} │ {len(self.records):>5} │ {total:>8.3f} │ {'100.0%':>7} │ {'':<11} │")
        print("└" + "─" * (width + 2) + "┴" + "─" * 7 + "┴" + "─" * 10 + "┴" + "─" * 9 + "┴" + "─" * 13 + "┘")


def _get_profiler() -> Profiler | None:
    """Get the active profiler for this thread, if any."""
    return getattr(_local, "profiler", None)


@contextmanager
def profile() -> Generator[Profiler, None, None]:
    """Context manager to enable operator profiling.

    Example:
        >>> with profile() as p:
        ...     ranks = rowwise_tiedrank(prices)
        # Prints summary on exit
    """
    p = Profiler()
    _local.profiler = p
    try:
        yield p
    finally:
        _local.profiler = None
        p.summary()


def profiled(func: F) -> F:
    """Record timing of an operator call while a profiler is active.

    The input shape is taken from the first positional argument when it is
    a polars DataFrame.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        p = _get_profiler()
        if p is None:
            return func(*args, **kwargs)

        shape = None
        if args and isinstance(args[0], pl.DataFrame):
            shape = args[0].shape

        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            p.record(func.__name__, time.perf_counter() - start, shape)

    return wrapper  # type: ignore[return-value]

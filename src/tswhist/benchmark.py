"""Timing comparison of initial strategies against exhaustive rebinning."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, Sequence

import numpy as np

from .core import SlidingHistogram
from .reference import exhaustive_histograms
from .strategies import STRATEGIES

logger = logging.getLogger(__name__)


def _best_of(fn: Callable[[], Any], repeat: int) -> tuple[float, Any]:
    best = float("inf")
    value: Any = None
    for _ in range(max(int(repeat), 1)):
        started = time.perf_counter()
        value = fn()
        best = min(best, time.perf_counter() - started)
    return best, value


def benchmark_strategies(
    signal: Sequence[float] | np.ndarray,
    n_bins: int,
    win_len: int,
    stride: int = 1,
    strategies: Iterable[str] | None = None,
    repeat: int = 3,
) -> Dict[str, Any]:
    """Time each strategy and the exhaustive reference on the same signal.

    Returns best-of-``repeat`` seconds per strategy, the reference time, the
    update counts and whether every strategy matched the reference exactly.
    """

    names = list(strategies) if strategies else sorted(STRATEGIES)
    ref_seconds, reference = _best_of(lambda: exhaustive_histograms(signal, n_bins, win_len, stride), repeat)

    timings: dict[str, float] = {}
    matches: dict[str, bool] = {}
    operations = 0
    num_windows = 0
    for name in names:
        seconds, result = _best_of(lambda: SlidingHistogram(signal, n_bins, win_len, stride, strategy=name).run(), repeat)
        timings[name] = seconds
        matches[name] = bool(np.array_equal(result.hist_matrix, reference))
        operations = result.operations
        num_windows = result.num_windows
        logger.debug("Strategy %s | %.6fs | matches=%s", name, seconds, matches[name])

    return {
        "n_samples": int(np.asarray(signal).size),
        "n_bins": int(n_bins),
        "win_len": int(win_len),
        "stride": int(stride),
        "num_windows": num_windows,
        "repeat": int(repeat),
        "strategies": timings,
        "reference_seconds": ref_seconds,
        "operations": operations,
        "reference_operations": num_windows * int(win_len),
        "matches": matches,
        "all_match": all(matches.values()),
    }

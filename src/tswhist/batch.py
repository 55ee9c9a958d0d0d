"""Fan independent signals out over a worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Any, List, Sequence

import numpy as np

from .core import SlidingHistogram, SlidingHistogramResult

logger = logging.getLogger(__name__)


def _run_one(signal: Sequence[float] | np.ndarray, n_bins: int, win_len: int, stride: int, kwargs: dict[str, Any]) -> SlidingHistogramResult:
    return SlidingHistogram(signal, n_bins, win_len, stride, **kwargs).run()


def batch_sliding_histograms(
    signals: Sequence[Sequence[float] | np.ndarray],
    n_bins: int,
    win_len: int,
    stride: int = 1,
    *,
    max_workers: int | None = None,
    executor: str = "process",
    **kwargs: Any,
) -> List[SlidingHistogramResult]:
    """Run each signal through its own driver and return results in input order.

    Runs share nothing, so any executor works. The first failing signal
    re-raises its exception here. ``kwargs`` are forwarded to
    :class:`~tswhist.core.SlidingHistogram` (``strategy``, ``self_normalize``).
    """

    if executor not in {"process", "thread"}:
        raise ValueError(f"Unknown executor '{executor}'. Available: ['process', 'thread']")
    if not signals:
        return []

    pool_cls: type[Executor] = ProcessPoolExecutor if executor == "process" else ThreadPoolExecutor
    effective_workers = min(max_workers or len(signals), len(signals))
    results: list[SlidingHistogramResult | None] = [None] * len(signals)

    with pool_cls(max_workers=effective_workers) as pool:
        futures = {
            pool.submit(_run_one, signal, n_bins, win_len, stride, dict(kwargs)): idx
            for idx, signal in enumerate(signals)
        }
        for future in as_completed(futures):
            idx = futures[future]
            results[idx] = future.result()

    logger.info("Batch complete | signals=%s | workers=%s | executor=%s", len(signals), effective_workers, executor)
    return [r for r in results if r is not None]

"""Strategies for the histogram of the first window."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence

import numpy as np

from .buffer import HistogramBuffer


class InitialHistogramStrategy(ABC):
    """Common interface for computing the window-0 histogram.

    Only the first window goes through a strategy; every later window is
    derived from it by the differential update, so all strategies must give
    identical counts, including skipping out-of-range bin indices.
    """

    name: str = "strategy"

    @abstractmethod
    def compute(self, bins: Sequence[int] | np.ndarray, n_bins: int) -> np.ndarray:
        """Return an ``n_bins`` int64 count vector for ``bins``."""

    def describe(self) -> Mapping[str, object]:
        return {"name": self.name}


class PushStrategy(InitialHistogramStrategy):
    """Push every bin index into an empty buffer."""

    name = "push"

    def compute(self, bins: Sequence[int] | np.ndarray, n_bins: int) -> np.ndarray:
        buffer = HistogramBuffer(n_bins)
        buffer.push(bins)
        return buffer.snapshot()


class BincountStrategy(InitialHistogramStrategy):
    """``numpy.bincount`` over the in-range bin indices."""

    name = "bincount"

    def compute(self, bins: Sequence[int] | np.ndarray, n_bins: int) -> np.ndarray:
        arr = np.asarray(bins, dtype=np.int64).ravel()
        arr = arr[(arr >= 0) & (arr < n_bins)]
        return np.bincount(arr, minlength=n_bins).astype(np.int64)


STRATEGIES: dict[str, type[InitialHistogramStrategy]] = {
    PushStrategy.name: PushStrategy,
    BincountStrategy.name: BincountStrategy,
}

DEFAULT_STRATEGY = PushStrategy.name


def get_strategy(strategy: str | InitialHistogramStrategy | None = None) -> InitialHistogramStrategy:
    """Resolve a strategy name (or pass an instance through)."""

    if isinstance(strategy, InitialHistogramStrategy):
        return strategy
    key = str(strategy or DEFAULT_STRATEGY).lower()
    factory = STRATEGIES.get(key)
    if factory is None:
        raise ValueError(f"Unknown initial histogram strategy '{key}'. Available: {sorted(STRATEGIES)}")
    return factory()

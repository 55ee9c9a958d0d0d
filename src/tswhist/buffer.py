"""Incrementally maintained per-bin count vector."""

from __future__ import annotations

from typing import Sequence

import numpy as np


class HistogramBuffer:
    """Mutable histogram of the samples currently inside a window.

    ``push`` and ``pop`` are O(k) in the number of indices supplied. Indices
    outside ``[0, n_bins)`` are skipped without raising; they can only show
    up when the samples were not normalized into [0, 1] upstream, and the
    ``dropped`` counter records how many were lost that way.
    """

    def __init__(self, n_bins: int) -> None:
        if n_bins <= 0:
            raise ValueError("n_bins must be positive")
        self.n_bins = int(n_bins)
        self._counts = np.zeros(self.n_bins, dtype=np.int64)
        self.operations = 0
        self.dropped = 0

    def _in_range(self, bins: Sequence[int] | np.ndarray) -> np.ndarray:
        arr = np.asarray(bins, dtype=np.int64).ravel()
        self.operations += int(arr.size)
        mask = (arr >= 0) & (arr < self.n_bins)
        self.dropped += int(arr.size - np.count_nonzero(mask))
        return arr[mask]

    def push(self, bins: Sequence[int] | np.ndarray) -> None:
        """Count each bin index once more."""

        np.add.at(self._counts, self._in_range(bins), 1)

    def pop(self, bins: Sequence[int] | np.ndarray) -> None:
        """Count each bin index once less."""

        np.subtract.at(self._counts, self._in_range(bins), 1)

    def seed(self, counts: Sequence[int] | np.ndarray, operations: int) -> None:
        """Replace the counts with a histogram of ``operations`` bin indices computed elsewhere."""

        arr = np.asarray(counts, dtype=np.int64)
        if arr.shape != (self.n_bins,):
            raise ValueError(f"Expected {self.n_bins} counts (got shape {arr.shape})")
        self._counts[:] = arr
        self.operations += int(operations)
        self.dropped += int(operations) - int(arr.sum())

    def snapshot(self) -> np.ndarray:
        return self._counts.copy()

    @property
    def counts(self) -> np.ndarray:
        view = self._counts.view()
        view.flags.writeable = False
        return view

    @property
    def total(self) -> int:
        return int(self._counts.sum())

    def __len__(self) -> int:
        return self.n_bins

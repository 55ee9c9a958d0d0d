"""Sliding histograms over samples that arrive in chunks."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Tuple

import numpy as np

from .binning import bin_indices, bin_indices_in_range
from .buffer import HistogramBuffer
from .core import _as_int
from .windows import uniform_edges


class StreamingSlidingHistogram:
    """Rolling histogram that emits one snapshot per completed window.

    Samples are binned on arrival against uniform bins over ``[low, high]``
    (default [0, 1]). Once the first ``win_len`` samples are in, every further
    ``stride`` samples trigger one pop/push step, exactly as in the batch
    driver, so feeding a signal in any chunking yields the same columns.
    """

    def __init__(
        self,
        n_bins: int,
        win_len: int,
        stride: int = 1,
        *,
        low: float = 0.0,
        high: float = 1.0,
    ) -> None:
        n_bins = _as_int(n_bins, "n_bins")
        win_len = _as_int(win_len, "win_len")
        stride = _as_int(stride, "stride")
        if n_bins <= 2:
            raise ValueError(f"Number of bins must be an integer larger than 2 (got {n_bins})")
        if win_len <= 0 or stride <= 0:
            raise ValueError("win_len and stride must be positive")
        if stride >= win_len:
            raise ValueError("Stride must be less than window length to ensure overlap")
        if not (np.isfinite(low) and np.isfinite(high)):
            raise ValueError(f"Bin range must be finite (got low={low}, high={high})")
        if high <= low:
            raise ValueError(f"Bin range must have positive width (got low={low}, high={high})")
        self.n_bins = int(n_bins)
        self.win_len = int(win_len)
        self.stride = int(stride)
        self.low = float(low)
        self.high = float(high)
        self.edges = uniform_edges(self.n_bins, self.low, self.high)
        self.reset()

    def _bin(self, samples: Iterable[float]) -> np.ndarray:
        arr = np.asarray(list(samples), dtype=float)
        if not np.all(np.isfinite(arr)):
            raise ValueError("Signal contains non-finite samples")
        if self.low == 0.0 and self.high == 1.0:
            return bin_indices(arr, self.n_bins)
        return bin_indices_in_range(arr, self.n_bins, self.low, self.high)

    def extend(self, samples: Iterable[float]) -> List[Tuple[int, np.ndarray]]:
        """Consume ``samples`` and return ``(start, counts)`` for each window they complete."""

        emitted: list[tuple[int, np.ndarray]] = []
        for b in self._bin(samples).tolist():
            if len(self._window) < self.win_len:
                self.buffer.push([b])
                self._window.append(b)
                if len(self._window) == self.win_len:
                    emitted.append(self._emit())
                continue
            self._pending.append(b)
            if len(self._pending) == self.stride:
                leaving = [self._window.popleft() for _ in range(self.stride)]
                self.buffer.pop(leaving)
                self.buffer.push(self._pending)
                self._window.extend(self._pending)
                self._pending = []
                emitted.append(self._emit())
        return emitted

    def _emit(self) -> tuple[int, np.ndarray]:
        start = self._next_start
        self._next_start += self.stride
        self.windows_emitted += 1
        return start, self.buffer.snapshot()

    def reset(self) -> None:
        self.buffer = HistogramBuffer(self.n_bins)
        self._window: deque[int] = deque()
        self._pending: list[int] = []
        self._next_start = 0
        self.windows_emitted = 0

    def __len__(self) -> int:
        return len(self._window) + len(self._pending)

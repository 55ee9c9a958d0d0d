"""Sliding-window histograms by differential update.

The first window is binned in full. Every later window is derived from the
previous one by removing the ``stride`` samples that fell off its left edge
and adding the ``stride`` samples that entered on its right edge, so the work
per step does not depend on the window length (Perreault & Hebert, "Median
Filtering in Constant Time", IEEE TIP 16(9), 2007).
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Sequence

import numpy as np

from .binning import bin_indices, bin_indices_in_range
from .buffer import HistogramBuffer
from .strategies import DEFAULT_STRATEGY, InitialHistogramStrategy, get_strategy
from .windows import transition_slices, uniform_edges, window_loci

logger = logging.getLogger(__name__)

INITIALIZING = "initializing"
SLIDING = "sliding"
COMPLETE = "complete"


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an integer (got bool)")
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(f"{name} must be an integer (got {type(value).__name__})") from None


def validate_inputs(
    signal: Sequence[float] | np.ndarray,
    n_bins: int,
    win_len: int,
    stride: int = 1,
) -> np.ndarray:
    """Check every precondition and return the signal as a read-only float vector.

    Nothing is computed unless all checks pass.
    """

    arr = np.asarray(signal)
    if arr.dtype.kind not in "iuf":
        raise TypeError(f"Signal must contain real numbers (got dtype {arr.dtype})")
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise ValueError(f"Signal must be a vector (got shape {arr.shape})")
    if arr.size == 0:
        raise ValueError("Signal must not be empty")
    arr = arr.astype(float, copy=False)
    if not np.all(np.isfinite(arr)):
        raise ValueError("Signal contains non-finite samples")

    n_bins = _as_int(n_bins, "n_bins")
    if n_bins <= 2:
        raise ValueError(f"Number of bins must be an integer larger than 2 (got {n_bins})")
    win_len = _as_int(win_len, "win_len")
    stride = _as_int(stride, "stride")
    if win_len < 1 or stride < 1:
        raise ValueError(f"Window length and stride must be positive (got win_len={win_len}, stride={stride})")
    if stride >= win_len:
        raise ValueError(
            f"Stride must be less than window length to ensure overlap (got stride={stride}, win_len={win_len})"
        )
    if win_len > arr.size:
        raise ValueError(f"Window length {win_len} exceeds signal length {arr.size}")

    view = arr.view()
    view.flags.writeable = False
    return view


@dataclass
class SlidingHistogramResult:
    """Histogram matrix (bins x windows), window starts and bin edges of one run."""

    hist_matrix: np.ndarray
    window_loci: np.ndarray
    edges: np.ndarray
    operations: int = 0
    dropped: int = 0
    strategy: str = DEFAULT_STRATEGY

    @property
    def n_bins(self) -> int:
        return int(self.hist_matrix.shape[0])

    @property
    def num_windows(self) -> int:
        return int(self.hist_matrix.shape[1])

    def loci(self, one_based: bool = False) -> np.ndarray:
        return self.window_loci + 1 if one_based else self.window_loci.copy()

    def as_tuple(self, one_based: bool = False) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.hist_matrix, self.loci(one_based), self.edges

    def as_dict(self, one_based: bool = False) -> Dict[str, Any]:
        return {
            "n_bins": self.n_bins,
            "num_windows": self.num_windows,
            "histograms": self.hist_matrix.tolist(),
            "window_loci": self.loci(one_based).tolist(),
            "one_based": one_based,
            "edges": self.edges.tolist(),
            "operations": self.operations,
            "dropped": self.dropped,
            "strategy": self.strategy,
        }


class SlidingHistogram:
    """Window driver owning the histogram buffer for a single signal.

    The buffer is created fresh for each pass and is never handed out; callers
    only ever see copies taken after a window has been fully formed.
    """

    def __init__(
        self,
        signal: Sequence[float] | np.ndarray,
        n_bins: int,
        win_len: int,
        stride: int = 1,
        *,
        strategy: str | InitialHistogramStrategy | None = None,
        self_normalize: bool = False,
    ) -> None:
        self.signal = validate_inputs(signal, n_bins, win_len, stride)
        self.n_bins = int(n_bins)
        self.win_len = int(win_len)
        self.stride = int(stride)
        self.strategy = get_strategy(strategy)
        self.self_normalize = self_normalize

        if self_normalize:
            low, high = float(self.signal.min()), float(self.signal.max())
            if high <= low:
                raise ValueError(f"Cannot self-normalize a constant signal (all samples equal {low})")
            self._bins = bin_indices_in_range(self.signal, self.n_bins, low, high)
        else:
            low, high = 0.0, 1.0
            self._bins = bin_indices(self.signal, self.n_bins)
        self._bins.flags.writeable = False

        self.edges = uniform_edges(self.n_bins, low, high)
        self.window_loci = window_loci(self.signal.size, self.win_len, self.stride)
        self.buffer = HistogramBuffer(self.n_bins)
        self.state = INITIALIZING

    @property
    def num_windows(self) -> int:
        return int(self.window_loci.size)

    @property
    def expected_operations(self) -> int:
        return self.win_len + (self.num_windows - 1) * 2 * self.stride

    def iter_windows(self) -> Iterator[tuple[int, np.ndarray]]:
        """Yield ``(start, counts)`` for every window in order."""

        buffer = HistogramBuffer(self.n_bins)
        self.buffer = buffer
        self.state = INITIALIZING

        first = self._bins[: self.win_len]
        buffer.seed(self.strategy.compute(first, self.n_bins), operations=first.size)
        yield 0, buffer.snapshot()

        self.state = SLIDING
        for start in self.window_loci[1:]:
            leaving, entering = transition_slices(int(start), self.win_len, self.stride)
            buffer.pop(self._bins[leaving])
            buffer.push(self._bins[entering])
            yield int(start), buffer.snapshot()

        self.state = COMPLETE
        logger.debug(
            "Sliding histogram complete | windows=%s | operations=%s | dropped=%s",
            self.num_windows,
            buffer.operations,
            buffer.dropped,
        )

    def run(self) -> SlidingHistogramResult:
        matrix = np.zeros((self.n_bins, self.num_windows), dtype=np.int64)
        for column, (_, counts) in enumerate(self.iter_windows()):
            matrix[:, column] = counts
        return SlidingHistogramResult(
            hist_matrix=matrix,
            window_loci=self.window_loci.copy(),
            edges=self.edges.copy(),
            operations=self.buffer.operations,
            dropped=self.buffer.dropped,
            strategy=self.strategy.name,
        )


def sliding_histogram(
    signal: Sequence[float] | np.ndarray,
    n_bins: int,
    win_len: int,
    stride: int = 1,
    *,
    strategy: str | InitialHistogramStrategy | None = None,
    self_normalize: bool = False,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute ``(hist_matrix, window_loci, edges)`` for a normalized signal.

    ``signal`` is expected in [0, 1] unless ``self_normalize`` is set, in which
    case bins and edges span the signal's own ``[min, max]``. ``hist_matrix``
    has shape ``(n_bins, num_windows)`` and ``window_loci`` holds 0-based
    window starts.
    """

    driver = SlidingHistogram(
        signal,
        n_bins,
        win_len,
        stride,
        strategy=strategy,
        self_normalize=self_normalize,
    )
    return driver.run().as_tuple()

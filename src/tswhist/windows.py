"""Window boundaries, transition index ranges and bin edges."""

from __future__ import annotations

import numpy as np


def count_windows(length: int, win_len: int, stride: int) -> int:
    """Number of full windows of ``win_len`` samples starting every ``stride``."""

    if win_len > length:
        return 0
    return (length - win_len) // stride + 1


def window_loci(length: int, win_len: int, stride: int, *, one_based: bool = False) -> np.ndarray:
    """Start index of each window, 0-based unless ``one_based`` is set."""

    n = count_windows(length, win_len, stride)
    loci = np.arange(n, dtype=np.int64) * stride
    if one_based:
        loci += 1
    return loci


def transition_slices(start: int, win_len: int, stride: int) -> tuple[slice, slice]:
    """Index ranges leaving and entering when the window moves to ``start``.

    ``start`` is the 0-based start of the new window. The leaving range is the
    ``stride`` samples just before it; the entering range is the ``stride``
    samples at its right edge. With ``stride < win_len`` the two never overlap.
    """

    if start < stride:
        raise ValueError(f"Window starting at {start} has no predecessor for stride {stride}")
    leaving = slice(start - stride, start)
    entering = slice(start + win_len - stride, start + win_len)
    return leaving, entering


def uniform_edges(n_bins: int, low: float = 0.0, high: float = 1.0) -> np.ndarray:
    """``n_bins + 1`` evenly spaced edges from ``low`` to ``high`` inclusive."""

    fractions = np.arange(n_bins + 1, dtype=float) / n_bins
    if low == 0.0 and high == 1.0:
        return fractions
    edges = low + (high - low) * fractions
    edges[-1] = high
    return edges

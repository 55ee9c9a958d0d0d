"""Exhaustive per-window histograms used to check the differential update."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .binning import bin_indices_in_range
from .core import validate_inputs
from .windows import window_loci


def exhaustive_histograms(
    signal: Sequence[float] | np.ndarray,
    n_bins: int,
    win_len: int,
    stride: int = 1,
    edges: Sequence[float] | np.ndarray | None = None,
) -> np.ndarray:
    """Rebin every window from scratch with the sliding driver's bin rule.

    Each window is binned on its own with ``floor((s - low) / span * n_bins)``
    (top edge folded into the last bin) and counted with ``numpy.bincount``,
    so the result must equal the differential update exactly. ``edges`` only
    supplies the range ``[edges[0], edges[-1]]`` and defaults to [0, 1].
    Indices outside ``[0, n_bins)`` are skipped, as the buffer skips them.

    Comparison against ``numpy.histogram`` is not exact: it places samples by
    comparing them with the float edges, and ``s * n_bins`` can round across
    an edge (``0.57 * 100`` floors to 56 while ``0.57 >= edges[57]``).
    """

    arr = validate_inputs(signal, n_bins, win_len, stride)
    n_bins, win_len, stride = int(n_bins), int(win_len), int(stride)
    if edges is None:
        low, high = 0.0, 1.0
    else:
        edges = np.asarray(edges, dtype=float)
        if edges.size != n_bins + 1:
            raise ValueError(f"Expected {n_bins + 1} edges (got {edges.size})")
        low, high = float(edges[0]), float(edges[-1])

    loci = window_loci(arr.size, win_len, stride)
    matrix = np.zeros((n_bins, loci.size), dtype=np.int64)
    for column, start in enumerate(loci):
        bins = bin_indices_in_range(arr[start : start + win_len], n_bins, low, high)
        bins = bins[(bins >= 0) & (bins < n_bins)]
        matrix[:, column] = np.bincount(bins, minlength=n_bins)
    return matrix

"""Map normalized samples onto uniform bin indices."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def bin_index(sample: float, n_bins: int) -> int:
    """Return ``floor(sample * n_bins)`` with the top edge folded into the last bin.

    Bins include their lower edge and exclude their upper edge, except the
    last bin which includes both, so ``1.0`` lands in ``n_bins - 1``. Values
    outside [0, 1] are not clamped any further and may produce an index
    outside ``[0, n_bins)``.
    """

    index = int(math.floor(sample * n_bins))
    if index == n_bins:
        return n_bins - 1
    return index


def bin_indices(signal: Sequence[float] | np.ndarray, n_bins: int) -> np.ndarray:
    """Vectorized :func:`bin_index` over a whole signal."""

    arr = np.asarray(signal, dtype=float)
    indices = np.floor(arr * n_bins).astype(np.int64)
    indices[indices == n_bins] = n_bins - 1
    return indices


def bin_indices_in_range(signal: Sequence[float] | np.ndarray, n_bins: int, low: float, high: float) -> np.ndarray:
    """Bin raw samples against uniform bins spanning ``[low, high]``."""

    arr = np.asarray(signal, dtype=float)
    span = high - low
    if span <= 0:
        raise ValueError(f"Bin range must have positive width (got low={low}, high={high})")
    return bin_indices((arr - low) / span, n_bins)

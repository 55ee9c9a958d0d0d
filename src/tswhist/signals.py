"""Signal loading, normalization and synthesis helpers."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import List, Sequence

import numpy as np
import pandas as pd


def normalize_signal(samples: Sequence[float] | np.ndarray) -> tuple[np.ndarray, float, float]:
    """Min-max map a raw signal into [0, 1].

    Returns the normalized array together with the original ``(min, max)`` so
    callers can remap edges back onto the raw value range.
    """

    arr = np.asarray(samples, dtype=float).ravel()
    if arr.size == 0:
        raise ValueError("Cannot normalize an empty signal")
    low = float(np.min(arr))
    high = float(np.max(arr))
    if not (math.isfinite(low) and math.isfinite(high)):
        raise ValueError("Signal contains non-finite samples")
    if high <= low:
        raise ValueError(f"Cannot normalize a constant signal (all samples equal {low})")
    return (arr - low) / (high - low), low, high


def generate_synthetic_series(
    n_samples: int = 10_000,
    kind: str = "gaussian",
    *,
    seed: int | None = None,
    freq: float = 5.0,
    sample_rate: float = 1000.0,
    noise_std: float = 0.1,
) -> List[float]:
    """Generate a Gaussian noise or noisy sinusoid test signal."""

    if n_samples <= 0:
        raise ValueError("n_samples must be positive")
    rng = np.random.default_rng(seed)
    if kind == "gaussian":
        series = rng.standard_normal(n_samples)
    elif kind == "sine":
        t = np.arange(n_samples) / float(sample_rate)
        series = np.sin(2 * math.pi * freq * t)
        if noise_std:
            series = series + rng.normal(scale=noise_std, size=n_samples)
    else:
        raise ValueError(f"Unknown synthetic signal kind '{kind}'. Available: ['gaussian', 'sine']")
    return series.tolist()


def ingest_samples(path: str | Path, value_column: str | None = None) -> List[float]:
    """Load samples from a JSON list, JSONL, CSV or Parquet file."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".jsonl":
        values = []
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            obj = json.loads(line)
            if isinstance(obj, (int, float)):
                values.append(float(obj))
            elif isinstance(obj, dict) and value_column and value_column in obj:
                values.append(float(obj[value_column]))
        return values
    if suffix == ".json":
        loaded = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict) and "samples" in loaded:
            loaded = loaded["samples"]
        if isinstance(loaded, list):
            return [float(x) for x in loaded if isinstance(x, (int, float))]
        raise ValueError("JSON sample file must contain a list of numbers or a 'samples' list")

    df = pd.read_parquet(path) if suffix == ".parquet" else pd.read_csv(path)
    if df.empty:
        raise ValueError(f"Sample file {path} is empty")
    if value_column is None:
        numeric_cols = df.select_dtypes(include=[np.number]).columns
        if numeric_cols.empty:
            raise ValueError("Sample file must contain at least one numeric column")
        value_column = "value" if "value" in numeric_cols else numeric_cols[0]
    elif value_column not in df.columns:
        raise ValueError(f"Column '{value_column}' not found in {path}")
    return df[value_column].astype(float).tolist()

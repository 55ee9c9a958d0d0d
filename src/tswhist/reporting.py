"""Summaries and Markdown/PDF reports for sliding histogram runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from jinja2 import Template
from matplotlib.backends.backend_pdf import PdfPages
from scipy import stats

# Reports are written headless.
matplotlib.use("Agg")

DEFAULT_SUMMARY_FILE = "summary.json"
DEFAULT_REPORT_FILE = "report.md"

_MARKDOWN_TEMPLATE = """# {{ title }}

- Source: {{ source }}
- Samples: {{ n_samples }}
- Normalization: {{ normalization }}
- Bins: {{ n_bins }} over [{{ "%.6g"|format(edges[0]) }}, {{ "%.6g"|format(edges[-1]) }}]
- Window length: {{ win_len }}
- Stride: {{ stride }}
- Windows: {{ num_windows }}
- Initial histogram strategy: {{ strategy }}

## Update Work
- Bin updates performed: {{ operations }}
- Bin updates expected: {{ expected_operations }}
- Samples dropped out of range: {{ dropped }}
{% if dropped %}
Some samples fell outside the bin range and were not counted; their windows sum to less than the window length.
{% endif %}

## Window Summary
{% if windows %}
| Window start | Entropy (bits) | Mode bin | Mean |
|---|---|---|---|
{% for w in windows %}| {{ w.start }} | {{ "%.4f"|format(w.entropy) }} | {{ w.mode_bin }} | {{ "%.4f"|format(w.mean) }} |
{% endfor %}
{% if truncated %}
_{{ truncated }} more windows not shown._
{% endif %}
{% else %}
(no windows)
{% endif %}
"""


def summarize_histograms(hist_matrix: np.ndarray, edges: Sequence[float] | np.ndarray) -> Dict[str, Any]:
    """Per-window entropy, mode and mean of a ``(n_bins, num_windows)`` matrix."""

    hist = np.asarray(hist_matrix, dtype=float)
    edges = np.asarray(edges, dtype=float)
    if hist.ndim != 2 or hist.shape[0] != edges.size - 1:
        raise ValueError(f"Histogram matrix shape {hist.shape} does not match {edges.size} edges")
    if hist.shape[1] == 0:
        return {"entropy_bits": [], "mode_bin": [], "mode_center": [], "mean": [], "entropy_mean": 0.0}

    centers = (edges[:-1] + edges[1:]) / 2.0
    totals = hist.sum(axis=0)
    safe_totals = np.where(totals > 0, totals, 1.0)
    entropy = np.nan_to_num(stats.entropy(hist, base=2, axis=0), nan=0.0)
    mode_bin = np.argmax(hist, axis=0)
    mean = (centers[:, None] * hist).sum(axis=0) / safe_totals

    return {
        "entropy_bits": entropy.tolist(),
        "mode_bin": mode_bin.tolist(),
        "mode_center": centers[mode_bin].tolist(),
        "mean": mean.tolist(),
        "entropy_mean": float(np.mean(entropy)),
    }


def render_markdown_report(context: Dict[str, Any], output_path: str | Path, *, max_rows: int = 50) -> Path:
    """Render a Markdown report from a run summary mapping."""

    features = context.get("features") or {}
    loci = context.get("window_loci") or []
    rows = [
        {
            "start": start,
            "entropy": features["entropy_bits"][i],
            "mode_bin": features["mode_bin"][i],
            "mean": features["mean"][i],
        }
        for i, start in enumerate(loci[:max_rows])
    ] if features else []

    template = Template(_MARKDOWN_TEMPLATE)
    rendered = template.render(
        title=context.get("title", "Sliding Window Histogram Report"),
        source=context.get("source", "unknown"),
        n_samples=context.get("n_samples", 0),
        normalization=context.get("normalization", "none"),
        n_bins=context.get("n_bins", 0),
        edges=context.get("edges") or [0.0, 1.0],
        win_len=context.get("win_len"),
        stride=context.get("stride"),
        num_windows=context.get("num_windows", len(loci)),
        strategy=context.get("strategy", "push"),
        operations=context.get("operations", 0),
        expected_operations=context.get("expected_operations", "n/a"),
        dropped=context.get("dropped", 0),
        windows=rows,
        truncated=max(len(loci) - max_rows, 0),
    )
    output = Path(output_path)
    output.write_text(rendered, encoding="utf-8")
    return output


def write_heatmap_pdf(
    hist_matrix: np.ndarray,
    window_loci: Sequence[int] | np.ndarray,
    edges: Sequence[float] | np.ndarray,
    output_path: str | Path,
    title: str = "Sliding Window Histogram",
) -> Path:
    """Plot the histogram matrix as a window-by-bin heatmap."""

    output = Path(output_path)
    hist = np.asarray(hist_matrix)
    loci = np.asarray(window_loci)
    edges = np.asarray(edges, dtype=float)

    with PdfPages(output) as pdf:
        fig, ax = plt.subplots(figsize=(10, 5))
        x_max = loci[-1] if loci.size > 1 else (loci[0] + 1 if loci.size else 1)
        mesh = ax.imshow(
            hist,
            aspect="auto",
            origin="lower",
            interpolation="nearest",
            extent=(loci[0] if loci.size else 0, x_max, edges[0], edges[-1]),
            cmap="viridis",
        )
        fig.colorbar(mesh, ax=ax, label="Count")
        ax.set_title(title)
        ax.set_xlabel("Window start (sample)")
        ax.set_ylabel("Value")
        fig.tight_layout()
        pdf.savefig(fig)
        plt.close(fig)

    return output


def generate_report(processed_dir: str | Path, output_path: str | Path | None = None) -> Path:
    """Generate a Markdown report from a processed run directory.

    If ``output_path`` is not provided, ``report.md`` within the processed
    directory is used.
    """

    processed_dir = Path(processed_dir)
    summary_path = processed_dir / DEFAULT_SUMMARY_FILE
    if not summary_path.exists():
        raise FileNotFoundError(f"Summary file not found: {summary_path}")

    summary: Dict[str, Any] = json.loads(summary_path.read_text(encoding="utf-8"))
    output_path = Path(output_path) if output_path else processed_dir / DEFAULT_REPORT_FILE
    return render_markdown_report(summary, output_path)

"""End-to-end run: load samples -> normalize -> slide -> write artifacts."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import numpy as np
import pandas as pd

from .config import HistogramConfig
from .core import SlidingHistogram, SlidingHistogramResult
from .logging_utils import log_event
from .reporting import (
    DEFAULT_REPORT_FILE,
    DEFAULT_SUMMARY_FILE,
    render_markdown_report,
    summarize_histograms,
    write_heatmap_pdf,
)
from .signals import ingest_samples, normalize_signal
from .windows import uniform_edges

DEFAULT_HISTOGRAM_FILE = "histograms.csv"
DEFAULT_HEATMAP_FILE = "heatmap.pdf"
logger = logging.getLogger(__name__)


def _coerce_config(config: HistogramConfig | Mapping[str, Any]) -> HistogramConfig:
    return config if isinstance(config, HistogramConfig) else HistogramConfig.from_mapping(config)


def compute_histograms(samples: Sequence[float] | np.ndarray, config: HistogramConfig | Mapping[str, Any]) -> SlidingHistogramResult:
    """Apply the configured normalization and run the sliding driver.

    ``minmax`` rescales the signal into [0, 1] before binning and reports
    edges on the raw value range; ``self`` lets the driver bin against the
    signal's own range; ``none`` expects samples already in [0, 1].
    """

    cfg = _coerce_config(config)
    signal = np.asarray(samples, dtype=float)
    low = high = None
    if cfg.normalization == "minmax":
        signal, low, high = normalize_signal(signal)

    driver = SlidingHistogram(
        signal,
        cfg.n_bins,
        cfg.win_len,
        cfg.stride,
        strategy=cfg.strategy,
        self_normalize=cfg.self_normalize,
    )
    result = driver.run()
    if low is not None and high is not None:
        result.edges = uniform_edges(cfg.n_bins, low, high)
    if result.dropped:
        logger.warning(
            "%s bin updates fell outside [0, %s) and were skipped; check that samples are normalized",
            result.dropped,
            cfg.n_bins,
        )
    return result


def histograms_to_frame(result: SlidingHistogramResult, one_based: bool = False) -> pd.DataFrame:
    """Histogram matrix as a DataFrame indexed by bin, one column per window start."""

    frame = pd.DataFrame(result.hist_matrix, columns=[int(x) for x in result.loci(one_based)])
    frame.index.name = "bin"
    frame.insert(0, "lower_edge", result.edges[:-1])
    frame.insert(1, "upper_edge", result.edges[1:])
    return frame


def process_signal_file(
    samples_path: str | Path,
    output_dir: str | Path,
    config: HistogramConfig | Mapping[str, Any],
) -> Dict[str, Any]:
    """Compute sliding histograms for a sample file and write run artifacts.

    Writes ``histograms.csv`` (rows are bins, columns are window starts),
    ``summary.json`` and ``report.md`` into ``output_dir``, plus
    ``heatmap.pdf`` when ``write_pdf`` is configured.
    """

    cfg = _coerce_config(config)
    samples_path = Path(samples_path)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    samples = ingest_samples(samples_path, value_column=cfg.value_column)
    result = compute_histograms(samples, cfg)

    histograms_to_frame(result, one_based=cfg.one_based).to_csv(output_dir / DEFAULT_HISTOGRAM_FILE)

    payload = result.as_dict(one_based=cfg.one_based)
    expected = cfg.win_len + (result.num_windows - 1) * 2 * cfg.stride
    summary: Dict[str, Any] = {
        "title": cfg.report_title,
        "source": str(samples_path.resolve()),
        "created_at": datetime.now(timezone.utc).isoformat(),
        "n_samples": len(samples),
        "win_len": cfg.win_len,
        "stride": cfg.stride,
        "normalization": cfg.normalization,
        "expected_operations": expected,
        "features": summarize_histograms(result.hist_matrix, result.edges),
        "config": cfg.model_dump(),
        "artifacts": {
            "histograms": str(output_dir / DEFAULT_HISTOGRAM_FILE),
            "report": str(output_dir / DEFAULT_REPORT_FILE),
        },
        **payload,
    }

    if cfg.write_pdf:
        pdf_path = write_heatmap_pdf(
            result.hist_matrix,
            result.loci(cfg.one_based),
            result.edges,
            output_dir / DEFAULT_HEATMAP_FILE,
            title=cfg.report_title,
        )
        summary["artifacts"]["heatmap"] = str(pdf_path)

    summary_path = output_dir / DEFAULT_SUMMARY_FILE
    summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")
    render_markdown_report(summary, output_dir / DEFAULT_REPORT_FILE)

    log_event(
        logger,
        "histogram_complete",
        source=str(samples_path),
        output=str(output_dir),
        samples=len(samples),
        windows=result.num_windows,
        operations=result.operations,
        dropped=result.dropped,
    )
    return summary

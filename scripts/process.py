"""CLI wrapper to compute sliding histograms for a sample file."""

from __future__ import annotations

import argparse
from pathlib import Path

from tswhist import HistogramConfig, process_signal_file


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute sliding window histograms")
    parser.add_argument("samples", type=Path, help="Path to CSV/JSON/JSONL/Parquet samples")
    parser.add_argument("config", type=Path, help="Run configuration (YAML or JSON)")
    parser.add_argument("output_dir", type=Path, help="Destination directory for run artifacts")
    args = parser.parse_args()

    summary = process_signal_file(args.samples, args.output_dir, HistogramConfig.from_file(args.config))
    print(f"Computed {summary['num_windows']} histograms from {summary['n_samples']} samples")


if __name__ == "__main__":
    main()

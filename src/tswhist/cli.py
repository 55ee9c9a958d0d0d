"""Command line interface for tswhist."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Sequence

import numpy as np

from . import __version__
from .benchmark import benchmark_strategies
from .config import HistogramConfig, load_run_config, validate_config_file
from .logging_utils import configure_logging
from .pipeline import compute_histograms, process_signal_file
from .reference import exhaustive_histograms
from .reporting import generate_report
from .signals import generate_synthetic_series, ingest_samples, normalize_signal
from .strategies import STRATEGIES

_OVERRIDES = ("n_bins", "win_len", "stride", "strategy", "normalization", "value_column")


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2))
    else:
        print(result)


def _add_histogram_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--n-bins", type=int, help="Number of histogram bins (integer > 2)")
    parser.add_argument("--win-len", type=int, help="Sliding window length in samples")
    parser.add_argument("--stride", type=int, help="Samples between window starts (default: 1)")
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), help="Initial histogram strategy")
    parser.add_argument(
        "--normalization",
        choices=["none", "minmax", "self"],
        help="none: samples already in [0,1]; minmax: rescale first; self: bin over the signal's own range",
    )
    parser.add_argument("--value-column", type=str, help="Column name for CSV/Parquet/JSONL inputs")


def _histogram_config(args: argparse.Namespace) -> HistogramConfig:
    """Merge an optional config file with command line overrides."""

    merged: Dict[str, Any] = load_run_config(args.config) if getattr(args, "config", None) else {}
    for key in _OVERRIDES:
        value = getattr(args, key, None)
        if value is not None:
            merged[key] = value
    if getattr(args, "one_based", False):
        merged["one_based"] = True
    if getattr(args, "pdf", False):
        merged["write_pdf"] = True
    missing = [key for key in ("n_bins", "win_len") if key not in merged]
    if missing:
        raise ValueError(f"Missing required parameter(s): {', '.join(missing)} (use --n-bins/--win-len or --config)")
    return HistogramConfig.from_mapping(merged)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tswhist",
        description="Sliding window histograms of 1D signals by differential update.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    compute = subparsers.add_parser("compute", help="Compute sliding histograms for a sample file")
    compute.add_argument("samples", type=Path, help="Path to CSV/JSON/JSONL/Parquet samples")
    compute.add_argument("output_dir", type=Path, help="Destination directory for run artifacts")
    compute.add_argument("--config", type=Path, help="Run configuration (YAML or JSON)")
    _add_histogram_arguments(compute)
    compute.add_argument("--one-based", action="store_true", help="Report 1-based window starts")
    compute.add_argument("--pdf", action="store_true", help="Also write a heatmap PDF")
    compute.add_argument("--json", action="store_true", help="Emit summary as JSON to stdout")

    verify = subparsers.add_parser("verify", help="Check sliding histograms against exhaustive rebinning")
    verify.add_argument("samples", type=Path, help="Path to CSV/JSON/JSONL/Parquet samples")
    verify.add_argument("--config", type=Path, help="Run configuration (YAML or JSON)")
    _add_histogram_arguments(verify)
    verify.add_argument("--json", action="store_true", help="Emit verification result as JSON")

    bench = subparsers.add_parser("benchmark", help="Time initial strategies against exhaustive rebinning")
    bench.add_argument("--samples", type=Path, help="Optional sample file (default: Gaussian noise)")
    bench.add_argument("--value-column", type=str, help="Column name for CSV/Parquet/JSONL inputs")
    bench.add_argument("--n-samples", type=int, default=100_000, help="Length of the generated signal")
    bench.add_argument("--seed", type=int, help="Random seed for the generated signal")
    bench.add_argument("--n-bins", type=int, default=100)
    bench.add_argument("--win-len", type=int, default=5000)
    bench.add_argument("--stride", type=int, default=10)
    bench.add_argument("--repeat", type=int, default=3, help="Best-of repetitions per timing")
    bench.add_argument("--json", action="store_true", help="Emit timings as JSON")

    synth = subparsers.add_parser("synth", help="Generate a synthetic test signal")
    synth.add_argument("--n-samples", type=int, default=10_000)
    synth.add_argument("--kind", choices=["gaussian", "sine"], default="gaussian")
    synth.add_argument("--seed", type=int)
    synth.add_argument("--noise-std", type=float, default=0.1, help="Noise standard deviation (sine only)")
    synth.add_argument("--output", type=Path, help="Optional path to write samples (JSON)")
    synth.add_argument("--json", action="store_true", help="Emit generated samples as JSON to stdout")

    validate = subparsers.add_parser("validate", help="Validate a run configuration file")
    validate.add_argument("config", type=Path, help="Path to configuration file")
    validate.add_argument("--json", action="store_true", help="Emit validation result as JSON")

    report = subparsers.add_parser("report", help="Generate a Markdown report from a processed run")
    report.add_argument("processed_dir", type=Path, help="Directory containing summary.json")
    report.add_argument("--output", type=Path, help="Optional path for the generated report")
    report.add_argument("--json", action="store_true", help="Emit report path as JSON to stdout")

    serve = subparsers.add_parser("serve", help="Run FastAPI service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("version", help="Display the installed version")

    return parser


def _verify(args: argparse.Namespace) -> Dict[str, Any]:
    cfg = _histogram_config(args)
    samples = np.asarray(ingest_samples(args.samples, value_column=cfg.value_column), dtype=float)
    result = compute_histograms(samples, cfg)
    if cfg.normalization == "minmax":
        samples, _, _ = normalize_signal(samples)
        edges = None
    else:
        edges = result.edges
    reference = exhaustive_histograms(samples, cfg.n_bins, cfg.win_len, cfg.stride, edges=edges)
    mismatched = np.flatnonzero(np.any(result.hist_matrix != reference, axis=0))
    return {
        "match": bool(mismatched.size == 0),
        "num_windows": result.num_windows,
        "mismatched_windows": result.window_loci[mismatched].tolist(),
        "operations": result.operations,
        "reference_operations": result.num_windows * cfg.win_len,
        "dropped": result.dropped,
    }


def _dispatch(args: argparse.Namespace) -> None:
    if args.command == "compute":
        summary = process_signal_file(args.samples, args.output_dir, _histogram_config(args))
        if args.json:
            _print_result(summary, as_json=True)
        else:
            print(
                f"Computed {summary['num_windows']} histograms of {summary['n_bins']} bins "
                f"from {summary['n_samples']} samples into {args.output_dir}"
            )
    elif args.command == "verify":
        outcome = _verify(args)
        _print_result(outcome, as_json=args.json)
        if not outcome["match"]:
            raise SystemExit(1)
    elif args.command == "benchmark":
        if args.samples:
            raw = ingest_samples(args.samples, value_column=args.value_column)
        else:
            raw = generate_synthetic_series(args.n_samples, "gaussian", seed=args.seed)
        signal, _, _ = normalize_signal(raw)
        timings = benchmark_strategies(signal, args.n_bins, args.win_len, args.stride, repeat=args.repeat)
        if args.json:
            _print_result(timings, as_json=True)
        else:
            for name, seconds in timings["strategies"].items():
                print(f"{name}: {seconds:.6f}s (match={timings['matches'][name]})")
            print(f"exhaustive: {timings['reference_seconds']:.6f}s")
    elif args.command == "synth":
        samples = generate_synthetic_series(args.n_samples, args.kind, seed=args.seed, noise_std=args.noise_std)
        payload = {"samples": samples, "kind": args.kind, "n_samples": len(samples)}
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            print(f"Wrote {len(samples)} synthetic samples to {args.output}")
        else:
            _print_result(payload, as_json=args.json)
    elif args.command == "validate":
        result = validate_config_file(args.config)
        _print_result(result.as_dict(), as_json=args.json)
        if not result.ok:
            raise SystemExit(1)
    elif args.command == "report":
        report_path = generate_report(args.processed_dir, args.output)
        if args.json:
            _print_result({"report": str(report_path)}, as_json=True)
        else:
            print(f"Generated report at {report_path}")
    elif args.command == "serve":
        from .service import create_app

        try:
            import uvicorn
        except ModuleNotFoundError:
            raise SystemExit("uvicorn is required to run the service. Install with `pip install uvicorn`.")
        uvicorn.run(create_app(), host=args.host, port=args.port)
    elif args.command == "version":
        print(__version__)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)
    try:
        _dispatch(args)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()

"""Sliding window histograms of 1D signals by differential update."""

from importlib import metadata

from .batch import batch_sliding_histograms
from .benchmark import benchmark_strategies
from .binning import bin_index, bin_indices
from .buffer import HistogramBuffer
from .config import HistogramConfig, load_run_config, validate_config, validate_config_file
from .core import SlidingHistogram, SlidingHistogramResult, sliding_histogram, validate_inputs
from .pipeline import compute_histograms, process_signal_file
from .reference import exhaustive_histograms
from .reporting import generate_report, summarize_histograms
from .service import create_app
from .signals import generate_synthetic_series, ingest_samples, normalize_signal
from .strategies import BincountStrategy, InitialHistogramStrategy, PushStrategy, get_strategy
from .streaming import StreamingSlidingHistogram
from .windows import count_windows, transition_slices, uniform_edges, window_loci

try:
    __version__ = metadata.version("tswhist")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.1.0"

__all__ = [
    "sliding_histogram",
    "SlidingHistogram",
    "SlidingHistogramResult",
    "validate_inputs",
    "bin_index",
    "bin_indices",
    "HistogramBuffer",
    "InitialHistogramStrategy",
    "PushStrategy",
    "BincountStrategy",
    "get_strategy",
    "count_windows",
    "window_loci",
    "transition_slices",
    "uniform_edges",
    "exhaustive_histograms",
    "StreamingSlidingHistogram",
    "batch_sliding_histograms",
    "benchmark_strategies",
    "HistogramConfig",
    "load_run_config",
    "validate_config",
    "validate_config_file",
    "normalize_signal",
    "ingest_samples",
    "generate_synthetic_series",
    "compute_histograms",
    "process_signal_file",
    "summarize_histograms",
    "generate_report",
    "create_app",
    "__version__",
]

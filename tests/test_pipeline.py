from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from tswhist import (
    HistogramConfig,
    compute_histograms,
    generate_report,
    generate_synthetic_series,
    ingest_samples,
    load_run_config,
    normalize_signal,
    process_signal_file,
    summarize_histograms,
    validate_config,
    validate_config_file,
)

SCENARIO = [0.0, 0.05, 0.95, 0.15, 0.99, 0.5, 0.0, 1.0]


def test_load_run_config_supports_yaml_and_json(tmp_path: Path) -> None:
    yaml_path = tmp_path / "run.yml"
    yaml_path.write_text("n_bins: 4\nwin_len: 4\nstride: 2\nnormalization: minmax\n")
    json_path = tmp_path / "run.json"
    json_path.write_text(json.dumps({"n_bins": 8, "win_len": 16}))

    assert load_run_config(yaml_path) == {"n_bins": 4, "win_len": 4, "stride": 2, "normalization": "minmax"}
    assert load_run_config(json_path) == {"n_bins": 8, "win_len": 16}


def test_load_run_config_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_run_config(tmp_path / "missing.yml")
    bad = tmp_path / "list.yml"
    bad.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="mapping"):
        load_run_config(bad)


def test_histogram_config_enforces_preconditions() -> None:
    cfg = HistogramConfig(n_bins=4, win_len=4, stride=2, strategy="BINCOUNT")
    assert cfg.strategy == "bincount"
    assert not cfg.self_normalize

    with pytest.raises(ValidationError):
        HistogramConfig(n_bins=2, win_len=4)
    with pytest.raises(ValidationError):
        HistogramConfig(n_bins=4, win_len=4, stride=4)
    with pytest.raises(ValidationError):
        HistogramConfig(n_bins=4, win_len=4, strategy="histcounts")
    with pytest.raises(ValidationError):
        HistogramConfig(n_bins=4, win_len=4, normalization="zscore")


def test_validate_config_reports_errors_and_warnings() -> None:
    bad = validate_config({"n_bins": 2, "win_len": 10, "stride": 10})
    assert not bad.ok
    assert any("n_bins" in err for err in bad.errors)
    assert bad.normalized == {}

    wide = validate_config({"n_bins": 4, "win_len": 10, "stride": 8, "colour": "blue"})
    assert wide.ok
    assert any("colour" in w for w in wide.warnings)
    assert any("more than half" in w for w in wide.warnings)
    assert wide.normalized["stride"] == 8
    assert wide.as_dict()["ok"] is True


def test_validate_config_file(tmp_path: Path) -> None:
    path = tmp_path / "run.yaml"
    path.write_text("n_bins: 10\nwin_len: 100\nstride: 5\n")
    result = validate_config_file(path)
    assert result.ok
    assert result.normalized["normalization"] == "none"


def test_normalize_signal_maps_to_unit_interval() -> None:
    normalized, low, high = normalize_signal([2.0, 4.0, 6.0])
    assert normalized.tolist() == [0.0, 0.5, 1.0]
    assert (low, high) == (2.0, 6.0)
    with pytest.raises(ValueError, match="constant"):
        normalize_signal([1.0, 1.0])
    with pytest.raises(ValueError):
        normalize_signal([])


def test_generate_synthetic_series_is_reproducible() -> None:
    a = generate_synthetic_series(256, "gaussian", seed=3)
    b = generate_synthetic_series(256, "gaussian", seed=3)
    assert a == b and len(a) == 256
    sine = generate_synthetic_series(100, "sine", seed=1, noise_std=0.0)
    assert max(abs(x) for x in sine) <= 1.0
    with pytest.raises(ValueError):
        generate_synthetic_series(10, "chirp")


def test_ingest_samples_formats(tmp_path: Path) -> None:
    json_path = tmp_path / "samples.json"
    json_path.write_text(json.dumps({"samples": [0.1, 0.2, "x", 0.3]}))
    assert ingest_samples(json_path) == [0.1, 0.2, 0.3]

    jsonl_path = tmp_path / "samples.jsonl"
    jsonl_path.write_text('{"v": 1.5}\n2.5\n\n{"other": 3}\n')
    assert ingest_samples(jsonl_path, value_column="v") == [1.5, 2.5]

    csv_path = tmp_path / "samples.csv"
    pd.DataFrame({"t": [0, 1, 2], "value": [0.5, 0.25, 1.0]}).to_csv(csv_path, index=False)
    assert ingest_samples(csv_path) == [0.5, 0.25, 1.0]
    assert ingest_samples(csv_path, value_column="t") == [0.0, 1.0, 2.0]
    with pytest.raises(ValueError, match="not found"):
        ingest_samples(csv_path, value_column="missing")

    with pytest.raises(FileNotFoundError):
        ingest_samples(tmp_path / "nope.csv")


def test_compute_histograms_minmax_reports_raw_edges() -> None:
    raw = np.array(SCENARIO) * 10.0 - 5.0
    result = compute_histograms(raw, {"n_bins": 4, "win_len": 4, "stride": 2, "normalization": "minmax"})
    assert result.hist_matrix[:, 0].tolist() == [3, 0, 0, 1]
    assert result.edges.tolist() == [-5.0, -2.5, 0.0, 2.5, 5.0]


def test_summarize_histograms() -> None:
    hist = np.array([[2, 4, 0], [2, 0, 0], [0, 0, 0], [0, 0, 4]])
    features = summarize_histograms(hist, [0.0, 0.25, 0.5, 0.75, 1.0])
    assert features["entropy_bits"] == pytest.approx([1.0, 0.0, 0.0])
    assert features["mode_bin"] == [0, 0, 3]
    assert features["mode_center"] == pytest.approx([0.125, 0.125, 0.875])
    assert features["mean"] == pytest.approx([0.25, 0.125, 0.875])
    with pytest.raises(ValueError):
        summarize_histograms(hist, [0.0, 1.0])


def test_process_signal_file_round_trip(tmp_path: Path) -> None:
    samples_path = tmp_path / "samples.json"
    samples_path.write_text(json.dumps(SCENARIO))
    output_dir = tmp_path / "run"

    summary = process_signal_file(
        samples_path,
        output_dir,
        {"n_bins": 4, "win_len": 4, "stride": 2, "one_based": True, "write_pdf": True},
    )

    assert summary["num_windows"] == 3
    assert summary["window_loci"] == [1, 3, 5]
    assert summary["operations"] == summary["expected_operations"] == 12
    assert summary["dropped"] == 0
    assert (output_dir / "summary.json").exists()
    assert (output_dir / "report.md").exists()
    assert (output_dir / "heatmap.pdf").exists()

    frame = pd.read_csv(output_dir / "histograms.csv", index_col="bin")
    assert list(frame.columns) == ["lower_edge", "upper_edge", "1", "3", "5"]
    assert frame["1"].tolist() == [3, 0, 0, 1]

    report_text = (output_dir / "report.md").read_text()
    assert "Windows: 3" in report_text
    assert "Bin updates expected: 12" in report_text

    report_path = generate_report(output_dir, tmp_path / "custom.md")
    assert report_path.read_text() == report_text


def test_process_signal_file_logs_dropped_samples(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    samples_path = tmp_path / "samples.json"
    samples_path.write_text(json.dumps([0.1, -0.5, 0.6, 1.5, 0.3, 0.9]))

    with caplog.at_level("WARNING"):
        summary = process_signal_file(samples_path, tmp_path / "run", {"n_bins": 4, "win_len": 4, "stride": 1})

    assert summary["dropped"] == 3
    assert "skipped" in caplog.text
    assert "were not counted" in (tmp_path / "run" / "report.md").read_text()


def test_generate_report_requires_summary(tmp_path: Path) -> None:
    processed_dir = tmp_path / "processed"
    processed_dir.mkdir()

    with pytest.raises(FileNotFoundError):
        generate_report(processed_dir)


def test_reporting_renders_headless() -> None:
    import matplotlib

    import tswhist.reporting  # noqa: F401

    assert matplotlib.get_backend().lower() == "agg"


@pytest.mark.parametrize("field", ["n_bins", "win_len", "stride"])
@pytest.mark.parametrize("value", [8.0, "8", True])
def test_histogram_config_requires_integer_parameters(field: str, value) -> None:
    params = {"n_bins": 4, "win_len": 10, "stride": 2}
    params[field] = value

    with pytest.raises(ValidationError):
        HistogramConfig(**params)
    assert not validate_config(params).ok

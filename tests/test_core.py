from __future__ import annotations

import numpy as np
import pytest

from tswhist import (
    HistogramBuffer,
    SlidingHistogram,
    bin_indices,
    exhaustive_histograms,
    sliding_histogram,
    validate_inputs,
)

SCENARIO = [0.0, 0.05, 0.95, 0.15, 0.99, 0.5, 0.0, 1.0]


def _rebin_every_window(signal, n_bins: int, win_len: int, stride: int) -> np.ndarray:
    bins = bin_indices(signal, n_bins)
    starts = range(0, len(signal) - win_len + 1, stride)
    columns = []
    for start in starts:
        window = bins[start : start + win_len]
        window = window[(window >= 0) & (window < n_bins)]
        columns.append(np.bincount(window, minlength=n_bins))
    return np.stack(columns, axis=1)


def test_scenario_rejects_two_bins() -> None:
    with pytest.raises(ValueError, match="larger than 2"):
        sliding_histogram(SCENARIO, 2, 4, 2)


def test_scenario_with_four_bins() -> None:
    hist, loci, edges = sliding_histogram(SCENARIO, 4, 4, 2)

    assert hist.shape == (4, 3)
    # bins per sample: 0, 0, 3, 0, 3, 2, 0, 3 (1.0 folds into the last bin)
    assert hist[:, 0].tolist() == [3, 0, 0, 1]
    assert hist[:, 1].tolist() == [1, 0, 1, 2]
    assert hist[:, 2].tolist() == [1, 0, 1, 2]
    assert loci.tolist() == [0, 2, 4]
    assert edges.tolist() == [0.0, 0.25, 0.5, 0.75, 1.0]


@pytest.mark.parametrize(
    "n_samples,n_bins,win_len,stride",
    [
        (500, 3, 10, 1),
        (1000, 16, 100, 7),
        (2048, 100, 500, 10),
        (333, 7, 32, 31),
    ],
)
def test_matches_exhaustive_rebinning(n_samples: int, n_bins: int, win_len: int, stride: int) -> None:
    rng = np.random.default_rng(n_samples + n_bins)
    signal = rng.random(n_samples)
    signal[::17] = 0.0
    signal[::23] = 1.0

    hist, _, edges = sliding_histogram(signal, n_bins, win_len, stride)

    assert np.array_equal(hist, _rebin_every_window(signal, n_bins, win_len, stride))
    assert np.array_equal(hist, exhaustive_histograms(signal, n_bins, win_len, stride, edges=edges))


def test_every_column_sums_to_window_length() -> None:
    signal = np.random.default_rng(1).random(4000)
    hist, _, _ = sliding_histogram(signal, 25, 300, 13)
    assert np.all(hist.sum(axis=0) == 300)


def test_edges_are_uniform_and_strictly_increasing() -> None:
    _, _, edges = sliding_histogram(np.linspace(0, 1, 50), 10, 20, 5)
    assert edges.size == 11
    assert edges[0] == 0.0 and edges[-1] == 1.0
    assert np.all(np.diff(edges) > 0)
    assert np.allclose(np.diff(edges), 0.1)


@pytest.mark.parametrize("length,win_len,stride", [(8, 4, 2), (100, 10, 3), (101, 100, 1), (50, 50, 7)])
def test_window_count_and_loci(length: int, win_len: int, stride: int) -> None:
    hist, loci, _ = sliding_histogram(np.full(length, 0.5), 5, win_len, stride)
    expected = (length - win_len) // stride + 1
    assert hist.shape[1] == expected
    assert loci.tolist() == [i * stride for i in range(expected)]


@pytest.mark.parametrize("win_len,stride", [(50, 1), (50, 7), (500, 7), (999, 998)])
def test_total_update_work_is_bounded(win_len: int, stride: int) -> None:
    driver = SlidingHistogram(np.random.default_rng(2).random(1000), 8, win_len, stride)
    result = driver.run()
    assert result.operations == win_len + (result.num_windows - 1) * 2 * stride
    assert result.operations == driver.expected_operations


@pytest.mark.parametrize("win_len", [20, 200, 2000])
def test_per_step_work_does_not_depend_on_window_length(win_len: int) -> None:
    stride = 5
    driver = SlidingHistogram(np.random.default_rng(3).random(4000), 10, win_len, stride)
    windows = driver.iter_windows()
    next(windows)
    previous = driver.buffer.operations
    assert previous == win_len
    for _ in windows:
        assert driver.buffer.operations - previous == 2 * stride
        previous = driver.buffer.operations


def test_snapshots_do_not_alias_the_buffer() -> None:
    driver = SlidingHistogram(SCENARIO, 4, 4, 2)
    snapshots = [counts for _, counts in driver.iter_windows()]
    assert snapshots[0].tolist() == [3, 0, 0, 1]
    snapshots[1][0] = 99
    assert driver.buffer.counts[0] == 1
    assert not np.shares_memory(snapshots[1], snapshots[2])


def test_driver_state_progresses_to_complete() -> None:
    driver = SlidingHistogram(SCENARIO, 4, 4, 2)
    assert driver.state == "initializing"
    windows = driver.iter_windows()
    next(windows)
    assert driver.state == "initializing"
    next(windows)
    assert driver.state == "sliding"
    list(windows)
    assert driver.state == "complete"


def test_run_can_be_repeated_with_a_fresh_buffer() -> None:
    driver = SlidingHistogram(SCENARIO, 4, 4, 2)
    first = driver.run()
    second = driver.run()
    assert np.array_equal(first.hist_matrix, second.hist_matrix)
    assert first.operations == second.operations == 4 + 2 * 2 * 2


def test_out_of_range_samples_are_silently_dropped() -> None:
    """Latent gap: un-normalized samples under-count instead of failing."""

    signal = [0.1, -0.5, 0.6, 1.5, 0.3, 0.9]
    driver = SlidingHistogram(signal, 4, 4, 1)
    result = driver.run()

    assert result.hist_matrix[:, 0].tolist() == [1, 0, 1, 0]
    assert result.hist_matrix.sum(axis=0).tolist() == [2, 2, 3]
    assert result.dropped == 3
    assert result.operations == driver.expected_operations


def test_slightly_above_one_folds_into_last_bin() -> None:
    hist, _, _ = sliding_histogram([1.0000000001, 0.0, 0.5, 0.2], 4, 3, 1)
    assert hist[:, 0].tolist() == [1, 0, 1, 1]


def test_self_normalizing_variant_uses_signal_range() -> None:
    rng = np.random.default_rng(4)
    raw = rng.normal(loc=10.0, scale=3.0, size=3000)

    hist, _, edges = sliding_histogram(raw, 50, 400, 9, self_normalize=True)

    assert edges[0] == raw.min()
    assert edges[-1] == raw.max()
    assert np.all(np.diff(edges) > 0)
    assert np.all(hist.sum(axis=0) == 400)
    assert np.array_equal(hist, exhaustive_histograms(raw, 50, 400, 9, edges=edges))


def test_self_normalizing_rejects_constant_signal() -> None:
    with pytest.raises(ValueError, match="constant"):
        sliding_histogram([3.0] * 10, 4, 5, 1, self_normalize=True)


def test_strategies_give_identical_results() -> None:
    signal = np.random.default_rng(5).random(1500)
    push = SlidingHistogram(signal, 12, 100, 4, strategy="push").run()
    bincount = SlidingHistogram(signal, 12, 100, 4, strategy="bincount").run()
    assert np.array_equal(push.hist_matrix, bincount.hist_matrix)
    assert push.operations == bincount.operations
    assert bincount.strategy == "bincount"


def test_result_as_dict_and_one_based_loci() -> None:
    result = SlidingHistogram(SCENARIO, 4, 4, 2).run()
    payload = result.as_dict(one_based=True)
    assert payload["window_loci"] == [1, 3, 5]
    assert payload["histograms"][3] == [1, 2, 2]
    assert payload["num_windows"] == 3
    _, loci, _ = result.as_tuple()
    assert loci.tolist() == [0, 2, 4]


def test_caller_signal_is_not_modified() -> None:
    signal = np.array(SCENARIO)
    original = signal.copy()
    sliding_histogram(signal, 4, 4, 2)
    assert np.array_equal(signal, original)
    assert signal.flags.writeable


@pytest.mark.parametrize(
    "signal,n_bins,win_len,stride,exc",
    [
        (SCENARIO, 2, 4, 2, ValueError),
        (SCENARIO, 0, 4, 2, ValueError),
        (SCENARIO, 4.0, 4, 2, TypeError),
        (SCENARIO, True, 4, 2, TypeError),
        (SCENARIO, 4, 4, 4, ValueError),
        (SCENARIO, 4, 4, 5, ValueError),
        (SCENARIO, 4, 9, 2, ValueError),
        (SCENARIO, 4, 4, 0, ValueError),
        (SCENARIO, 4, 4.5, 2, TypeError),
        ([], 4, 4, 2, ValueError),
        (0.5, 4, 4, 2, ValueError),
        ([[0.1, 0.2], [0.3, 0.4]], 4, 2, 1, ValueError),
        (["a", "b", "c", "d", "e"], 4, 4, 2, TypeError),
        ([0.1, float("nan"), 0.2, 0.3, 0.4], 4, 4, 2, ValueError),
    ],
)
def test_rejects_contract_violations(signal, n_bins, win_len, stride, exc) -> None:
    with pytest.raises(exc):
        validate_inputs(signal, n_bins, win_len, stride)
    with pytest.raises(exc):
        sliding_histogram(signal, n_bins, win_len, stride)


def test_accepts_row_and_column_vectors() -> None:
    row = np.array([SCENARIO])
    column = row.T
    expected, _, _ = sliding_histogram(SCENARIO, 4, 4, 2)
    assert np.array_equal(sliding_histogram(row, 4, 4, 2)[0], expected)
    assert np.array_equal(sliding_histogram(column, 4, 4, 2)[0], expected)


def test_buffer_tracks_current_window_during_sliding() -> None:
    signal = np.random.default_rng(6).random(300)
    driver = SlidingHistogram(signal, 6, 40, 3)
    bins = bin_indices(signal, 6)
    for start, counts in driver.iter_windows():
        expected = np.bincount(bins[start : start + 40], minlength=6)
        assert np.array_equal(counts, expected)
        assert isinstance(driver.buffer, HistogramBuffer)
        assert driver.buffer.total == 40


def test_exhaustive_reference_uses_the_same_bin_rule_at_rounding_boundaries() -> None:
    # 0.57 * 100 rounds to 56.999..., so the floor rule puts it in bin 56
    # even though 0.57 is not below edges[57].
    signal = [0.57, 0.1, 0.2, 0.3, 0.29, 0.58]
    hist, _, edges = sliding_histogram(signal, 100, 3, 1)

    assert hist[56, 0] == 1
    assert np.array_equal(hist, exhaustive_histograms(signal, 100, 3, 1))
    assert np.array_equal(hist, exhaustive_histograms(signal, 100, 3, 1, edges=edges))


def test_exhaustive_reference_rejects_mismatched_edges() -> None:
    with pytest.raises(ValueError, match="edges"):
        exhaustive_histograms(SCENARIO, 4, 4, 2, edges=[0.0, 0.5, 1.0])

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

import spectrogram_grid.spectrogram_engine as spectrogram_engine
from spectrogram_grid import (
    AnalysisConfig,
    AudioSignal,
    ConfigurationError,
    DataFormatError,
    SignalUnavailableError,
    WindowCache,
    analyze,
    compute_spectrogram,
    compute_spectrogram_async,
    spectrogram_from_json,
)
from spectrogram_grid.utils import bin_for_frequency


def _sine_wave(freq: float, sr: int, duration: float) -> np.ndarray:
    t = np.linspace(0, duration, int(sr * duration), endpoint=False)
    return np.sin(2 * np.pi * freq * t).astype(np.float32)


@pytest.mark.parametrize("columns", [1, 3, 4, 50])
def test_silence_maps_to_minimum_intensity(columns):
    signal = AudioSignal(np.zeros(8, dtype=np.float32), 8000)
    result = compute_spectrogram(signal, AnalysisConfig(fft_size=4, target_columns=columns), window_cache=WindowCache())
    assert result.shape == (columns, 2)
    assert not result.data.any()


def test_sine_wave_shows_a_constant_band():
    sr = 44100
    signal = AudioSignal(_sine_wave(440.0, sr, duration=1.0), sr)
    result = compute_spectrogram(signal, AnalysisConfig(fft_size=512, target_columns=100), window_cache=WindowCache())

    assert result.columns == 100
    assert result.bins == 256
    band = bin_for_frequency(440.0, sr, 512)
    assert band == 5
    peaks = result.data.argmax(axis=1)
    assert np.all(np.abs(peaks.astype(int) - band) <= 1)
    assert np.all(result.data[:, band] > 60)
    assert result.data[:, 100:].mean() < 10


def test_precomputed_data_round_trips_at_same_width():
    result = spectrogram_from_json("[[10,20],[30,40]]", 2)
    assert result.to_list() == [[10, 20], [30, 40]]


def test_precomputed_data_is_resampled():
    result = spectrogram_from_json(b"[[0,0],[100,200]]", 4)
    assert result.to_list() == [[0, 0], [0, 0], [100, 200], [100, 200]]


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[]",
        "{}",
        "[[]]",
        "[[1,2],[3]]",
        "[[1,2],[3,300]]",
        "[[1.5]]",
        "[[true]]",
        "[[1,true]]",
        "[[2,1.0]]",
        "[1,2]",
        "[[-1]]",
    ],
)
def test_malformed_precomputed_data_is_rejected(payload):
    with pytest.raises(DataFormatError):
        spectrogram_from_json(payload, 10)


@pytest.mark.parametrize("config", [AnalysisConfig(fft_size=0), AnalysisConfig(target_columns=0), AnalysisConfig(fft_size=-512)])
def test_invalid_config_fails_before_analysis(monkeypatch, config):
    def _should_not_run(*args, **kwargs):
        raise AssertionError("analysis started with an invalid config")

    monkeypatch.setattr(spectrogram_engine, "frequency_rows", _should_not_run)
    signal = AudioSignal(np.zeros(1024, dtype=np.float32), 8000)
    with pytest.raises(ConfigurationError):
        compute_spectrogram(signal, config)


def test_precomputed_path_rejects_zero_columns():
    with pytest.raises(ConfigurationError):
        spectrogram_from_json("[[1]]", 0)


def test_missing_signal_is_reported_distinctly():
    with pytest.raises(SignalUnavailableError):
        compute_spectrogram(None, AnalysisConfig())
    with pytest.raises(SignalUnavailableError):
        compute_spectrogram(AudioSignal(np.zeros(0, dtype=np.float32), 8000), AnalysisConfig())
    with pytest.raises(SignalUnavailableError):
        AudioSignal(None, 8000)


def test_multichannel_signal_is_rejected():
    with pytest.raises(SignalUnavailableError):
        AudioSignal(np.zeros((100, 2), dtype=np.float32), 8000)


def test_analyze_keeps_native_resolution():
    signal = AudioSignal(np.random.default_rng(2).standard_normal(10000).astype(np.float32), 16000)
    matrix = analyze(signal, AnalysisConfig(fft_size=256), window_cache=WindowCache())
    assert matrix.frames == 10000 // 128
    assert matrix.bins == 128
    assert matrix.data.dtype == np.uint8


def test_short_signal_produces_one_frame():
    signal = AudioSignal(np.ones(10, dtype=np.float32), 8000)
    matrix = analyze(signal, AnalysisConfig(fft_size=512), window_cache=WindowCache())
    assert matrix.frames == 1
    assert compute_spectrogram(signal, AnalysisConfig(fft_size=512, target_columns=30)).shape == (30, 256)


def test_outputs_are_read_only():
    signal = AudioSignal(np.ones(2048, dtype=np.float32), 8000)
    result = compute_spectrogram(signal, AnalysisConfig(fft_size=64, target_columns=16))
    with pytest.raises(ValueError):
        result.data[0, 0] = 1
    with pytest.raises(ValueError):
        signal.samples[0] = 2.0


def test_caller_buffer_is_not_touched():
    samples = np.ones(2048, dtype=np.float32)
    compute_spectrogram(AudioSignal(samples, 8000), AnalysisConfig(fft_size=64, target_columns=16))
    assert np.all(samples == 1.0)


def test_async_result_matches_sync():
    sr = 8000
    signal = AudioSignal(_sine_wave(1000.0, sr, duration=0.5), sr)
    config = AnalysisConfig(fft_size=256, target_columns=40)
    expected = compute_spectrogram(signal, config)
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = compute_spectrogram_async(signal, config, pool)
        result = future.result(timeout=30)
    np.testing.assert_array_equal(result.data, expected.data)


def test_async_surfaces_errors_through_the_future():
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = compute_spectrogram_async(None, AnalysisConfig(), pool)
        with pytest.raises(SignalUnavailableError):
            future.result(timeout=30)


def test_async_rejects_invalid_config_immediately():
    with ThreadPoolExecutor(max_workers=1) as pool:
        with pytest.raises(ConfigurationError):
            compute_spectrogram_async(None, AnalysisConfig(fft_size=0), pool)


def test_threaded_config_gives_same_matrix():
    signal = AudioSignal(np.random.default_rng(4).standard_normal(50000).astype(np.float32), 16000)
    serial = compute_spectrogram(signal, AnalysisConfig(fft_size=512, target_columns=300))
    threaded = compute_spectrogram(signal, AnalysisConfig(fft_size=512, target_columns=300, workers=3))
    np.testing.assert_allclose(threaded.data.astype(int), serial.data.astype(int), atol=1)

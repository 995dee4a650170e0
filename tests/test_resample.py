import numpy as np
import pytest

from spectrogram_grid.errors import ConfigurationError, DataFormatError
from spectrogram_grid.resample import overlap_weights, resample


def test_same_size_resample_is_identity():
    source = np.array([[10, 20], [30, 40]], dtype=np.uint8)
    np.testing.assert_array_equal(resample(source, 2), source)


@pytest.mark.parametrize("frames", [1, 3, 7, 49, 172])
def test_identity_for_awkward_frame_counts(frames):
    source = np.random.default_rng(frames).integers(0, 256, size=(frames, 5)).astype(np.uint8)
    np.testing.assert_array_equal(resample(source, frames), source)


def test_downsampling_averages_covered_frames():
    source = np.array([[0], [10], [20], [30]], dtype=np.uint8)
    assert resample(source, 2).tolist() == [[5], [25]]


def test_upsampling_replicates_frames():
    source = np.array([[10], [30]], dtype=np.uint8)
    assert resample(source, 4).tolist() == [[10], [10], [30], [30]]


def test_partial_overlaps_are_weighted():
    # three source cells into two target cells: weights 2/3 + 1/3 and 1/3 + 2/3
    source = np.array([[30], [60], [90]], dtype=np.uint8)
    assert resample(source, 2).tolist() == [[40], [80]]


def test_partial_overlap_upsampling_truncates():
    source = np.array([[0], [100]], dtype=np.uint8)
    # target cells of width 1/3: the middle one straddles both frames equally
    assert resample(source, 3).tolist() == [[0], [50], [100]]


@pytest.mark.parametrize("frames,columns", [(1, 1), (1, 640), (172, 100), (100, 172), (13, 1000), (999, 7)])
def test_output_shape_and_range(frames, columns):
    source = np.random.default_rng(columns).integers(0, 256, size=(frames, 4)).astype(np.uint8)
    result = resample(source, columns)
    assert result.shape == (columns, 4)
    assert result.dtype == np.uint8


def test_full_scale_input_stays_full_scale():
    source = np.full((37, 3), 255, dtype=np.uint8)
    assert np.all(resample(source, 100) == 255)
    assert np.all(resample(source, 11) == 255)


def test_area_is_conserved_within_truncation():
    frames, columns = 37, 100
    source = np.random.default_rng(5).integers(0, 256, size=(frames, 8)).astype(np.uint8)
    result = resample(source, columns).astype(np.int64)

    expected = source.astype(np.int64).sum(axis=0) * columns / frames
    shortfall = expected - result.sum(axis=0)
    assert np.all(shortfall > -1e-9)
    assert np.all(shortfall < columns)


def test_overlap_weights_cover_each_cell_once():
    weights = overlap_weights(7, 3)
    assert weights.shape == (3, 7)
    np.testing.assert_array_equal(np.asarray(weights.sum(axis=1)).ravel(), [7, 7, 7])
    np.testing.assert_array_equal(np.asarray(weights.sum(axis=0)).ravel(), [3] * 7)


def test_float_input_is_truncated():
    source = np.array([[10.9], [20.9]])
    assert resample(source, 1).tolist() == [[15]]


def test_empty_source_is_rejected():
    with pytest.raises(DataFormatError):
        resample(np.zeros((0, 4), dtype=np.uint8), 10)


def test_non_positive_columns_are_rejected():
    with pytest.raises(ConfigurationError):
        resample(np.zeros((3, 4), dtype=np.uint8), 0)

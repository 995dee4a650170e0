"""
Area-weighted (box) resampling of the time axis.

Source frames and target columns each partition the unit interval into equal
cells. Every target column is the sum of the source frames it overlaps,
weighted by overlap / target-cell width, then truncated to uint8.

Overlaps are measured on an integer grid of F * T units (a source cell is T
units wide, a target cell F units wide), so weights are exact and a
same-size resample returns its input unchanged.
"""
import logging

import numpy as np
from scipy import sparse

from .config import INTENSITY_MAX
from .errors import ConfigurationError, DataFormatError

logger = logging.getLogger(__name__)


def overlap_weights(source_frames: int, target_columns: int) -> sparse.csr_matrix:
    """
    Sparse (target_columns, source_frames) matrix of overlap lengths in grid units.

    Each row sums to source_frames (one target cell), each column to
    target_columns (one source cell).
    """
    if source_frames <= 0:
        raise DataFormatError("cannot resample a matrix with no frames")
    if target_columns <= 0:
        raise ConfigurationError(f"target_columns must be positive, got {target_columns}")

    source_edges = np.arange(source_frames + 1, dtype=np.int64) * target_columns
    target_edges = np.arange(target_columns + 1, dtype=np.int64) * source_frames
    edges = np.union1d(source_edges, target_edges)

    starts = edges[:-1]
    lengths = np.diff(edges)
    source_index = starts // target_columns
    target_index = starts // source_frames

    return sparse.csr_matrix(
        (lengths, (target_index, source_index)),
        shape=(target_columns, source_frames),
        dtype=np.int64,
    )


def resample(matrix: np.ndarray, target_columns: int) -> np.ndarray:
    """
    Resample a (frames, bins) intensity matrix to (target_columns, bins).

    Works for both up- and downsampling with the same rule.
    """
    source = np.asarray(matrix)
    if source.ndim != 2 or source.shape[0] == 0:
        raise DataFormatError("frequency matrix must be a non-empty 2-D array")

    frames = source.shape[0]
    weights = overlap_weights(frames, target_columns)
    logger.debug("Resampling %d frames x %d bins to %d columns", frames, source.shape[1], target_columns)

    if np.issubdtype(source.dtype, np.integer):
        totals = weights @ source.astype(np.int64)
        columns = totals // frames
    else:
        totals = weights @ source.astype(np.float64)
        columns = np.floor(totals / frames)

    return np.clip(columns, 0, INTENSITY_MAX).astype(np.uint8)

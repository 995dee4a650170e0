from typing import Iterator, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def frame_count(length: int, hop: int) -> int:
    """Number of analysis windows: floor(length / hop), and never less than one for a non-empty signal."""
    if length <= 0:
        return 0
    return max(1, length // hop)


def extract_frames(
    samples: np.ndarray,
    fft_size: int,
    hop: int,
    window: np.ndarray,
    start: int = 0,
    stop: int = None,
) -> np.ndarray:
    """
    Slice samples into windowed frames of fft_size.

    Frame f starts at f * hop. Positions past the end of the signal are
    zero-filled, so every frame has exactly fft_size entries. start/stop select
    a contiguous range of frame indices. Returns a (frames, fft_size) float32 array.
    """
    total = frame_count(len(samples), hop)
    stop = total if stop is None else min(stop, total)
    if stop <= start:
        return np.zeros((0, fft_size), dtype=np.float32)

    first_sample = start * hop
    needed = (stop - 1 - start) * hop + fft_size
    chunk = np.zeros(needed, dtype=np.float32)
    available = samples[first_sample:first_sample + needed]
    chunk[: len(available)] = available

    frames = sliding_window_view(chunk, fft_size)[::hop][: stop - start]
    return frames * window


def iter_frame_blocks(total: int, block_size: int) -> Iterator[Tuple[int, int]]:
    for start in range(0, total, block_size):
        yield start, min(start + block_size, total)

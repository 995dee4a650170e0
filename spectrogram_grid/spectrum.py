import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
from scipy import fft

from .config import INTENSITY_FLOOR, INTENSITY_MAX, INTENSITY_SCALE, AnalysisConfig
from .frames import extract_frames, frame_count, iter_frame_blocks
from .window import WindowCache, default_cache

logger = logging.getLogger(__name__)

# Frames per task when analysis is spread over worker threads
FRAME_BLOCK_SIZE = 256


def magnitudes(frames: np.ndarray, fft_size: int) -> np.ndarray:
    """|X_k| for bins 0 .. fft_size/2 - 1 of every windowed frame."""
    spectrum = fft.rfft(frames, n=fft_size, axis=-1)
    return np.abs(spectrum[..., : fft_size // 2])


def to_intensity(magnitude: np.ndarray) -> np.ndarray:
    """
    Compress magnitudes to 8-bit display intensities.

    log10(m) * 45, floored at -255, then saturated into 0..255 and truncated.
    Zero magnitude lands on the floor and therefore maps to 0.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        scaled = np.log10(magnitude) * INTENSITY_SCALE
    scaled = np.nan_to_num(scaled, nan=INTENSITY_FLOOR, neginf=INTENSITY_FLOOR, posinf=INTENSITY_MAX)
    scaled = np.maximum(scaled, INTENSITY_FLOOR)
    return np.clip(scaled, 0, INTENSITY_MAX).astype(np.uint8)


def analyze_frames(frames: np.ndarray, fft_size: int) -> np.ndarray:
    return to_intensity(magnitudes(frames, fft_size))


def _analyze_block(samples: np.ndarray, config: AnalysisConfig, window: np.ndarray, start: int, stop: int) -> np.ndarray:
    frames = extract_frames(samples, config.fft_size, config.effective_hop, window, start=start, stop=stop)
    return analyze_frames(frames, config.fft_size)


def frequency_rows(
    samples: np.ndarray,
    config: AnalysisConfig,
    window_cache: Optional[WindowCache] = None,
    executor: Optional[ThreadPoolExecutor] = None,
) -> np.ndarray:
    """
    Run framing and the spectral transform over the whole signal.

    Returns a (frames, fft_size // 2) uint8 array in frame order. Frames are
    analysed FRAME_BLOCK_SIZE at a time so only one block of windowed frames
    is held per task. With config.workers > 1 (or an explicit executor) the
    blocks run concurrently and are reassembled in their original order.
    """
    cache = window_cache if window_cache is not None else default_cache
    window = cache.get(config.fft_size)
    hop = config.effective_hop
    total = frame_count(len(samples), hop)
    logger.debug("Analysing %d frames (fft_size=%d, hop=%d)", total, config.fft_size, hop)

    blocks = list(iter_frame_blocks(total, FRAME_BLOCK_SIZE))
    if executor is None and config.workers <= 1:
        rows = [_analyze_block(samples, config, window, start, stop) for start, stop in blocks]
    elif executor is not None:
        futures = [executor.submit(_analyze_block, samples, config, window, start, stop) for start, stop in blocks]
        rows = [future.result() for future in futures]
    else:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            futures = [pool.submit(_analyze_block, samples, config, window, start, stop) for start, stop in blocks]
            rows = [future.result() for future in futures]

    if not rows:
        return np.zeros((0, config.bins), dtype=np.uint8)
    return np.concatenate(rows, axis=0)

import logging
from threading import Lock
from typing import Dict

import numpy as np
from scipy.signal import windows

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def hann_window(fft_size: int) -> np.ndarray:
    """Symmetric Hann weights, 0.5 * (1 - cos(2*pi*i / (fft_size - 1)))."""
    if fft_size <= 0:
        raise ConfigurationError(f"fft_size must be positive, got {fft_size}")
    table = windows.hann(fft_size, sym=True).astype(np.float32)
    table.setflags(write=False)
    return table


class WindowCache:
    """
    Window tables keyed by fft_size.

    Tables are read-only once built, so one cache can be shared between
    concurrent analyses. Pass a fresh instance (or call clear()) to isolate runs.
    """

    def __init__(self):
        self._tables: Dict[int, np.ndarray] = {}
        self._lock = Lock()

    def get(self, fft_size: int) -> np.ndarray:
        with self._lock:
            table = self._tables.get(fft_size)
            if table is None:
                logger.debug("Building Hann window table for fft_size=%d", fft_size)
                table = hann_window(fft_size)
                self._tables[fft_size] = table
            return table

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()

    def __contains__(self, fft_size: int) -> bool:
        with self._lock:
            return fft_size in self._tables

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)


default_cache = WindowCache()

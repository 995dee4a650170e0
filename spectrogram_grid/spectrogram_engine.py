import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional, Union

from .config import AnalysisConfig
from .errors import ConfigurationError, SignalUnavailableError
from .models import AudioSignal, FrequencyMatrix, ResampledMatrix
from .resample import resample
from .spectrum import frequency_rows
from .window import WindowCache

logger = logging.getLogger(__name__)


def _require_signal(signal: Optional[AudioSignal]) -> AudioSignal:
    if signal is None:
        raise SignalUnavailableError("audio buffer is not available")
    if signal.length == 0:
        raise SignalUnavailableError("audio buffer is empty")
    return signal


def analyze(
    signal: AudioSignal,
    config: AnalysisConfig,
    window_cache: Optional[WindowCache] = None,
    executor: Optional[ThreadPoolExecutor] = None,
) -> FrequencyMatrix:
    """Frame, window and transform the signal into a FrequencyMatrix at native time resolution."""
    config.validate()
    signal = _require_signal(signal)
    rows = frequency_rows(signal.samples, config, window_cache=window_cache, executor=executor)
    return FrequencyMatrix(rows)


def resample_matrix(matrix: FrequencyMatrix, target_columns: int) -> ResampledMatrix:
    if target_columns <= 0:
        raise ConfigurationError(f"target_columns must be positive, got {target_columns}")
    return ResampledMatrix(resample(matrix.data, target_columns))


def compute_spectrogram(
    signal: AudioSignal,
    config: AnalysisConfig,
    window_cache: Optional[WindowCache] = None,
    executor: Optional[ThreadPoolExecutor] = None,
) -> ResampledMatrix:
    """
    Turn a mono signal into a (target_columns, fft_size // 2) intensity grid.

    The config is validated before any work starts.
    """
    config.validate()
    matrix = analyze(signal, config, window_cache=window_cache, executor=executor)
    result = resample_matrix(matrix, config.target_columns)
    logger.debug(
        "Spectrogram ready: %d frames -> %d columns x %d bins",
        matrix.frames,
        result.columns,
        result.bins,
    )
    return result


def compute_spectrogram_async(
    signal: AudioSignal,
    config: AnalysisConfig,
    executor: Executor,
    window_cache: Optional[WindowCache] = None,
) -> Future:
    """Schedule compute_spectrogram on executor; the future resolves once with the matrix or the error."""
    config.validate()
    return executor.submit(compute_spectrogram, signal, config, window_cache)


def spectrogram_from_json(payload: Union[str, bytes], target_columns: int) -> ResampledMatrix:
    """Resample precomputed frequency data, skipping analysis."""
    if target_columns <= 0:
        raise ConfigurationError(f"target_columns must be positive, got {target_columns}")
    matrix = FrequencyMatrix.from_json(payload)
    return resample_matrix(matrix, target_columns)

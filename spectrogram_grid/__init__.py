"""
Spectrogram grid.

Turns a mono audio signal into a fixed-width grid of 8-bit intensities
(columns = time, rows = frequency) ready for a renderer to colour and paint.
Rendering, file loading and network fetch live in their own modules and are
never required by the analysis core.
"""
from .config import AnalysisConfig
from .errors import (
    AudioLoadingError,
    ConfigurationError,
    DataFormatError,
    SignalUnavailableError,
    SpectrogramError,
    TransferError,
)
from .models import AudioSignal, FrequencyMatrix, ResampledMatrix
from .spectrogram_engine import (
    analyze,
    compute_spectrogram,
    compute_spectrogram_async,
    resample_matrix,
    spectrogram_from_json,
)
from .window import WindowCache

__all__ = [
    "AnalysisConfig",
    "AudioLoadingError",
    "AudioSignal",
    "ConfigurationError",
    "DataFormatError",
    "FrequencyMatrix",
    "ResampledMatrix",
    "SignalUnavailableError",
    "SpectrogramError",
    "TransferError",
    "WindowCache",
    "analyze",
    "compute_spectrogram",
    "compute_spectrogram_async",
    "resample_matrix",
    "spectrogram_from_json",
]

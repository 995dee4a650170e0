class SpectrogramError(Exception):
    """Base class for every failure surfaced by spectrogram_grid."""


class ConfigurationError(SpectrogramError, ValueError):
    """Raised when fft_size, hop_size, target_columns or workers are out of range."""


class SignalUnavailableError(SpectrogramError):
    """Raised when no usable sample buffer was supplied."""


class AudioLoadingError(SignalUnavailableError):
    """Raised when an audio file cannot be loaded."""


class DataFormatError(SpectrogramError, ValueError):
    """Raised when precomputed frequency data is not a rectangular JSON matrix."""


class TransferError(SpectrogramError):
    """Raised when precomputed frequency data could not be fetched."""

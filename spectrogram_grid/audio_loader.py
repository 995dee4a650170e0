import io
import logging
import math
from pathlib import Path
from typing import Optional, Union

import numpy as np
import soundfile as sf
from scipy import signal

from .config import DEFAULT_CHANNEL
from .errors import AudioLoadingError, SignalUnavailableError
from .models import AudioSignal

SUPPORTED_EXTENSIONS = (".wav", ".flac", ".ogg")

logger = logging.getLogger(__name__)


def is_supported_file(path: Union[str, Path]) -> bool:
    return str(path).lower().endswith(SUPPORTED_EXTENSIONS)


def _resample(audio: np.ndarray, original_sr: int, target_sr: int) -> np.ndarray:
    if original_sr == target_sr:
        return audio
    gcd = math.gcd(int(original_sr), int(target_sr))
    upsample_factor = target_sr // gcd
    downsample_factor = original_sr // gcd
    return signal.resample_poly(audio, upsample_factor, downsample_factor)


def select_channel(data: np.ndarray, channel: int = DEFAULT_CHANNEL) -> np.ndarray:
    """Pick one reference channel from (frames,) or (frames, channels) sample data."""
    if data.ndim == 1:
        return data
    channels = data.shape[1]
    if not -channels <= channel < channels:
        raise SignalUnavailableError(f"channel {channel} requested but audio has {channels} channel(s)")
    return data[:, channel]


def load_audio(
    source: Union[str, Path, io.BytesIO],
    channel: int = DEFAULT_CHANNEL,
    target_sample_rate: Optional[int] = None,
) -> AudioSignal:
    """
    Load an audio file using soundfile and optionally resample it.
    Returns the reference channel as an AudioSignal.
    """
    try:
        data, sample_rate = sf.read(source, dtype="float32", always_2d=False)
    except Exception as exc:
        raise AudioLoadingError(str(exc)) from exc

    data = select_channel(data, channel)
    if data.size == 0:
        raise SignalUnavailableError(f"{source} contains no samples")

    if target_sample_rate:
        data = _resample(data, sample_rate, target_sample_rate)
        sample_rate = target_sample_rate

    logger.debug("Loaded %d samples at %d Hz from %s", data.shape[0], sample_rate, source)
    return AudioSignal(data.astype(np.float32), int(sample_rate))


def audio_info(path: Union[str, Path]) -> dict:
    try:
        meta = sf.info(path)
    except Exception as exc:
        raise AudioLoadingError(str(exc)) from exc
    duration = meta.frames / float(meta.samplerate) if meta.samplerate else 0.0
    return {
        "sample_rate": int(meta.samplerate),
        "frames": int(meta.frames),
        "channels": int(meta.channels),
        "duration": duration,
        "path": Path(path),
    }

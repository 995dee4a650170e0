"""
Fetching precomputed frequency data over HTTP.

The payload is a JSON array of frames (see FrequencyMatrix.from_json).
Network and HTTP failures surface as TransferError; a payload that arrives but
cannot be decoded surfaces as DataFormatError. There is no retry here, callers
decide whether to try again.
"""
import logging
from typing import Optional

import requests

from .errors import ConfigurationError, TransferError
from .models import FrequencyMatrix, ResampledMatrix
from .spectrogram_engine import resample_matrix

DEFAULT_TIMEOUT = 10.0

logger = logging.getLogger(__name__)


def fetch_frequencies_payload(url: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None) -> str:
    getter = session.get if session is not None else requests.get
    try:
        resp = getter(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Fetching frequency data from %s failed: %s", url, exc)
        raise TransferError(f"Failed to fetch frequency data from {url}: {exc}") from exc
    return resp.text


def fetch_frequencies(url: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None) -> FrequencyMatrix:
    return FrequencyMatrix.from_json(fetch_frequencies_payload(url, timeout=timeout, session=session))


def fetch_spectrogram(
    url: str,
    target_columns: int,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> ResampledMatrix:
    if target_columns <= 0:
        raise ConfigurationError(f"target_columns must be positive, got {target_columns}")
    return resample_matrix(fetch_frequencies(url, timeout=timeout, session=session), target_columns)

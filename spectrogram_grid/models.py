import json
from dataclasses import dataclass
from typing import List, Union

import numpy as np

from .config import INTENSITY_MAX
from .errors import DataFormatError, SignalUnavailableError


def _read_only(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class AudioSignal:
    """One reference channel of samples. sample_rate is informational only."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        if self.samples is None:
            raise SignalUnavailableError("no sample buffer supplied")
        samples = np.asarray(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise SignalUnavailableError("audio must be mono; select a reference channel first")
        object.__setattr__(self, "samples", _read_only(samples))
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def length(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        return self.length / float(self.sample_rate) if self.sample_rate else 0.0


@dataclass(frozen=True, eq=False)
class FrequencyMatrix:
    """
    Intensity rows at native time resolution.

    data has shape (frames, bins): one row per analysis frame in time order,
    bins ordered low to high frequency.
    """

    data: np.ndarray

    def __post_init__(self):
        data = np.asarray(self.data)
        if data.ndim != 2 or data.shape[0] == 0 or data.shape[1] == 0:
            raise DataFormatError(f"frequency matrix must be non-empty and 2-D, got shape {data.shape}")
        object.__setattr__(self, "data", _read_only(data.astype(np.uint8)))

    @property
    def frames(self) -> int:
        return int(self.data.shape[0])

    @property
    def bins(self) -> int:
        return int(self.data.shape[1])

    def to_list(self) -> List[List[int]]:
        return self.data.tolist()

    @classmethod
    def from_json(cls, payload: Union[str, bytes]) -> "FrequencyMatrix":
        """Decode a JSON array of arrays of 8-bit ints (outer = frames, inner = bins)."""
        try:
            raw = json.loads(payload)
        except (TypeError, ValueError) as exc:
            raise DataFormatError(f"frequency data is not valid JSON: {exc}") from exc
        return cls.from_rows(raw)

    @classmethod
    def from_rows(cls, rows) -> "FrequencyMatrix":
        if not isinstance(rows, list) or not rows:
            raise DataFormatError("frequency data must be a non-empty array of frames")
        width = None
        for index, row in enumerate(rows):
            if not isinstance(row, list) or not row:
                raise DataFormatError(f"frame {index} is not a non-empty array")
            if width is None:
                width = len(row)
            elif len(row) != width:
                raise DataFormatError(f"frame {index} has {len(row)} bins, expected {width}")
            # bool is an int subclass and numpy would upcast it inside an int row
            if any(isinstance(value, bool) or not isinstance(value, int) for value in row):
                raise DataFormatError(f"frame {index} contains non-integer values")

        try:
            values = np.array(rows)
        except (TypeError, ValueError) as exc:
            raise DataFormatError(f"frequency data is not a numeric matrix: {exc}") from exc
        if values.ndim != 2 or values.dtype.kind not in "iu":
            raise DataFormatError("frequency data must contain only integers")
        if values.min() < 0 or values.max() > INTENSITY_MAX:
            raise DataFormatError(f"frequency data values must be within 0..{INTENSITY_MAX}")
        return cls(values.astype(np.uint8))


@dataclass(frozen=True, eq=False)
class ResampledMatrix:
    """
    Output handed to a renderer.

    data has shape (columns, bins): columns are time ascending left to right,
    bins are frequency ascending bottom to top.
    """

    data: np.ndarray

    def __post_init__(self):
        data = np.asarray(self.data)
        if data.ndim != 2:
            raise DataFormatError(f"resampled matrix must be 2-D, got shape {data.shape}")
        object.__setattr__(self, "data", _read_only(data.astype(np.uint8)))

    @property
    def columns(self) -> int:
        return int(self.data.shape[0])

    @property
    def bins(self) -> int:
        return int(self.data.shape[1])

    @property
    def shape(self):
        return self.columns, self.bins

    def to_list(self) -> List[List[int]]:
        return self.data.tolist()

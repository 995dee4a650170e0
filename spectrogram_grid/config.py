import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigurationError

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent
CONFIG_PATH = PACKAGE_ROOT / "spectrogram_config.json"

FFT_SIZE_OPTIONS = (256, 512, 1024, 2048, 4096)
DEFAULT_FFT_SIZE = 512
DEFAULT_TARGET_COLUMNS = 1000
DEFAULT_WORKERS = 1
DEFAULT_CHANNEL = 0

# log10(magnitude) * INTENSITY_SCALE, floored at INTENSITY_FLOOR
INTENSITY_SCALE = 45.0
INTENSITY_FLOOR = -255.0
INTENSITY_MAX = 255


def _whole_int(value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected a whole number, got {value!r}")
    return int(value)


def _optional_int(value) -> Optional[int]:
    return None if value in (None, "") else _whole_int(value)


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Parameters for one analysis run.

    hop_size defaults to half of fft_size (50% overlap) when left as None.
    """

    fft_size: int = DEFAULT_FFT_SIZE
    target_columns: int = DEFAULT_TARGET_COLUMNS
    hop_size: Optional[int] = None
    workers: int = DEFAULT_WORKERS

    @property
    def effective_hop(self) -> int:
        if self.hop_size is None:
            return self.fft_size // 2
        return self.hop_size

    @property
    def bins(self) -> int:
        return self.fft_size // 2

    def validate(self) -> "AnalysisConfig":
        if self.fft_size <= 0:
            raise ConfigurationError(f"fft_size must be positive, got {self.fft_size}")
        if self.target_columns <= 0:
            raise ConfigurationError(f"target_columns must be positive, got {self.target_columns}")
        if self.fft_size < 2:
            raise ConfigurationError("fft_size must be at least 2 to yield a frequency bin")
        if self.hop_size is not None and not 1 <= self.hop_size <= self.fft_size:
            raise ConfigurationError(f"hop_size must be within 1..{self.fft_size}, got {self.hop_size}")
        if self.workers <= 0:
            raise ConfigurationError(f"workers must be positive, got {self.workers}")
        return self

    @classmethod
    def from_dict(cls, data: Dict) -> "AnalysisConfig":
        try:
            return cls(
                fft_size=_whole_int(data.get("fft_size", DEFAULT_FFT_SIZE)),
                target_columns=_whole_int(data.get("target_columns", DEFAULT_TARGET_COLUMNS)),
                hop_size=_optional_int(data.get("hop_size")),
                workers=_whole_int(data.get("workers", DEFAULT_WORKERS)),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid analysis config: {exc}") from exc

    def to_dict(self) -> Dict:
        return {
            "fft_size": self.fft_size,
            "target_columns": self.target_columns,
            "hop_size": self.hop_size,
            "workers": self.workers,
        }


@dataclass
class HarnessConfig:
    """Settings for the batch harness: where WAVs come from and where PNGs go."""

    input_directory: Path
    output_directory: Path
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    channel: int = DEFAULT_CHANNEL
    sample_rate: Optional[int] = None
    # None derives pixel rows per bin from the channel count of each file
    height_factor: Optional[int] = None
    write_matrix_json: bool = False

    @classmethod
    def from_dict(cls, data: Dict) -> "HarnessConfig":
        base = PROJECT_ROOT

        def _resolve(path_value: str) -> Path:
            path_obj = Path(path_value)
            return path_obj if path_obj.is_absolute() else (base / path_obj)

        try:
            cfg = cls(
                input_directory=_resolve(data["input_directory"]),
                output_directory=_resolve(data["output_directory"]),
                analysis=AnalysisConfig.from_dict(data.get("analysis", {})),
                channel=_whole_int(data.get("channel", DEFAULT_CHANNEL)),
                sample_rate=_optional_int(data.get("sample_rate")),
                height_factor=_optional_int(data.get("height_factor")),
                write_matrix_json=bool(data.get("write_matrix_json", False)),
            )
            if cfg.height_factor is not None and cfg.height_factor <= 0:
                raise ConfigurationError(f"height_factor must be positive, got {cfg.height_factor}")
            return cfg
        except ConfigurationError:
            raise
        except KeyError as exc:
            raise ConfigurationError(f"Missing config key: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid harness config: {exc}") from exc

    def to_dict(self) -> Dict:
        def _relativize(path: Path) -> str:
            try:
                return str(path.relative_to(PROJECT_ROOT))
            except ValueError:
                return str(path)

        return {
            "input_directory": _relativize(self.input_directory),
            "output_directory": _relativize(self.output_directory),
            "analysis": self.analysis.to_dict(),
            "channel": self.channel,
            "sample_rate": self.sample_rate,
            "height_factor": self.height_factor,
            "write_matrix_json": self.write_matrix_json,
        }


def load_config(config_path: Path = CONFIG_PATH) -> HarnessConfig:
    with Path(config_path).open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except ValueError as exc:
            raise ConfigurationError(f"Config file {config_path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must hold a JSON object")
    cfg = HarnessConfig.from_dict(raw)
    cfg.analysis.validate()
    return cfg


def save_config(config: HarnessConfig, config_path: Path = CONFIG_PATH) -> None:
    with Path(config_path).open("w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)

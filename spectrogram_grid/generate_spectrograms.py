"""
Batch harness to generate spectrogram PNGs.

This script:
- loads the JSON config
- processes all supported audio files in input_directory (or the given paths)
- saves grayscale spectrogram PNGs (and optionally the matrix JSON) to output_directory

Precomputed frequency data can be rendered instead with --frequencies-json or --frequencies-url.
"""
import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from .audio_loader import audio_info, is_supported_file, load_audio
from .config import CONFIG_PATH, HarnessConfig, load_config
from .errors import DataFormatError, SpectrogramError
from .models import ResampledMatrix
from .renderer import render_grayscale_png, save_png
from .spectrogram_engine import compute_spectrogram, spectrogram_from_json
from .transport import fetch_spectrogram
from .utils import channel_height_factor, format_seconds, hz_per_bin, ms_per_hop
from .window import WindowCache

logger = logging.getLogger(__name__)


def _write_outputs(
    matrix: ResampledMatrix,
    stem: str,
    cfg: HarnessConfig,
    output_dir: Path,
    height_factor: Optional[int] = None,
) -> Path:
    if cfg.height_factor is not None:
        height_factor = cfg.height_factor
    png = render_grayscale_png(matrix, height_factor=height_factor or 1)
    output_path = save_png(png, output_dir / f"{stem}_spectrogram.png")
    if cfg.write_matrix_json:
        json_path = output_dir / f"{stem}_spectrogram.json"
        json_path.write_text(json.dumps(matrix.to_list()), encoding="utf-8")
    return output_path


def generate_spectrogram(
    audio_path: Path,
    cfg: HarnessConfig,
    output_dir: Optional[Path] = None,
    window_cache: Optional[WindowCache] = None,
) -> Path:
    """Analyse one audio file and write its PNG."""
    output_dir = output_dir or cfg.output_directory
    channels = audio_info(audio_path)["channels"]
    signal = load_audio(audio_path, channel=cfg.channel, target_sample_rate=cfg.sample_rate)
    analysis = cfg.analysis
    logger.info(
        "%s: %s at %d Hz, %.2f Hz/bin, %.2f ms/frame",
        audio_path.name,
        format_seconds(signal.duration),
        signal.sample_rate,
        hz_per_bin(signal.sample_rate, analysis.fft_size),
        ms_per_hop(analysis.effective_hop, signal.sample_rate),
    )
    matrix = compute_spectrogram(signal, analysis, window_cache=window_cache)
    return _write_outputs(matrix, audio_path.stem, cfg, output_dir, height_factor=channel_height_factor(channels))


def generate_from_frequencies(
    payload: str,
    stem: str,
    cfg: HarnessConfig,
    output_dir: Optional[Path] = None,
) -> Path:
    matrix = spectrogram_from_json(payload, cfg.analysis.target_columns)
    return _write_outputs(matrix, stem, cfg, output_dir or cfg.output_directory)


def _read_payload(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DataFormatError(f"{path} is not UTF-8 text: {exc}") from exc


def generate_for_paths(paths: Sequence[Path], cfg: HarnessConfig, output_dir: Optional[Path] = None) -> List[Path]:
    """Generate spectrograms for each path, logging and skipping files that fail."""
    cache = WindowCache()
    results = []
    for path in paths:
        try:
            results.append(generate_spectrogram(path, cfg, output_dir=output_dir, window_cache=cache))
        except SpectrogramError as exc:
            logger.warning("Skipping %s: %s", path, exc)
    return results


def generate_for_directory(input_dir: Path, output_dir: Path, cfg: HarnessConfig) -> List[Path]:
    audio_files = sorted(p for p in input_dir.iterdir() if p.is_file() and is_supported_file(p))
    if not audio_files:
        logger.info("No audio files found in %s", input_dir)
    return generate_for_paths(audio_files, cfg, output_dir=output_dir)


def run_harness(config_path: Path = CONFIG_PATH) -> List[Path]:
    """Load JSON config and generate spectrograms for every file in its input directory."""
    cfg = load_config(config_path)
    cfg.input_directory.mkdir(parents=True, exist_ok=True)
    cfg.output_directory.mkdir(parents=True, exist_ok=True)
    return generate_for_directory(cfg.input_directory, cfg.output_directory, cfg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render audio files as spectrogram PNGs.")
    parser.add_argument("paths", nargs="*", type=Path, help="audio files (defaults to the configured input directory)")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="JSON config file")
    parser.add_argument("--output", type=Path, default=None, help="output directory")
    parser.add_argument("--fft-size", type=int, default=None)
    parser.add_argument("--columns", type=int, default=None, help="output columns (display width in pixels)")
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--frequencies-json", type=Path, default=None, help="render precomputed frequency data from a file")
    parser.add_argument("--frequencies-url", default=None, help="render precomputed frequency data from a URL")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _apply_overrides(cfg: HarnessConfig, args: argparse.Namespace) -> HarnessConfig:
    overrides = {}
    if args.fft_size is not None:
        overrides["fft_size"] = args.fft_size
    if args.columns is not None:
        overrides["target_columns"] = args.columns
    if args.workers is not None:
        overrides["workers"] = args.workers
    if overrides:
        cfg.analysis = replace(cfg.analysis, **overrides)
    cfg.analysis.validate()
    if args.output is not None:
        cfg.output_directory = args.output
    return cfg


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = _apply_overrides(load_config(args.config), args)
        cfg.output_directory.mkdir(parents=True, exist_ok=True)

        if args.frequencies_url:
            matrix = fetch_spectrogram(args.frequencies_url, cfg.analysis.target_columns)
            results = [_write_outputs(matrix, "remote", cfg, cfg.output_directory)]
        elif args.frequencies_json:
            payload = _read_payload(args.frequencies_json)
            results = [generate_from_frequencies(payload, args.frequencies_json.stem, cfg)]
        elif args.paths:
            results = generate_for_paths(args.paths, cfg)
        else:
            cfg.input_directory.mkdir(parents=True, exist_ok=True)
            results = generate_for_directory(cfg.input_directory, cfg.output_directory, cfg)
    except (SpectrogramError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Generated %d spectrogram(s) into %s", len(results), cfg.output_directory)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

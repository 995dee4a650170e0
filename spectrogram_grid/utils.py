def hz_per_bin(sample_rate: int, fft_size: int) -> float:
    return float(sample_rate) / float(fft_size)


def ms_per_hop(hop_size: int, sample_rate: int) -> float:
    return 1000.0 * float(hop_size) / float(sample_rate)


def bin_for_frequency(frequency: float, sample_rate: int, fft_size: int) -> int:
    """Index of the bin whose centre is nearest to frequency, limited to the kept half of the spectrum."""
    index = int(round(float(frequency) / hz_per_bin(sample_rate, fft_size)))
    return min(max(index, 0), fft_size // 2 - 1)


def canvas_columns(display_width: float, pixel_ratio: float = 1.0) -> int:
    """Output columns for a display width in CSS pixels at the given device pixel ratio."""
    columns = int(round(float(display_width) * float(pixel_ratio)))
    if columns <= 0:
        raise ValueError("display width and pixel ratio must give at least one column")
    return columns


def channel_height_factor(channels: int) -> int:
    """Pixel rows per bin: two for a mono source, one for stereo and wider sources."""
    if channels <= 0:
        raise ValueError("channels must be positive")
    return max(1, 2 // channels)


def _clamp_position(position: float) -> float:
    return min(max(float(position), 0.0), 1.0)


def position_to_column(position: float, columns: int) -> int:
    """Map a normalised horizontal position in [0, 1] to a column index."""
    if columns <= 0:
        raise ValueError("columns must be positive")
    return min(int(_clamp_position(position) * columns), columns - 1)


def position_to_seconds(position: float, duration: float) -> float:
    return _clamp_position(position) * float(duration)


def format_seconds(seconds: float) -> str:
    if seconds >= 60:
        minutes = int(seconds // 60)
        remainder = seconds % 60
        return f"{minutes:d}m {remainder:.1f}s"
    return f"{seconds:.2f}s"

"""Spectrogram of complex float32 IQ recordings: windowing, FFT power in dB and view ranges."""

from __future__ import annotations

import math
import os
from array import array
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from iqfft.fft import KissFFT

__all__ = [
    "WindowType",
    "AxisRange",
    "Spectrogram",
    "generate_window",
    "parse_iq",
    "load_iq",
    "compute_spectrogram",
    "level_range",
    "format_level",
    "FFT_SIZES",
    "DEFAULT_FFT_SIZE",
    "DEFAULT_WINDOW",
    "LEVEL_LIMITS",
    "DEFAULT_MIN_LEVEL",
    "DEFAULT_MAX_LEVEL",
]

FFT_SIZES: tuple[int, ...] = (256, 512, 1024, 2048, 4096, 8192)
DEFAULT_FFT_SIZE = 1024
LEVEL_LIMITS: tuple[int, int] = (-120, 0)
DEFAULT_MIN_LEVEL = -100
DEFAULT_MAX_LEVEL = -20

_POWER_FLOOR = 1e-12
_SAMPLE_SIZE = 2 * array("f").itemsize


class WindowType(IntEnum):
    """Window applied to each block before its FFT."""

    RECTANGULAR = 0
    HANN = 1
    HAMMING = 2
    BLACKMAN = 3

    @classmethod
    def coerce(cls, value: int | WindowType) -> WindowType:
        """Map an index to a window; indices without a window of their own are rectangular."""
        try:
            return cls(int(value))
        except ValueError:
            return cls.RECTANGULAR


DEFAULT_WINDOW = WindowType.HANN


@dataclass(frozen=True)
class AxisRange:
    """A closed interval on a plot axis."""

    lower: float
    upper: float

    def size(self) -> float:
        """Length of the interval."""
        return self.upper - self.lower

    def clamp(self, limits: AxisRange) -> AxisRange:
        """Shift this range, keeping its size, so that it lies within ``limits``.

        The lower edge is fixed first, then the upper one, so a range wider
        than ``limits`` ends up aligned with the upper limit.
        """
        lower, upper = self.lower, self.upper
        span = self.size()
        if lower < limits.lower:
            lower = limits.lower
            upper = limits.lower + span
        if upper > limits.upper:
            upper = limits.upper
            lower = limits.upper - span
        return AxisRange(lower, upper)


@dataclass
class Spectrogram:
    """Power in dB per FFT block (rows) and per frequency bin (columns).

    Columns are shifted so that the zero frequency sits in the middle:
    column ``j`` holds FFT bin ``(j + fft_size // 2) % fft_size``.
    """

    fft_size: int
    window_type: WindowType
    cells: list[list[float]] = field(default_factory=list)

    @property
    def num_ffts(self) -> int:
        """Number of FFT blocks, the extent along the time axis."""
        return len(self.cells)

    @property
    def x_range(self) -> AxisRange:
        """Full data range along the time axis."""
        return AxisRange(0, self.num_ffts)

    @property
    def y_range(self) -> AxisRange:
        """Full data range along the frequency axis."""
        return AxisRange(0, self.fft_size)

    def cell(self, block: int, column: int) -> float:
        """Power in dB of one block and one shifted frequency column."""
        return self.cells[block][column]


def generate_window(window_type: int | WindowType, size: int) -> list[float]:
    """Return ``size`` window coefficients of the given type."""
    if size < 1:
        raise ValueError(f"window size must be positive, got {size}")
    kind = WindowType.coerce(window_type)
    if kind is WindowType.RECTANGULAR:
        return [1.0] * size
    if size < 2:
        raise ValueError(f"a {kind.name.lower()} window needs at least 2 points, got {size}")
    denom = size - 1
    result: list[float] = []
    for i in range(size):
        phase = 2 * math.pi * i / denom
        if kind is WindowType.HANN:
            value = 0.5 * (1 - math.cos(phase))
        elif kind is WindowType.HAMMING:
            value = 0.54 - 0.46 * math.cos(phase)
        else:
            value = 0.42 - 0.5 * math.cos(phase) + 0.08 * math.cos(2 * phase)
        result.append(value)
    return result


def parse_iq(data: bytes) -> list[complex]:
    """Decode interleaved native float32 I/Q pairs; trailing partial samples are dropped."""
    usable = len(data) - len(data) % _SAMPLE_SIZE
    values = array("f", bytes(data[:usable])).tolist()
    return [complex(i, q) for i, q in zip(values[0::2], values[1::2])]


def load_iq(path: str | os.PathLike[str]) -> list[complex]:
    """Read a complex float32 IQ file (``.cf32``, ``.cfile``, ``.raw``)."""
    with open(path, "rb") as handle:
        return parse_iq(handle.read())


def compute_spectrogram(
    iq_data: Sequence[complex] | Iterable[complex],
    fft_size: int = DEFAULT_FFT_SIZE,
    window_type: int | WindowType = DEFAULT_WINDOW,
) -> Spectrogram:
    """Split IQ samples into blocks of ``fft_size``, window them and compute power in dB.

    Samples beyond the last whole block are ignored.
    """
    samples = [complex(x) for x in iq_data]
    if not samples:
        raise ValueError("no data to process")
    kind = WindowType.coerce(window_type)
    window = generate_window(kind, fft_size)
    cfg = KissFFT(fft_size, False)
    half = fft_size // 2
    num_ffts = len(samples) // fft_size

    cells: list[list[float]] = []
    for i in range(num_ffts):
        block = samples[i * fft_size:(i + 1) * fft_size]
        out = cfg.transform(s * w for s, w in zip(block, window))
        row = []
        for j in range(fft_size):
            v = out[(j + half) % fft_size]
            row.append(10 * math.log10(v.real * v.real + v.imag * v.imag + _POWER_FLOOR))
        cells.append(row)
    return Spectrogram(fft_size=fft_size, window_type=kind, cells=cells)


def level_range(min_level: int, max_level: int) -> AxisRange:
    """Colour scale range in dB; a minimum not below the maximum is set just under it."""
    if min_level >= max_level:
        min_level = max_level - 1
    return AxisRange(min_level, max_level)


def format_level(value: int) -> str:
    """Label text for a level in dB."""
    return f"{value} dB"
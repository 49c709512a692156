"""Multi-dimensional FFT of real data, real along the last dimension."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from iqfft.fftnd import NdFFT
from iqfft.fftr import RealFFT

__all__ = ["NdRealFFT"]


class NdRealFFT:
    """A configured real FFT over an array of shape ``dims``.

    The time side holds ``prod(dims)`` real values, row-major. The frequency
    side holds ``prod(dims[:-1]) * (dims[-1] // 2 + 1)`` complex values,
    row-major. The last dimension must be even.
    """

    def __init__(self, dims: Sequence[int], inverse: bool = False) -> None:
        self.dims: tuple[int, ...] = tuple(int(d) for d in dims)
        if not self.dims:
            raise ValueError("at least one dimension is required")
        self.inverse = bool(inverse)
        self.dim_real = self.dims[-1]
        self.dim_other = math.prod(self.dims[:-1])
        self._cfg_r = RealFFT(self.dim_real, self.inverse)
        self._cfg_nd = NdFFT(self.dims[:-1], self.inverse)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dims={self.dims}, inverse={self.inverse})"

    @property
    def nrbins(self) -> int:
        """Number of complex bins along the last dimension."""
        return self.dim_real // 2 + 1

    def forward(self, timedata: Iterable[float]) -> list[complex]:
        """Transform real row-major data into its half spectrum."""
        if self.inverse:
            raise ValueError("forward() called on a configuration made for the inverse transform")
        samples = [float(x) for x in timedata]
        expected = self.dim_other * self.dim_real
        if len(samples) != expected:
            raise ValueError(f"expected {expected} real samples, got {len(samples)}")

        rows = [
            self._cfg_r.forward(samples[k1 * self.dim_real:(k1 + 1) * self.dim_real])
            for k1 in range(self.dim_other)
        ]
        nrbins = self.nrbins
        freq = [0j] * (self.dim_other * nrbins)
        for k2 in range(nrbins):
            column = self._cfg_nd.transform(row[k2] for row in rows)
            for k1, value in enumerate(column):
                freq[k1 * nrbins + k2] = value
        return freq

    def backward(self, freqdata: Iterable[complex]) -> list[float]:
        """Transform a half spectrum back into real row-major data, unscaled."""
        if not self.inverse:
            raise ValueError("backward() called on a configuration made for the forward transform")
        bins = [complex(x) for x in freqdata]
        nrbins = self.nrbins
        expected = self.dim_other * nrbins
        if len(bins) != expected:
            raise ValueError(f"expected {expected} complex bins, got {len(bins)}")

        columns = [self._cfg_nd.transform(bins[k2::nrbins]) for k2 in range(nrbins)]
        result: list[float] = []
        for k1 in range(self.dim_other):
            result.extend(self._cfg_r.backward(column[k1] for column in columns))
        return result
"""Multi-dimensional complex FFT over row-major data."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from iqfft.fft import KissFFT

__all__ = ["NdFFT"]


class NdFFT:
    """A configured complex FFT over an array of shape ``dims``.

    Data is a flat, row-major sequence of ``prod(dims)`` complex values.
    Each stage transforms one dimension, transposing as it goes, so after
    the last stage the result is back in row-major order. With no
    dimensions the transform is the identity on a single value.
    """

    def __init__(self, dims: Sequence[int], inverse: bool = False) -> None:
        self.dims: tuple[int, ...] = tuple(int(d) for d in dims)
        for d in self.dims:
            if d < 1:
                raise ValueError(f"every dimension must be positive, got {self.dims}")
        self.inverse = bool(inverse)
        self.dimprod = math.prod(self.dims)
        self._states = tuple(KissFFT(d, self.inverse) for d in self.dims)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dims={self.dims}, inverse={self.inverse})"

    def transform(self, data: Iterable[complex]) -> list[complex]:
        """Transform ``prod(dims)`` complex values laid out row-major."""
        buf = [complex(x) for x in data]
        if len(buf) != self.dimprod:
            raise ValueError(f"expected {self.dimprod} samples, got {len(buf)}")
        for state in self._states:
            stride = self.dimprod // state.nfft
            out: list[complex] = []
            for i in range(stride):
                out.extend(state.transform(buf[i::stride]))
            buf = out
        return buf
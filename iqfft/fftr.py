"""Real-input FFT built on a half-size complex FFT."""

from __future__ import annotations

import math
from collections.abc import Iterable

from iqfft.fft import KissFFT

__all__ = ["RealFFT"]


class RealFFT:
    """A configured FFT of ``nfft`` real samples; ``nfft`` must be even.

    The forward transform maps ``nfft`` real samples to ``nfft // 2 + 1``
    complex bins. The backward transform maps those bins back to ``nfft``
    real samples, unscaled: a round trip multiplies the input by ``nfft``.
    """

    def __init__(self, nfft: int, inverse: bool = False) -> None:
        if nfft < 2 or nfft % 2:
            raise ValueError(f"real FFT size must be even and at least 2, got {nfft}")
        self.nfft = nfft
        self.inverse = bool(inverse)
        ncfft = nfft // 2
        self._substate = KissFFT(ncfft, self.inverse)
        sign = 1.0 if self.inverse else -1.0
        self.super_twiddles: tuple[complex, ...] = tuple(
            complex(math.cos(phase), math.sin(phase))
            for phase in (sign * math.pi * ((i + 1) / ncfft + 0.5) for i in range(ncfft // 2))
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nfft={self.nfft}, inverse={self.inverse})"

    @property
    def nbins(self) -> int:
        """Number of complex bins on the frequency side."""
        return self.nfft // 2 + 1

    def forward(self, timedata: Iterable[float]) -> list[complex]:
        """Transform ``nfft`` real samples into ``nfft // 2 + 1`` complex bins."""
        if self.inverse:
            raise ValueError("forward() called on a configuration made for the inverse transform")
        samples = [float(x) for x in timedata]
        if len(samples) != self.nfft:
            raise ValueError(f"expected {self.nfft} real samples, got {len(samples)}")

        ncfft = self.nfft // 2
        packed = [complex(re, im) for re, im in zip(samples[0::2], samples[1::2])]
        tmp = self._substate.transform(packed)

        freq = [0j] * (ncfft + 1)
        tdc = tmp[0]
        freq[0] = complex(tdc.real + tdc.imag, 0.0)
        freq[ncfft] = complex(tdc.real - tdc.imag, 0.0)

        for k in range(1, ncfft // 2 + 1):
            fpk = tmp[k]
            fpnk = tmp[ncfft - k].conjugate()
            f1k = fpk + fpnk
            f2k = fpk - fpnk
            tw = f2k * self.super_twiddles[k - 1]
            freq[k] = 0.5 * (f1k + tw)
            freq[ncfft - k] = complex(0.5 * (f1k.real - tw.real), 0.5 * (tw.imag - f1k.imag))
        return freq

    def backward(self, freqdata: Iterable[complex]) -> list[float]:
        """Transform ``nfft // 2 + 1`` complex bins into ``nfft`` real samples."""
        if not self.inverse:
            raise ValueError("backward() called on a configuration made for the forward transform")
        bins = [complex(x) for x in freqdata]
        ncfft = self.nfft // 2
        if len(bins) != ncfft + 1:
            raise ValueError(f"expected {ncfft + 1} complex bins, got {len(bins)}")

        tmp = [0j] * ncfft
        tmp[0] = complex(bins[0].real + bins[ncfft].real, bins[0].real - bins[ncfft].real)

        for k in range(1, ncfft // 2 + 1):
            fk = bins[k]
            fnkc = bins[ncfft - k].conjugate()
            fek = fk + fnkc
            fok = (fk - fnkc) * self.super_twiddles[k - 1]
            tmp[k] = fek + fok
            tmp[ncfft - k] = (fek - fok).conjugate()

        out = self._substate.transform(tmp)
        result: list[float] = []
        for value in out:
            result.append(value.real)
            result.append(value.imag)
        return result
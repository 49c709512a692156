"""Complex FFT class with in-place reconfiguration and a packed real transform."""

from __future__ import annotations

import cmath
import math
from collections.abc import Iterable

from iqfft.fft import KissFFT

__all__ = ["ComplexFFT"]


def _stages(n: int) -> list[tuple[int, int]]:
    """Factor out 4s, then 2s, then 3, 5, 7, 9, ...; stop once ``p * p`` exceeds ``n``."""
    stages: list[tuple[int, int]] = []
    p = 4
    while True:
        while n % p:
            if p == 4:
                p = 2
            elif p == 2:
                p = 3
            else:
                p += 2
            if p * p > n:
                p = n
        n //= p
        stages.append((p, n))
        if n <= 1:
            break
    return stages


class ComplexFFT(KissFFT):
    """A complex FFT of a fixed size and direction that can be reconfigured.

    The transform is unscaled: the l2 norm of the output is ``sqrt(nfft)``
    times that of the input, in either direction.
    """

    def __init__(self, nfft: int, inverse: bool = False) -> None:
        super().__init__(nfft, inverse)
        self.factors = tuple(_stages(nfft))

    def assign(self, nfft: int, inverse: bool) -> None:
        """Change the size and/or direction, as if newly constructed."""
        inverse = bool(inverse)
        if nfft != self.nfft:
            ComplexFFT.__init__(self, nfft, inverse)
        elif inverse != self.inverse:
            self.twiddles = tuple(t.conjugate() for t in self.twiddles)
            self.inverse = inverse

    def transform(self, data: Iterable[complex]) -> list[complex]:
        """Transform exactly ``nfft`` complex samples."""
        return super().transform(data)

    def transform_real(self, src: Iterable[float]) -> list[complex]:
        """DFT of ``2 * nfft`` real samples, packed into ``nfft`` complex values.

        Element 0 holds the DC term as its real part and the term at
        ``nfft`` as its imaginary part; elements 1 to ``nfft - 1`` hold
        the corresponding DFT values. The rest follows from conjugate symmetry.
        """
        values = [float(x) for x in src]
        n = self.nfft
        if len(values) != 2 * n:
            raise ValueError(f"expected {2 * n} real samples, got {len(values)}")

        dst = super().transform(complex(re, im) for re, im in zip(values[0::2], values[1::2]))
        d0 = dst[0]
        dst[0] = complex(d0.real + d0.imag, d0.real - d0.imag)

        half_phi_inc = (math.pi if self.inverse else -math.pi) / n
        twiddle_mul = cmath.exp(1j * half_phi_inc)
        k = 1
        while 2 * k < n:
            a, b = dst[k], dst[n - k]
            w = 0.5 * complex(a.real + b.real, a.imag - b.imag)
            z = 0.5 * complex(a.imag + b.imag, -a.real + b.real)
            twiddle = self.twiddles[k // 2]
            if k % 2:
                twiddle *= twiddle_mul
            dst[k] = w + twiddle * z
            dst[n - k] = (w - twiddle * z).conjugate()
            k += 1
        if n % 2 == 0:
            dst[n // 2] = dst[n // 2].conjugate()
        return dst
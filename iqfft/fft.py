"""Mixed-radix complex FFT with radix 2, 3, 4 and 5 butterflies and a generic fallback."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

__all__ = ["KissFFT", "factor", "next_fast_size", "next_fast_size_real"]


def factor(n: int) -> list[tuple[int, int]]:
    """Split ``n`` into stages of ``(radix, remainder)``.

    Powers of 4 come out first, then 2, then odd factors in increasing order.
    Each remainder is the previous remainder divided by the stage's radix.
    """
    if n < 1:
        raise ValueError(f"FFT size must be positive, got {n}")
    floor_sqrt = math.isqrt(n)
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
            if p > floor_sqrt:
                p = n
        n //= p
        stages.append((p, n))
        if n <= 1:
            break
    return stages


def next_fast_size(n: int) -> int:
    """Return the smallest size >= ``n`` whose only prime factors are 2, 3 and 5."""
    if n < 1:
        raise ValueError(f"size must be positive, got {n}")
    while True:
        m = n
        for prime in (2, 3, 5):
            while m % prime == 0:
                m //= prime
        if m <= 1:
            return n
        n += 1


def next_fast_size_real(n: int) -> int:
    """Return an even fast size >= ``n``, suitable for a real-input FFT."""
    if n < 1:
        raise ValueError(f"size must be positive, got {n}")
    return next_fast_size((n + 1) >> 1) << 1


class KissFFT:
    """A configured complex FFT of a fixed size and direction.

    The inverse transform is unscaled: a forward transform followed by an
    inverse one yields the input multiplied by ``nfft``.
    """

    def __init__(self, nfft: int, inverse: bool = False) -> None:
        if nfft < 1:
            raise ValueError(f"FFT size must be positive, got {nfft}")
        self.nfft = nfft
        self.inverse = bool(inverse)
        sign = 1.0 if self.inverse else -1.0
        self.twiddles: tuple[complex, ...] = tuple(
            complex(math.cos(phase), math.sin(phase))
            for phase in (sign * 2 * math.pi * i / nfft for i in range(nfft))
        )
        self.factors: tuple[tuple[int, int], ...] = tuple(factor(nfft))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nfft={self.nfft}, inverse={self.inverse})"

    def transform(self, data: Iterable[complex]) -> list[complex]:
        """Transform exactly ``nfft`` complex samples."""
        samples = [complex(x) for x in data]
        if len(samples) != self.nfft:
            raise ValueError(f"expected {self.nfft} samples, got {len(samples)}")
        return self._run(samples, 1)

    def transform_stride(self, data: Sequence[complex], stride: int) -> list[complex]:
        """Transform ``nfft`` samples read from every ``stride``-th element of ``data``."""
        if stride < 1:
            raise ValueError(f"stride must be positive, got {stride}")
        samples = [complex(x) for x in data]
        needed = (self.nfft - 1) * stride + 1
        if len(samples) < needed:
            raise ValueError(
                f"need at least {needed} samples for stride {stride}, got {len(samples)}"
            )
        return self._run(samples, stride)

    def _run(self, samples: list[complex], stride: int) -> list[complex]:
        out = [0j] * self.nfft
        self._work(out, 0, samples, 0, 1, stride, 0)
        return out

    def _work(
        self,
        out: list[complex],
        base: int,
        data: list[complex],
        start: int,
        fstride: int,
        in_stride: int,
        stage: int,
    ) -> None:
        p, m = self.factors[stage]
        step = fstride * in_stride
        if m == 1:
            for k in range(p):
                out[base + k] = data[start + k * step]
        else:
            # p decimated sub-transforms of size m, recombined below
            for k in range(p):
                self._work(out, base + k * m, data, start + k * step, fstride * p, in_stride, stage + 1)

        if p == 2:
            self._bfly2(out, base, fstride, m)
        elif p == 3:
            self._bfly3(out, base, fstride, m)
        elif p == 4:
            self._bfly4(out, base, fstride, m)
        elif p == 5:
            self._bfly5(out, base, fstride, m)
        else:
            self._bfly_generic(out, base, fstride, m, p)

    def _bfly2(self, f: list[complex], base: int, fstride: int, m: int) -> None:
        tw = self.twiddles
        for k in range(m):
            a, b = base + k, base + k + m
            t = f[b] * tw[k * fstride]
            f[b] = f[a] - t
            f[a] += t

    def _bfly3(self, f: list[complex], base: int, fstride: int, m: int) -> None:
        tw = self.twiddles
        epi3 = tw[fstride * m].imag
        for k in range(m):
            i0, i1, i2 = base + k, base + k + m, base + k + 2 * m
            s1 = f[i1] * tw[k * fstride]
            s2 = f[i2] * tw[2 * k * fstride]
            s3 = s1 + s2
            s0 = (s1 - s2) * epi3
            mid = f[i0] - s3 * 0.5
            f[i0] += s3
            f[i2] = mid - 1j * s0
            f[i1] = mid + 1j * s0

    def _bfly4(self, f: list[complex], base: int, fstride: int, m: int) -> None:
        tw = self.twiddles
        rot = 1j if self.inverse else -1j
        for k in range(m):
            i0, i1, i2, i3 = base + k, base + k + m, base + k + 2 * m, base + k + 3 * m
            s0 = f[i1] * tw[k * fstride]
            s1 = f[i2] * tw[2 * k * fstride]
            s2 = f[i3] * tw[3 * k * fstride]
            s5 = f[i0] - s1
            f0 = f[i0] + s1
            s3 = s0 + s2
            s4 = (s0 - s2) * rot
            f[i2] = f0 - s3
            f[i0] = f0 + s3
            f[i1] = s5 + s4
            f[i3] = s5 - s4

    def _bfly5(self, f: list[complex], base: int, fstride: int, m: int) -> None:
        tw = self.twiddles
        ya = tw[fstride * m]
        yb = tw[fstride * 2 * m]
        for u in range(m):
            i0 = base + u
            i1, i2, i3, i4 = i0 + m, i0 + 2 * m, i0 + 3 * m, i0 + 4 * m
            s0 = f[i0]
            s1 = f[i1] * tw[u * fstride]
            s2 = f[i2] * tw[2 * u * fstride]
            s3 = f[i3] * tw[3 * u * fstride]
            s4 = f[i4] * tw[4 * u * fstride]
            s7 = s1 + s4
            s10 = s1 - s4
            s8 = s2 + s3
            s9 = s2 - s3

            f[i0] = s0 + s7 + s8

            s5 = s0 + s7 * ya.real + s8 * yb.real
            s6 = -1j * (s10 * ya.imag + s9 * yb.imag)
            f[i1] = s5 - s6
            f[i4] = s5 + s6

            s11 = s0 + s7 * yb.real + s8 * ya.real
            s12 = 1j * (s10 * yb.imag - s9 * ya.imag)
            f[i2] = s11 + s12
            f[i3] = s11 - s12

    def _bfly_generic(self, f: list[complex], base: int, fstride: int, m: int, p: int) -> None:
        tw = self.twiddles
        n = self.nfft
        for u in range(m):
            scratch = [f[base + u + q * m] for q in range(p)]
            for q1 in range(p):
                k = u + q1 * m
                twidx = 0
                acc = scratch[0]
                for q in range(1, p):
                    twidx = (twidx + fstride * k) % n
                    acc += scratch[q] * tw[twidx]
                f[base + k] = acc
"""Integer fixed-point complex FFT with scaled twiddle factors."""

from __future__ import annotations

import math
from collections.abc import Iterable

from iqfft.complex_fft import _stages

__all__ = ["FixedPointFFT"]

Cpx = tuple[int, int]


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _cdiv(c: Cpx, d: int) -> Cpx:
    return (_tdiv(c[0], d), _tdiv(c[1], d))


def _cmul(a: Cpx, b: Cpx) -> Cpx:
    return (a[0] * b[0] - a[1] * b[1], a[0] * b[1] + a[1] * b[0])


def _add(a: Cpx, b: Cpx) -> Cpx:
    return (a[0] + b[0], a[1] + b[1])


def _sub(a: Cpx, b: Cpx) -> Cpx:
    return (a[0] - b[0], a[1] - b[1])


def _to_cpx(value: complex | tuple[int, int]) -> Cpx:
    if isinstance(value, complex):
        return (int(value.real), int(value.imag))
    if isinstance(value, (int, float)):
        return (int(value), 0)
    re, im = value
    return (int(re), int(im))


class FixedPointFFT:
    """A complex FFT on integer samples.

    Twiddle factors are scaled up by ``scale_factor`` and truncated to
    integers; every product with a twiddle is divided back down, truncating
    toward zero. Samples are ``(real, imag)`` integer pairs (complex values
    are truncated). The transform is unscaled, like the floating-point one.
    """

    def __init__(self, nfft: int, inverse: bool = False, scale_factor: float = 1024.0) -> None:
        if nfft < 1:
            raise ValueError(f"FFT size must be positive, got {nfft}")
        scale = int(scale_factor)
        if scale == 0:
            raise ValueError(f"scale factor must be at least 1 in magnitude, got {scale_factor}")
        self.nfft = nfft
        self.inverse = bool(inverse)
        self.scale_factor = scale
        phinc = (2 if self.inverse else -2) * math.pi / nfft
        self.twiddles: tuple[Cpx, ...] = tuple(
            (int(scale_factor * math.cos(i * phinc)), int(scale_factor * math.sin(i * phinc)))
            for i in range(nfft)
        )
        self.factors: tuple[tuple[int, int], ...] = tuple(_stages(nfft))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(nfft={self.nfft}, inverse={self.inverse}, "
            f"scale_factor={self.scale_factor})"
        )

    def transform(self, data: Iterable[complex | tuple[int, int]]) -> list[Cpx]:
        """Transform exactly ``nfft`` integer complex samples."""
        samples = [_to_cpx(x) for x in data]
        if len(samples) != self.nfft:
            raise ValueError(f"expected {self.nfft} samples, got {len(samples)}")
        out: list[Cpx] = [(0, 0)] * self.nfft
        self._work(out, 0, samples, 0, 1, 0)
        return out

    def _work(
        self, out: list[Cpx], base: int, data: list[Cpx], start: int, fstride: int, stage: int
    ) -> None:
        p, m = self.factors[stage]
        if m == 1:
            for k in range(p):
                out[base + k] = data[start + k * fstride]
        else:
            for k in range(p):
                self._work(out, base + k * m, data, start + k * fstride, fstride * p, stage + 1)

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

    def _bfly2(self, f: list[Cpx], base: int, fstride: int, m: int) -> None:
        tw, s = self.twiddles, self.scale_factor
        for k in range(m):
            a, b = base + k, base + k + m
            t = _cdiv(_cmul(f[b], tw[k * fstride]), s)
            f[b] = _sub(f[a], t)
            f[a] = _add(f[a], t)

    def _bfly3(self, f: list[Cpx], base: int, fstride: int, m: int) -> None:
        tw, s = self.twiddles, self.scale_factor
        epi3 = tw[fstride * m][1]
        for k in range(m):
            i0, i1, i2 = base + k, base + k + m, base + k + 2 * m
            s1 = _cdiv(_cmul(f[i1], tw[k * fstride]), s)
            s2 = _cdiv(_cmul(f[i2], tw[2 * k * fstride]), s)
            s3 = _add(s1, s2)
            s0 = _sub(s1, s2)
            mid = _sub(f[i0], _cdiv(s3, 2))
            s0 = _cdiv((s0[0] * epi3, s0[1] * epi3), s)
            f[i0] = _add(f[i0], s3)
            f[i2] = (mid[0] + s0[1], mid[1] - s0[0])
            f[i1] = (mid[0] - s0[1], mid[1] + s0[0])

    def _bfly4(self, f: list[Cpx], base: int, fstride: int, m: int) -> None:
        tw, s = self.twiddles, self.scale_factor
        neg = -1 if self.inverse else 1
        for k in range(m):
            i0, i1, i2, i3 = base + k, base + k + m, base + k + 2 * m, base + k + 3 * m
            s0 = _cdiv(_cmul(f[i1], tw[k * fstride]), s)
            s1 = _cdiv(_cmul(f[i2], tw[2 * k * fstride]), s)
            s2 = _cdiv(_cmul(f[i3], tw[3 * k * fstride]), s)
            s5 = _sub(f[i0], s1)
            f0 = _add(f[i0], s1)
            s3 = _add(s0, s2)
            d = _sub(s0, s2)
            s4 = (d[1] * neg, -d[0] * neg)
            f[i2] = _sub(f0, s3)
            f[i0] = _add(f0, s3)
            f[i1] = _add(s5, s4)
            f[i3] = _sub(s5, s4)

    def _bfly5(self, f: list[Cpx], base: int, fstride: int, m: int) -> None:
        tw, s = self.twiddles, self.scale_factor
        ya = tw[fstride * m]
        yb = tw[fstride * 2 * m]
        for u in range(m):
            i0 = base + u
            i1, i2, i3, i4 = i0 + m, i0 + 2 * m, i0 + 3 * m, i0 + 4 * m
            s0 = f[i0]
            s1 = _cdiv(_cmul(f[i1], tw[u * fstride]), s)
            s2 = _cdiv(_cmul(f[i2], tw[2 * u * fstride]), s)
            s3 = _cdiv(_cmul(f[i3], tw[3 * u * fstride]), s)
            s4 = _cdiv(_cmul(f[i4], tw[4 * u * fstride]), s)
            s7 = _add(s1, s4)
            s10 = _sub(s1, s4)
            s8 = _add(s2, s3)
            s9 = _sub(s2, s3)

            f[i0] = _add(_add(s0, s7), s8)

            s5 = _add(s0, _cdiv(
                (s7[0] * ya[0] + s8[0] * yb[0], s7[1] * ya[0] + s8[1] * yb[0]), s))
            s6 = _cdiv(
                (s10[1] * ya[1] + s9[1] * yb[1], -s10[0] * ya[1] - s9[0] * yb[1]), s)
            f[i1] = _sub(s5, s6)
            f[i4] = _add(s5, s6)

            s11 = _add(s0, _cdiv(
                (s7[0] * yb[0] + s8[0] * ya[0], s7[1] * yb[0] + s8[1] * ya[0]), s))
            s12 = _cdiv(
                (-s10[1] * yb[1] + s9[1] * ya[1], s10[0] * yb[1] - s9[0] * ya[1]), s)
            f[i2] = _add(s11, s12)
            f[i3] = _sub(s11, s12)

    def _bfly_generic(self, f: list[Cpx], base: int, fstride: int, m: int, p: int) -> None:
        tw, s, n = self.twiddles, self.scale_factor, self.nfft
        for u in range(m):
            scratch = [f[base + u + q * m] for q in range(p)]
            for q1 in range(p):
                k = u + q1 * m
                twidx = 0
                acc = scratch[0]
                for q in range(1, p):
                    twidx += fstride * k
                    if twidx >= n:
                        twidx -= n
                    acc = _add(acc, _cdiv(_cmul(scratch[q], tw[twidx]), s))
                f[base + k] = acc
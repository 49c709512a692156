"""Command-line FFT of binary float32 sample streams."""

from __future__ import annotations

import getopt
import math
import sys
from array import array
from collections.abc import Iterator, Sequence
from typing import BinaryIO

from iqfft.fft import KissFFT
from iqfft.fftnd import NdFFT
from iqfft.fftndr import NdRealFFT
from iqfft.fftr import RealFFT

__all__ = [
    "parse_dims",
    "fft_stream",
    "fft_stream_real",
    "fft_stream_nd",
    "fft_stream_nd_real",
    "main",
]

_SCALAR_SIZE = array("f").itemsize
_DEFAULT_NFFT = 1024
_USAGE = (
    "usage options:\n"
    "\t-n d1[,d2,d3...]: fft dimension(s)\n"
    "\t-i : inverse\n"
    "\t-R : real input samples, not complex\n"
)


def parse_dims(arg: str) -> list[int]:
    """Parse a comma-separated list of FFT dimensions such as ``"64,32"``."""
    try:
        dims = [int(part) for part in arg.split(",")]
    except ValueError:
        raise ValueError(f"invalid dimension list: {arg!r}") from None
    if any(d < 1 for d in dims):
        raise ValueError(f"dimensions must be positive: {arg!r}")
    return dims


def _blocks(fin: BinaryIO, nscalars: int) -> Iterator[list[float]]:
    """Yield whole blocks of ``nscalars`` float32 values; a trailing partial block is dropped."""
    nbytes = nscalars * _SCALAR_SIZE
    while True:
        chunk = bytearray()
        while len(chunk) < nbytes:
            piece = fin.read(nbytes - len(chunk))
            if not piece:
                break
            chunk.extend(piece)
        if len(chunk) < nbytes:
            return
        yield array("f", bytes(chunk)).tolist()


def _pairs(values: list[float]) -> list[complex]:
    return [complex(re, im) for re, im in zip(values[0::2], values[1::2])]


def _write_complex(fout: BinaryIO, values: Sequence[complex]) -> None:
    out = array("f")
    for v in values:
        out.append(v.real)
        out.append(v.imag)
    fout.write(out.tobytes())


def _write_real(fout: BinaryIO, values: Sequence[float]) -> None:
    fout.write(array("f", values).tobytes())


def fft_stream(fin: BinaryIO, fout: BinaryIO, nfft: int, inverse: bool = False) -> None:
    """Transform consecutive blocks of ``nfft`` complex float32 samples."""
    cfg = KissFFT(nfft, inverse)
    for block in _blocks(fin, 2 * nfft):
        _write_complex(fout, cfg.transform(_pairs(block)))


def fft_stream_real(fin: BinaryIO, fout: BinaryIO, nfft: int, inverse: bool = False) -> None:
    """Real FFT of blocks: ``nfft`` reals to ``nfft // 2 + 1`` complex bins, or back."""
    cfg = RealFFT(nfft, inverse)
    nbins = nfft // 2 + 1
    if inverse:
        for block in _blocks(fin, 2 * nbins):
            _write_real(fout, cfg.backward(_pairs(block)))
    else:
        for block in _blocks(fin, nfft):
            _write_complex(fout, cfg.forward(block))


def fft_stream_nd(fin: BinaryIO, fout: BinaryIO, dims: Sequence[int], inverse: bool = False) -> None:
    """Multi-dimensional complex FFT of blocks of ``prod(dims)`` samples."""
    cfg = NdFFT(dims, inverse)
    dimprod = math.prod(dims)
    for block in _blocks(fin, 2 * dimprod):
        _write_complex(fout, cfg.transform(_pairs(block)))


def fft_stream_nd_real(
    fin: BinaryIO, fout: BinaryIO, dims: Sequence[int], inverse: bool = False
) -> None:
    """Multi-dimensional real FFT of blocks, real along the last dimension."""
    cfg = NdRealFFT(dims, inverse)
    dimprod = math.prod(dims)
    rdim = dims[-1]
    complex_scalars = dimprod * 2 * (rdim // 2 + 1) // rdim
    if inverse:
        for block in _blocks(fin, complex_scalars):
            _write_real(fout, cfg.backward(_pairs(block)))
    else:
        for block in _blocks(fin, dimprod):
            _write_complex(fout, cfg.forward(block))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the FFT utility; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, rest = getopt.getopt(args, "n:iR")
    except getopt.GetoptError as exc:
        sys.stderr.write(f"{exc}\n{_USAGE}")
        return 1

    dims = [_DEFAULT_NFFT]
    inverse = False
    real = False
    for opt, value in opts:
        if opt == "-n":
            try:
                dims = parse_dims(value)
            except ValueError as exc:
                sys.stderr.write(f"{exc}\n")
                return 1
        elif opt == "-i":
            inverse = True
        elif opt == "-R":
            real = True

    in_path = rest[0] if len(rest) > 0 else "-"
    out_path = rest[1] if len(rest) > 1 else "-"

    fin = sys.stdin.buffer if in_path == "-" else open(in_path, "rb")
    try:
        fout = sys.stdout.buffer if out_path == "-" else open(out_path, "wb")
        try:
            if len(dims) == 1:
                if real:
                    fft_stream_real(fin, fout, dims[0], inverse)
                else:
                    fft_stream(fin, fout, dims[0], inverse)
            elif real:
                fft_stream_nd_real(fin, fout, dims, inverse)
            else:
                fft_stream_nd(fin, fout, dims, inverse)
            fout.flush()
        finally:
            if fout is not sys.stdout.buffer:
                fout.close()
    finally:
        if fin is not sys.stdin.buffer:
            fin.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
"""Averaged power spectral density of 16-bit audio rendered as a PNG image."""

from __future__ import annotations

import getopt
import math
import struct
import sys
import zlib
from array import array
from collections.abc import Iterable, Iterator, Sequence
from itertools import chain
from typing import BinaryIO

from iqfft.fftr import RealFFT

__all__ = ["value_to_rgb", "values_to_pixels", "psd_rows", "write_png", "main"]

_PI = 3.14159265358979
_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_USAGE = (
    "usage options:\n"
    "\t-n d: fft dimension(s) [1024]\n"
    "\t-r d: number of rows to average [20]\n"
    "\t-a : remove average from each fft buffer\n"
    "\t-s : input is stereo, channels will be combined before fft\n"
    "16 bit machine format real input is assumed\n"
)


def _byte(value: float) -> int:
    return int(value) & 0xFF


def value_to_rgb(x: float) -> tuple[int, int, int]:
    """Map a value in ``[0, 1]`` to an ``(r, g, b)`` colour."""
    return (
        _byte(255 * abs(math.sin(x * _PI * 3 / 2))),
        _byte(255 * math.sin(x * _PI)),
        _byte(255 * abs(math.sin(x * _PI * 5 / 2))),
    )


def values_to_pixels(values: Iterable[float]) -> list[tuple[int, int, int]]:
    """Normalise values to their own min..max range and colour each one."""
    vals = [float(v) for v in values]
    if not vals:
        raise ValueError("no values to colour")
    lo, hi = min(vals), max(vals)
    span = hi - lo
    if span == 0:
        raise ValueError(f"min == max == {lo:f}")
    return [value_to_rgb((v - lo) / span) for v in vals]


def _read_exact(fin: BinaryIO, nbytes: int) -> bytes:
    chunk = bytearray()
    while len(chunk) < nbytes:
        piece = fin.read(nbytes - len(chunk))
        if not piece:
            break
        chunk.extend(piece)
    return bytes(chunk)


def psd_rows(
    fin: BinaryIO,
    nfft: int = 1024,
    navg: int = 20,
    remove_dc: bool = False,
    stereo: bool = False,
) -> Iterator[list[float]]:
    """Yield rows of ``nfft // 2 + 1`` power levels in dB, each averaged over ``navg`` FFTs.

    Input is native-endian signed 16-bit samples; stereo frames have their
    two channels summed. A trailing incomplete block is ignored.
    """
    if navg < 1:
        raise ValueError(f"number of rows to average must be positive, got {navg}")
    cfg = RealFFT(nfft)
    nfreqs = nfft // 2 + 1
    channels = 2 if stereo else 1
    nbytes = array("h").itemsize * channels * nfft
    mag2 = [0.0] * nfreqs
    count = 0
    while True:
        chunk = _read_exact(fin, nbytes)
        if len(chunk) < nbytes:
            return
        raw = array("h", chunk)
        if stereo:
            tbuf = [float(a + b) for a, b in zip(raw[0::2], raw[1::2])]
        else:
            tbuf = [float(v) for v in raw]
        if remove_dc:
            avg = sum(tbuf) / nfft
            tbuf = [v - avg for v in tbuf]
        freq = cfg.forward(tbuf)
        mag2 = [m + f.real * f.real + f.imag * f.imag for m, f in zip(mag2, freq)]
        count += 1
        if count == navg:
            yield [10 * math.log10(m / navg + 1.0) for m in mag2]
            mag2 = [0.0] * nfreqs
            count = 0


def _png_chunk(kind: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(kind + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", crc)


def write_png(fout: BinaryIO, rows: Iterable[Sequence[float]]) -> None:
    """Write rows of levels as an 8-bit RGB PNG, one pixel per value."""
    grid = [list(row) for row in rows]
    if not grid:
        raise ValueError("no rows to draw")
    width = len(grid[0])
    if width == 0 or any(len(row) != width for row in grid):
        raise ValueError("rows must be non-empty and of equal length")
    pixels = values_to_pixels(chain.from_iterable(grid))
    raw = bytearray()
    for r in range(len(grid)):
        raw.append(0)
        for rgb in pixels[r * width:(r + 1) * width]:
            raw.extend(rgb)
    header = struct.pack(">IIBBBBB", width, len(grid), 8, 2, 0, 0, 0)
    fout.write(_PNG_SIGNATURE)
    fout.write(_png_chunk(b"IHDR", header))
    fout.write(_png_chunk(b"IDAT", zlib.compress(bytes(raw))))
    fout.write(_png_chunk(b"IEND", b""))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the PSD image utility; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, rest = getopt.getopt(args, "n:r:as")
    except getopt.GetoptError as exc:
        sys.stderr.write(f"{exc}\n{_USAGE}")
        return 1

    nfft, navg = 1024, 20
    remove_dc = stereo = False
    try:
        for opt, value in opts:
            if opt == "-n":
                nfft = int(value)
            elif opt == "-r":
                navg = int(value)
            elif opt == "-a":
                remove_dc = True
            elif opt == "-s":
                stereo = True
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n{_USAGE}")
        return 1

    in_path = rest[0] if len(rest) > 0 else "-"
    out_path = rest[1] if len(rest) > 1 else "-"

    try:
        fin = sys.stdin.buffer if in_path == "-" else open(in_path, "rb")
    except OSError as exc:
        sys.stderr.write(f"{in_path}: {exc.strerror}\n")
        return 1
    try:
        rows = list(psd_rows(fin, nfft, navg, remove_dc, stereo))
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    finally:
        if fin is not sys.stdin.buffer:
            fin.close()

    if not rows:
        sys.stderr.write("not enough input for a single row\n")
        return 1

    nfreqs = nfft // 2 + 1
    flat = list(chain.from_iterable(rows))
    sys.stderr.write(f"min ==%f,max=%f\n" % (min(flat), max(flat)))
    sys.stderr.write(f"creating {nfreqs}x{len(rows)} png\n")
    sys.stderr.write("bitdepth 8 \n")

    try:
        fout = sys.stdout.buffer if out_path == "-" else open(out_path, "wb")
    except OSError as exc:
        sys.stderr.write(f"{out_path}: {exc.strerror}\n")
        return 1
    try:
        write_png(fout, rows)
        fout.flush()
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    finally:
        if fout is not sys.stdout.buffer:
            fout.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
"""FIR filtering by fast convolution (overlap-save) and by direct convolution."""

from __future__ import annotations

import contextlib
import getopt
import sys
from array import array
from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from itertools import islice
from typing import BinaryIO

from iqfft.fft import KissFFT
from iqfft.fftr import RealFFT

__all__ = [
    "FastFIR",
    "direct_filter",
    "fast_filter_stream",
    "direct_filter_stream",
    "main",
]

_MIN_FFT_LEN_COMPLEX = 1024
_MIN_FFT_LEN_REAL = 2048
_FLOAT_SIZE = array("f").itemsize
_DIRECT_BLOCK = 4096
_USAGE = (
    "usage options:\n"
    "\t-n nfft: fft size to use\n"
    "\t-d : use direct FIR filtering, not fast convolution\n"
    "\t-i filename: input file\n"
    "\t-o filename: output(filtered) file\n"
    "\t-h filename: impulse response\n"
    "\t-R : real samples, not complex\n"
    "\t-v : verbose\n"
)


def _default_nfft(n_taps: int, real: bool) -> int:
    """Next power of two at least twice the filter length, with a floor."""
    i = n_taps - 1
    nfft = 2
    while True:
        nfft <<= 1
        i >>= 1
        if not i:
            break
    return max(nfft, _MIN_FFT_LEN_REAL if real else _MIN_FFT_LEN_COMPLEX)


class FastFIR:
    """Streaming FIR filter using FFT-based overlap-save convolution.

    The first ``len(impulse_response) - 1`` outputs (the start-up transient)
    are not produced: output ``k`` is ``sum(h[i] * x[k + n - 1 - i])``.
    Feed samples with :meth:`process` and finish with :meth:`flush`.
    """

    def __init__(
        self,
        impulse_response: Iterable[complex],
        nfft: int | None = 0,
        real: bool = False,
    ) -> None:
        self.real = bool(real)
        conv = float if self.real else complex
        taps = [conv(v) for v in impulse_response]
        if not taps:
            raise ValueError("impulse response must not be empty")
        if not nfft or nfft <= 0:
            nfft = _default_nfft(len(taps), self.real)
        if nfft < len(taps):
            raise ValueError(
                f"FFT size {nfft} is smaller than the impulse response length {len(taps)}"
            )
        self.nfft = nfft
        self.ntaps = len(taps)
        self.ngood = nfft - len(taps) + 1
        self._zero = conv(0)

        if self.real:
            self._forward = RealFFT(nfft, False).forward
            self._backward = RealFFT(nfft, True).backward
        else:
            self._forward = KissFFT(nfft, False).transform
            self._backward = KissFFT(nfft, True).transform

        # rotate the response left so the scrap samples land at the end of each block
        tmp = [self._zero] * nfft
        tmp[0] = taps[-1]
        tmp[nfft - len(taps) + 1:] = taps[:-1]
        scale = 1.0 / nfft
        self._freq_resp = [v * scale for v in self._forward(tmp)]
        self._pending: list = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ntaps={self.ntaps}, nfft={self.nfft}, real={self.real})"

    def _convolve_block(self, block: list) -> list:
        freq = self._forward(block)
        return self._backward([a * b for a, b in zip(freq, self._freq_resp)])

    def process(self, samples: Iterable[complex]) -> list:
        """Add samples and return every output that can now be computed."""
        conv = float if self.real else complex
        self._pending.extend(conv(x) for x in samples)
        out: list = []
        start = 0
        while len(self._pending) - start >= self.nfft:
            block = self._pending[start:start + self.nfft]
            out.extend(self._convolve_block(block)[:self.ngood])
            start += self.ngood
        del self._pending[:start]
        return out

    def flush(self) -> list:
        """Zero-pad the held samples, return the remaining outputs and reset."""
        out = self.process(())
        n = len(self._pending)
        if n:
            block = self._pending + [self._zero] * (self.nfft - n)
            out.extend(self._convolve_block(block)[:max(0, n - self.ntaps + 1)])
        self._pending = []
        return out


def _direct(samples: Iterator, taps: list) -> Iterator:
    if not taps:
        raise ValueError("impulse response must not be empty")
    nlag = len(taps) - 1
    history = deque(islice(samples, nlag), maxlen=nlag)
    if len(history) < nlag:
        raise ValueError("insufficient data to overcome transient")
    older_taps = taps[nlag:0:-1]
    head = taps[0]
    for x in samples:
        yield sum(h * v for h, v in zip(older_taps, history)) + head * x
        history.append(x)


def direct_filter(samples: Iterable[complex], impulse_response: Sequence[complex]) -> list:
    """Filter by direct convolution, dropping the start-up transient."""
    return list(_direct(iter(samples), list(impulse_response)))


def _decode(data: bytes, real: bool) -> list:
    values = array("f", data).tolist()
    if real:
        return values
    return [complex(re, im) for re, im in zip(values[0::2], values[1::2])]


def _encode(values: Sequence, real: bool) -> bytes:
    if real:
        return array("f", values).tobytes()
    out = array("f")
    for v in values:
        out.append(v.real)
        out.append(v.imag)
    return out.tobytes()


def _sample_chunks(fin: BinaryIO, real: bool, count: int) -> Iterator[list]:
    """Yield decoded float32 samples; a trailing partial sample is dropped."""
    size = _FLOAT_SIZE * (1 if real else 2)
    pending = b""
    while True:
        piece = fin.read(size * count)
        if not piece:
            return
        data = pending + piece
        usable = len(data) - len(data) % size
        pending = data[usable:]
        if usable:
            yield _decode(data[:usable], real)


def fast_filter_stream(
    fin: BinaryIO,
    fout: BinaryIO,
    impulse_response: Sequence[complex],
    nfft: int | None = 0,
    real: bool = False,
) -> int:
    """Filter a float32 sample stream by fast convolution; returns samples written."""
    cfg = FastFIR(impulse_response, nfft, real)
    written = 0
    for chunk in _sample_chunks(fin, cfg.real, cfg.nfft + 4 * cfg.ngood):
        out = cfg.process(chunk)
        fout.write(_encode(out, cfg.real))
        written += len(out)
    out = cfg.flush()
    fout.write(_encode(out, cfg.real))
    return written + len(out)


def direct_filter_stream(
    fin: BinaryIO,
    fout: BinaryIO,
    impulse_response: Sequence[complex],
    real: bool = False,
) -> int:
    """Filter a float32 sample stream by direct convolution; returns samples written."""
    conv = float if real else complex
    taps = [conv(v) for v in impulse_response]
    samples = (s for chunk in _sample_chunks(fin, real, _DIRECT_BLOCK) for s in chunk)
    batch: list = []
    written = 0
    for y in _direct(samples, taps):
        batch.append(y)
        if len(batch) >= _DIRECT_BLOCK:
            fout.write(_encode(batch, real))
            written += len(batch)
            batch = []
    fout.write(_encode(batch, real))
    return written + len(batch)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the FIR filter utility; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, _ = getopt.getopt(args, "n:h:i:o:vdR")
    except getopt.GetoptError as exc:
        sys.stderr.write(f"{exc}\n{_USAGE}")
        return 1

    verbose = use_direct = real = False
    nfft = 0
    in_path = out_path = filt_path = None
    for opt, value in opts:
        if opt == "-v":
            verbose = True
        elif opt == "-n":
            try:
                nfft = int(value)
            except ValueError:
                sys.stderr.write(f"invalid fft size: {value!r}\n")
                return 1
        elif opt == "-i":
            in_path = value
        elif opt == "-o":
            out_path = value
        elif opt == "-h":
            filt_path = value
        elif opt == "-d":
            use_direct = True
        elif opt == "-R":
            real = True

    if filt_path is None:
        sys.stderr.write("You must supply the FIR coeffs via -h\n")
        return 1

    size = _FLOAT_SIZE * (1 if real else 2)
    try:
        with open(filt_path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        sys.stderr.write(f"{filt_path}: {exc.strerror}\n")
        return 1
    if len(raw) % size:
        sys.stderr.write("short read on filter file\n")
    taps = _decode(raw[:len(raw) - len(raw) % size], real)
    if verbose:
        sys.stderr.write(f"{len(taps)} samples in FIR filter\n")
    if not taps:
        sys.stderr.write("filter file holds no samples\n")
        return 1

    with contextlib.ExitStack() as stack:
        try:
            fin = stack.enter_context(open(in_path, "rb")) if in_path else sys.stdin.buffer
            fout = stack.enter_context(open(out_path, "w+b")) if out_path else sys.stdout.buffer
        except OSError as exc:
            sys.stderr.write(f"{exc.filename}: {exc.strerror}\n")
            return 1
        try:
            if use_direct:
                written = direct_filter_stream(fin, fout, taps, real)
            else:
                written = fast_filter_stream(fin, fout, taps, nfft, real)
        except ValueError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        fout.flush()
    if verbose:
        sys.stderr.write(f"{written} samples written\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
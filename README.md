# iqfft

A small, dependency-free FFT toolkit in plain Python, with tools built on
it: a block-wise FFT of sample streams, fast FIR convolution, a power
spectral density image writer, and spectrogram processing for complex
float32 IQ recordings.

## What is inside

| Module                 | Provides |
|------------------------|----------|
| `iqfft.fft`            | `KissFFT`, a mixed-radix complex FFT (radix 2, 3, 4, 5 and generic), with `transform` and `transform_stride`; plus `factor`, `next_fast_size` and `next_fast_size_real` |
| `iqfft.fftr`           | `RealFFT`, an FFT of real input of even length (`forward` gives `nfft // 2 + 1` bins, `backward` returns `nfft` samples) |
| `iqfft.fftnd`          | `NdFFT`, a multi-dimensional complex FFT over flat row-major data |
| `iqfft.fftndr`         | `NdRealFFT`, a multi-dimensional FFT whose last dimension is real and even |
| `iqfft.complex_fft`    | `ComplexFFT`, a complex FFT with `assign` to change size or direction and `transform_real` for `2 * nfft` real samples packed into `nfft` complex values |
| `iqfft.fixed`          | `FixedPointFFT`, an integer FFT on `(real, imag)` pairs with twiddle factors scaled by `scale_factor` (default 1024) |
| `iqfft.fftutil`        | Stream helpers `fft_stream`, `fft_stream_real`, `fft_stream_nd`, `fft_stream_nd_real`, `parse_dims` and the `iqfft-fft` command |
| `iqfft.fastfir`        | `FastFIR` overlap-save fast convolution, `direct_filter`, `fast_filter_stream`, `direct_filter_stream` and the `iqfft-fastconv` command |
| `iqfft.psdpng`         | `psd_rows`, `value_to_rgb`, `values_to_pixels`, `write_png` and the `iqfft-psdpng` command |
| `iqfft.spectrogram`    | `generate_window`, `parse_iq`, `load_iq`, `compute_spectrogram`, `level_range`, `format_level`, `WindowType`, `AxisRange`, `Spectrogram` |

Transforms are unscaled: a forward transform followed by an inverse one
gives back the input multiplied by `nfft`. Each configuration is made for
one direction; calling `RealFFT.forward` on an inverse configuration (or
`backward` on a forward one) raises `ValueError`, as does passing the wrong
number of samples.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Library use

```python
from iqfft.fft import KissFFT, next_fast_size
from iqfft.fftr import RealFFT

forward = KissFFT(8, False)
spectrum = forward.transform([1, 0, 0, 0, 0, 0, 0, 0])   # all ones

inverse = KissFFT(8, True)
restored = [x / 8 for x in inverse.transform(spectrum)]

real = RealFFT(16, False)
bins = real.forward([float(i) for i in range(16)])        # 9 complex bins

print(next_fast_size(1021))                               # 1024
```

Fast convolution of a long signal, in blocks. The start-up transient
(the first `len(impulse_response) - 1` outputs) is not produced; `flush`
zero-pads what is left and returns the remaining outputs:

```python
from iqfft.fastfir import FastFIR

fir = FastFIR([0.25, 0.5, 0.25], 0, True)   # nfft 0 picks a size automatically
output = fir.process(samples) + fir.flush()
```

A spectrogram of a complex float32 IQ recording (`.cf32`, `.cfile`, `.raw`):
one row of power values in dB per whole FFT block, with the zero frequency
in the middle column. Samples after the last whole block are ignored.

```python
from iqfft.spectrogram import load_iq, compute_spectrogram, WindowType

iq = load_iq("capture.cf32")
spectrogram = compute_spectrogram(iq, 1024, WindowType.HANN)
print(spectrogram.num_ffts, spectrogram.cell(0, 512))
```

`AxisRange.clamp` shifts a view range, keeping its size, to lie within the
data range (`Spectrogram.x_range`, `Spectrogram.y_range`); `level_range`
builds a colour scale range in dB, moving a minimum that is not below the
maximum to one less than it; `format_level(-20)` gives `"-20 dB"`.

## Command-line tools

### `iqfft-fft`

Transforms a stream of native 32-bit float samples, block by block. A
trailing incomplete block is dropped.

```
iqfft-fft [-n d1[,d2,...]] [-i] [-R] [infile|-] [outfile|-]
```

* `-n` FFT size, or comma-separated sizes for a multi-dimensional FFT
  (default 1024)
* `-i` inverse transform
* `-R` real samples instead of complex

Input and output default to standard input and output; `-` names them
explicitly.

### `iqfft-fastconv`

Filters a stream of native 32-bit float samples with an FIR impulse
response.

```
iqfft-fastconv -h filter.bin [-n nfft] [-i infile] [-o outfile] [-d] [-R] [-v]
```

* `-h` file holding the filter coefficients, in the same sample format (required)
* `-n` FFT size; chosen automatically when omitted
* `-i`, `-o` input and output files (standard streams by default)
* `-d` use direct FIR filtering instead of fast convolution
* `-R` real samples instead of complex
* `-v` report the number of filter samples and of samples written on standard error

### `iqfft-psdpng`

Reads native-endian signed 16-bit real samples, averages power spectra and
writes them as an 8-bit RGB PNG image, one row per average.

```
iqfft-psdpng [-n nfft] [-r rows] [-a] [-s] [infile|-] [outfile|-]
```

* `-n` FFT size (default 1024)
* `-r` number of spectra averaged per image row (default 20)
* `-a` remove the mean from each FFT buffer
* `-s` stereo input; the two channels are summed before the FFT

## What this package does not do

There is no graphical viewer: `iqfft.spectrogram` computes the spectrogram
values, windows and view ranges, but drawing them, file dialogs, sliders and
colour maps are left to the program that uses it. There is also no shared
cache of FFT configurations; create a `KissFFT` (or another class) once per
size and direction and reuse it.
import cmath
import math
import struct

import pytest

from iqfft.spectrogram import (
    AxisRange,
    Spectrogram,
    WindowType,
    compute_spectrogram,
    format_level,
    generate_window,
    level_range,
    load_iq,
    parse_iq,
)


def _pack(samples):
    return b"".join(struct.pack("=ff", s.real, s.imag) for s in samples)


def test_rectangular_window_is_all_ones():
    assert generate_window(WindowType.RECTANGULAR, 5) == [1.0] * 5


def test_unknown_window_index_is_rectangular():
    assert generate_window(7, 4) == [1.0] * 4


@pytest.mark.parametrize("kind", [WindowType.HANN, WindowType.HAMMING, WindowType.BLACKMAN])
def test_tapered_windows_are_symmetric_and_peak_in_middle(kind):
    w = generate_window(kind, 9)
    assert len(w) == 9
    for a, b in zip(w, reversed(w)):
        assert a == pytest.approx(b, abs=1e-12)
    assert w[4] == pytest.approx(1.0)
    assert max(w) == w[4]


def test_hann_and_blackman_endpoints_are_zero():
    assert generate_window(WindowType.HANN, 16)[0] == pytest.approx(0.0, abs=1e-12)
    assert generate_window(WindowType.BLACKMAN, 16)[-1] == pytest.approx(0.0, abs=1e-12)


def test_hamming_endpoint():
    assert generate_window(WindowType.HAMMING, 16)[0] == pytest.approx(0.54 - 0.46)


def test_window_size_errors():
    with pytest.raises(ValueError):
        generate_window(WindowType.HANN, 0)
    with pytest.raises(ValueError):
        generate_window(WindowType.HANN, 1)


def test_parse_iq_round_trip_and_drops_partial():
    samples = [1 + 2j, -0.5 + 0.25j, 3 - 4j]
    data = _pack(samples) + b"\x00\x01\x02"
    assert parse_iq(data) == samples


def test_load_iq_reads_file(tmp_path):
    samples = [0.5 + 0.5j, -1 + 0j]
    path = tmp_path / "capture.cf32"
    path.write_bytes(_pack(samples))
    assert load_iq(path) == samples


def test_block_count_and_ranges():
    spec = compute_spectrogram([1 + 0j] * 20, 8, WindowType.RECTANGULAR)
    assert isinstance(spec, Spectrogram)
    assert spec.num_ffts == 20 // 8
    assert spec.x_range == AxisRange(0, 20 // 8)
    assert spec.y_range == AxisRange(0, 8)
    assert all(len(row) == 8 for row in spec.cells)


def test_tone_lands_in_shifted_column():
    n, b = 8, 3
    tone = [cmath.exp(2j * math.pi * b * k / n) for k in range(n)]
    spec = compute_spectrogram(tone, n, WindowType.RECTANGULAR)
    peak_col = (b - n // 2) % n
    row = spec.cells[0]
    assert row[peak_col] == pytest.approx(10 * math.log10(n * n), abs=1e-6)
    for j, value in enumerate(row):
        if j != peak_col:
            assert value == pytest.approx(-120.0, abs=1e-3)


def test_dc_is_centred():
    n = 8
    spec = compute_spectrogram([1 + 0j] * n, n, 0)
    row = spec.cells[0]
    assert max(range(n), key=row.__getitem__) == n // 2


def test_empty_data_raises():
    with pytest.raises(ValueError):
        compute_spectrogram([], 8, WindowType.HANN)


def test_level_range_kept_when_ordered():
    assert level_range(-100, -20) == AxisRange(-100, -20)


@pytest.mark.parametrize("lo,hi", [(-20, -20), (-10, -50)])
def test_level_range_fixes_inverted(lo, hi):
    result = level_range(lo, hi)
    assert result == AxisRange(hi - 1, hi)


def test_format_level():
    assert format_level(-100) == "-100 dB"


def test_axis_range_clamp():
    limits = AxisRange(0, 100)
    below = AxisRange(-5, 5)
    above = AxisRange(95, 105)
    inside = AxisRange(10, 20)
    assert below.clamp(limits) == AxisRange(limits.lower, limits.lower + below.size())
    assert above.clamp(limits) == AxisRange(limits.upper - above.size(), limits.upper)
    assert inside.clamp(limits) == inside
    assert AxisRange(2, 7).size() == 7 - 2
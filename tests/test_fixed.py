import random

import pytest

from iqfft.fft import KissFFT
from iqfft.fixed import FixedPointFFT


def _random_ints(n, seed, amplitude=1000):
    rng = random.Random(seed)
    return [(rng.randint(-amplitude, amplitude), rng.randint(-amplitude, amplitude)) for _ in range(n)]


def _max_error(fixed_out, exact_out):
    return max(abs(complex(*a) - b) for a, b in zip(fixed_out, exact_out))


def test_impulse_spreads_exactly():
    cfg = FixedPointFFT(4)
    out = cfg.transform([(1000, 0), (0, 0), (0, 0), (0, 0)])
    assert out == [(1000, 0)] * 4


def test_constant_input_concentrates_in_dc():
    cfg = FixedPointFFT(8)
    out = cfg.transform([(100, 0)] * 8)
    assert out[0] == (800, 0)
    assert all(abs(re) <= 2 and abs(im) <= 2 for re, im in out[1:])


@pytest.mark.parametrize("nfft", [2, 3, 4, 5, 7, 8, 12, 15, 16, 30, 60])
def test_matches_floating_point_transform(nfft):
    data = _random_ints(nfft, seed=nfft)
    fixed = FixedPointFFT(nfft).transform(data)
    exact = KissFFT(nfft).transform(complex(re, im) for re, im in data)
    peak = max(abs(x) for x in exact)
    assert _max_error(fixed, exact) <= 0.02 * peak + 5 * nfft


@pytest.mark.parametrize("nfft", [6, 10, 16, 21])
def test_inverse_matches_floating_point(nfft):
    data = _random_ints(nfft, seed=100 + nfft)
    fixed = FixedPointFFT(nfft, inverse=True).transform(data)
    exact = KissFFT(nfft, inverse=True).transform(complex(re, im) for re, im in data)
    peak = max(abs(x) for x in exact)
    assert _max_error(fixed, exact) <= 0.02 * peak + 5 * nfft


def test_round_trip_scales_by_nfft():
    nfft = 16
    data = _random_ints(nfft, seed=7)
    spectrum = FixedPointFFT(nfft).transform(data)
    back = FixedPointFFT(nfft, inverse=True).transform(spectrum)
    for (re, im), (bre, bim) in zip(data, back):
        assert abs(bre - nfft * re) <= 0.02 * nfft * 1000
        assert abs(bim - nfft * im) <= 0.02 * nfft * 1000


def test_outputs_are_whole_numbers_close_to_exact():
    data = _random_ints(5, seed=3)
    out = FixedPointFFT(5).transform(data)
    assert len(out) == 5
    assert [(int(re), int(im)) for re, im in out] == out
    exact = KissFFT(5).transform(complex(re, im) for re, im in data)
    peak = max(abs(x) for x in exact)
    assert _max_error(out, exact) <= 0.02 * peak + 25


def test_accepts_complex_input():
    data = _random_ints(8, seed=11)
    as_pairs = FixedPointFFT(8).transform(data)
    as_complex = FixedPointFFT(8).transform(complex(re, im) for re, im in data)
    assert as_pairs == as_complex


def test_larger_scale_factor_is_more_accurate():
    nfft = 30
    data = _random_ints(nfft, seed=5)
    exact = KissFFT(nfft).transform(complex(re, im) for re, im in data)
    coarse = _max_error(FixedPointFFT(nfft, scale_factor=64.0).transform(data), exact)
    fine = _max_error(FixedPointFFT(nfft, scale_factor=65536.0).transform(data), exact)
    assert fine < coarse


def test_twiddle_zero_is_scale_factor():
    cfg = FixedPointFFT(8, scale_factor=1024.0)
    assert cfg.twiddles[0] == (1024, 0)
    assert len(cfg.twiddles) == 8


def test_wrong_length_raises():
    with pytest.raises(ValueError):
        FixedPointFFT(4).transform([(1, 0)] * 3)


@pytest.mark.parametrize("nfft", [0, -4])
def test_invalid_size_raises(nfft):
    with pytest.raises(ValueError):
        FixedPointFFT(nfft)


def test_zero_scale_factor_raises():
    with pytest.raises(ValueError):
        FixedPointFFT(8, scale_factor=0.5)
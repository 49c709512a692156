import math
import random

import pytest

from iqfft.fftnd import NdFFT
from iqfft.fftndr import NdRealFFT
from iqfft.fftr import RealFFT


def _random_real(n, seed):
    rng = random.Random(seed)
    return [rng.uniform(-10, 10) for _ in range(n)]


@pytest.mark.parametrize("dims", [(3, 4), (2, 3, 6), (5, 8)])
def test_forward_matches_half_of_full_complex_transform(dims):
    total = math.prod(dims)
    data = _random_real(total, total)
    full = NdFFT(dims).transform(complex(x, 0) for x in data)
    cfg = NdRealFFT(dims)
    result = cfg.forward(data)
    dim_real = dims[-1]
    nrbins = dim_real // 2 + 1
    dim_other = total // dim_real
    assert len(result) == dim_other * nrbins
    expected = [full[k1 * dim_real + k2] for k1 in range(dim_other) for k2 in range(nrbins)]
    assert result == pytest.approx(expected, abs=1e-9)


@pytest.mark.parametrize("dims", [(4, 4), (3, 2), (2, 5, 10), (6,)])
def test_round_trip_scales_by_product(dims):
    total = math.prod(dims)
    data = _random_real(total, total + 1)
    spectrum = NdRealFFT(dims, False).forward(data)
    back = NdRealFFT(dims, True).backward(spectrum)
    assert len(back) == total
    assert back == pytest.approx([x * total for x in data], abs=1e-8)


def test_single_dimension_matches_real_fft():
    data = _random_real(12, 2)
    assert NdRealFFT((12,)).forward(data) == pytest.approx(RealFFT(12).forward(data))


def test_dc_bin_is_sum_of_input():
    data = _random_real(3 * 4, 9)
    result = NdRealFFT((3, 4)).forward(data)
    assert result[0] == pytest.approx(sum(data))


def test_odd_last_dimension_is_rejected():
    with pytest.raises(ValueError):
        NdRealFFT((4, 5))


def test_no_dimensions_is_rejected():
    with pytest.raises(ValueError):
        NdRealFFT(())


def test_direction_mismatch_is_rejected():
    with pytest.raises(ValueError):
        NdRealFFT((2, 4), True).forward([0.0] * 8)
    with pytest.raises(ValueError):
        NdRealFFT((2, 4), False).backward([0j] * 6)


def test_wrong_lengths_are_rejected():
    with pytest.raises(ValueError):
        NdRealFFT((2, 4)).forward([0.0] * 7)
    with pytest.raises(ValueError):
        NdRealFFT((2, 4), True).backward([0j] * 5)
import math
import random

import pytest

from iqfft.fft import KissFFT
from iqfft.fftr import RealFFT


def _snr_db(reference, candidate):
    sigpow = 1e-10
    noisepow = 1e-10
    for a, b in zip(reference, candidate):
        a, b = complex(a), complex(b)
        sigpow += abs(a) ** 2
        noisepow += abs(a - b) ** 2
    return 10 * math.log10(sigpow / noisepow)


def _rand_scalar(rng):
    return (rng.randint(0, 2**31 - 1) - (2**31 - 1) // 2) / 2


def test_forward_matches_complex_fft_of_real_input():
    nfft = 8 * 3 * 5
    rng = random.Random(1234)
    rin = [_rand_scalar(rng) for _ in range(nfft)]
    cout = KissFFT(nfft, False).transform(complex(x, 0) for x in rin)
    sout = RealFFT(nfft, False).forward(rin)
    assert len(sout) == nfft // 2 + 1
    assert _snr_db(cout[: nfft // 2 + 1], sout) > 200


def test_backward_matches_complex_inverse_of_symmetric_spectrum():
    nfft = 8 * 3 * 5
    rng = random.Random(99)
    cin = [0j] * nfft
    for i in range(1, nfft // 2):
        cin[i] = complex(_rand_scalar(rng), _rand_scalar(rng))
    for i in range(1, nfft // 2):
        cin[nfft - i] = cin[i].conjugate()

    cout = KissFFT(nfft, True).transform(cin)
    rout = RealFFT(nfft, True).backward(cin[: nfft // 2 + 1])
    assert len(rout) == nfft
    sout = [complex(x, 0) for x in rout]
    assert _snr_db(cout[: nfft // 2], sout[: nfft // 2]) > 200


def _two_tone_snr(nfft, bin1, bin2):
    maxrange = 32767
    f1 = bin1 * 2 * math.pi / nfft
    f2 = bin2 * 2 * math.pi / nfft
    tbuf = [(maxrange >> 1) * math.cos(f1 * i) + (maxrange >> 1) * math.cos(f2 * i) for i in range(nfft)]
    kout = RealFFT(nfft).forward(tbuf)
    sigpow = 0.0
    noisepow = 0.0
    for i, value in enumerate(kout):
        mag2 = (value.real / maxrange) ** 2 + (value.imag / maxrange) ** 2
        if i != 0 and i != nfft // 2:
            mag2 *= 2
        if i not in (bin1, bin2):
            noisepow += mag2
        else:
            sigpow += mag2
    return 10 * math.log10(sigpow / (noisepow + 1e-50))


def test_two_tone_signal_concentrates_power_in_tone_bins():
    nfft = 4 * 2 * 2 * 3 * 5
    snrs = []
    for i in range(0, nfft // 2, (nfft >> 4) + 1):
        for j in range(i, nfft // 2, (nfft >> 4) + 7):
            snrs.append(_two_tone_snr(nfft, i, j))
    snrs.append(_two_tone_snr(nfft, nfft // 2, nfft // 2))
    assert min(snrs) > 200


def test_small_forward_values():
    result = RealFFT(4).forward([1, 2, 3, 4])
    assert result == pytest.approx([10, -2 + 2j, -2])


def test_dc_and_nyquist_bins_are_real():
    rng = random.Random(7)
    data = [rng.uniform(-1, 1) for _ in range(16)]
    result = RealFFT(16).forward(data)
    assert result[0].imag == 0.0
    assert result[-1].imag == 0.0
    assert result[0].real == pytest.approx(sum(data))


@pytest.mark.parametrize("nfft", [2, 4, 6, 10, 24, 120, 256])
def test_round_trip_scales_by_nfft(nfft):
    rng = random.Random(nfft)
    data = [rng.uniform(-100, 100) for _ in range(nfft)]
    spectrum = RealFFT(nfft, False).forward(data)
    back = RealFFT(nfft, True).backward(spectrum)
    assert back == pytest.approx([x * nfft for x in data], abs=1e-6)


@pytest.mark.parametrize("nfft", [0, 1, 3, 15])
def test_odd_or_too_small_size_is_rejected(nfft):
    with pytest.raises(ValueError):
        RealFFT(nfft)


def test_forward_on_inverse_configuration_is_rejected():
    with pytest.raises(ValueError):
        RealFFT(8, True).forward([0.0] * 8)


def test_backward_on_forward_configuration_is_rejected():
    with pytest.raises(ValueError):
        RealFFT(8, False).backward([0j] * 5)


def test_wrong_lengths_are_rejected():
    with pytest.raises(ValueError):
        RealFFT(8).forward([0.0] * 7)
    with pytest.raises(ValueError):
        RealFFT(8, True).backward([0j] * 4)
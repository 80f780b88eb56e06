"""
Tests for the zero-padded magnitude spectrum in sigspectrum.py.
"""

import numpy as np
import pytest

import sigspectrum
import sigwave
from sigspectrum import (
    frequency_axis,
    magnitude_spectrum,
    padded_length,
    peak_frequency,
    zero_pad,
)


@pytest.mark.parametrize("n,expected", [
    (0, 0), (1, 1), (2, 2), (3, 4), (5, 8), (8, 8), (9, 16),
    (100, 128), (1024, 1024), (1025, 2048),
])
def test_padded_length(n, expected):
    assert padded_length(n) == expected


def test_padded_length_negative():
    with pytest.raises(ValueError):
        padded_length(-1)


def test_zero_pad_copies_then_fills_zeros():
    out = zero_pad(np.array([1.0, 2.0, 3.0, 4.0, 5.0]))
    np.testing.assert_array_equal(out, [1, 2, 3, 4, 5, 0, 0, 0])


def test_power_of_two_is_not_padded():
    x = np.arange(8, dtype=float)
    np.testing.assert_array_equal(zero_pad(x), x)
    assert magnitude_spectrum(x).size == 4


def test_length_five_pads_to_eight():
    assert magnitude_spectrum(np.ones(5)).size == 4


@pytest.mark.parametrize("n", [1, 2, 5, 8, 100, 1000])
def test_all_zero_input(n):
    mags = magnitude_spectrum(np.zeros(n))
    assert mags.size == padded_length(n) // 2
    assert np.all(mags == 0.0)


def test_empty_input_is_empty_result():
    mags = magnitude_spectrum(np.array([]))
    assert mags.size == 0
    assert frequency_axis(mags.size, 100.0).size == 0


def test_no_scaling_on_forward_transform():
    # DC of all-ones is N, a full-scale bin-centred sine is N/2
    np.testing.assert_allclose(magnitude_spectrum(np.ones(8)),
                               [8.0, 0.0, 0.0, 0.0], atol=1e-12)
    x = np.sin(2 * np.pi * np.arange(8) / 8)
    np.testing.assert_allclose(magnitude_spectrum(x),
                               [0.0, 4.0, 0.0, 0.0], atol=1e-12)


def test_magnitudes_non_negative():
    rng = np.random.default_rng(7)
    mags = magnitude_spectrum(rng.standard_normal(300))
    assert np.all(mags >= 0.0)


def test_nan_propagates():
    mags = magnitude_spectrum(np.array([1.0, np.nan, 0.0, 0.0]))
    assert np.all(np.isnan(mags))


def test_frequency_axis_spacing():
    freqs = frequency_axis(64, 100.0)
    assert freqs[0] == 0.0
    assert freqs[1] == pytest.approx(100.0 / 128.0)
    assert freqs[-1] == pytest.approx(63 * 100.0 / 128.0)


def test_peak_frequency_empty():
    with pytest.raises(ValueError):
        peak_frequency(np.array([]), 100.0)


def test_sine_end_to_end():
    x = sigwave.generate("sine", 1.0, 10.0, 0.0, fs=100.0, duration=1.0)
    assert x.size == 100
    mags = magnitude_spectrum(x)
    assert padded_length(x.size) == 128
    assert mags.size == 64
    # 10 Hz sits at 12.8 bins of 100/128 Hz; the nearest bin wins
    assert int(np.argmax(mags)) == 13
    assert peak_frequency(mags, 100.0) == pytest.approx(13 * 100.0 / 128.0)


def test_square_has_odd_harmonics():
    fs, f = 1024.0, 16.0
    x = sigwave.generate("square", 1.0, f, 0.0, fs, 1.0, 50.0)
    mags = magnitude_spectrum(x)
    freqs = frequency_axis(mags.size, fs)
    at = {int(round(fr)): m for fr, m in zip(freqs, mags)}
    assert at[16] > 10 * at[32]
    assert at[48] > 10 * at[32]
    assert at[16] > at[48]


def test_load_samples_with_header(tmp_path):
    path = tmp_path / "s.csv"
    path.write_text("time_s,amplitude\n0,1.5\n0.1,-2\n")
    np.testing.assert_array_equal(sigspectrum.load_samples(str(path)), [1.5, -2.0])


def test_load_samples_single_column(tmp_path):
    path = tmp_path / "s.txt"
    path.write_text("1\n2\n3\n")
    np.testing.assert_array_equal(sigspectrum.load_samples(str(path)), [1, 2, 3])


def test_inf_propagates():
    mags = magnitude_spectrum(np.array([1.0, np.inf, 0.0, 0.0, 2.0]))
    assert mags.size == 4
    assert not np.any(np.isfinite(mags))

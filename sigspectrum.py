#!/usr/bin/env python3
"""
sigspectrum.py - One-sided magnitude spectrum of a real sample sequence.

The input is zero-padded to the next power of two (an input whose length
is already a power of two is used as-is), transformed with a forward FFT
without 1/N scaling, and the magnitudes of the first half of the
coefficients (DC up to, but excluding, Nyquist) are returned.

Bin i of the result is plotted at i * fs / (2 * num_bins) Hz.

Examples
--------
# 1) Spectrum of a CSV written by sigwave.py (last column is used):
python sigspectrum.py sine.csv --fs 44100

# 2) Same, writing frequency/magnitude pairs to a CSV:
python sigspectrum.py sine.csv --fs 44100 -o sine_spectrum.csv
"""

import argparse

import numpy as np


def padded_length(n: int) -> int:
    """
    Smallest power of two >= n. 0 stays 0; a power of two is unchanged.
    """
    if n < 0:
        raise ValueError(f"length must be >= 0, got {n}")
    if n == 0:
        return 0
    # ceil(log2(n)) without floating point
    return 1 << (n - 1).bit_length()


def zero_pad(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    n_pad = padded_length(x.size)
    out = np.zeros(n_pad, dtype=np.float64)
    count = min(x.size, n_pad)
    out[:count] = x[:count]
    return out


def magnitude_spectrum(x: np.ndarray) -> np.ndarray:
    """
    Magnitudes of the first padded_length/2 FFT coefficients of x.

    Empty input returns an empty array. NaN/Inf samples are not checked
    and show up in the output.
    """
    xp = zero_pad(x)
    if xp.size == 0:
        return np.array([], dtype=np.float64)
    X = np.fft.fft(xp)
    return np.abs(X[:xp.size // 2])


def frequency_axis(num_bins: int, fs: float) -> np.ndarray:
    """
    Frequency (Hz) of each of num_bins magnitudes: i * fs / (2 * num_bins).

    Open question: whether N in fs / (2 * N) should be num_bins or the
    padded length is unresolved. num_bins is kept; with
    num_bins == padded_length / 2 this gives fs / padded_length.
    """
    if num_bins <= 0:
        return np.array([], dtype=np.float64)
    df = fs / (2.0 * num_bins)
    return np.arange(num_bins) * df


def peak_frequency(magnitudes: np.ndarray, fs: float) -> float:
    if magnitudes.size == 0:
        raise ValueError("empty spectrum has no peak")
    freqs = frequency_axis(magnitudes.size, fs)
    return float(freqs[int(np.argmax(magnitudes))])


def load_samples(path: str) -> np.ndarray:
    """
    Read samples from a text/CSV file. Lines starting with a non-numeric
    header are skipped; with several columns the last one is used.
    """
    with open(path, "r", encoding="utf-8") as f:
        first = f.readline()
    skip = 0
    head = first.strip().split(",")[0] if first.strip() else ""
    try:
        float(head)
    except ValueError:
        skip = 1 if head else 0
    data = np.loadtxt(path, delimiter=",", skiprows=skip, ndmin=2)
    if data.size == 0:
        return np.array([], dtype=np.float64)
    return data[:, -1].astype(np.float64)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Magnitude spectrum (zero-padded FFT) of a sample file."
    )
    parser.add_argument("infile", type=str,
                        help="Input text/CSV file of samples (last column used).")
    parser.add_argument("--fs", type=float, required=True,
                        help="Sample rate of the input (Hz).")
    parser.add_argument("-o", "--outfile", type=str, default=None,
                        help="Output CSV file (frequency_hz, magnitude).")

    args = parser.parse_args(argv)

    if args.fs <= 0:
        parser.error("--fs must be > 0")

    x = load_samples(args.infile)
    mags = magnitude_spectrum(x)
    freqs = frequency_axis(mags.size, args.fs)

    print(f"Read {x.size} samples from '{args.infile}'.")
    print(f"  padded length: {padded_length(x.size)}")
    print(f"  bins         : {mags.size}")
    if mags.size:
        print(f"  bin spacing  : {args.fs / (2.0 * mags.size):.6g} Hz")
        print(f"  peak         : {peak_frequency(mags, args.fs):.3f} Hz")

    if args.outfile:
        data = np.column_stack([freqs, mags]) if mags.size else np.empty((0, 2))
        np.savetxt(args.outfile, data, delimiter=",",
                   header="frequency_hz,magnitude", comments="", fmt="%.10g")
        print(f"Wrote {mags.size} bins to '{args.outfile}'.")

    return 0


if __name__ == "__main__":
    main()

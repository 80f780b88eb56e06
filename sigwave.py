#!/usr/bin/env python3
"""
sigwave.py - Periodic waveform generator (sine, square, triangle, sawtooth).

Generates real-valued sample sequences at sample rate fs:

  - sine     : A * sin(2*pi*f*t + phase)
  - square   : +A while the cycle fraction is below the duty cycle, else -A
  - triangle : 4*A*|cycle - 0.5| - A
  - sawtooth : rising edge for the first 'width' of each cycle, then falling

where t = i / fs for i in [0, floor(fs * duration)) and cycle = (t*f) mod 1.
Only the sine uses the phase argument.

The samples (or their magnitude spectrum, see sigspectrum.py) can be written
as a two-column CSV, rendered to an image, and described in a JSON sidecar.

Usage:
  python sigwave.py --help
"""

import argparse
import json
import math
import os
import warnings
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import numpy as np
from matplotlib.figure import Figure

import sigspectrum


class WaveformParameterError(ValueError):
    """Raised when waveform parameters fall outside their valid domain."""


class Waveform(str, Enum):
    SINE = "sine"
    SQUARE = "square"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"


WAVEFORM_CHOICES = [w.value for w in Waveform]

DEFAULT_DUTY_CYCLE = 50.0
DEFAULT_WIDTH = 0.5


@dataclass(frozen=True)
class SignalParameters:
    amplitude: float
    frequency: float
    phase: float
    fs: float
    duration: float

    @property
    def num_samples(self) -> int:
        return int(math.floor(self.fs * self.duration))

    @property
    def sample_period(self) -> float:
        return 1.0 / self.fs

    def validate(self) -> None:
        """
        Reject parameters that would give an empty or meaningless sequence.
        """
        for name, value in asdict(self).items():
            if not math.isfinite(value):
                raise WaveformParameterError(f"{name} must be finite, got {value}.")
        _check_time_base(self.fs, self.duration)

    def time_vector(self) -> np.ndarray:
        return np.arange(self.num_samples) / self.fs


# ================================================================
# Helpers
# ================================================================

def _check_time_base(fs: float, duration: float) -> None:
    if not math.isfinite(fs) or fs <= 0:
        raise WaveformParameterError(f"fs must be finite and > 0, got {fs}.")
    if not math.isfinite(duration) or duration <= 0:
        raise WaveformParameterError(
            f"duration must be finite and > 0, got {duration}.")


def gen_time_vector(fs: float, duration: float) -> np.ndarray:
    _check_time_base(fs, duration)
    n = int(math.floor(fs * duration))
    return np.arange(n) / fs


def cycle_fraction(t: np.ndarray, frequency: float) -> np.ndarray:
    """Position within the current period, in [0, 1)."""
    return np.mod(t * frequency, 1.0)


def _check_width(width: float) -> None:
    if not math.isfinite(width) or width <= 0.0 or width >= 1.0:
        raise WaveformParameterError(
            f"sawtooth width must be in the open interval (0, 1), got {width}.")


def safe_eval_float(expr: str) -> float:
    """
    Parse a numeric field. Accepts plain numbers (20e3, -1.5) and simple
    arithmetic with pi (pi/2, 2*pi). Raises ValueError otherwise.
    """
    s = expr.strip()
    if not s:
        raise ValueError("empty value")
    try:
        val = eval(s, {"__builtins__": None}, {"pi": math.pi})
        return float(val)
    except (SyntaxError, NameError, TypeError, ValueError,
            ZeroDivisionError, OverflowError, AttributeError) as e:
        raise ValueError(f"not a number: '{s}'") from e


# ================================================================
# Waveform generators (all produce float64 samples at fs)
# ================================================================

def gen_sine(fs: float, duration: float, amplitude: float,
             frequency: float, phase: float = 0.0) -> np.ndarray:
    t = gen_time_vector(fs, duration)
    return amplitude * np.sin(2 * np.pi * frequency * t + phase)


def gen_square(fs: float, duration: float, amplitude: float,
               frequency: float,
               duty_cycle: float = DEFAULT_DUTY_CYCLE) -> np.ndarray:
    """
    Square wave, high for the first duty_cycle percent of each period.

    duty_cycle outside (0, 100) gives a constant output (always low at or
    below 0, always high at or above 100).
    """
    if not 0.0 < duty_cycle < 100.0:
        warnings.warn(
            f"square: duty cycle {duty_cycle}% outside (0, 100); output is constant.")
    t = gen_time_vector(fs, duration)
    cycle = cycle_fraction(t, frequency)
    duty = duty_cycle / 100.0
    return np.where(cycle < duty, amplitude, -amplitude).astype(np.float64)


def gen_triangle(fs: float, duration: float, amplitude: float,
                 frequency: float) -> np.ndarray:
    """
    Symmetric triangle: +A at the start of each period, -A at mid-period.
    """
    t = gen_time_vector(fs, duration)
    cycle = cycle_fraction(t, frequency)
    return 4 * amplitude * np.abs(cycle - 0.5) - amplitude


def gen_sawtooth(fs: float, duration: float, amplitude: float,
                 frequency: float, width: float = DEFAULT_WIDTH) -> np.ndarray:
    """
    Sawtooth with a rising ramp over the first 'width' of the period
    and a falling ramp over the rest.

    width: 0 < width < 1. Both ends divide by zero and are rejected.
    """
    _check_width(width)
    t = gen_time_vector(fs, duration)
    cycle = cycle_fraction(t, frequency)
    rising = 2 * amplitude * cycle / width - amplitude
    falling = 2 * amplitude * (1 - cycle) / (1 - width) - amplitude
    return np.where(cycle < width, rising, falling)


def generate(waveform: str,
             amplitude: float,
             frequency: float,
             phase: float,
             fs: float,
             duration: float,
             extra: Optional[float] = None) -> np.ndarray:
    """
    Generate floor(fs * duration) samples of the requested waveform.

    extra: duty cycle in percent for square, width ratio for sawtooth.
           Ignored for sine and triangle. None selects the default.
    """
    try:
        wf = Waveform(waveform)
    except ValueError:
        raise ValueError(f"Unknown waveform: {waveform}") from None

    params = SignalParameters(amplitude, frequency, phase, fs, duration)
    params.validate()

    if wf is Waveform.SINE:
        return gen_sine(fs, duration, amplitude, frequency, phase)
    elif wf is Waveform.SQUARE:
        duty = DEFAULT_DUTY_CYCLE if extra is None else extra
        return gen_square(fs, duration, amplitude, frequency, duty)
    elif wf is Waveform.TRIANGLE:
        return gen_triangle(fs, duration, amplitude, frequency)
    else:
        width = DEFAULT_WIDTH if extra is None else extra
        return gen_sawtooth(fs, duration, amplitude, frequency, width)


# ================================================================
# Output helpers
# ================================================================

def write_series_csv(path: str, x: np.ndarray, y: np.ndarray,
                     x_label: str, y_label: str) -> None:
    data = np.column_stack([x, y]) if x.size else np.empty((0, 2))
    np.savetxt(path, data, delimiter=",", header=f"{x_label},{y_label}",
               comments="", fmt="%.10g")


def plot_series(path: str, x: np.ndarray, y: np.ndarray,
                title: str, xlabel: str, ylabel: str) -> None:
    """
    Render a single line series to an image file (format from extension).
    """
    fig = Figure(figsize=(8, 4), tight_layout=True)
    ax = fig.add_subplot(1, 1, 1)
    ax.plot(x, y, linewidth=1.0)
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)
    fig.savefig(path)


def write_meta(
    data_path: str,
    waveform: str,
    params: SignalParameters,
    extra: Optional[float],
    num_values: int,
    spectrum: bool,
    padded_length: Optional[int] = None,
    description: str = "",
):
    """
    Write a JSON sidecar (<data_path>.meta.json) describing the run.
    """
    now = datetime.now(timezone.utc).isoformat(timespec="seconds")
    meta = {
        "global": {
            "waveform": waveform,
            "params": asdict(params),
            "kind": "spectrum" if spectrum else "samples",
            "description": description,
            "created": now,
        },
        "data": {
            "count": num_values,
        },
    }
    if waveform == Waveform.SQUARE.value:
        meta["global"]["duty_cycle"] = DEFAULT_DUTY_CYCLE if extra is None else extra
    elif waveform == Waveform.SAWTOOTH.value:
        meta["global"]["width"] = DEFAULT_WIDTH if extra is None else extra
    if padded_length is not None:
        meta["data"]["padded_length"] = padded_length
        if num_values:
            meta["data"]["bin_spacing"] = params.fs / (2.0 * num_values)

    meta_path = data_path + ".meta.json"
    with open(meta_path, "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)
    return meta_path


# ================================================================
# CLI
# ================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Periodic waveform generator with magnitude spectrum view."
    )
    parser.add_argument("--waveform", "-w", type=str, required=True,
                        choices=WAVEFORM_CHOICES,
                        help="Waveform type.")
    parser.add_argument("--amplitude", "-A", type=float, default=1.0,
                        help="Peak amplitude.")
    parser.add_argument("--freq", "-f", type=float, default=10.0,
                        help="Waveform frequency (Hz).")
    parser.add_argument("--phase", type=float, default=0.0,
                        help="Initial phase (rad). Sine only.")
    parser.add_argument("--fs", type=float, default=44100.0,
                        help="Sample rate (Hz).")
    parser.add_argument("--duration", "-d", type=float, default=1.0,
                        help="Signal duration (s).")
    parser.add_argument("--duty", type=float, default=DEFAULT_DUTY_CYCLE,
                        help="Square duty cycle (percent, 0-100).")
    parser.add_argument("--width", type=float, default=DEFAULT_WIDTH,
                        help="Sawtooth rising-edge width (0 < width < 1).")
    parser.add_argument("--spectrum", action="store_true",
                        help="Output the magnitude spectrum instead of samples.")
    parser.add_argument("--outfile", "-o", type=str, default=None,
                        help="Output CSV file (x, value).")
    parser.add_argument("--plot", type=str, default=None,
                        help="Render the output series to an image (e.g. out.png).")
    parser.add_argument("--meta", action="store_true",
                        help="Write a JSON sidecar (<outfile>.meta.json).")
    parser.add_argument("--description", type=str, default="",
                        help="Description for the JSON sidecar.")

    args = parser.parse_args(argv)

    if args.meta and not args.outfile:
        parser.error("--meta requires --outfile.")

    if args.waveform == Waveform.SQUARE.value:
        extra = args.duty
    elif args.waveform == Waveform.SAWTOOTH.value:
        extra = args.width
    else:
        extra = None

    print(f"Generating waveform '{args.waveform}'...")
    print(f"  amplitude: {args.amplitude:.6g}")
    print(f"  freq     : {args.freq:.6g} Hz")
    print(f"  fs       : {args.fs:.6g} Hz")
    print(f"  duration : {args.duration:.6g} s")
    if args.waveform == Waveform.SINE.value:
        print(f"  phase    : {args.phase:.6g} rad")
    elif extra is not None:
        label = "duty" if args.waveform == Waveform.SQUARE.value else "width"
        print(f"  {label:<9}: {extra:.6g}")

    try:
        x = generate(args.waveform, args.amplitude, args.freq, args.phase,
                     args.fs, args.duration, extra)
    except WaveformParameterError as e:
        parser.error(str(e))

    params = SignalParameters(args.amplitude, args.freq, args.phase,
                              args.fs, args.duration)
    padded = None
    if args.spectrum:
        y = sigspectrum.magnitude_spectrum(x)
        padded = sigspectrum.padded_length(x.size)
        axis = sigspectrum.frequency_axis(y.size, args.fs)
        x_label, y_label = "frequency_hz", "magnitude"
        title = "Magnitude Spectrum (FFT)"
        xlabel, ylabel = "Frequency (Hz)", "Magnitude"
        print(f"Samples: {x.size}, padded to {padded}, {y.size} bins.")
        if y.size:
            print(f"Peak frequency: "
                  f"{sigspectrum.peak_frequency(y, args.fs):.3f} Hz")
    else:
        y = x
        axis = params.time_vector()
        x_label, y_label = "time_s", "amplitude"
        title = "Generated signal"
        xlabel, ylabel = "Time (s)", "Amplitude"
        print(f"Samples: {x.size}")

    if args.outfile:
        write_series_csv(args.outfile, axis, y, x_label, y_label)
        size_bytes = os.path.getsize(args.outfile)
        print(f"Done. Wrote {size_bytes} bytes to '{args.outfile}'.")
        if args.meta:
            meta_path = write_meta(
                data_path=args.outfile,
                waveform=args.waveform,
                params=params,
                extra=extra,
                num_values=y.size,
                spectrum=args.spectrum,
                padded_length=padded,
                description=args.description,
            )
            print(f"Wrote metadata to '{meta_path}'.")

    if args.plot:
        plot_series(args.plot, axis, y, title, xlabel, ylabel)
        print(f"Wrote plot to '{args.plot}'.")

    return 0


if __name__ == "__main__":
    main()

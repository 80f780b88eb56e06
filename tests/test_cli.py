"""
Tests for the sigwave and sigspectrum command-line entry points.
"""

import json

import numpy as np
import pytest

import sigspectrum
import sigwave


def _read_csv(path):
    with open(path, encoding="utf-8") as f:
        header = f.readline().strip()
    data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    return header, data


def test_samples_csv_and_meta(tmp_path, capsys):
    out = tmp_path / "sine.csv"
    rc = sigwave.main(["-w", "sine", "--fs", "100", "-d", "1",
                       "-f", "10", "-o", str(out), "--meta"])
    assert rc == 0

    header, data = _read_csv(out)
    assert header == "time_s,amplitude"
    assert data.shape == (100, 2)
    assert data[1, 0] == pytest.approx(0.01)

    with open(str(out) + ".meta.json", encoding="utf-8") as f:
        meta = json.load(f)
    assert meta["global"]["waveform"] == "sine"
    assert meta["global"]["kind"] == "samples"
    assert meta["global"]["params"]["fs"] == 100.0
    assert meta["data"]["count"] == 100

    assert "Samples: 100" in capsys.readouterr().out


def test_spectrum_csv(tmp_path, capsys):
    out = tmp_path / "spectrum.csv"
    sigwave.main(["-w", "sine", "--fs", "100", "-d", "1", "-f", "10",
                  "--spectrum", "-o", str(out), "--meta"])

    header, data = _read_csv(out)
    assert header == "frequency_hz,magnitude"
    assert data.shape == (64, 2)
    assert int(np.argmax(data[:, 1])) == 13

    with open(str(out) + ".meta.json", encoding="utf-8") as f:
        meta = json.load(f)
    assert meta["data"]["padded_length"] == 128
    assert meta["data"]["bin_spacing"] == pytest.approx(100.0 / 128.0)

    assert "padded to 128" in capsys.readouterr().out


def test_square_duty_recorded(tmp_path):
    out = tmp_path / "sq.csv"
    sigwave.main(["-w", "square", "--fs", "50", "-d", "1",
                  "--duty", "30", "-o", str(out), "--meta"])
    with open(str(out) + ".meta.json", encoding="utf-8") as f:
        meta = json.load(f)
    assert meta["global"]["duty_cycle"] == 30.0


def test_plot_written(tmp_path):
    png = tmp_path / "tri.png"
    sigwave.main(["-w", "triangle", "--fs", "200", "-d", "0.5",
                  "--plot", str(png)])
    assert png.exists()
    assert png.stat().st_size > 0


def test_invalid_width_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        sigwave.main(["-w", "sawtooth", "--width", "1"])
    assert exc.value.code == 2
    assert "width" in capsys.readouterr().err


def test_non_positive_fs_exits():
    with pytest.raises(SystemExit):
        sigwave.main(["-w", "sine", "--fs", "0"])


def test_meta_requires_outfile():
    with pytest.raises(SystemExit):
        sigwave.main(["-w", "sine", "--meta"])


def test_sigspectrum_reads_sigwave_output(tmp_path, capsys):
    samples = tmp_path / "saw.csv"
    spectrum = tmp_path / "saw_spec.csv"
    sigwave.main(["-w", "sawtooth", "--fs", "1000", "-d", "0.5",
                  "-f", "50", "--width", "0.2", "-o", str(samples)])
    rc = sigspectrum.main([str(samples), "--fs", "1000", "-o", str(spectrum)])
    assert rc == 0

    header, data = _read_csv(spectrum)
    assert header == "frequency_hz,magnitude"
    assert data.shape == (256, 2)
    out = capsys.readouterr().out
    assert "padded length: 512" in out
    assert "peak" in out


def test_sigspectrum_rejects_bad_fs(tmp_path):
    path = tmp_path / "x.txt"
    path.write_text("1\n2\n")
    with pytest.raises(SystemExit):
        sigspectrum.main([str(path), "--fs", "-5"])

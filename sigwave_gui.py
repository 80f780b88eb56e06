#!/usr/bin/env python3
from __future__ import annotations

import warnings
from typing import Optional, List, Tuple

from PySide6.QtCore import Qt, QPointF, QRectF
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QGridLayout, QGroupBox, QLabel, QLineEdit, QComboBox, QCheckBox,
    QPushButton, QTextEdit, QFileDialog, QMessageBox, QSizePolicy
)
from PySide6.QtCharts import QChart, QChartView, QLineSeries, QValueAxis

import numpy as np

import sigwave
import sigspectrum


MAX_PLOT_POINTS = 20000

WAVEFORM_LABELS = {
    "sine": "Sine",
    "square": "Square",
    "triangle": "Triangle",
    "sawtooth": "Sawtooth",
}


class ChartView(QChartView):
    """
    Line chart with horizontal-only navigation: the wheel zooms the time
    (or frequency) axis around the cursor, left-drag pans it, and a
    double-click restores the range of the last plot. The amplitude axis
    stays as set by the plot.
    """

    def __init__(self, chart):
        super().__init__(chart)
        self._drag_x: Optional[float] = None

    def wheelEvent(self, event):
        area = self.chart().plotArea()
        if area.width() <= 0:
            return
        factor = 0.8 if event.angleDelta().y() > 0 else 1.25
        anchor = min(max(event.position().x(), area.left()), area.right())
        left = anchor - (anchor - area.left()) * factor
        self.chart().zoomIn(QRectF(left, area.top(),
                                   area.width() * factor, area.height()))
        event.accept()

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._drag_x = event.position().x()
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self._drag_x is None:
            super().mouseMoveEvent(event)
            return
        x = event.position().x()
        self.chart().scroll(self._drag_x - x, 0)
        self._drag_x = x
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._drag_x = None
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event):
        self.chart().zoomReset()
        event.accept()


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Signals and Spectra (sigwave)")
        self.resize(1280, 720)

        self._validation_targets: List[Tuple[QLineEdit, str]] = []
        # (x, y, title, xlabel, ylabel) of the series currently shown
        self._last_series: Optional[Tuple[np.ndarray, np.ndarray, str, str, str]] = None

        central = QWidget()
        root_v = QVBoxLayout(central)
        root_v.setContentsMargins(12, 12, 12, 12)
        root_v.setSpacing(10)
        self.setCentralWidget(central)

        top = QWidget()
        top_h = QHBoxLayout(top)
        top_h.setContentsMargins(0, 0, 0, 0)
        top_h.setSpacing(12)
        top_h.addWidget(self._build_params_box(), 2)
        top_h.addWidget(self._build_measurements_box(), 1)
        root_v.addWidget(top)

        root_v.addWidget(self._build_chart(), 1)
        root_v.addWidget(self._build_log_box())
        root_v.addWidget(self._build_bottom_bar())

        self._update_visibility()

    # ---------------- UI helpers ----------------

    def _row_with_units(self, edit: QLineEdit, units: str) -> QWidget:
        w = QWidget()
        h = QHBoxLayout(w)
        h.setContentsMargins(0, 0, 0, 0)
        h.setSpacing(6)
        h.addWidget(edit)
        if units:
            u = QLabel(units)
            u.setStyleSheet("color: #666;")
            h.addWidget(u)
        h.addStretch(1)
        return w

    def _mark_valid(self, edit: QLineEdit, ok: bool, msg: str = ""):
        if ok:
            edit.setStyleSheet("")
            edit.setToolTip("")
        else:
            edit.setStyleSheet(
                "background: #ffecec; border: 1px solid #cc4444;")
            edit.setToolTip(msg)

    def _log(self, msg: str):
        self.log_text.append(msg)

    def _warn(self, msg: str):
        self._log(f"Warning: {msg}")

    def _parse_float(self, edit: QLineEdit, name: str) -> float:
        try:
            return sigwave.safe_eval_float(edit.text())
        except ValueError as e:
            raise ValueError(f"{name}: {e}") from None

    def _validate_all(self):
        for edit, label in self._validation_targets:
            s = edit.text().strip()
            if not s:
                self._mark_valid(edit, True)
                continue
            try:
                sigwave.safe_eval_float(s)
                ok = True
            except ValueError:
                ok = False
            self._mark_valid(edit, ok,
                             f"Invalid {label}. Examples: 10, 2.5, 44.1e3, pi/2")

    # ---------------- Build sections ----------------

    def _build_params_box(self) -> QGroupBox:
        box = QGroupBox("Signal")
        g = QGridLayout(box)
        g.setColumnStretch(1, 1)
        g.setColumnStretch(3, 1)

        self.waveform_cb = QComboBox()
        for value in sigwave.WAVEFORM_CHOICES:
            self.waveform_cb.addItem(WAVEFORM_LABELS[value], value)
        self.waveform_cb.currentIndexChanged.connect(self._update_visibility)

        self.amplitude_edit = QLineEdit("1.0")
        self.freq_edit = QLineEdit("10.0")
        self.phase_edit = QLineEdit("0.0")
        self.fs_edit = QLineEdit("44100.0")
        self.dur_edit = QLineEdit("1.0")
        self.duty_edit = QLineEdit(str(sigwave.DEFAULT_DUTY_CYCLE))
        self.width_edit = QLineEdit(str(sigwave.DEFAULT_WIDTH))

        self._validation_targets = [
            (self.amplitude_edit, "amplitude"),
            (self.freq_edit, "frequency"),
            (self.phase_edit, "phase"),
            (self.fs_edit, "sample rate"),
            (self.dur_edit, "duration"),
            (self.duty_edit, "duty cycle"),
            (self.width_edit, "sawtooth width"),
        ]
        for edit, _label in self._validation_targets:
            edit.textChanged.connect(self._validate_all)

        g.addWidget(QLabel("Waveform:"), 0, 0)
        g.addWidget(self.waveform_cb, 0, 1)

        g.addWidget(QLabel("Amplitude:"), 0, 2)
        g.addWidget(self.amplitude_edit, 0, 3)

        g.addWidget(QLabel("Frequency:"), 1, 0)
        g.addWidget(self._row_with_units(self.freq_edit, "Hz"), 1, 1)

        g.addWidget(QLabel("Phase:"), 1, 2)
        g.addWidget(self._row_with_units(self.phase_edit, "rad"), 1, 3)

        g.addWidget(QLabel("Sample rate:"), 2, 0)
        g.addWidget(self._row_with_units(self.fs_edit, "Hz"), 2, 1)

        g.addWidget(QLabel("Duration:"), 2, 2)
        g.addWidget(self._row_with_units(self.dur_edit, "s"), 2, 3)

        self.duty_label = QLabel("Duty cycle:")
        self.duty_row = self._row_with_units(self.duty_edit, "%")
        g.addWidget(self.duty_label, 3, 0)
        g.addWidget(self.duty_row, 3, 1)

        self.width_label = QLabel("Sawtooth width:")
        self.width_row = self._row_with_units(self.width_edit, "(0-1)")
        g.addWidget(self.width_label, 3, 2)
        g.addWidget(self.width_row, 3, 3)

        hint = QLabel("Phase applies to the sine only.")
        hint.setStyleSheet("color: #666;")
        g.addWidget(hint, 4, 0, 1, 4)

        return box

    def _build_measurements_box(self) -> QGroupBox:
        box = QGroupBox("Measurements")
        v = QVBoxLayout(box)
        v.setContentsMargins(8, 8, 8, 8)
        self.metrics_text = QTextEdit()
        self.metrics_text.setReadOnly(True)
        self.metrics_text.setMinimumHeight(120)
        v.addWidget(self.metrics_text)
        return box

    def _build_chart(self) -> QWidget:
        self.series = QLineSeries()
        self.series.setUseOpenGL(False)
        self.chart = QChart()
        self.chart.setTitle("Generated signal")
        self.chart.addSeries(self.series)
        self.chart.legend().hide()
        self.axis_x = QValueAxis()
        self.axis_x.setTitleText("Time (s)")
        self.axis_y = QValueAxis()
        self.axis_y.setTitleText("Amplitude")
        self.chart.addAxis(self.axis_x, Qt.AlignBottom)
        self.chart.addAxis(self.axis_y, Qt.AlignLeft)
        self.series.attachAxis(self.axis_x)
        self.series.attachAxis(self.axis_y)
        self.chart_view = ChartView(self.chart)
        self.chart_view.setMinimumHeight(360)
        self.chart_view.setSizePolicy(
            QSizePolicy.Expanding, QSizePolicy.Expanding)
        return self.chart_view

    def _build_log_box(self) -> QGroupBox:
        box = QGroupBox("Log")
        v = QVBoxLayout(box)
        v.setContentsMargins(10, 10, 10, 10)
        self.log_text = QTextEdit()
        self.log_text.setReadOnly(True)
        self.log_text.setMaximumHeight(110)
        v.addWidget(self.log_text)
        return box

    def _build_bottom_bar(self) -> QWidget:
        bottom = QWidget()
        bottom_h = QHBoxLayout(bottom)
        bottom_h.setContentsMargins(0, 0, 0, 0)
        bottom_h.setSpacing(10)

        self.status_label = QLabel("Ready.")
        self.status_label.setSizePolicy(
            QSizePolicy.Expanding, QSizePolicy.Preferred)

        self.spectrum_chk = QCheckBox("Show spectrum")
        self.save_btn = QPushButton("Save PNG...")
        self.save_btn.setEnabled(False)
        self.save_btn.clicked.connect(self.on_save_png)
        self.plot_btn = QPushButton("Plot")
        self.plot_btn.clicked.connect(self.on_plot)

        bottom_h.addWidget(self.status_label)
        bottom_h.addWidget(self.spectrum_chk)
        bottom_h.addWidget(self.save_btn)
        bottom_h.addWidget(self.plot_btn)
        return bottom

    # ---------------- Visibility logic ----------------

    def _current_waveform(self) -> str:
        return self.waveform_cb.currentData()

    def _update_visibility(self):
        wf = self._current_waveform()
        is_square = wf == sigwave.Waveform.SQUARE.value
        is_saw = wf == sigwave.Waveform.SAWTOOTH.value
        self.duty_label.setVisible(is_square)
        self.duty_row.setVisible(is_square)
        self.width_label.setVisible(is_saw)
        self.width_row.setVisible(is_saw)
        self._validate_all()

    # ---------------- actions ----------------

    def _snapshot_params(self) -> Tuple[str, sigwave.SignalParameters, Optional[float]]:
        wf = self._current_waveform()
        params = sigwave.SignalParameters(
            amplitude=self._parse_float(self.amplitude_edit, "Amplitude"),
            frequency=self._parse_float(self.freq_edit, "Frequency"),
            phase=self._parse_float(self.phase_edit, "Phase"),
            fs=self._parse_float(self.fs_edit, "Sample rate"),
            duration=self._parse_float(self.dur_edit, "Duration"),
        )
        extra = None
        if wf == sigwave.Waveform.SQUARE.value:
            extra = self._parse_float(self.duty_edit, "Duty cycle")
        elif wf == sigwave.Waveform.SAWTOOTH.value:
            extra = self._parse_float(self.width_edit, "Sawtooth width")
        return wf, params, extra

    def on_plot(self):
        try:
            wf, p, extra = self._snapshot_params()
        except ValueError as e:
            QMessageBox.critical(
                self, "Error",
                f"Check that every field holds a valid number.\n\n{e}")
            return

        self._log(f"Plot requested: {wf}.")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                x = sigwave.generate(wf, p.amplitude, p.frequency, p.phase,
                                     p.fs, p.duration, extra)
            except sigwave.WaveformParameterError as e:
                for w in caught:
                    self._warn(str(w.message))
                self._on_error(str(e))
                return
            for w in caught:
                self._warn(str(w.message))

        if self.spectrum_chk.isChecked():
            mags = sigspectrum.magnitude_spectrum(x)
            freqs = sigspectrum.frequency_axis(mags.size, p.fs)
            self._show_series(freqs, mags, "Magnitude Spectrum (FFT)",
                              "Frequency (Hz)", "Magnitude")
            self._update_measurements(x, p.fs, mags)
        else:
            t = p.time_vector()
            self._show_series(t, x, "Generated signal",
                              "Time (s)", "Amplitude")
            self._update_measurements(x, p.fs, None)

        self.status_label.setText(f"Plotted {x.size} samples.")

    def _show_series(self, x: np.ndarray, y: np.ndarray,
                     title: str, xlabel: str, ylabel: str):
        self._last_series = (x, y, title, xlabel, ylabel)
        self.save_btn.setEnabled(x.size > 0)

        step = max(1, x.size // MAX_PLOT_POINTS)
        xs = x[::step]
        ys = y[::step]
        points = [QPointF(float(a), float(b)) for a, b in zip(xs, ys)]
        self.series.replace(points)

        self.chart.setTitle(title)
        self.axis_x.setTitleText(xlabel)
        self.axis_y.setTitleText(ylabel)
        if xs.size:
            x_hi = float(xs[-1]) if xs[-1] > xs[0] else float(xs[0]) + 1.0
            self.axis_x.setRange(float(xs[0]), x_hi)
            finite = ys[np.isfinite(ys)]
            y_lo = float(np.min(finite)) if finite.size else -1.0
            y_hi = float(np.max(finite)) if finite.size else 1.0
            if y_lo == y_hi:
                y_lo -= 1.0
                y_hi += 1.0
            pad = 0.05 * (y_hi - y_lo)
            self.axis_y.setRange(y_lo - pad, y_hi + pad)
        self.chart.update()
        self.chart_view.repaint()

    def _update_measurements(self, x: np.ndarray, fs: float,
                             mags: Optional[np.ndarray]):
        if x.size == 0:
            self.metrics_text.setPlainText("No samples (fs * duration < 1).")
            return

        rms = float(np.sqrt(np.mean(x ** 2)))
        peak = float(np.max(np.abs(x)))
        lines = [
            f"Samples: {x.size}",
            f"Duration: {x.size / fs:.6f} s",
            f"RMS: {rms:.6f}",
            f"Peak: {peak:.6f}",
        ]
        if mags is not None and mags.size:
            lines += [
                f"Padded length: {sigspectrum.padded_length(x.size)}",
                f"Bins: {mags.size} ({fs / (2.0 * mags.size):.4f} Hz/bin)",
                f"Peak frequency: {sigspectrum.peak_frequency(mags, fs):.3f} Hz",
            ]
        self.metrics_text.setPlainText("\n".join(lines))

    def on_save_png(self):
        if self._last_series is None:
            return
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Save plot",
            "plot.png",
            "PNG images (*.png);;All files (*.*)",
        )
        if not path:
            return
        x, y, title, xlabel, ylabel = self._last_series
        try:
            sigwave.plot_series(path, x, y, title, xlabel, ylabel)
        except OSError as e:
            self._on_error(f"Could not save plot: {e}")
            return
        self._log(f"Saved plot to '{path}'.")

    def _on_error(self, err: str):
        self.status_label.setText("Error.")
        self._log(f"Error: {err}")
        QMessageBox.critical(self, "Error", err)


def main():
    app = QApplication([])
    win = MainWindow()
    win.show()
    app.exec()


if __name__ == "__main__":
    main()

# ui_components.py
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QComboBox, QPushButton,
    QLabel, QGroupBox, QFormLayout, QDoubleSpinBox, QSlider,
    QStatusBar, QScrollArea, QFrame, QSizePolicy
)
from PyQt6.QtCore import Qt, pyqtSignal
from typing import Dict, Any, List
import logging

from config import AnalysisConfig, AppConfig, WINDOW_TYPES
from signals import SignalCollection
from waveforms import SignalDescriptor, WaveformKind

logger = logging.getLogger(__name__)


class ParameterControl(QWidget):
    """Combined slider and spinbox control for parameters"""
    valueChanged = pyqtSignal(float)

    def __init__(self, min_val: float, max_val: float, value: float, decimals: int = 1,
                 suffix: str = "", step: float = None):
        super().__init__()
        self.slider_scale = 10 ** decimals
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        self.spinbox = QDoubleSpinBox()
        self.spinbox.setRange(min_val, max_val)
        self.spinbox.setDecimals(decimals)
        self.spinbox.setSuffix(suffix)
        self.spinbox.setValue(value)
        if step:
            self.spinbox.setSingleStep(step)
        self.spinbox.setFixedWidth(100)

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(int(min_val * self.slider_scale), int(max_val * self.slider_scale))
        self.slider.setValue(int(value * self.slider_scale))

        self.spinbox.valueChanged.connect(self._spinbox_changed)
        self.slider.valueChanged.connect(self._slider_changed)

        layout.addWidget(self.spinbox)
        layout.addWidget(self.slider, stretch=1)

    def _spinbox_changed(self, value):
        self.slider.blockSignals(True)
        self.slider.setValue(int(value * self.slider_scale))
        self.slider.blockSignals(False)
        self.valueChanged.emit(value)

    def _slider_changed(self, value):
        actual = value / self.slider_scale
        self.spinbox.blockSignals(True)
        self.spinbox.setValue(actual)
        self.spinbox.blockSignals(False)
        self.valueChanged.emit(actual)

    def value(self) -> float:
        return self.spinbox.value()

    def setValue(self, value: float):
        self.spinbox.setValue(value)


class SignalWidget(QFrame):
    """Editor for a single signal descriptor"""
    parameterChanged = pyqtSignal(dict)
    removeRequested = pyqtSignal()

    def __init__(self, descriptor: SignalDescriptor, number: int, analysis: AnalysisConfig,
                 app_config: AppConfig, parent=None):
        super().__init__(parent)
        self.descriptor = descriptor
        self.number = number
        self.analysis = analysis
        self.app_config = app_config
        self.setFrameStyle(QFrame.Shape.Panel | QFrame.Shadow.Raised)
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout(self)

        # Header with remove button
        header = QHBoxLayout()
        self.title_label = QLabel()
        self.title_label.setStyleSheet("font-weight: bold;")
        self.set_number(self.number)
        header.addWidget(self.title_label)

        remove_btn = QPushButton("×")
        remove_btn.setFixedSize(20, 20)
        remove_btn.clicked.connect(self.removeRequested.emit)
        header.addWidget(remove_btn)
        layout.addLayout(header)

        params_layout = QFormLayout()

        self.kind_combo = QComboBox()
        for kind in WaveformKind:
            self.kind_combo.addItem(kind.label, kind.value)
        self.kind_combo.setCurrentIndex(self.kind_combo.findData(self.descriptor.kind.value))
        self.kind_combo.currentIndexChanged.connect(
            lambda _: self.on_param_changed('kind', self.kind_combo.currentData()))

        # Frequency slider stops at Nyquist, values above it would only alias
        self.frequency = ParameterControl(0.0, self.analysis.nyquist,
                                          min(self.descriptor.frequency, self.analysis.nyquist), 0, " Hz")
        self.amplitude = ParameterControl(0.0, self.app_config.max_amplitude,
                                          self.descriptor.amplitude, 2, "", 0.1)
        self.frequency.valueChanged.connect(lambda v: self.on_param_changed('frequency', v))
        self.amplitude.valueChanged.connect(lambda v: self.on_param_changed('amplitude', v))

        params_layout.addRow("Waveform:", self.kind_combo)
        params_layout.addRow("Frequency:", self.frequency)
        params_layout.addRow("Amplitude:", self.amplitude)
        layout.addLayout(params_layout)

    def set_number(self, number: int):
        self.number = number
        self.title_label.setText(f"Signal {number}")

    def on_param_changed(self, param: str, value):
        self.parameterChanged.emit({param: value})


class SignalPanel(QGroupBox):
    """List of signal editors mirroring a SignalCollection"""

    def __init__(self, collection: SignalCollection, analysis: AnalysisConfig, app_config: AppConfig):
        super().__init__("Signals")
        self.collection = collection
        self.analysis = analysis
        self.app_config = app_config
        self.widgets: List[SignalWidget] = []
        self.init_ui()
        self.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Expanding)
        self.setMinimumHeight(200)

        # Existing descriptors get editors up front
        for descriptor in self.collection:
            self._add_widget(descriptor)

    def init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setSpacing(4)
        main_layout.setContentsMargins(6, 8, 6, 8)

        add_btn = QPushButton("Add Signal")
        add_btn.clicked.connect(lambda: self.add_signal())
        main_layout.addWidget(add_btn)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        scroll.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)

        self.signal_container = QWidget()
        self.signal_layout = QVBoxLayout(self.signal_container)
        self.signal_layout.setSpacing(4)
        self.signal_layout.setContentsMargins(4, 4, 4, 4)
        self.signal_layout.addStretch()

        scroll.setWidget(self.signal_container)
        main_layout.addWidget(scroll, stretch=1)

    def add_signal(self, descriptor: SignalDescriptor = None):
        """Add a signal to the collection and create its editor"""
        if descriptor is None:
            descriptor = SignalDescriptor(WaveformKind.SINE, self.app_config.default_frequency,
                                          self.app_config.default_amplitude)
        # Editor first so the widget list matches the collection when listeners run
        self._add_widget(descriptor)
        self.collection.add(descriptor)

    def _add_widget(self, descriptor: SignalDescriptor):
        widget = SignalWidget(descriptor, len(self.widgets) + 1, self.analysis, self.app_config)
        widget.parameterChanged.connect(lambda changes, w=widget: self.update_signal(w, changes))
        widget.removeRequested.connect(lambda w=widget: self.remove_signal(w))
        self.signal_layout.insertWidget(len(self.widgets), widget)
        self.widgets.append(widget)

    def update_signal(self, widget: SignalWidget, changes: Dict[str, Any]):
        if widget in self.widgets:
            self.collection.update(self.widgets.index(widget), **changes)

    def remove_signal(self, widget: SignalWidget):
        """Remove a signal and renumber the remaining editors"""
        if widget not in self.widgets:
            return
        index = self.widgets.index(widget)
        self.widgets.pop(index)
        self.signal_layout.removeWidget(widget)
        widget.deleteLater()
        for i, remaining in enumerate(self.widgets):
            remaining.set_number(i + 1)
        self.collection.remove(index)


class AnalyzerPanel(QGroupBox):
    window_changed = pyqtSignal(str)

    def __init__(self, analysis: AnalysisConfig):
        super().__init__("Analyzer")
        self.analysis = analysis
        self.init_ui()

    def init_ui(self):
        layout = QFormLayout(self)

        self.window_type = QComboBox()
        self.window_type.addItems(list(WINDOW_TYPES))
        self.window_type.setCurrentText(self.analysis.window_type)
        self.window_type.currentTextChanged.connect(self.window_changed.emit)
        layout.addRow("Window:", self.window_type)

        layout.addRow("Buffer size:", QLabel(f"{self.analysis.buffer_size} samples"))
        layout.addRow("Sample rate:", QLabel(f"{self.analysis.sample_rate} Hz"))
        layout.addRow("Bandwidth:", QLabel(f"{self.analysis.bandwidth:.2f} Hz"))


class StatusBar(QStatusBar):
    def __init__(self):
        super().__init__()
        self.setSizeGripEnabled(False)

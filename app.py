# app.py
import sys
import numpy as np
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QLabel,
    QMenuBar, QMenu, QMessageBox
)
from PyQt6.QtCore import QTimer, QEvent
from PyQt6.QtGui import QAction, QColor, QLinearGradient, QBrush
import pyqtgraph as pg
import logging

# Local imports
from config import SettingsManager, VERSION
from processor import SpectrumProcessor, SpectrumResult, band_edge
from signals import SignalCollection
from waveforms import SignalDescriptor, WaveformKind
from ui_components import SignalPanel, AnalyzerPanel, StatusBar

# Get logger but don't set level - it's controlled by AppConfig
logger = logging.getLogger(__name__)

BAR_GRADIENT = ("#DA70D6", "#9932CC", "#2E0854")


class SignalScopeUI(QMainWindow):
    def __init__(self, settings_manager: SettingsManager = None):
        super().__init__()
        self.settings_manager = settings_manager or SettingsManager()
        settings = self.settings_manager.load_settings()
        self.analysis = self.settings_manager.get_analysis_config(settings)
        self.app_config = self.settings_manager.get_app_config(settings)

        self.setWindowTitle(f"Signal Scope v{VERSION}")
        self.setGeometry(100, 100, self.app_config.window_width, self.app_config.window_height)

        # Start with one signal so there is something to look at
        self.collection = SignalCollection([
            SignalDescriptor(WaveformKind.SINE, self.app_config.default_frequency,
                             self.app_config.default_amplitude)
        ])
        # Recomputation is pulled by the debounce timer, not pushed on every edit
        self.processor = SpectrumProcessor(self.analysis, self.collection, auto_update=False)
        self.processor.subscribe(self.update_plot)

        self.init_ui()

        # Setup debounce timer
        self.timer = QTimer()
        self.timer.setSingleShot(True)
        self.timer.setInterval(self.app_config.debounce_ms)
        self.timer.timeout.connect(self.processor.refresh)
        self.collection.subscribe(lambda _: self.schedule_update())

        self.analyzer_panel.window_changed.connect(self.on_window_changed)

        self.processor.refresh()

    def init_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QHBoxLayout(central_widget)

        main_layout.addWidget(self.create_control_panel())
        main_layout.addWidget(self.create_graph_panel(), stretch=2)

        self.setMenuBar(self.create_menu_bar())

        # Create status bar with coordinate label
        self.statusbar = StatusBar()
        self.coord_label = QLabel("")
        self.statusbar.addPermanentWidget(self.coord_label)
        self.setStatusBar(self.statusbar)

    def create_menu_bar(self) -> QMenuBar:
        menubar = QMenuBar()

        file_menu = QMenu("&File", self)
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)
        menubar.addMenu(file_menu)

        signal_menu = QMenu("&Signals", self)
        add_action = QAction("&Add Signal", self)
        add_action.triggered.connect(lambda: self.signal_panel.add_signal())
        signal_menu.addAction(add_action)
        menubar.addMenu(signal_menu)

        return menubar

    def create_control_panel(self) -> QWidget:
        control_panel = QWidget()
        layout = QVBoxLayout(control_panel)
        layout.setSpacing(4)
        layout.setContentsMargins(4, 4, 4, 4)
        control_panel.setFixedWidth(380)

        self.analyzer_panel = AnalyzerPanel(self.analysis)
        self.signal_panel = SignalPanel(self.collection, self.analysis, self.app_config)
        layout.addWidget(self.analyzer_panel)
        layout.addWidget(self.signal_panel, stretch=1)
        return control_panel

    def create_graph_panel(self) -> QWidget:
        self.graph_widget = pg.PlotWidget()
        self.setup_graph()
        return self.graph_widget

    def setup_graph(self):
        """Initializes the PyQtGraph bar chart"""
        self.graph_widget.setBackground('w')
        plot_item = self.graph_widget.getPlotItem()
        plot_item.showGrid(x=True, y=True, alpha=0.3)
        self.graph_widget.setLabel('left', 'Level (dB)')
        self.graph_widget.setLabel('bottom', 'Frequency (Hz)')
        self.graph_widget.setXRange(0, band_edge(self.analysis), padding=0)
        self.graph_widget.setMouseEnabled(x=True, y=False)

        # Vertical gradient from the 0 dB ceiling down to the floor
        gradient = QLinearGradient(0, 0, 0, 1)
        gradient.setCoordinateMode(QLinearGradient.CoordinateMode.ObjectMode)
        for offset, color in zip((0.0, 0.5, 1.0), BAR_GRADIENT):
            gradient.setColorAt(offset, QColor(color))

        self.bars = pg.BarGraphItem(x=[], height=[], width=self.analysis.bandwidth,
                                    brush=QBrush(gradient), pen=pg.mkPen(None))
        self.graph_widget.addItem(self.bars)

        self.message = pg.TextItem("", color=(80, 80, 80), anchor=(0.5, 0.5))
        self.graph_widget.addItem(self.message)
        self.message.setPos(band_edge(self.analysis) / 2, -30)

        self.graph_widget.scene().sigMouseMoved.connect(self.mouse_moved)
        self.graph_widget.installEventFilter(self)

    def schedule_update(self):
        """Restart the debounce timer after an edit"""
        self.timer.start()

    def update_plot(self, result: SpectrumResult):
        """Draw a freshly computed spectrum"""
        try:
            if not result.has_data:
                self.bars.setOpts(x=[], height=[], y0=[])
                if result.status == SpectrumResult.NO_SIGNALS:
                    text = "No signals"
                elif result.status == SpectrumResult.ERROR:
                    text = f"Analysis error: {result.error}"
                else:
                    text = "Silent signal"
                self.message.setText(text)
                self.statusbar.showMessage(text)
                return

            floor = result.floor_db
            # Silent bands sit on the floor of the chart
            levels = np.where(np.isfinite(result.levels), result.levels, floor)
            self.bars.setOpts(x=result.frequencies, y0=np.full(len(levels), floor),
                              height=levels - floor, width=self.analysis.bandwidth)
            self.graph_widget.setYRange(floor, 0.0, padding=0)
            self.message.setPos(band_edge(self.analysis) / 2, floor / 2)
            self.message.setText("")
            self.statusbar.showMessage(f"{result.signal_count} signal(s), floor {floor:.1f} dB")
        except Exception as e:
            logger.error(f"Plot error details: {str(e)}")

    def on_window_changed(self, window_type: str):
        try:
            self.processor.set_window_type(window_type)
            self.analysis = self.processor.config
            self.schedule_update()
        except ValueError as e:
            logger.error(f"Settings update error: {str(e)}")
            self.show_error("Settings Error", f"Error updating analyzer settings: {str(e)}")

    def show_error(self, title: str, message: str):
        QMessageBox.critical(self, title, message)

    def eventFilter(self, obj, event) -> bool:
        if obj is self.graph_widget and event.type() == QEvent.Type.Leave:
            # Clear coordinates when mouse leaves the widget
            self.coord_label.setText("")
        return super().eventFilter(obj, event)

    def mouse_moved(self, pos):
        """Show frequency and level under the cursor"""
        if self.graph_widget.sceneBoundingRect().contains(pos):
            point = self.graph_widget.getPlotItem().vb.mapSceneToView(pos)
            x, y = point.x(), point.y()
            freq_str = f"{x/1000:.1f} kHz" if x >= 1000 else f"{x:.0f} Hz"
            self.coord_label.setText(f"Frequency: {freq_str}, Level: {y:.1f} dB")
        else:
            self.coord_label.setText("")

    def closeEvent(self, event):
        """Save preferences and detach the processor"""
        try:
            self.timer.stop()
            self.app_config.window_width = self.width()
            self.app_config.window_height = self.height()
            self.settings_manager.save_settings({
                'analysis': self.analysis.to_dict(),
                'app': self.app_config.to_dict(),
            })
            self.processor.close()
        except Exception as e:
            logger.error(f"Shutdown error: {e}")
        finally:
            event.accept()


def main():
    app = QApplication(sys.argv)
    window = SignalScopeUI()
    window.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()

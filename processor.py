# processor.py
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from scipy import signal
import logging

from config import AnalysisConfig
from errors import (SignalScopeError, NoSignalsError, DegenerateSpectrumError,
                    BandIndexError, BufferSizeError)
from mixer import SignalMixer
from signals import SignalCollection
from waveforms import WaveformGenerator

logger = logging.getLogger(__name__)

# Composite peaks at or below this many ulps per unit of summed amplitude count as silence
SILENCE_TOLERANCE = 8 * np.finfo(np.float64).eps


def make_window(window_type: str, size: int) -> np.ndarray:
    """Create an analysis window of the requested type"""
    if window_type == 'hanning':
        return np.hanning(size)
    elif window_type == 'hamming':
        return np.hamming(size)
    elif window_type == 'blackman':
        return np.blackman(size)
    elif window_type == 'flattop':
        return signal.windows.flattop(size)
    elif window_type == 'rectangular':
        return np.ones(size)
    raise ValueError(f"Unknown window type: {window_type}")


def forward_transform(buffer: np.ndarray, config: AnalysisConfig,
                      window: Optional[np.ndarray] = None) -> np.ndarray:
    """Magnitude spectrum of a real buffer, buffer_size // 2 bands.

    Magnitudes are scaled as 2 * |X[k]| / N so a full-scale sine centred on
    a band reads 1.0. The window's coherent gain is compensated.
    """
    data = np.asarray(buffer, dtype=np.float64)
    if data.shape != (config.buffer_size,):
        raise BufferSizeError(f"Expected {config.buffer_size} samples, got {data.shape}")

    if window is None:
        window = make_window(config.window_type, config.buffer_size)

    # Normalize window to preserve amplitude
    windowed = data * (window / np.mean(window))

    spectrum = np.fft.rfft(windowed)[:config.band_count]  # Drop the Nyquist bin
    return 2.0 * np.abs(spectrum) / config.buffer_size


def to_decibels(magnitudes: np.ndarray) -> np.ndarray:
    """20 * log10(m), with zero magnitudes mapped to -inf"""
    magnitudes = np.asarray(magnitudes, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return 20.0 * np.log10(magnitudes)


def condition(magnitudes: np.ndarray) -> np.ndarray:
    """Convert magnitudes to decibels normalized to a 0 dB peak.

    Silent bands stay at -inf and are ignored when finding the peak. Raises
    DegenerateSpectrumError when no band has a finite level.
    """
    spec_db = to_decibels(magnitudes)
    finite = np.isfinite(spec_db)
    if not finite.any():
        raise DegenerateSpectrumError("Spectrum has no finite level to normalize against")

    peak = spec_db[finite].max()
    return spec_db - peak


def band_frequency(index: int, config: AnalysisConfig) -> float:
    """Centre frequency in Hz of the band at the given index"""
    if isinstance(index, (bool, np.bool_)) or not isinstance(index, (int, np.integer)):
        raise BandIndexError(f"Band index must be an integer, got {index!r}")
    if not 0 <= index < config.band_count:
        raise BandIndexError(f"Band index {index} out of range [0, {config.band_count})")
    return config.bandwidth * index + config.bandwidth / 2.0


def band_frequencies(config: AnalysisConfig) -> np.ndarray:
    """Centre frequencies of all bands"""
    return config.bandwidth * np.arange(config.band_count) + config.bandwidth / 2.0


def band_edge(config: AnalysisConfig) -> float:
    """Upper end of the frequency axis, one band past the last centre"""
    return config.bandwidth * config.band_count + config.bandwidth / 2.0


@dataclass
class SpectrumResult:
    # Result status
    OK = "ok"
    NO_SIGNALS = "no_signals"
    SILENT = "silent"
    ERROR = "error"

    status: str
    frequencies: np.ndarray = field(default_factory=lambda: np.array([]))
    levels: np.ndarray = field(default_factory=lambda: np.array([]))
    signal_count: int = 0
    error: str = ""

    @property
    def has_data(self) -> bool:
        return self.status == self.OK

    @property
    def floor_db(self) -> float:
        """Lowest finite level, or 0.0 when there is none"""
        finite = self.levels[np.isfinite(self.levels)] if len(self.levels) else self.levels
        return float(finite.min()) if len(finite) else 0.0


class SpectrumProcessor:
    """Runs descriptors -> composite buffer -> conditioned spectrum.

    When bound to a SignalCollection every mutation marks the last result
    stale; with auto_update on the spectrum is recomputed immediately and
    listeners receive the new SpectrumResult.
    """

    def __init__(self, config: AnalysisConfig, collection: Optional[SignalCollection] = None,
                 generator: Optional[WaveformGenerator] = None, auto_update: bool = True):
        self.config = config
        self.generator = generator or WaveformGenerator()
        self.mixer = SignalMixer(config, self.generator)
        self.auto_update = auto_update
        self.collection = None
        self.window = None
        self._unsubscribe = None
        self._listeners: List[Callable[[SpectrumResult], None]] = []
        self._last_result: Optional[SpectrumResult] = None
        self._stale = True

        self.update_window()
        if collection is not None:
            self.set_collection(collection)

    def update_window(self):
        """Update the window function based on current settings"""
        logger.debug(f"Updating window: {self.config.window_type}, size {self.config.buffer_size}")
        self.window = make_window(self.config.window_type, self.config.buffer_size)

    def set_window_type(self, window_type: str):
        """Switch the analysis window, keeping buffer size and sample rate"""
        self.config = AnalysisConfig(self.config.buffer_size, self.config.sample_rate, window_type)
        self.mixer.config = self.config
        self.update_window()
        self._invalidate()

    def set_collection(self, collection: SignalCollection):
        """Bind to a signal collection and follow its changes"""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self.collection = collection
        self._unsubscribe = collection.subscribe(self._on_collection_changed)
        self._invalidate()

    def subscribe(self, callback: Callable[[SpectrumResult], None]) -> Callable[[], None]:
        """Register a spectrum-changed callback and return its remover"""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def last_result(self) -> Optional[SpectrumResult]:
        return self._last_result

    def analyze(self, descriptors) -> np.ndarray:
        """Conditioned spectrum of the given descriptors; raises on degenerate input"""
        descriptors = list(descriptors)
        total = self.mixer.mix(descriptors)

        # Cancelling signals leave rounding residue proportional to their amplitudes
        tolerance = SILENCE_TOLERANCE * sum(abs(d.amplitude) for d in descriptors)
        if np.max(np.abs(total)) <= tolerance:
            raise DegenerateSpectrumError(f"Composite peak {np.max(np.abs(total))} within rounding of silence")

        magnitudes = forward_transform(total, self.config, self.window)
        return condition(magnitudes)

    def process(self, descriptors=None) -> SpectrumResult:
        """Recompute the spectrum, reporting missing or silent input as a status"""
        if descriptors is None:
            descriptors = self.collection.descriptors() if self.collection is not None else ()
        descriptors = list(descriptors)

        try:
            levels = self.analyze(descriptors)
            result = SpectrumResult(SpectrumResult.OK, band_frequencies(self.config), levels,
                                    len(descriptors))
        except NoSignalsError:
            logger.debug("No signals configured")
            result = SpectrumResult(SpectrumResult.NO_SIGNALS)
        except DegenerateSpectrumError:
            logger.info(f"Composite of {len(descriptors)} signals is silent")
            result = SpectrumResult(SpectrumResult.SILENT, signal_count=len(descriptors))
        except SignalScopeError as e:
            logger.error(f"Processing error: {str(e)}")
            result = SpectrumResult(SpectrumResult.ERROR, signal_count=len(descriptors), error=str(e))
        except Exception as e:
            logger.error(f"Processing error: {str(e)}")
            raise

        self._last_result = result
        self._stale = False
        return result

    def refresh(self) -> SpectrumResult:
        """Recompute and notify listeners"""
        result = self.process()
        for callback in list(self._listeners):
            callback(result)
        return result

    def close(self):
        """Detach from the collection"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.collection = None

    def _on_collection_changed(self, collection: SignalCollection):
        self._invalidate()

    def _invalidate(self):
        self._stale = True
        self._last_result = None
        if self.auto_update and self.collection is not None:
            self.refresh()

# waveforms.py
import numpy as np
from scipy import signal
from dataclasses import dataclass, asdict, fields, replace
from enum import Enum
from typing import Optional
import logging

from config import AnalysisConfig

logger = logging.getLogger(__name__)


class WaveformKind(Enum):
    SINE = 'sine'
    TRIANGLE = 'triangle'
    SAW = 'saw'
    SQUARE = 'square'
    NOISE = 'noise'

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, name) -> 'WaveformKind':
        """Accept a WaveformKind, its value or its display label"""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for kind in cls:
            if kind.value == key:
                return kind
        raise ValueError(f"Unknown waveform kind: {name}")


@dataclass(frozen=True)
class SignalDescriptor:
    """Parameters of one signal generator.

    Frequency is meaningful in [0, sample_rate / 2] and amplitude in
    [0, inf); values outside are passed through and alias or invert.
    """
    kind: WaveformKind = WaveformKind.SINE
    frequency: float = 440.0
    amplitude: float = 1.0

    def __post_init__(self):
        # Allow plain strings for the kind, normalize to the enum
        object.__setattr__(self, 'kind', WaveformKind.parse(self.kind))

    def replace(self, **changes) -> 'SignalDescriptor':
        return replace(self, **changes)

    def to_dict(self) -> dict:
        d = asdict(self)
        d['kind'] = self.kind.value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> 'SignalDescriptor':
        """Create descriptor from dictionary, ignoring unknown fields"""
        valid_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered_data)


class WaveformGenerator:
    def __init__(self, rng_type: str = 'uniform', seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)
        self.rng_type = rng_type

    def generate(self, kind, frequency: float, amplitude: float,
                 buffer_size: int, sample_rate: int) -> np.ndarray:
        """Generate one buffer of samples for the given waveform"""
        kind = WaveformKind.parse(kind)
        logger.debug(f"Generating {kind.label}: {frequency} Hz, amplitude {amplitude}, {buffer_size} samples")

        if kind is WaveformKind.NOISE:
            data = self._generate_noise(buffer_size)
        else:
            t = np.arange(buffer_size) / sample_rate
            phase = 2 * np.pi * frequency * t
            if kind is WaveformKind.SINE:
                data = np.sin(phase)
            elif kind is WaveformKind.TRIANGLE:
                data = signal.sawtooth(phase, width=0.5)
            elif kind is WaveformKind.SAW:
                data = signal.sawtooth(phase)
            else:  # square
                data = signal.square(phase)

        return amplitude * data

    def generate_descriptor(self, descriptor: SignalDescriptor, config: AnalysisConfig) -> np.ndarray:
        return self.generate(descriptor.kind, descriptor.frequency, descriptor.amplitude,
                             config.buffer_size, config.sample_rate)

    def _generate_noise(self, frames: int) -> np.ndarray:
        """Generate white noise, new values on every call"""
        if self.rng_type == 'uniform':
            return self._rng.uniform(-1.0, 1.0, frames)
        else:  # standard_normal
            return self._rng.standard_normal(frames)

    def set_seed(self, seed: Optional[int]):
        """Set random seed"""
        self._rng = np.random.default_rng(seed)

    def set_rng_type(self, rng_type: str):
        if rng_type not in ('uniform', 'standard_normal'):
            raise ValueError(f"Unknown RNG type: {rng_type}")
        self.rng_type = rng_type

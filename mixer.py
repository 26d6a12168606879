# mixer.py
import numpy as np
from typing import Iterable, Optional
import logging

from config import AnalysisConfig
from errors import NoSignalsError, GeneratorContractError
from waveforms import SignalDescriptor, WaveformGenerator

logger = logging.getLogger(__name__)


class SignalMixer:
    """Sums the buffers of several signal generators into one composite buffer.

    Amplitudes accumulate linearly: no averaging or clipping is applied, so
    several full-scale signals can leave the [-1, 1] range.
    """

    def __init__(self, config: AnalysisConfig, generator: Optional[WaveformGenerator] = None):
        self.config = config
        self.generator = generator or WaveformGenerator()

    def mix(self, descriptors: Iterable[SignalDescriptor]) -> np.ndarray:
        descriptors = list(descriptors)
        if not descriptors:
            raise NoSignalsError("No signals configured")

        total = self._generate(descriptors[0])
        for descriptor in descriptors[1:]:
            total = total + self._generate(descriptor)

        logger.debug(f"Mixed {len(descriptors)} signals into {len(total)} samples")
        return total

    def _generate(self, descriptor: SignalDescriptor) -> np.ndarray:
        data = np.asarray(self.generator.generate_descriptor(descriptor, self.config), dtype=np.float64)
        if data.shape != (self.config.buffer_size,):
            raise GeneratorContractError(
                f"Generator returned {data.shape} samples for {descriptor.kind.label}, "
                f"expected {self.config.buffer_size}")
        return data


def mix(descriptors: Iterable[SignalDescriptor], config: AnalysisConfig,
        generator: Optional[WaveformGenerator] = None) -> np.ndarray:
    """Sum the generator output of every descriptor into one buffer"""
    return SignalMixer(config, generator).mix(descriptors)

# errors.py


class SignalScopeError(Exception):
    """Base error for the signal analysis pipeline."""


class InvalidConfigError(SignalScopeError, ValueError):
    """Raised when an analysis configuration cannot be used."""


class NoSignalsError(SignalScopeError, ValueError):
    """Raised when a mix is requested without any signal descriptors."""


class DegenerateSpectrumError(SignalScopeError, ValueError):
    """Raised when a spectrum has no finite decibel value to normalize against."""


class BandIndexError(SignalScopeError, IndexError):
    """Raised when a band index falls outside the analyzed half spectrum."""


class BufferSizeError(SignalScopeError, ValueError):
    """Raised when a buffer does not match the configured buffer size."""


class GeneratorContractError(SignalScopeError, RuntimeError):
    """Raised when a waveform generator returns a buffer of the wrong length."""

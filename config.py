# config.py
from dataclasses import dataclass, asdict, fields
from typing import Dict, Any
import json
import numbers
import os
from pathlib import Path
import logging

from errors import InvalidConfigError

# Configure logging with a default level
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.ERROR  # Matches AppConfig default
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

DEFAULT_BUFFER_SIZE = 2048
DEFAULT_SAMPLE_RATE = 44100

WINDOW_TYPES = ('rectangular', 'hanning', 'hamming', 'blackman', 'flattop')


@dataclass(frozen=True)
class AnalysisConfig:
    """Sampling and analysis settings, fixed for the lifetime of a pipeline.

    buffer_size is the number of samples in one composite buffer. With the
    default 2048 samples at 44.1 kHz a buffer covers about 46 ms of signal;
    doubling it either doubles the covered time or the sample rate.
    """
    buffer_size: int = DEFAULT_BUFFER_SIZE
    sample_rate: int = DEFAULT_SAMPLE_RATE
    window_type: str = 'rectangular'

    def __post_init__(self):
        for name in ('buffer_size', 'sample_rate'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
        if self.buffer_size <= 0 or self.buffer_size % 2 != 0:
            raise InvalidConfigError(f"buffer_size must be a positive even number, got {self.buffer_size}")
        if self.sample_rate <= 0:
            raise InvalidConfigError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.window_type not in WINDOW_TYPES:
            raise InvalidConfigError(f"Unknown window type: {self.window_type}")

    @property
    def bandwidth(self) -> float:
        """Width in Hz of one frequency band"""
        return 2.0 * self.sample_rate / 2.0 / self.buffer_size

    @property
    def nyquist(self) -> float:
        """Highest frequency representable without aliasing"""
        return self.sample_rate / 2.0

    @property
    def band_count(self) -> int:
        """Number of bands in the non-redundant half of the spectrum"""
        return self.buffer_size // 2

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'AnalysisConfig':
        """Create config from dictionary, ignoring unknown fields"""
        valid_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered_data)


@dataclass
class AppConfig:
    # Logging settings
    log_level: str = 'ERROR'  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL

    # Recompute at most once per interval while sliders are dragged
    debounce_ms: int = 30

    # Window settings
    window_width: int = 1200
    window_height: int = 700

    # Defaults for newly added signals
    default_frequency: float = 440.0
    default_amplitude: float = 1.0
    max_amplitude: float = 3.0

    def __post_init__(self):
        # Set the global logging level when AppConfig is instantiated
        logging.getLogger().setLevel(self.log_level)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'AppConfig':
        """Create config from dictionary, ignoring unknown fields"""
        valid_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered_data)


class SettingsManager:
    """Loads and stores analyzer and window preferences as JSON.

    Signal sets are not stored; only the settings that shape the pipeline
    and the window.
    """

    def __init__(self, app_name: str = "signal_scope", settings_file: Path = None):
        self.app_name = app_name
        self.settings_file = settings_file or self._get_settings_path()
        self.default_settings = {
            'analysis': AnalysisConfig().to_dict(),
            'app': AppConfig().to_dict(),
        }

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings path"""
        if os.name == 'nt':  # Windows
            base_path = Path(os.getenv('APPDATA', Path.home()))
        else:  # Unix/Linux/Mac
            base_path = Path.home() / '.config'
        return base_path / self.app_name / 'settings.json'

    def save_settings(self, settings: Dict[str, Any]):
        """Save settings to file"""
        try:
            # Ensure directory exists
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w') as f:
                json.dump(settings, f, indent=4)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    def load_settings(self) -> Dict[str, Any]:
        """Load settings from file"""
        try:
            if self.settings_file.exists():
                with open(self.settings_file, 'r') as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    return self._merge_settings(self.default_settings, loaded)
                logger.error(f"Ignoring settings file with unexpected content: {self.settings_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading settings: {e}")
        return self._merge_settings(self.default_settings, {})

    def _merge_settings(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge settings, with override taking priority"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_settings(result[key], value)
            else:
                result[key] = value
        return result

    def get_analysis_config(self, settings: Dict[str, Any] = None) -> AnalysisConfig:
        """Build the analysis config, falling back to defaults on bad values"""
        settings = settings if settings is not None else self.load_settings()
        try:
            return AnalysisConfig.from_dict(settings.get('analysis', {}))
        except (InvalidConfigError, TypeError) as e:
            logger.error(f"Invalid analysis settings, using defaults: {e}")
            return AnalysisConfig()

    def get_app_config(self, settings: Dict[str, Any] = None) -> AppConfig:
        settings = settings if settings is not None else self.load_settings()
        try:
            return AppConfig.from_dict(settings.get('app', {}))
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid app settings, using defaults: {e}")
            return AppConfig()

import numpy as np
import pytest

from config import AnalysisConfig
from waveforms import SignalDescriptor, WaveformGenerator, WaveformKind


def test_parse_accepts_value_label_and_enum() -> None:
    assert WaveformKind.parse("saw") is WaveformKind.SAW
    assert WaveformKind.parse("Triangle") is WaveformKind.TRIANGLE
    assert WaveformKind.parse(WaveformKind.NOISE) is WaveformKind.NOISE


def test_parse_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        WaveformKind.parse("pulse")


def test_descriptor_defaults_and_string_kind() -> None:
    descriptor = SignalDescriptor()
    assert descriptor.kind is WaveformKind.SINE
    assert descriptor.frequency == 440.0
    assert descriptor.amplitude == 1.0
    assert SignalDescriptor("square").kind is WaveformKind.SQUARE


def test_descriptor_does_not_validate_out_of_policy_values() -> None:
    descriptor = SignalDescriptor(WaveformKind.SINE, frequency=30_000.0, amplitude=-2.0)
    assert descriptor.frequency == 30_000.0
    assert descriptor.amplitude == -2.0


def test_descriptor_dict_conversion_ignores_unknown_fields() -> None:
    descriptor = SignalDescriptor.from_dict({"kind": "saw", "frequency": 100.0, "phase": 1.0})
    assert descriptor == SignalDescriptor(WaveformKind.SAW, 100.0, 1.0)
    assert descriptor.to_dict() == {"kind": "saw", "frequency": 100.0, "amplitude": 1.0}


def test_descriptor_replace_returns_copy() -> None:
    original = SignalDescriptor()
    updated = original.replace(frequency=880.0)
    assert original.frequency == 440.0
    assert updated.frequency == 880.0


@pytest.mark.parametrize("kind", list(WaveformKind))
def test_generate_length_and_amplitude_bound(kind: WaveformKind) -> None:
    data = WaveformGenerator(seed=1).generate(kind, 400.0, 0.5, 2048, 44_100)
    assert data.shape == (2048,)
    assert np.max(np.abs(data)) <= 0.5 + 1e-12


def test_sine_matches_closed_form() -> None:
    data = WaveformGenerator().generate(WaveformKind.SINE, 400.0, 1.0, 2048, 44_100)
    t = np.arange(2048) / 44_100
    np.testing.assert_allclose(data, np.sin(2 * np.pi * 400.0 * t))


def test_periodic_kinds_are_deterministic() -> None:
    generator = WaveformGenerator()
    for kind in (WaveformKind.SINE, WaveformKind.TRIANGLE, WaveformKind.SAW, WaveformKind.SQUARE):
        first = generator.generate(kind, 1000.0, 1.0, 1024, 44_100)
        second = generator.generate(kind, 1000.0, 1.0, 1024, 44_100)
        np.testing.assert_array_equal(first, second)


def test_noise_changes_between_calls_and_respects_seed() -> None:
    generator = WaveformGenerator(seed=7)
    first = generator.generate(WaveformKind.NOISE, 0.0, 1.0, 256, 44_100)
    second = generator.generate(WaveformKind.NOISE, 0.0, 1.0, 256, 44_100)
    assert not np.array_equal(first, second)

    generator.set_seed(7)
    np.testing.assert_array_equal(generator.generate(WaveformKind.NOISE, 0.0, 1.0, 256, 44_100), first)


def test_set_rng_type_rejects_unknown() -> None:
    generator = WaveformGenerator()
    generator.set_rng_type("standard_normal")
    assert generator.rng_type == "standard_normal"
    with pytest.raises(ValueError):
        generator.set_rng_type("pink")


def test_generate_descriptor_uses_config() -> None:
    config = AnalysisConfig(buffer_size=512, sample_rate=8000)
    data = WaveformGenerator().generate_descriptor(SignalDescriptor(WaveformKind.SQUARE, 100.0, 2.0), config)
    assert data.shape == (512,)
    assert set(np.unique(np.abs(data))) <= {0.0, 2.0}

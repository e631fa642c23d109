"""Tests for scenario configuration."""

import json
import math

import numpy as np
import pytest

from direction_finding.antenna_array import Simulation
from direction_finding.core.config import (
    PRESETS,
    ArrayLayoutConfig,
    ConfigValidationError,
    ScenarioConfig,
    SourceConfig,
    get_preset,
    list_presets,
)


class TestSourceConfig:
    """Test SourceConfig dataclass."""

    def test_defaults(self):
        """Test default source."""
        source = SourceConfig()
        assert source.angle == 0.0
        assert source.pulse_rate == 1e6
        assert source.snr_db is None

    def test_invalid_pulse_rate(self):
        """Test non-positive pulse rate is rejected."""
        with pytest.raises(ConfigValidationError):
            SourceConfig(pulse_rate=0.0)

    def test_non_finite_angle(self):
        """Test NaN angle is rejected."""
        with pytest.raises(ConfigValidationError):
            SourceConfig(angle=float("nan"))


class TestArrayLayoutConfig:
    """Test ArrayLayoutConfig dataclass."""

    def test_invalid_layout(self):
        """Test unknown layout names."""
        with pytest.raises(ConfigValidationError):
            ArrayLayoutConfig(layout="spiral")

    def test_corner_needs_four(self):
        """Test corner layout is fixed at four elements."""
        with pytest.raises(ConfigValidationError):
            ArrayLayoutConfig(layout="corner", num_elements=5)
        ArrayLayoutConfig(layout="corner", num_elements=4)

    def test_invalid_values(self):
        """Test invalid sizes and dimensions."""
        with pytest.raises(ConfigValidationError):
            ArrayLayoutConfig(num_elements=0)
        with pytest.raises(ConfigValidationError):
            ArrayLayoutConfig(dimension=-1.0)
        with pytest.raises(ConfigValidationError):
            ArrayLayoutConfig(jitter_variance=-0.1)
        with pytest.raises(ConfigValidationError):
            ArrayLayoutConfig(reference=[1.0])

    def test_is_value_error(self):
        """Test validation errors are ValueErrors."""
        with pytest.raises(ValueError):
            ArrayLayoutConfig(layout="spiral")


class TestScenarioConfig:
    """Test ScenarioConfig dataclass."""

    def test_defaults(self):
        """Test default scenario is valid."""
        config = ScenarioConfig()
        assert config.carrier_frequency == 1e9
        assert config.noise_model == "density"
        assert len(config.sources) == 1

    def test_scan_grid(self):
        """Test scan grid endpoints and size."""
        grid = ScenarioConfig().scan_grid()
        assert len(grid) == 100
        assert grid[0] == pytest.approx(-math.pi / 2)
        assert grid[-1] == pytest.approx(math.pi / 2)

    def test_invalid_values(self):
        """Test invalid scenario values."""
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(carrier_frequency=0.0)
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(noise_model="thermal")
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(num_snapshots=0)
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(sources=[])
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(scan_start=1.0, scan_stop=0.0)

    def test_snr_model_requires_snr(self):
        """Test the snr noise model needs an SNR on every source."""
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(noise_model="snr", sources=[SourceConfig(snr_db=10.0), SourceConfig()])
        config = ScenarioConfig(noise_model="snr", sources=[SourceConfig(snr_db=10.0)])
        assert config.sources[0].snr_db == 10.0

    def test_density_model_forbids_snr(self):
        """Test per-source SNR cannot be used with a noise density."""
        with pytest.raises(ConfigValidationError):
            ScenarioConfig(sources=[SourceConfig(snr_db=10.0)])

    def test_dict_roundtrip(self):
        """Test to_dict and from_dict preserve the scenario."""
        config = get_preset("music_circular")
        restored = ScenarioConfig.from_dict(config.to_dict())
        assert restored == config
        assert isinstance(restored.array, ArrayLayoutConfig)
        assert isinstance(restored.sources[0], SourceConfig)

    def test_save_load(self, tmp_path):
        """Test JSON persistence."""
        path = tmp_path / "scenario.json"
        config = ScenarioConfig(name="saved", seed=5)
        assert config.save(str(path))
        with open(path) as f:
            assert json.load(f)["name"] == "saved"
        loaded = ScenarioConfig.load(str(path))
        assert loaded == config

    def test_load_missing(self, tmp_path):
        """Test loading a missing file returns None."""
        assert ScenarioConfig.load(str(tmp_path / "missing.json")) is None

    def test_load_invalid_json(self, tmp_path):
        """Test loading malformed JSON returns None."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert ScenarioConfig.load(str(path)) is None

    def test_load_invalid_values(self, tmp_path):
        """Test loading a file with invalid values returns None."""
        path = tmp_path / "invalid.json"
        path.write_text(json.dumps({"carrier_frequency": -1.0}))
        assert ScenarioConfig.load(str(path)) is None


class TestPresets:
    """Test preset scenarios."""

    def test_list_presets(self):
        """Test all presets are registered."""
        names = list_presets()
        assert "cbf_linear" in names
        assert "music_circular" in names
        assert len(names) == len(PRESETS)

    def test_unknown_preset(self):
        """Test unknown preset returns None."""
        assert get_preset("nonexistent") is None

    def test_cbf_presets_single_source(self):
        """Test beamformer presets have one source."""
        for name in list_presets():
            if name.startswith("cbf"):
                assert len(get_preset(name).sources) == 1

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_presets_build(self, name):
        """Test every preset builds a simulation."""
        config = ScenarioConfig.from_dict(get_preset(name).to_dict())
        config.seed = 0
        sim = Simulation.from_config(config)
        assert sim.num_elements == config.array.num_elements
        assert sim.num_sources == len(config.sources)
        assert np.all(np.isfinite(sim.snapshot(0.0)))

"""Tests for conversion utilities."""

import math

import numpy as np
import pytest

from direction_finding.utils.conversions import (
    TWO_PI,
    angular_distance,
    db_to_linear,
    freq_to_str,
    linear_to_db,
    sample_rate_to_str,
    str_to_freq,
    wrap_angle,
    wrap_to_pi,
)


class TestPowerConversions:
    """Test power conversion functions."""

    def test_db_to_linear(self):
        """Test dB to linear conversion."""
        assert db_to_linear(0) == pytest.approx(1.0)
        assert db_to_linear(10) == pytest.approx(10.0)
        assert db_to_linear(20) == pytest.approx(100.0)
        assert db_to_linear(-10) == pytest.approx(0.1)

    def test_linear_to_db(self):
        """Test linear to dB conversion."""
        assert linear_to_db(1.0) == pytest.approx(0.0)
        assert linear_to_db(10.0) == pytest.approx(10.0)
        assert linear_to_db(0.1) == pytest.approx(-10.0)

    def test_linear_to_db_zero(self):
        """Test zero power stays finite."""
        assert np.isfinite(linear_to_db(0.0))

    def test_arrays(self):
        """Test conversions on numpy arrays."""
        values = np.array([1.0, 10.0, 100.0])
        np.testing.assert_allclose(linear_to_db(values), [0.0, 10.0, 20.0], atol=1e-9)


class TestAngleConversions:
    """Test angle wrapping functions."""

    def test_wrap_angle(self):
        """Test wrapping into [0, 2*pi)."""
        assert wrap_angle(0.0) == 0.0
        assert wrap_angle(TWO_PI) == pytest.approx(0.0)
        assert wrap_angle(-math.pi / 2) == pytest.approx(3 * math.pi / 2)
        assert wrap_angle(5 * math.pi) == pytest.approx(math.pi)

    def test_wrap_angle_range(self):
        """Test wrapped angles never reach 2*pi."""
        for angle in (-1e-18, -TWO_PI, 7.5, -100.0):
            wrapped = wrap_angle(angle)
            assert 0.0 <= wrapped < TWO_PI

    def test_wrap_to_pi(self):
        """Test wrapping into [-pi, pi)."""
        assert wrap_to_pi(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
        assert wrap_to_pi(0.5) == pytest.approx(0.5)
        np.testing.assert_allclose(wrap_to_pi(np.array([TWO_PI, -0.5])), [0.0, -0.5], atol=1e-12)

    def test_angular_distance(self):
        """Test distance across the 0/2*pi seam."""
        assert angular_distance(0.1, TWO_PI - 0.1) == pytest.approx(0.2)
        assert angular_distance(1.0, 1.5) == pytest.approx(0.5)
        assert angular_distance(0.0, math.pi) == pytest.approx(math.pi)


class TestFrequencyConversions:
    """Test frequency string conversions."""

    def test_freq_to_str(self):
        """Test frequency to string conversion."""
        assert freq_to_str(1e9) == "1.000000 GHz"
        assert freq_to_str(144.2e6) == "144.200000 MHz"
        assert freq_to_str(7.5e3) == "7.500 kHz"
        assert freq_to_str(50) == "50.0 Hz"

    def test_str_to_freq(self):
        """Test string to frequency parsing."""
        assert str_to_freq("1GHz") == pytest.approx(1e9)
        assert str_to_freq("2.00001 MHz") == pytest.approx(2.00001e6)
        assert str_to_freq("500k") == pytest.approx(5e5)
        assert str_to_freq("1000") == pytest.approx(1000.0)

    def test_sample_rate_to_str(self):
        """Test sample rate to string conversion."""
        assert sample_rate_to_str(2.00013e9) == "2.00013 GS/s"
        assert sample_rate_to_str(2.00001e6) == "2.00001 MS/s"
        assert sample_rate_to_str(48e3) == "48.00 kS/s"

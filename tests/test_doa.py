"""Tests for MUSIC and peak finding."""

import math

import numpy as np
import pytest

from direction_finding.antenna_array import (
    SPEED_OF_LIGHT,
    ArrayManifold,
    HalfSineTrain,
    MUSICEstimator,
    MUSICResult,
    PeakSelection,
    Pseudospectrum,
    SignalSource,
    Simulation,
    circular_array,
    default_music_grid,
    find_peaks,
    linear_array,
    music,
)
from direction_finding.core.exceptions import (
    DirectionFindingError,
    InsufficientArrayAperture,
)
from direction_finding.utils.conversions import angular_distance

FC = 1e9
WAVELENGTH = SPEED_OF_LIGHT / FC


def two_source_simulation(seed: int = 1) -> Simulation:
    """Eleven-element circular array watching sources at 0.95 and 6.0 rad."""
    array = circular_array(11, 2 * WAVELENGTH)
    s1 = SignalSource(0.95, HalfSineTrain(1e6))
    s2 = SignalSource(6.0, HalfSineTrain(1e6))
    return Simulation(array, FC, 0.1, s1, s2, seed=seed)


def lookup(values):
    """Function over integer grid points returning values[i]."""
    return lambda x: values[int(round(x))]


class TestMUSIC:
    """Test MUSIC estimation."""

    def test_resolves_two_sources(self):
        """Test both sources are recovered on a 0.01 rad grid."""
        sim = two_source_simulation()
        spectrum = music(sim, 2.00001e6, 1000)
        peaks = find_peaks(spectrum, np.arange(0, 2 * np.pi, 0.01), n=2)
        assert len(peaks) == 2
        assert peaks[0] == pytest.approx(0.95, abs=0.05)
        assert peaks[1] == pytest.approx(6.0, abs=0.05)

    def test_estimate_result(self):
        """Test the estimator result bundles angles and spectrum."""
        sim = two_source_simulation(seed=2)
        result = MUSICEstimator(sim).estimate(2.00001e6, 1000)
        assert isinstance(result, MUSICResult)
        assert result.num_sources == 2
        assert result.spectrum.shape == result.grid.shape
        np.testing.assert_allclose(result.grid, default_music_grid())
        assert len(result.singular_values) == 11
        for found, true in zip(result.angles, [0.95, 6.0]):
            assert angular_distance(found, true) < 0.05
        assert result.angles_deg[0] == pytest.approx(math.degrees(result.angles[0]))

    def test_covariance_hermitian(self):
        """Test the sample covariance is Hermitian and positive semidefinite."""
        r = MUSICEstimator(two_source_simulation()).covariance(2.00001e6, 200)
        assert r.shape == (11, 11)
        np.testing.assert_allclose(r, r.conj().T, atol=1e-6)
        assert np.all(np.linalg.eigvalsh(r) > -1e-6)

    def test_singular_values_descending(self):
        """Test singular values are sorted with the signal subspace first."""
        spectrum = music(two_source_simulation(), 2.00001e6, 1000)
        s = spectrum.singular_values
        assert np.all(np.diff(s) <= 0)
        # Two dominant values, the rest at the noise floor
        assert s[1] > 10 * s[2]

    def test_noise_subspace_shape(self):
        """Test noise subspace has M - P columns and is read-only."""
        spectrum = music(two_source_simulation(), 2.00001e6, 300)
        assert spectrum.noise_subspace.shape == (11, 9)
        with pytest.raises(ValueError):
            spectrum.noise_subspace[0, 0] = 1.0

    def test_pseudospectrum_positive(self):
        """Test the pseudospectrum is positive and finite everywhere."""
        spectrum = music(two_source_simulation(), 2.00001e6, 300)
        values = spectrum.evaluate(default_music_grid())
        assert np.all(values > 0)
        assert np.all(np.isfinite(values))
        assert spectrum(1.0) == pytest.approx(spectrum.evaluate([1.0])[0])

    def test_num_sources_override(self):
        """Test an explicit signal subspace dimension."""
        estimator = MUSICEstimator(two_source_simulation(), num_sources=3)
        assert estimator.num_sources == 3
        spectrum = estimator.pseudospectrum(2.00001e6, 100)
        assert spectrum.noise_subspace.shape == (11, 8)

    def test_insufficient_aperture(self):
        """Test sources must be fewer than elements."""
        array = linear_array(2, WAVELENGTH / 2)
        sim = Simulation(
            array,
            FC,
            0.1,
            SignalSource(0.2, HalfSineTrain(1e6)),
            SignalSource(0.8, HalfSineTrain(1e6)),
        )
        with pytest.raises(InsufficientArrayAperture) as exc_info:
            music(sim, 2e6, 10)
        assert isinstance(exc_info.value, DirectionFindingError)
        assert "operation=music" in str(exc_info.value)
        assert exc_info.value.array_size == 2

    def test_invalid_num_sources(self):
        """Test a zero-dimensional signal subspace is rejected."""
        with pytest.raises(ValueError):
            MUSICEstimator(two_source_simulation(), num_sources=0)


class TestPseudospectrum:
    """Test Pseudospectrum class."""

    def test_exact_null_stays_finite(self):
        """Test a steering vector orthogonal to the noise subspace."""
        array = linear_array(2, WAVELENGTH / 2)
        manifold = ArrayManifold(array, WAVELENGTH)
        a = manifold(0.3)
        noise = np.array([[a[1].conj()], [-a[0].conj()]]) / math.sqrt(2)
        spectrum = Pseudospectrum(manifold, noise)
        value = spectrum(0.3)
        assert math.isfinite(value)
        assert value > 1e10

    def test_reevaluation_is_stable(self):
        """Test repeated evaluation gives the same values."""
        spectrum = music(two_source_simulation(), 2.00001e6, 200)
        grid = np.linspace(0, 1, 7)
        np.testing.assert_array_equal(spectrum.evaluate(grid), spectrum.evaluate(grid))


class TestFindPeaks:
    """Test find_peaks function."""

    VALUES = [0.0, 3.0, 1.0, 5.0, 2.0, 4.0, 0.0]

    def test_single_peak_exact(self):
        """Test a grid point peak is returned exactly."""
        grid = np.arange(0.0, 10.0, 0.5)
        assert find_peaks(lambda x: -((x - 3.0) ** 2), grid) == [3.0]

    def test_top_n(self):
        """Test the n highest peaks are kept, sorted by angle."""
        grid = range(len(self.VALUES))
        f = lookup(self.VALUES)
        assert find_peaks(f, grid, n=1) == [3.0]
        assert find_peaks(f, grid, n=2) == [3.0, 5.0]

    def test_fewer_peaks_than_requested(self):
        """Test all peaks are returned when fewer than n exist."""
        grid = range(len(self.VALUES))
        assert find_peaks(lookup(self.VALUES), grid, n=5) == [1.0, 3.0, 5.0]

    def test_plateau_not_a_peak(self):
        """Test equal neighbours do not make a peak."""
        values = [0.0, 2.0, 2.0, 0.0]
        assert find_peaks(lookup(values), range(4), n=2) == []

    def test_endpoints_not_peaks(self):
        """Test grid endpoints are never peaks."""
        values = [5.0, 1.0, 0.0, 1.0, 5.0]
        assert find_peaks(lookup(values), range(5), n=2) == []

    def test_threshold(self):
        """Test threshold keeps peaks above min times threshold."""
        values = [1.0, 3.0, 1.0, 20.0, 1.0, 50.0, 1.0]
        f = lookup(values)
        assert find_peaks(f, range(7), threshold=10.0) == [3.0, 5.0]
        assert find_peaks(f, range(7), threshold=2.5) == [1.0, 3.0, 5.0]

    def test_threshold_default(self):
        """Test threshold policy without a value uses 10."""
        values = [1.0, 3.0, 1.0, 20.0, 1.0, 50.0, 1.0]
        found = find_peaks(lookup(values), range(7), selection=PeakSelection.THRESHOLD)
        assert found == [3.0, 5.0]

    def test_top_n_ignores_threshold(self):
        """Test explicit TOP_N selection ignores any threshold."""
        values = [1.0, 3.0, 1.0, 20.0, 1.0, 50.0, 1.0]
        found = find_peaks(
            lookup(values), range(7), n=3, threshold=10.0, selection=PeakSelection.TOP_N
        )
        assert found == [1.0, 3.0, 5.0]

    def test_invalid_n(self):
        """Test n must be at least 1."""
        with pytest.raises(ValueError):
            find_peaks(lookup(self.VALUES), range(7), n=0)

    def test_empty_grid(self):
        """Test an empty grid has no peaks."""
        assert find_peaks(lambda x: x, []) == []

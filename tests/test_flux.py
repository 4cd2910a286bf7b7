"""Tests for spectral scaling in skyrender.core.flux."""

import astropy.units as u
import pytest
from astropy.coordinates import SkyCoord

from skyrender.core.components import (
    ConstantSpectrum,
    SkyComponent,
    SpectralIndex,
    Stokes,
)
from skyrender.core.flux import (
    check_taylor_term,
    scaled_flux,
    spectral_index_of,
    spectral_scale,
    taylor_factor,
)
from skyrender.errors import ConfigurationError


class TestTaylorTerms:
    """Tests for Taylor-term factors."""

    @pytest.mark.parametrize("term", [0, 1, 2])
    def test_supported(self, term):
        """Terms 0, 1 and 2 are accepted."""
        check_taylor_term(term)

    @pytest.mark.parametrize("term", [-1, 3])
    def test_unsupported(self, term):
        """Any other term is a configuration error."""
        with pytest.raises(ConfigurationError, match="taylor terms"):
            check_taylor_term(term)

    def test_factors(self):
        """Factors should be 1, alpha and alpha * (alpha - 1) / 2."""
        alpha = -0.7
        assert taylor_factor(alpha, 0) == 1.0
        assert taylor_factor(alpha, 1) == pytest.approx(-0.7)
        assert taylor_factor(alpha, 2) == pytest.approx(0.595)

    def test_curvature(self):
        """Curvature only enters the second term."""
        assert taylor_factor(0.0, 2, beta=0.3) == pytest.approx(0.3)
        assert taylor_factor(0.0, 1, beta=0.3) == 0.0


class TestSpectralScale:
    """Tests for spectral model dispatch."""

    def test_constant(self):
        """A flat spectrum has no spectral index and unit scale."""
        assert spectral_scale(ConstantSpectrum(), 5e9) == 1.0
        assert spectral_index_of(ConstantSpectrum()) == 0.0

    def test_power_law(self):
        """A power law scales with frequency and reports its index."""
        spectrum = SpectralIndex(2.0, 1e9 * u.Hz)
        assert spectral_scale(spectrum, 2e9) == pytest.approx(4.0)
        assert spectral_index_of(spectrum) == 2.0

    def test_unsupported_model(self):
        """Unknown spectral models are a configuration error."""
        with pytest.raises(ConfigurationError, match="spectral model"):
            spectral_scale(object(), 1e9)


class TestScaledFlux:
    """Tests for the combined spectral and Taylor scaling."""

    @pytest.fixture
    def component(self):
        """A polarized power-law point component."""
        return SkyComponent(
            SkyCoord(0 * u.deg, 0 * u.deg),
            [2.0, 0.2, -0.4, 0.1],
            spectrum=SpectralIndex(-1.0, 1e9 * u.Hz),
        )

    def test_term_zero(self, component):
        """Term 0 is the flux at the frequency."""
        flux = scaled_flux(component, 2e9, 0)
        assert flux.value(Stokes.I) == pytest.approx(1.0)
        assert flux.value(Stokes.U) == pytest.approx(-0.2)

    def test_term_one(self, component):
        """Term 1 is the flux at the frequency times alpha."""
        flux = scaled_flux(component, 2e9, 1)
        assert flux.value(Stokes.I) == pytest.approx(-1.0)
        assert flux.value(Stokes.Q) == pytest.approx(-0.1)

    def test_component_unchanged(self, component):
        """Scaling returns a new Flux and leaves the component alone."""
        scaled_flux(component, 2e9, 2)
        assert component.flux.value(Stokes.I) == 2.0

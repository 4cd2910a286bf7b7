"""Tests for component types in skyrender.core.components."""

import astropy.units as u
import numpy as np
import pytest
from astropy.coordinates import SkyCoord

from skyrender.core.components import (
    AbstractEllipticalShape,
    ConstantSpectrum,
    DiskShape,
    Flux,
    GaussianShape,
    PointShape,
    SkyComponent,
    SpectralIndex,
    Stokes,
)


class TestStokes:
    """Tests for the Stokes enumeration."""

    def test_fits_codes(self):
        """Stokes values should follow the FITS STOKES axis convention."""
        assert Stokes(1) is Stokes.I
        assert Stokes(4) is Stokes.V
        assert Stokes(-5) is Stokes.XX

    def test_is_iquv(self):
        """Only I, Q, U and V are Stokes parameters."""
        assert all(s.is_iquv() for s in (Stokes.I, Stokes.Q, Stokes.U, Stokes.V))
        assert not Stokes.RR.is_iquv()
        assert not Stokes.XY.is_iquv()


class TestFlux:
    """Tests for the Flux class."""

    def test_scalar_is_stokes_i(self):
        """A scalar flux should be unpolarized Stokes I."""
        flux = Flux(2.5)
        assert flux.value(Stokes.I) == 2.5
        assert flux.value(Stokes.Q) == 0.0
        assert flux.value(Stokes.V) == 0.0

    def test_values_in_unit(self):
        """Values should convert to the requested unit."""
        flux = Flux([1.0, 0.5, 0.25, 0.125], unit=u.mJy)
        assert flux.value(Stokes.U) == pytest.approx(0.25e-3)
        assert flux.value(Stokes.U, u.mJy) == pytest.approx(0.25)

    def test_quantity_keeps_unit(self):
        """A Quantity input should keep its own unit."""
        flux = Flux([1.0, 0.0, 0.0, 0.0] * u.mJy)
        assert flux.value(Stokes.I) == pytest.approx(1e-3)

    def test_wrong_length(self):
        """Flux needs exactly four Stokes values."""
        with pytest.raises(ValueError):
            Flux([1.0, 2.0])

    def test_not_flux_density(self):
        """Units that are not flux densities should be rejected."""
        with pytest.raises(ValueError):
            Flux(1.0, unit=u.m)

    def test_non_iquv_stokes(self):
        """Correlation products cannot be read from a Stokes flux."""
        with pytest.raises(ValueError):
            Flux(1.0).value(Stokes.XX)

    def test_scaled(self):
        """Scaling should multiply every polarization."""
        flux = Flux([1.0, 2.0, 3.0, 4.0]).scaled(0.5)
        np.testing.assert_allclose(flux.values.to_value(u.Jy), [0.5, 1.0, 1.5, 2.0])


class TestShapes:
    """Tests for component shapes."""

    def test_gaussian_radians(self):
        """Axes and position angle should be available in radians."""
        shape = GaussianShape(3.6 * u.deg, 1.8 * u.deg, 90 * u.deg)
        assert shape.major_axis_rad == pytest.approx(np.deg2rad(3.6))
        assert shape.minor_axis_rad == pytest.approx(np.deg2rad(1.8))
        assert shape.position_angle_rad == pytest.approx(np.pi / 2)

    def test_default_position_angle(self):
        """The position angle should default to zero."""
        shape = GaussianShape(2 * u.arcsec, 1 * u.arcsec)
        assert shape.position_angle_rad == 0.0

    def test_negative_axis(self):
        """Axis lengths must not be negative."""
        with pytest.raises(ValueError):
            GaussianShape(-1 * u.arcsec, 1 * u.arcsec)

    def test_axis_must_be_angle(self):
        """Axis lengths must carry angular units."""
        with pytest.raises(ValueError):
            DiskShape(1 * u.m, 1 * u.arcsec)

    def test_elliptical_base(self):
        """Gaussian and disk shapes share the elliptical base class."""
        gaussian = GaussianShape(2 * u.arcsec, 1 * u.arcsec)
        disk = DiskShape(2 * u.arcsec, 1 * u.arcsec)
        assert isinstance(gaussian, AbstractEllipticalShape)
        assert isinstance(disk, AbstractEllipticalShape)
        assert not isinstance(PointShape(), AbstractEllipticalShape)

    def test_kinds_differ(self):
        """Every shape should carry its own type tag."""
        kinds = {PointShape.kind, GaussianShape.kind, DiskShape.kind}
        assert len(kinds) == 3


class TestSpectra:
    """Tests for spectral models."""

    def test_constant(self):
        """A constant spectrum scales by one everywhere."""
        assert ConstantSpectrum().sample(1e9) == 1.0
        assert ConstantSpectrum(1.4 * u.GHz).reference_frequency == 1.4 * u.GHz

    def test_spectral_index(self):
        """A power law should scale by (f / f0) ** alpha."""
        spectrum = SpectralIndex(-0.7, 1.4 * u.GHz)
        assert spectrum.sample(2.8e9) == pytest.approx(2.0**-0.7)
        assert spectrum.sample(2.8 * u.GHz) == pytest.approx(2.0**-0.7)
        assert spectrum.sample(1.4e9) == pytest.approx(1.0)

    def test_plain_reference_is_hz(self):
        """A plain reference frequency should be read as Hz."""
        spectrum = SpectralIndex(1.0, 1.0e9)
        assert spectrum.reference_frequency.to_value(u.Hz) == 1.0e9

    def test_reference_not_frequency(self):
        """A reference frequency in a non-spectral unit is rejected."""
        with pytest.raises(ValueError):
            SpectralIndex(-0.7, 3 * u.kg)


class TestSkyComponent:
    """Tests for the SkyComponent class."""

    @pytest.fixture
    def direction(self):
        """A scalar sky direction."""
        return SkyCoord(180 * u.deg, -45 * u.deg)

    def test_defaults(self, direction):
        """Shape and spectrum should default to a flat point source."""
        component = SkyComponent(direction, 1.0)
        assert isinstance(component.shape, PointShape)
        assert isinstance(component.spectrum, ConstantSpectrum)
        assert isinstance(component.flux, Flux)
        assert component.flux.value(Stokes.I) == 1.0

    def test_non_scalar_direction(self):
        """Only a single direction is allowed."""
        directions = SkyCoord([1, 2] * u.deg, [3, 4] * u.deg)
        with pytest.raises(ValueError):
            SkyComponent(directions, 1.0)

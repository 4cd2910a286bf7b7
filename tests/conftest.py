"""Shared pytest fixtures for skyrender tests."""

import astropy.units as u
import numpy as np
import pytest
from astropy.wcs import WCS

from skyrender.core.image import SkyImage


def build_wcs(
    n_lat=11,
    n_lon=11,
    stokes=None,
    cdelt_arcsec=1.0,
    lat_cdelt_arcsec=None,
    swap_direction=False,
    ref_freq_hz=1.4e9,
    chan_width_hz=1.0e6,
    center=(180.0, -45.0),
):
    """Build a RA/Dec/frequency(/Stokes) WCS centred on pixel (n // 2).

    Args:
        stokes: Consecutive FITS Stokes codes of the Stokes axis, or None for
            no Stokes axis.
        swap_direction: Put declination before right ascension.
    """
    lat_cdelt_arcsec = cdelt_arcsec if lat_cdelt_arcsec is None else lat_cdelt_arcsec
    ra = ("RA---SIN", center[0], -cdelt_arcsec / 3600.0, (n_lon + 1) / 2, "deg")
    dec = ("DEC--SIN", center[1], lat_cdelt_arcsec / 3600.0, (n_lat + 1) / 2, "deg")
    axes = [dec, ra] if swap_direction else [ra, dec]
    axes.append(("FREQ", ref_freq_hz, chan_width_hz, 1.0, "Hz"))
    if stokes is not None:
        step = stokes[1] - stokes[0] if len(stokes) > 1 else 1
        axes.append(("STOKES", stokes[0], step, 1.0, ""))

    wcs = WCS(naxis=len(axes))
    wcs.wcs.ctype = [axis[0] for axis in axes]
    wcs.wcs.crval = [axis[1] for axis in axes]
    wcs.wcs.cdelt = [axis[2] for axis in axes]
    wcs.wcs.crpix = [axis[3] for axis in axes]
    wcs.wcs.cunit = [axis[4] for axis in axes]
    return wcs


def build_image(
    n_lat=11,
    n_lon=11,
    n_chan=1,
    stokes=None,
    dtype=np.float64,
    fill=0.0,
    swap_direction=False,
    **wcs_kwargs,
):
    """Build a SkyImage with a filled data array matching build_wcs."""
    wcs = build_wcs(
        n_lat=n_lat,
        n_lon=n_lon,
        stokes=stokes,
        swap_direction=swap_direction,
        **wcs_kwargs,
    )
    direction = (n_lon, n_lat) if swap_direction else (n_lat, n_lon)
    shape = (n_chan, *direction)
    if stokes is not None:
        shape = (len(stokes), *shape)
    return SkyImage(np.full(shape, fill, dtype=dtype), wcs, flux_unit=u.Jy)


def pixel_direction(image, pixel_lat, pixel_lon):
    """Return the sky direction of a fractional (latitude, longitude) pixel."""
    celestial = image.wcs.celestial
    pixel = [0.0, 0.0]
    pixel[celestial.wcs.lat] = pixel_lat
    pixel[celestial.wcs.lng] = pixel_lon
    return celestial.pixel_to_world(*pixel)


@pytest.fixture
def make_image():
    """Factory for test images."""
    return build_image


@pytest.fixture
def direction_at():
    """Factory for the sky direction of a pixel position."""
    return pixel_direction


@pytest.fixture
def image_3d():
    """An 11x11 single-channel RA/Dec/frequency image with no Stokes axis."""
    return build_image()


@pytest.fixture
def image_iquv():
    """An 11x11 image with two channels and an I, Q, U, V Stokes axis."""
    return build_image(n_chan=2, stokes=(1, 2, 3, 4))


@pytest.fixture
def reference_frequency():
    """Reference frequency of the test images."""
    return 1.4e9 * u.Hz

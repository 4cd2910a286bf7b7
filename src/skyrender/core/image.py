"""Image cube with world coordinates, the target of component imaging.

SkyImage pairs a mutable numpy array with an astropy WCS. Array axes follow
numpy (C) order, which is the reverse of the WCS (FITS) axis order; every axis
index returned by this module is an array axis.
"""

import copy
import warnings

import astropy.units as u
import numpy as np
from astropy.io import fits
from astropy.utils.exceptions import AstropyUserWarning
from astropy.wcs import WCS, InvalidCoordinateError, NoConvergence
from astropy.wcs.utils import proj_plane_pixel_scales

from skyrender.core.components import Stokes
from skyrender.errors import ConfigurationError, DirectionConversionError

# wcsprm.axis_types thousands digit
_STOKES_TYPE = 1
_CELESTIAL_TYPE = 2
_SPECTRAL_TYPE = 3


class SkyImage:
    """A float32/float64 image cube described by a WCS.

    The image is owned by the caller. Renderers only read its shape and
    coordinates and accumulate into individual pixels or blocks.
    """

    def __init__(self, data, wcs: WCS, flux_unit=u.Jy):
        """Initialize the SkyImage.

        Args:
            data:
                The pixel array. Used in place (not copied) when it is already
                a float32 or float64 numpy array.
            wcs:
                World coordinate system with one WCS axis per array axis.
            flux_unit:
                Flux density unit of one pixel value (per pixel).
        """
        data = np.asarray(data)
        if data.dtype not in (np.float32, np.float64):
            raise ValueError(f"Image data must be float32 or float64, not {data.dtype}")
        if wcs.naxis != data.ndim:
            raise ValueError(
                f"WCS has {wcs.naxis} axes but the image has {data.ndim} dimensions"
            )
        wcs.wcs.set()
        self.data = data
        self.wcs = wcs
        self.flux_unit = u.Unit(flux_unit)

    @classmethod
    def from_fits(cls, path, hdu=0, flux_unit=u.Jy):
        """Load an image and its WCS from a FITS file."""
        with fits.open(path) as hdul:
            header = hdul[hdu].header
            data = np.asarray(hdul[hdu].data)
            # FITS data is big-endian, convert to native byte order
            data = data.astype(data.dtype.newbyteorder("="))
            wcs = WCS(header)
        return cls(data, wcs, flux_unit=flux_unit)

    def to_fits(self, path, overwrite=False):
        """Write the image and its WCS to a FITS file."""
        header = self.wcs.to_header()
        header["BUNIT"] = f"{self.flux_unit.to_string('fits')}/pixel"
        fits.PrimaryHDU(data=self.data, header=header).writeto(
            path, overwrite=overwrite
        )

    @classmethod
    def zeros_like(cls, other: "SkyImage") -> "SkyImage":
        """Return a zero-filled image with the coordinates of ``other``."""
        return cls(np.zeros_like(other.data), other.wcs.deepcopy(), other.flux_unit)

    def copy(self) -> "SkyImage":
        """Return a deep copy of the image."""
        return SkyImage(self.data.copy(), copy.deepcopy(self.wcs), self.flux_unit)

    @property
    def shape(self) -> tuple[int, ...]:
        """Length of each array axis."""
        return self.data.shape

    @property
    def ndim(self) -> int:
        """Number of array axes."""
        return self.data.ndim

    @property
    def dtype(self) -> np.dtype:
        """Element type of the pixel array."""
        return self.data.dtype

    def get_at(self, position):
        """Return the value (or block) at ``position``."""
        return self.data[position]

    def add_at(self, position, value):
        """Accumulate ``value`` into the pixel (or block) at ``position``."""
        self.data[position] += value

    # Coordinate discovery
    def _array_axis(self, wcs_axis: int) -> int:
        return self.ndim - 1 - wcs_axis

    def _wcs_axes_of_type(self, axis_type: int) -> list[int]:
        return [
            i for i, t in enumerate(self.wcs.wcs.axis_types) if t // 1000 == axis_type
        ]

    def direction_axes(self) -> tuple[int, int]:
        """Return the array axes (latitude, longitude) of the direction coordinate.

        Raises:
            ConfigurationError:
                If the image does not have exactly one two-axis celestial
                coordinate.
        """
        if len(self._wcs_axes_of_type(_CELESTIAL_TYPE)) != 2:
            raise ConfigurationError(
                "Coordinate system has unsupported number of direction axes"
            )
        celestial = self.wcs.celestial
        if celestial.pixel_n_dim != 2:
            raise ConfigurationError(
                "Direction coordinate has unsupported number of pixel axes"
            )
        if celestial.world_n_dim != 2:
            raise ConfigurationError(
                "Direction coordinate has unsupported number of world axes"
            )
        lng, lat = self.wcs.wcs.lng, self.wcs.wcs.lat
        if lng < 0 or lat < 0:
            raise ConfigurationError(
                "Direction coordinate lacks a longitude/latitude pair"
            )
        return self._array_axis(lat), self._array_axis(lng)

    def direction_to_pixel(self, direction) -> tuple[float, float]:
        """Convert a sky direction to fractional (latitude, longitude) pixels.

        The direction is transformed into the frame of the image by astropy.
        Positions outside the image are returned as they are; bounds checking
        is left to the caller.

        Raises:
            DirectionConversionError:
                If the projection cannot represent the direction.
        """
        celestial = self.wcs.celestial
        try:
            pixel = celestial.world_to_pixel(direction)
        except (InvalidCoordinateError, NoConvergence) as err:
            raise DirectionConversionError(
                f"Cannot convert {direction} to pixel coordinates"
            ) from err
        pixel_lat = float(pixel[celestial.wcs.lat])
        pixel_lon = float(pixel[celestial.wcs.lng])
        if not (np.isfinite(pixel_lat) and np.isfinite(pixel_lon)):
            raise DirectionConversionError(
                f"Cannot convert {direction} to pixel coordinates"
            )
        return pixel_lat, pixel_lon

    def direction_increment(self) -> tuple[u.Quantity, u.Quantity]:
        """Return the absolute pixel scale along (latitude, longitude)."""
        celestial = self.wcs.celestial
        scales = proj_plane_pixel_scales(celestial)
        units = celestial.wcs.cunit
        lat, lng = celestial.wcs.lat, celestial.wcs.lng
        return (
            abs(scales[lat]) * u.Unit(units[lat]),
            abs(scales[lng]) * u.Unit(units[lng]),
        )

    def spectral_axis(self) -> int | None:
        """Return the array axis of the spectral coordinate, if there is one."""
        axes = self._wcs_axes_of_type(_SPECTRAL_TYPE)
        if len(axes) > 1:
            raise ConfigurationError(
                "Coordinate system has more than one spectral axis"
            )
        return self._array_axis(axes[0]) if axes else None

    def channel_frequencies(self) -> np.ndarray:
        """Return the world frequency in Hz of every channel of the spectral axis.

        Raises:
            ConfigurationError:
                If there is no spectral axis or a channel cannot be expressed
                as a frequency.
        """
        axis = self.spectral_axis()
        if axis is None:
            raise ConfigurationError("Image must have a frequency axis")
        channels = np.arange(self.shape[axis])
        with warnings.catch_warnings():
            # No observer/target on the WCS: frequencies are used as labelled
            warnings.simplefilter("ignore", AstropyUserWarning)
            try:
                spectral = self.wcs.spectral.pixel_to_world(channels)
                freqs = np.atleast_1d(u.Quantity(spectral.to(u.Hz)).value)
            except (u.UnitConversionError, u.UnitsError, ValueError) as err:
                raise ConfigurationError("Cannot convert a frequency value") from err
        if not np.all(np.isfinite(freqs)):
            raise ConfigurationError("Cannot convert a frequency value")
        return freqs.astype(np.float64)

    def channel_frequency(self, index: int) -> float:
        """Return the world frequency in Hz of one channel."""
        return float(self.channel_frequencies()[index])

    def stokes_axis(self) -> tuple[int | None, list[Stokes]]:
        """Return the array axis of the Stokes coordinate and its planes.

        An image without a Stokes axis holds Stokes I only.

        Raises:
            ConfigurationError:
                If there are several Stokes axes or a plane has an unknown code.
        """
        axes = self._wcs_axes_of_type(_STOKES_TYPE)
        if not axes:
            return None, [Stokes.I]
        if len(axes) > 1:
            raise ConfigurationError("Coordinate system has more than one Stokes axis")
        axis = self._array_axis(axes[0])
        stokes_wcs = self.wcs.sub([axes[0] + 1])
        codes = np.atleast_1d(
            stokes_wcs.pixel_to_world_values(np.arange(self.shape[axis]))
        )
        planes = []
        for code in codes:
            try:
                planes.append(Stokes(int(np.rint(code))))
            except ValueError as err:
                raise ConfigurationError(
                    f"Unsupported polarization type {code} on the Stokes axis"
                ) from err
        return axis, planes

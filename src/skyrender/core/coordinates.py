"""Axis roles, channel frequencies and pixel addressing for an image cube."""

from typing import final

import equinox as eqx
import numpy as np
from astropy.coordinates import SkyCoord

from skyrender.core.components import Stokes
from skyrender.core.image import SkyImage
from skyrender.errors import ConfigurationError
from skyrender.logger import logger


@final
class AxisRoles(eqx.Module):
    """Array axes holding each coordinate of an image.

    The direction pair is mandatory. The spectral and polarization axes may be
    absent (None), in which case they contribute no dimension to a position.
    """

    lat: int
    lon: int
    spectral: int | None
    polarization: int | None

    def __init__(
        self,
        lat: int,
        lon: int,
        spectral: int | None = None,
        polarization: int | None = None,
    ):
        """Initialize the roles, checking that no two share an axis."""
        axes = (lat, lon, spectral, polarization)
        present = [axis for axis in axes if axis is not None]
        if len(set(present)) != len(present):
            raise ValueError(f"Axis roles must be distinct, got {present}")
        if sorted(present) != list(range(len(present))):
            raise ValueError(
                f"Axis roles must cover axes 0..{len(present) - 1}, got {present}"
            )
        self.lat = lat
        self.lon = lon
        self.spectral = spectral
        self.polarization = polarization

    @property
    def naxis(self) -> int:
        """Number of axes that are present."""
        return 2 + (self.spectral is not None) + (self.polarization is not None)


def resolve_axis_roles(image: SkyImage) -> tuple[AxisRoles, list[Stokes]]:
    """Find the axis roles of an image and the Stokes type of each plane.

    Args:
        image: The target image.

    Returns:
        The axis roles and the list of Stokes planes. Without a polarization
        axis the list is [Stokes.I].

    Raises:
        ConfigurationError:
            If the direction coordinate is unsupported, there is no spectral
            axis, or the polarization axis holds anything but I, Q, U and V.
    """
    lat, lon = image.direction_axes()

    pol_axis, stokes = image.stokes_axis()
    if pol_axis is not None:
        if image.shape[pol_axis] != len(stokes):
            raise ConfigurationError("Stokes axis length does not match its planes")
        for plane in stokes:
            if not plane.is_iquv():
                raise ConfigurationError(
                    "Stokes axis can only contain I, Q, U or V pols"
                )
    else:
        logger.debug("No polarisation axis, assuming Stokes I")

    freq_axis = image.spectral_axis()
    if freq_axis is None:
        raise ConfigurationError("Image must have a frequency axis")

    n_known = 3 + (pol_axis is not None)
    if n_known != image.ndim:
        raise ConfigurationError(
            f"Image has {image.ndim} axes but only {n_known} are understood"
        )
    roles = AxisRoles(lat=lat, lon=lon, spectral=freq_axis, polarization=pol_axis)
    return roles, stokes


def frequency_table(image: SkyImage) -> np.ndarray:
    """Return the frequency in Hz of every channel, computed once per render."""
    return image.channel_frequencies()


def make_position(
    roles: AxisRoles,
    lat_idx,
    lon_idx,
    spectral_idx=None,
    polarization_idx=None,
) -> tuple:
    """Build a full-dimensional image index from per-role indices.

    Indices may be ints or slices. Only roles that are present contribute a
    dimension; an index given for an absent role is ignored.

    Args:
        roles: Axis roles of the image.
        lat_idx: Index along the latitude axis.
        lon_idx: Index along the longitude axis.
        spectral_idx: Index along the spectral axis, if present.
        polarization_idx: Index along the polarization axis, if present.

    Returns:
        A tuple usable to index the image array.
    """
    position = [None] * roles.naxis
    position[roles.lat] = lat_idx
    position[roles.lon] = lon_idx
    if roles.spectral is not None:
        if spectral_idx is None:
            raise ValueError(
                "Image has a spectral axis but no spectral index was given"
            )
        position[roles.spectral] = spectral_idx
    if roles.polarization is not None:
        if polarization_idx is None:
            raise ValueError(
                "Image has a polarization axis but no polarization index was given"
            )
        position[roles.polarization] = polarization_idx
    return tuple(position)


def world_to_pixel(image: SkyImage, direction: SkyCoord) -> tuple[float, float]:
    """Convert a component direction to fractional (latitude, longitude) pixels."""
    return image.direction_to_pixel(direction)


def in_bounds(image: SkyImage, roles: AxisRoles, pixel_lat, pixel_lon) -> bool:
    """Whether a pixel position lies within the direction axes of the image."""
    n_lat = image.shape[roles.lat]
    n_lon = image.shape[roles.lon]
    return 0 <= pixel_lat <= n_lat - 1 and 0 <= pixel_lon <= n_lon - 1

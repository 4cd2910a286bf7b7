"""Projection of sky component catalogues onto image cubes.

The entry point is project(), which renders every component of a catalogue
at every channel and polarization of an image and adds the result into it.
Point components fall into a single pixel; Gaussian components are integrated
over every pixel within an adaptive cutoff radius of their centre.
"""

from collections.abc import Iterable

import astropy.units as u
import numpy as np

from skyrender.core.components import (
    Flux,
    GaussianShape,
    PointShape,
    SkyComponent,
    Stokes,
)
from skyrender.core.coordinates import (
    AxisRoles,
    frequency_table,
    in_bounds,
    make_position,
    resolve_axis_roles,
    world_to_pixel,
)
from skyrender.core.flux import check_taylor_term, scaled_flux
from skyrender.core.gaussian import find_cutoff, make_footprint, window_flux
from skyrender.core.image import SkyImage
from skyrender.errors import ConfigurationError, UnsupportedShapeError
from skyrender.logger import logger
from skyrender.settings import Settings


def project(
    image: SkyImage,
    components: Iterable[SkyComponent],
    term: int = 0,
    settings: Settings | None = None,
):
    """Add the flux of every component into the image.

    Each component is rendered for every channel of the spectral axis and
    every plane of the Stokes axis (Stokes I only if the image has none).
    Values are added to what is already in the image.

    Failures are fatal and abort the call. By default the call is not atomic:
    components, channels and polarizations processed before the failure stay
    in the image, while nothing from the failing component instance onwards
    is added. With ``settings.atomic`` the image is only touched once every
    component rendered successfully.

    Args:
        image:
            The target image, modified in place.
        components:
            The component catalogue.
        term:
            Taylor term to render, 0, 1 or 2.
        settings:
            Rendering settings. Defaults are used if not given.

    Raises:
        ConfigurationError:
            If the image coordinates, a spectral model, the Taylor term or a
            Gaussian's pixel grid are unsupported.
        UnsupportedShapeError:
            If a component has a shape that cannot be rendered.
        DirectionConversionError:
            If a component direction cannot be converted to pixels.
    """
    settings = Settings() if settings is None else settings
    check_taylor_term(term)
    components = list(components)
    if not components:
        return

    roles, stokes = resolve_axis_roles(image)
    freqs = frequency_table(image)
    logger.info(
        f"Projecting {len(components)} components onto {image.shape} image "
        f"({len(freqs)} channels, {len(stokes)} pols, taylor term {term})"
    )

    target = SkyImage.zeros_like(image) if settings.atomic else image

    for component in components:
        pixel = None
        for freq_idx, freq in enumerate(freqs):
            flux = scaled_flux(component, freq, term)
            for pol_idx, pol in enumerate(stokes):
                match component.shape:
                    case PointShape():
                        pixel = pixel or world_to_pixel(image, component.direction)
                        project_point_shape(
                            target,
                            component,
                            roles,
                            freq_idx,
                            flux,
                            pol_idx,
                            pol,
                            pixel=pixel,
                        )
                    case GaussianShape():
                        pixel = pixel or world_to_pixel(image, component.direction)
                        project_gaussian_shape(
                            target,
                            component,
                            roles,
                            freq_idx,
                            flux,
                            pol_idx,
                            pol,
                            settings=settings,
                            pixel=pixel,
                        )
                    case _:
                        shape_name = type(component.shape).__name__
                        raise UnsupportedShapeError(
                            f"Unsupported shape type {shape_name} "
                            f"for component {component.name!r}"
                        )

    if settings.atomic:
        image.add_at(Ellipsis, target.data)


def _round_half_away(value: float) -> int:
    return int(np.copysign(np.floor(abs(value) + 0.5), value))


def project_point_shape(
    image: SkyImage,
    component: SkyComponent,
    roles: AxisRoles,
    freq_idx: int,
    flux: Flux,
    pol_idx: int,
    stokes: Stokes,
    pixel: tuple[float, float] | None = None,
):
    """Add a point component to the pixel nearest to its direction.

    Components whose rounded position is outside the image are skipped.

    Args:
        image: The target image.
        component: The component to render.
        roles: Axis roles of the image.
        freq_idx: Channel to render into.
        flux: Flux of the component at this channel and Taylor term.
        pol_idx: Polarization plane to render into.
        stokes: Stokes type of that plane.
        pixel: Fractional (latitude, longitude) pixel position, if already known.
    """
    pixel_lat, pixel_lon = pixel or world_to_pixel(image, component.direction)

    lat = _round_half_away(pixel_lat)
    lon = _round_half_away(pixel_lon)
    if not in_bounds(image, roles, lat, lon):
        logger.debug(f"Point component {component.name!r} is outside the image")
        return

    pos = make_position(roles, lat, lon, freq_idx, pol_idx)
    image.add_at(pos, flux.value(stokes, image.flux_unit))


def project_gaussian_shape(
    image: SkyImage,
    component: SkyComponent,
    roles: AxisRoles,
    freq_idx: int,
    flux: Flux,
    pol_idx: int,
    stokes: Stokes,
    settings: Settings | None = None,
    pixel: tuple[float, float] | None = None,
):
    """Add a Gaussian component, integrated over each pixel, to the image.

    Components whose centre is outside the image are skipped, even when the
    centre would round to an edge pixel. Only the square window within the
    cutoff radius of the centre is rendered; flux beyond it is dropped.

    Args:
        image: The target image.
        component: The component to render, with a GaussianShape.
        roles: Axis roles of the image.
        freq_idx: Channel to render into.
        flux: Flux of the component at this channel and Taylor term.
        pol_idx: Polarization plane to render into.
        stokes: Stokes type of that plane.
        settings: Rendering settings. Defaults are used if not given.
        pixel: Fractional (latitude, longitude) pixel position, if already known.

    Raises:
        ConfigurationError:
            If the two direction axes have different pixel sizes.
    """
    settings = Settings() if settings is None else settings
    pixel_lat, pixel_lon = pixel or world_to_pixel(image, component.direction)

    if not in_bounds(image, roles, pixel_lat, pixel_lon):
        logger.debug(f"Gaussian component {component.name!r} is outside the image")
        return

    lat_size, lon_size = image.direction_increment()
    lat_rad = lat_size.to_value(u.rad)
    lon_rad = lon_size.to_value(u.rad)
    if not np.isclose(lat_rad, lon_rad, rtol=settings.pixel_scale_rtol, atol=0.0):
        raise ConfigurationError("Non-equal pixel sizes not supported")

    shape = component.shape
    footprint = make_footprint(
        x_center=pixel_lon,
        y_center=pixel_lat,
        axis_a=shape.major_axis_rad / lon_rad,
        axis_b=shape.minor_axis_rad / lon_rad,
        position_angle=shape.position_angle_rad,
        flux=flux.value(stokes, image.flux_unit),
    )

    # Stop sampling once the density is below what the image can resolve
    n_lat = image.shape[roles.lat]
    n_lon = image.shape[roles.lon]
    epsilon = np.finfo(image.dtype).eps
    cutoff = find_cutoff(footprint, max(n_lat, n_lon), epsilon)

    # Inclusive pixel ranges on both axes
    lat_start = max(0, int(pixel_lat) - cutoff)
    lat_end = min(n_lat - 1, int(pixel_lat) + cutoff)
    lon_start = max(0, int(pixel_lon) - cutoff)
    lon_end = min(n_lon - 1, int(pixel_lon) + cutoff)

    block = window_flux(
        footprint,
        np.arange(lon_start, lon_end + 1),
        np.arange(lat_start, lat_end + 1),
        narrow_threshold=settings.narrow_threshold,
        max_step=settings.max_quadrature_step,
    )
    if roles.lat > roles.lon:
        block = block.T

    pos = make_position(
        roles,
        slice(lat_start, lat_end + 1),
        slice(lon_start, lon_end + 1),
        freq_idx,
        pol_idx,
    )
    image.add_at(pos, block)

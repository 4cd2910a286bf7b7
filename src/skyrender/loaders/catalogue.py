"""Component catalogue loader for TOML files.

A catalogue is a list of ``[[component]]`` tables:

    [[component]]
    name = "src1"
    ra = 187.5          # degrees, or "12h30m00s"
    dec = -45.0         # degrees, or "-45d00m00s"
    frame = "icrs"
    flux = [1.0, 0.1, 0.0, 0.0]
    flux_unit = "Jy"

    [component.shape]
    type = "gaussian"
    major = 30.0
    minor = 10.0
    pa = 45.0
    angle_unit = "arcsec"

    [component.spectrum]
    type = "spectral_index"
    index = -0.7
    reference_frequency = 1.4e9
"""

try:
    import tomllib

    HAS_TOMLLIB = True
except ImportError:
    import toml

    HAS_TOMLLIB = False

import astropy.units as u
from astropy.coordinates import Angle, SkyCoord

from skyrender.core.components import (
    ComponentType,
    ConstantSpectrum,
    DiskShape,
    Flux,
    GaussianShape,
    PointShape,
    SkyComponent,
    SpectralIndex,
)
from skyrender.logger import logger


def load_components(toml_file) -> list[SkyComponent]:
    """Load a component catalogue from a TOML file.

    Args:
        toml_file: Path to the TOML catalogue.

    Returns:
        The components in file order.
    """
    if HAS_TOMLLIB:
        with open(toml_file, "rb") as file:
            config = tomllib.load(file)
    else:
        config = toml.load(toml_file)

    components = components_from_dicts(config.get("component", []))
    logger.info(f"Loaded {len(components)} components from {toml_file}")
    return components


def components_from_dicts(entries) -> list[SkyComponent]:
    """Build components from a sequence of catalogue dictionaries.

    Raises:
        ValueError: If an entry has an unknown shape or spectrum type, or a
            required key is missing.
    """
    return [_component_from_dict(i, entry) for i, entry in enumerate(entries)]


def _component_from_dict(i, entry) -> SkyComponent:
    name = entry.get("name", f"component_{i}")
    for key in ("ra", "dec", "flux"):
        if key not in entry:
            raise ValueError(f"Component {name!r} is missing {key!r}")

    return SkyComponent(
        direction=_direction(entry["ra"], entry["dec"], entry.get("frame", "icrs")),
        flux=Flux(entry["flux"], u.Unit(entry.get("flux_unit", "Jy"))),
        shape=_shape(entry.get("shape", {}), name),
        spectrum=_spectrum(entry.get("spectrum", {}), name),
        name=name,
    )


def _direction(ra, dec, frame) -> SkyCoord:
    # Strings are sexagesimal (RA in hours), numbers are degrees
    ra = Angle(ra, u.hourangle if isinstance(ra, str) else u.deg)
    dec = Angle(dec, u.deg)
    return SkyCoord(ra, dec, frame=frame)


def _shape(table, name):
    kind = _kind(table.get("type", ComponentType.POINT.value), name)
    if kind is ComponentType.POINT:
        return PointShape()
    if kind not in (ComponentType.GAUSSIAN, ComponentType.DISK):
        raise ValueError(f"Component {name!r} has unknown shape type {kind.value!r}")

    for key in ("major", "minor"):
        if key not in table:
            raise ValueError(f"Component {name!r} shape is missing {key!r}")

    angle_unit = u.Unit(table.get("angle_unit", "arcsec"))
    pa_unit = u.Unit(table.get("pa_unit", "deg"))
    shape_class = GaussianShape if kind is ComponentType.GAUSSIAN else DiskShape
    return shape_class(
        major_axis=table["major"] * angle_unit,
        minor_axis=table["minor"] * angle_unit,
        position_angle=table.get("pa", 0.0) * pa_unit,
    )


def _spectrum(table, name):
    kind = _kind(table.get("type", ComponentType.CONSTANT_SPECTRUM.value), name)
    reference_frequency = table.get("reference_frequency")
    match kind:
        case ComponentType.CONSTANT_SPECTRUM:
            return ConstantSpectrum(reference_frequency)
        case ComponentType.SPECTRAL_INDEX:
            if reference_frequency is None:
                raise ValueError(
                    f"Component {name!r} has a spectral index but no "
                    "reference_frequency"
                )
            return SpectralIndex(table.get("index", 0.0), reference_frequency)
        case _:
            raise ValueError(
                f"Component {name!r} has unknown spectrum type {kind.value!r}"
            )


def _kind(value, name) -> ComponentType:
    try:
        return ComponentType(value)
    except ValueError as err:
        raise ValueError(f"Component {name!r} has unknown type {value!r}") from err

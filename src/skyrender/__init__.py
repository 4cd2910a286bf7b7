"""Render sky component catalogues onto image cubes."""

from skyrender import constants
from skyrender.core import (
    AxisRoles,
    ComponentType,
    ConstantSpectrum,
    DiskShape,
    Flux,
    GaussianShape,
    PointShape,
    SkyComponent,
    SkyImage,
    SpectralIndex,
    Stokes,
    project,
)
from skyrender.errors import (
    ConfigurationError,
    DirectionConversionError,
    SkyRenderError,
    UnsupportedShapeError,
)
from skyrender.loaders import components_from_dicts, load_components
from skyrender.settings import Settings

__all__ = [
    "constants",
    "AxisRoles",
    "ComponentType",
    "ConstantSpectrum",
    "DiskShape",
    "Flux",
    "GaussianShape",
    "PointShape",
    "SkyComponent",
    "SkyImage",
    "SpectralIndex",
    "Stokes",
    "project",
    "Settings",
    "SkyRenderError",
    "ConfigurationError",
    "UnsupportedShapeError",
    "DirectionConversionError",
    "components_from_dicts",
    "load_components",
]

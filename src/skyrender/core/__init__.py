"""Core classes and functions for skyrender."""

from skyrender.core.components import (
    ComponentType,
    ConstantSpectrum,
    DiskShape,
    Flux,
    GaussianShape,
    PointShape,
    SkyComponent,
    SpectralIndex,
    Stokes,
)
from skyrender.core.coordinates import AxisRoles, make_position, resolve_axis_roles
from skyrender.core.image import SkyImage
from skyrender.core.imager import project

__all__ = [
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
    "make_position",
    "project",
    "resolve_axis_roles",
]

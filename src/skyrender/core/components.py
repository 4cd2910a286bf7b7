"""Sky component objects: shapes, spectral models, flux and polarization.

Shapes and spectral models are closed sets of immutable variants. Renderers
dispatch on them with structural pattern matching, never by downcasting.
"""

import enum
from typing import ClassVar, final

import astropy.units as u
import equinox as eqx
import numpy as np
from astropy.coordinates import SkyCoord


class Stokes(enum.IntEnum):
    """Polarization products, numbered with the FITS STOKES axis codes."""

    I = 1  # noqa: E741
    Q = 2
    U = 3
    V = 4
    RR = -1
    LL = -2
    RL = -3
    LR = -4
    XX = -5
    YY = -6
    XY = -7
    YX = -8

    def is_iquv(self) -> bool:
        """Whether this is one of the Stokes I, Q, U or V parameters."""
        return self in (Stokes.I, Stokes.Q, Stokes.U, Stokes.V)


class ComponentType(enum.Enum):
    """Type tags for component shapes and spectral models."""

    POINT = "point"
    GAUSSIAN = "gaussian"
    DISK = "disk"
    CONSTANT_SPECTRUM = "constant"
    SPECTRAL_INDEX = "spectral_index"


def _angle(value, name) -> u.Quantity:
    angle = u.Quantity(value)
    if not angle.unit.is_equivalent(u.rad):
        raise ValueError(f"{name} must be an angle, got unit {angle.unit}")
    if angle.ndim != 0 or not np.isfinite(angle.value):
        raise ValueError(f"{name} must be a finite scalar angle")
    return angle


def _frequency(value) -> u.Quantity:
    freq = value if isinstance(value, u.Quantity) else value * u.Hz
    try:
        freq.to(u.Hz, equivalencies=u.spectral())
    except u.UnitConversionError as err:
        raise ValueError(f"{value} cannot be expressed as a frequency") from err
    return freq


@final
class Flux(eqx.Module):
    """Stokes I, Q, U and V flux density of a component at its reference frequency.

    Attributes:
        values:
            Length-4 Quantity in a spectral flux density unit (e.g. Jy).
    """

    values: u.Quantity

    def __init__(self, values, unit=u.Jy):
        """Initialize the Flux.

        Args:
            values:
                Either a scalar (Stokes I only) or a sequence of four values
                ordered I, Q, U, V. Quantities keep their own unit.
            unit:
                Unit applied to plain numbers.
        """
        quantity = u.Quantity(values, unit)
        if quantity.ndim == 0:
            quantity = u.Quantity([quantity.value, 0.0, 0.0, 0.0], quantity.unit)
        if quantity.shape != (4,):
            raise ValueError(f"Flux needs 4 Stokes values, got shape {quantity.shape}")
        if not quantity.unit.is_equivalent(u.Jy):
            raise ValueError(f"Flux unit {quantity.unit} is not a flux density")
        self.values = quantity

    def value(self, stokes: Stokes, unit=u.Jy) -> float:
        """Return the flux of one Stokes parameter as a float in ``unit``."""
        stokes = Stokes(stokes)
        if not stokes.is_iquv():
            raise ValueError(f"Flux holds only Stokes I, Q, U and V, not {stokes.name}")
        return float(self.values[stokes.value - 1].to_value(unit))

    def scaled(self, factor: float) -> "Flux":
        """Return a new Flux with every polarization multiplied by ``factor``."""
        return Flux(self.values * factor)


# Shapes
@final
class PointShape(eqx.Module):
    """An unresolved source."""

    kind: ClassVar[ComponentType] = ComponentType.POINT


class AbstractEllipticalShape(eqx.Module):
    """Base class for shapes described by two FWHM axes and a position angle.

    Only the final subclasses GaussianShape and DiskShape are instantiated.
    """

    major_axis: u.Quantity
    minor_axis: u.Quantity
    position_angle: u.Quantity

    def __init__(self, major_axis, minor_axis, position_angle=0.0 * u.deg):
        """Initialize the shape from FWHM axis lengths and a position angle.

        Args:
            major_axis: FWHM of the major axis as an angle.
            minor_axis: FWHM of the minor axis as an angle.
            position_angle: Angle of the major axis, north through east.
        """
        major_axis = _angle(major_axis, "major_axis")
        minor_axis = _angle(minor_axis, "minor_axis")
        if major_axis.value < 0 or minor_axis.value < 0:
            raise ValueError("Axis lengths must be non-negative")
        self.major_axis = major_axis
        self.minor_axis = minor_axis
        self.position_angle = _angle(position_angle, "position_angle")

    @property
    def major_axis_rad(self) -> float:
        """Major axis FWHM in radians."""
        return float(self.major_axis.to_value(u.rad))

    @property
    def minor_axis_rad(self) -> float:
        """Minor axis FWHM in radians."""
        return float(self.minor_axis.to_value(u.rad))

    @property
    def position_angle_rad(self) -> float:
        """Position angle in radians."""
        return float(self.position_angle.to_value(u.rad))


@final
class GaussianShape(AbstractEllipticalShape):
    """An elliptical Gaussian brightness distribution."""

    kind: ClassVar[ComponentType] = ComponentType.GAUSSIAN


@final
class DiskShape(AbstractEllipticalShape):
    """A uniform elliptical disk. Catalogued but not rendered."""

    kind: ClassVar[ComponentType] = ComponentType.DISK


# Spectral models
@final
class ConstantSpectrum(eqx.Module):
    """A flat spectrum."""

    reference_frequency: u.Quantity | None
    kind: ClassVar[ComponentType] = ComponentType.CONSTANT_SPECTRUM

    def __init__(self, reference_frequency=None):
        """Initialize the spectrum with an optional reference frequency."""
        self.reference_frequency = (
            None if reference_frequency is None else _frequency(reference_frequency)
        )

    def sample(self, frequency) -> float:
        """Return the flux scale factor at ``frequency`` (always 1)."""
        return 1.0


@final
class SpectralIndex(eqx.Module):
    """A power-law spectrum, S(f) = S(f0) * (f / f0) ** index."""

    index: float
    reference_frequency: u.Quantity
    kind: ClassVar[ComponentType] = ComponentType.SPECTRAL_INDEX

    def __init__(self, index: float, reference_frequency):
        """Initialize the spectrum.

        Args:
            index: The spectral index alpha.
            reference_frequency: Frequency at which the component flux is given.
        """
        self.index = float(index)
        self.reference_frequency = _frequency(reference_frequency)

    def sample(self, frequency) -> float:
        """Return the flux scale factor at ``frequency``.

        Args:
            frequency: A Quantity, or a plain number taken to be in Hz.
        """
        if not isinstance(frequency, u.Quantity):
            frequency = frequency * u.Hz
        f = frequency.to_value(u.Hz, equivalencies=u.spectral())
        f0 = self.reference_frequency.to_value(u.Hz, equivalencies=u.spectral())
        return float((f / f0) ** self.index)


@final
class SkyComponent(eqx.Module):
    """A single parametric source of sky brightness."""

    direction: SkyCoord
    flux: Flux
    shape: PointShape | GaussianShape | DiskShape
    spectrum: ConstantSpectrum | SpectralIndex
    name: str

    def __init__(
        self,
        direction: SkyCoord,
        flux: Flux,
        shape=None,
        spectrum=None,
        name: str = "",
    ):
        """Initialize the SkyComponent.

        Args:
            direction: Scalar sky position of the component.
            flux: Stokes flux at the reference frequency of the spectrum.
            shape: Spatial shape, a point source by default.
            spectrum: Spectral model, a constant spectrum by default.
            name: Optional label used in log messages.
        """
        if not isinstance(direction, SkyCoord) or not direction.isscalar:
            raise ValueError("direction must be a scalar SkyCoord")
        self.direction = direction
        self.flux = flux if isinstance(flux, Flux) else Flux(flux)
        self.shape = PointShape() if shape is None else shape
        self.spectrum = ConstantSpectrum() if spectrum is None else spectrum
        self.name = name

"""Spectral scaling and Taylor-term transforms of component flux.

For wideband (multi-frequency synthesis) imaging the sky brightness is
expanded as a Taylor series in frequency about the reference frequency.
For a power-law spectrum with index alpha and curvature beta the first three
coefficients are

    I0 = I(f)
    I1 = I(f) * alpha
    I2 = I(f) * (0.5 * alpha * (alpha - 1) + beta)

No curvature is ever stored on a component, so beta is always zero here.
"""

from skyrender.core.components import (
    ConstantSpectrum,
    Flux,
    SkyComponent,
    SpectralIndex,
)
from skyrender.errors import ConfigurationError

TAYLOR_TERMS = (0, 1, 2)


def check_taylor_term(term: int):
    """Raise ConfigurationError unless ``term`` is 0, 1 or 2."""
    if term not in TAYLOR_TERMS:
        raise ConfigurationError("Only support taylor terms 0, 1 & 2")


def spectral_scale(spectrum, frequency_hz: float) -> float:
    """Return the factor scaling the reference flux to ``frequency_hz``."""
    match spectrum:
        case ConstantSpectrum():
            return 1.0
        case SpectralIndex():
            return spectrum.sample(frequency_hz)
        case _:
            raise ConfigurationError("Unsupported spectral model")


def spectral_index_of(spectrum) -> float:
    """Return alpha for a power-law spectrum and 0 for any other model."""
    match spectrum:
        case SpectralIndex(index=alpha):
            return alpha
        case _:
            return 0.0


def taylor_factor(alpha: float, term: int, beta: float = 0.0) -> float:
    """Return the multiplier turning I(f) into Taylor coefficient ``term``.

    Args:
        alpha: Spectral index.
        term: Taylor term, 0, 1 or 2.
        beta: Spectral curvature.

    Raises:
        ConfigurationError: For any other term.
    """
    check_taylor_term(term)
    if term == 0:
        return 1.0
    if term == 1:
        return alpha
    return 0.5 * alpha * (alpha - 1.0) + beta


def scaled_flux(component: SkyComponent, frequency_hz: float, term: int) -> Flux:
    """Return the component flux at a frequency for the given Taylor term.

    The spectral scale is applied uniformly to every polarization, then the
    Taylor-term factor.

    Args:
        component: The sky component.
        frequency_hz: Channel frequency in Hz.
        term: Taylor term, 0, 1 or 2.

    Returns:
        The scaled Stokes flux.

    Raises:
        ConfigurationError:
            For an unsupported spectral model or Taylor term.
    """
    scale = spectral_scale(component.spectrum, frequency_hz)
    factor = taylor_factor(spectral_index_of(component.spectrum), term)
    return component.flux.scaled(scale).scaled(factor)

"""Exceptions raised by skyrender.

Every failure is fatal for the rendering call that raised it. Components that
fall outside the image are culled silently and never raise.
"""


class SkyRenderError(Exception):
    """Base class for all skyrender errors."""


class ConfigurationError(SkyRenderError, ValueError):
    """The image coordinates, catalogue or call arguments are unsupported."""


class UnsupportedShapeError(ConfigurationError):
    """A component shape has no renderer."""


class DirectionConversionError(SkyRenderError, ValueError):
    """A world direction could not be converted to pixel coordinates."""

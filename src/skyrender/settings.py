"""Configuration management for component imaging.

This module provides the Settings class that controls the tunable policies of
the component imager. Settings are built from defaults, optionally updated
from a TOML file, and finally overridden by a dictionary of custom values.

The Settings class controls:
- The minor-axis threshold below which Gaussians are integrated as 1D ridges
- The largest Simpson sub-step used by the 2D pixel integral
- The tolerance of the equal pixel-scale check for Gaussian rendering
- Whether a rendering call is applied atomically
- The level of the package logger

The module supports both Python 3.11+ (tomllib) and older versions (toml
package) for TOML file parsing.
"""

import math

try:
    import tomllib

    HAS_TOMLLIB = True
except ImportError:
    import toml

    HAS_TOMLLIB = False

from skyrender import constants as const
from skyrender.logger import LEVELS, set_level


class Settings:
    """Configuration manager for component imaging.

    Attributes:
        narrow_threshold (float):
            Minor axis in pixels below which a Gaussian is rendered with the 1D
            line-integral path. Reference outputs are produced with 1e-3.
        max_quadrature_step (float):
            Largest sub-step of the 2D Simpson integral, in pixels. Must be a
            power-of-two fraction of a pixel.
        pixel_scale_rtol (float):
            Relative tolerance used when checking that both direction axes
            have the same pixel scale.
        atomic (bool):
            If True, a rendering call accumulates into a scratch image that is
            merged into the target only once every component succeeded. If
            False, updates made before a failure remain in the target.
        log_level (str):
            Level name applied to the package logger by apply_logging().
    """

    def __init__(self, toml_file=None, custom_settings=None):
        """Initialize Settings with default values and optional configuration.

        Args:
            toml_file (str or pathlib.Path, optional):
                Path to TOML configuration file. If provided, settings will
                be loaded from this file after applying defaults.
            custom_settings (dict, optional):
                Dictionary of custom setting overrides. Keys must correspond
                to valid Settings attributes. Applied after TOML file loading.

        Raises:
            AttributeError:
                If custom_settings contains keys that don't correspond to
                valid Settings attributes.
            ValueError:
                If a setting has an invalid value.
        """
        # Default settings
        self.narrow_threshold = const.narrow_threshold
        self.max_quadrature_step = const.max_quadrature_step
        self.pixel_scale_rtol = const.pixel_scale_rtol
        self.atomic = False
        self.log_level = "INFO"

        if toml_file:
            self.load_settings(toml_file)

        if custom_settings:
            for key, value in custom_settings.items():
                if hasattr(self, key):
                    setattr(self, key, value)
                else:
                    raise AttributeError(f"{key} is not a valid setting.")

        self.validate()

    def __repr__(self):
        """Return a string representation of the Settings object."""
        attrs = vars(self)
        parts = ["Settings:"]
        for key, value in attrs.items():
            parts.append(f"  {key}: {value}")
        return "\n".join(parts)

    def validate(self):
        """Check that every setting holds a usable value.

        Raises:
            ValueError:
                If a threshold or step is out of range.
        """
        if not self.narrow_threshold > 0:
            raise ValueError(
                f"narrow_threshold must be positive, got {self.narrow_threshold}"
            )
        step = self.max_quadrature_step
        if not 0 < step <= 1 or not math.log2(step).is_integer():
            raise ValueError(
                "max_quadrature_step must be a power-of-two fraction of a pixel, "
                f"got {step}"
            )
        if self.pixel_scale_rtol < 0:
            raise ValueError(
                f"pixel_scale_rtol must be non-negative, got {self.pixel_scale_rtol}"
            )
        if self.log_level.upper() not in LEVELS:
            raise ValueError(f"Unknown log level {self.log_level!r}")

    def apply_logging(self):
        """Set the package logger to the configured level."""
        set_level(self.log_level)

    def load_settings(self, toml_file):
        """Load configuration settings from a TOML file.

        Only settings present in the file are updated.

        Example TOML structure:
            [rendering]
            narrow_threshold = 1e-3
            max_quadrature_step = 0.03125
            pixel_scale_rtol = 1e-10
            atomic = false

            [logging]
            level = "DEBUG"
        """
        # Load the TOML file
        if HAS_TOMLLIB:
            with open(toml_file, "rb") as file:
                config = tomllib.load(file)
        else:
            config = toml.load(toml_file)

        if "rendering" in config:
            rendering = config["rendering"]
            if (threshold := rendering.get("narrow_threshold")) is not None:
                self.narrow_threshold = float(threshold)
            if (step := rendering.get("max_quadrature_step")) is not None:
                self.max_quadrature_step = float(step)
            if (rtol := rendering.get("pixel_scale_rtol")) is not None:
                self.pixel_scale_rtol = float(rtol)
            if (atomic := rendering.get("atomic")) is not None:
                self.atomic = atomic

        if "logging" in config:
            if (level := config["logging"].get("level")) is not None:
                self.log_level = level

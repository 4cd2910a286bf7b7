"""Tests for the Settings class in skyrender.settings."""

import logging

import pytest

from skyrender import constants as const
from skyrender.logger import logger, set_level
from skyrender.settings import Settings


class TestSettings:
    """Tests for building Settings from defaults, files and overrides."""

    def test_defaults(self):
        """Defaults should match the package constants."""
        settings = Settings()
        assert settings.narrow_threshold == const.narrow_threshold
        assert settings.max_quadrature_step == const.max_quadrature_step
        assert settings.pixel_scale_rtol == const.pixel_scale_rtol
        assert settings.atomic is False
        assert settings.log_level == "INFO"

    def test_custom(self):
        """Custom settings override the defaults."""
        settings = Settings(custom_settings={"narrow_threshold": 1e-2, "atomic": True})
        assert settings.narrow_threshold == 1e-2
        assert settings.atomic is True

    def test_unknown_key(self):
        """Unknown settings are rejected."""
        with pytest.raises(AttributeError):
            Settings(custom_settings={"not_a_setting": 1})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"narrow_threshold": 0.0},
            {"max_quadrature_step": 0.1},
            {"max_quadrature_step": 2.0},
            {"pixel_scale_rtol": -1.0},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, overrides):
        """Out of range values are rejected."""
        with pytest.raises(ValueError):
            Settings(custom_settings=overrides)

    def test_toml_file(self, tmp_path):
        """Settings are read from the rendering and logging tables."""
        path = tmp_path / "settings.toml"
        path.write_text(
            "[rendering]\n"
            "narrow_threshold = 0.005\n"
            "max_quadrature_step = 0.0625\n"
            "atomic = true\n"
            "\n"
            "[logging]\n"
            'level = "DEBUG"\n'
        )
        settings = Settings(toml_file=path)
        assert settings.narrow_threshold == 0.005
        assert settings.max_quadrature_step == 0.0625
        assert settings.pixel_scale_rtol == const.pixel_scale_rtol
        assert settings.atomic is True
        assert settings.log_level == "DEBUG"

    def test_custom_after_toml(self, tmp_path):
        """Custom settings are applied after the TOML file."""
        path = tmp_path / "settings.toml"
        path.write_text("[rendering]\natomic = true\n")
        settings = Settings(toml_file=path, custom_settings={"atomic": False})
        assert settings.atomic is False

    def test_apply_logging(self):
        """The package logger takes the configured level."""
        previous = logger.level
        try:
            Settings(custom_settings={"log_level": "debug"}).apply_logging()
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_repr(self):
        """The representation lists every setting."""
        text = repr(Settings())
        assert "narrow_threshold" in text
        assert "atomic" in text


class TestLogger:
    """Tests for the package logger helpers."""

    def test_set_level(self):
        """Level names are case insensitive."""
        previous = logger.level
        try:
            set_level("warning")
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(previous)

    def test_unknown_level(self):
        """Unknown level names are rejected."""
        with pytest.raises(ValueError):
            set_level("LOUD")

    def test_no_propagation(self):
        """The package logger does not forward to the root logger."""
        assert logger.propagate is False
        assert len(logger.handlers) == 1

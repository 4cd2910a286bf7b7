"""Catalogue loader utilities for skyrender."""

from skyrender.loaders.catalogue import components_from_dicts, load_components

__all__ = [
    "components_from_dicts",
    "load_components",
]

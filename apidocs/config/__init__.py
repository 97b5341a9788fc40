"""Configuration management utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apidocs.config.settings import (
        ConfigurationError,
        GeneratorSettings,
        load_config,
        load_settings,
    )

__all__ = [
    "ConfigurationError",
    "GeneratorSettings",
    "load_config",
    "load_settings",
]


def __getattr__(name: str):
    if name in __all__:
        from apidocs.config import settings

        return getattr(settings, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

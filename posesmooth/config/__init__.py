"""Configuration module for posesmooth."""

from posesmooth.config.settings import (
    Settings,
    FilterConfig,
    FilterVariant,
    ScalePolicy,
)

__all__ = ["Settings", "FilterConfig", "FilterVariant", "ScalePolicy"]

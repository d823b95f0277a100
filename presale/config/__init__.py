"""Configuration package."""

from presale.config.settings import Settings, settings


__all__ = ["Settings", "settings"]

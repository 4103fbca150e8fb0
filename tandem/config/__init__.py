"""Configuration package for Tandem."""

from tandem.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

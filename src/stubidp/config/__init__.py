"""Configuration package for stubidp."""

from .settings import Dialect, Settings, get_settings, reset_settings

__all__ = ["Dialect", "Settings", "get_settings", "reset_settings"]

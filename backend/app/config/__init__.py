"""Configuration package for the investment evolution service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]

"""Configuration package for the portfolio tracker."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]

"""Configuration for the relay server."""

from .settings import AppConfig

__all__ = ["AppConfig"]

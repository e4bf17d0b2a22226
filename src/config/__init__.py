"""Configuration for Novus Academica."""

from src.config.settings import PROJECT_ROOT, Settings, settings

__all__ = ["PROJECT_ROOT", "Settings", "settings"]

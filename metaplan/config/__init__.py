"""Configuration package for Metaplan."""

from metaplan.config.settings import Settings

__all__ = ["Settings"]

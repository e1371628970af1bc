"""Metaplan: prioritized daily tasks, horizon goals and core values with remote sync."""

__version__ = "0.1.0"

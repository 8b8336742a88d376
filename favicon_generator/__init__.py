"""Favicon Generator: derive a complete favicon set from a single image."""

__version__ = "0.1.0"

"""Texture build driver with one-shot and persistent modes."""

__version__ = "1.0.0"

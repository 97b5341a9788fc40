"""Render API reference documentation from a structured API model."""

__version__ = "0.1.0"

"""Packaging unit conversion and price resolution for a tile & ceramics counter."""

__version__ = "0.1.0"

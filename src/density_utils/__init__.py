"""Density Utils - Utilities for filling in missing ingredient densities."""

__version__ = "0.1.0"

from . import bedrock, ingredients, tables

__all__ = ["bedrock", "ingredients", "tables"]

"""
Bronze Spark schemas and silver table layouts.
"""

from . import bronze, silver

__all__ = ["bronze", "silver"]

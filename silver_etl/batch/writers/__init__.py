"""
Silver table writers.
"""

from .silver_writer import SilverTableWriter

__all__ = [
    "SilverTableWriter",
]

"""
Readers for raw (bronze) entity batches.
"""

from .csv_reader import CSVBronzeReader, CSVReader
from .postgres_reader import PostgresBronzeReader

__all__ = [
    "CSVReader",
    "CSVBronzeReader",
    "PostgresBronzeReader",
]

"""
Spark batch processing module.
"""

from .loader import BatchLoader
from .pipeline import SilverPipeline
from .readers import CSVBronzeReader, CSVReader, PostgresBronzeReader
from .session import create_spark_session
from .writers import SilverTableWriter

__all__ = [
    "BatchLoader",
    "SilverPipeline",
    "CSVReader",
    "CSVBronzeReader",
    "PostgresBronzeReader",
    "SilverTableWriter",
    "create_spark_session",
]

"""
Core data models for the silver-layer pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .error_log_entry import ErrorLogEntry
from .load_result import LoadResult
from .run_summary import PipelineRunSummary

__all__ = [
    "ErrorLogEntry",
    "LoadResult",
    "PipelineRunSummary",
]

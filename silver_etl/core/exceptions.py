"""
Exception hierarchy for the silver-layer pipeline.
"""


class SilverPipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(SilverPipelineError):
    """Raised when the pipeline configuration is missing or invalid."""


class EntityTransformError(SilverPipelineError):
    """Raised when an entity's raw batch cannot be transformed."""

    def __init__(self, entity_name: str, message: str):
        self.entity_name = entity_name
        self.message = message
        super().__init__(f"[{entity_name}] {message}")


class StoreUnavailableError(SilverPipelineError):
    """
    Raised when the destination store cannot be reached.

    Affects every entity equally, so it is never isolated per entity.
    """

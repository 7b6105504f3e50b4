"""
Pipeline configuration.

Loads pipeline settings from a YAML file and database settings from the
environment (optionally seeded from a .env file).
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from silver_etl.core.entities import DEFAULT_LOAD_ORDER, ENTITIES
from silver_etl.core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "config/pipeline.yaml"


class SparkSettings(BaseModel):
    """Spark session settings"""

    app_name: str = "silver-etl"
    master: str = "local[*]"
    shuffle_partitions: int = Field(8, ge=1)


class PipelineConfig(BaseModel):
    """
    Settings for one bronze -> silver run.

    Attributes:
        bronze_source: Where raw batches come from ("postgres" or "csv")
        bronze_schema: Postgres schema holding the bronze tables
        bronze_dir: Directory of raw CSV exports (csv source only)
        silver_schema: Postgres schema receiving the silver tables
        entities: Entities to load, in load order
        spark: Spark session settings
    """

    bronze_source: Literal["postgres", "csv"] = "postgres"
    bronze_schema: str = Field("bronze", min_length=1)
    bronze_dir: str | None = Field(None, validate_default=True)
    silver_schema: str = Field("silver", min_length=1)
    entities: list[str] = Field(default_factory=lambda: list(DEFAULT_LOAD_ORDER))
    spark: SparkSettings = Field(default_factory=SparkSettings)

    @field_validator("entities")
    @classmethod
    def check_entities_known(cls, v):
        """Every entity must be registered and listed once."""
        unknown = [name for name in v if name not in ENTITIES]
        if unknown:
            raise ValueError(f"unknown entities: {unknown}")
        if len(set(v)) != len(v):
            raise ValueError("entities must not repeat")
        return v

    @field_validator("bronze_dir")
    @classmethod
    def check_bronze_dir(cls, v, info):
        if info.data.get("bronze_source") == "csv" and not v:
            raise ValueError("bronze_dir is required when bronze_source is 'csv'")
        return v


class PipelineConfigLoader:
    """
    Loads pipeline settings from a YAML file.

    Expected YAML format:
    ```yaml
    pipeline:
      bronze_source: postgres
      bronze_schema: bronze
      silver_schema: silver
      entities:
        - crm_cust_info
        - crm_prd_info
      spark:
        app_name: silver-etl
        master: local[*]
    ```
    """

    def __init__(self, config_path: str | Path, env_file: str | Path | None = None):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file
            env_file: Optional .env file loaded into the environment
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise ConfigurationError(f"Pipeline configuration file not found: {config_path}")

        self.env_file = env_file

    def load(self, **overrides: Any) -> PipelineConfig:
        """
        Parse and validate the configuration.

        Args:
            **overrides: Values that replace the file's settings (e.g. from CLI flags);
                None values are ignored

        Returns:
            Validated PipelineConfig

        Raises:
            ConfigurationError: If the YAML is invalid or fails validation
        """
        if self.env_file is not None:
            load_dotenv(self.env_file, override=False)

        with open(self.config_path) as f:
            try:
                config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict) or "pipeline" not in config:
            raise ConfigurationError("Configuration file must contain 'pipeline' section")

        settings = dict(config["pipeline"] or {})
        settings.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return PipelineConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid pipeline configuration: {e}") from e


def load_config(config_path: str | Path | None = None, **overrides: Any) -> PipelineConfig:
    """
    Load the pipeline configuration, falling back to defaults when the
    default config file is absent.
    """
    if config_path is None:
        if not Path(DEFAULT_CONFIG_PATH).exists():
            load_dotenv(override=False)
            try:
                return PipelineConfig(**{k: v for k, v in overrides.items() if v is not None})
            except ValidationError as e:
                raise ConfigurationError(f"Invalid pipeline configuration: {e}") from e
        config_path = DEFAULT_CONFIG_PATH

    return PipelineConfigLoader(config_path, env_file=".env" if Path(".env").exists() else None).load(**overrides)

"""
Command-line interface for the silver-layer pipeline.

Usage:
    python -m silver_etl.cli.silver_cli run [options]
    python -m silver_etl.cli.silver_cli init-schema [--with-bronze]
    python -m silver_etl.cli.silver_cli errors [--entity NAME] [--limit N]
"""

import argparse
import sys

from silver_etl.batch import (
    CSVBronzeReader,
    PostgresBronzeReader,
    SilverPipeline,
    SilverTableWriter,
    create_spark_session,
)
from silver_etl.core.config import PipelineConfig, load_config
from silver_etl.core.exceptions import ConfigurationError, StoreUnavailableError
from silver_etl.observability import metrics
from silver_etl.observability.logger import LOG_LEVELS, get_logger, setup_logger
from silver_etl.warehouse.connection import DatabaseConnectionPool
from silver_etl.warehouse.error_log import ErrorLogSink, query_error_log
from silver_etl.warehouse.schema_mgmt import SchemaManager

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 2
EXIT_FATAL = 1


def _build_pool(args) -> DatabaseConnectionPool:
    return DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )


def _load_config(args) -> PipelineConfig:
    overrides = {}
    if getattr(args, "entity", None):
        overrides["entities"] = args.entity
    if getattr(args, "bronze_dir", None):
        overrides["bronze_source"] = "csv"
        overrides["bronze_dir"] = args.bronze_dir
    return load_config(args.config, **overrides)


def run_command(args) -> int:
    """
    Execute a full bronze -> silver run.

    Returns:
        Process exit code: 0 when every entity loaded, 2 when some failed
    """
    config = _load_config(args)
    logger.info(
        f"Starting silver load for entities: {', '.join(config.entities)}",
        extra={"bronze_source": config.bronze_source},
    )

    if args.metrics_port:
        metrics.start_metrics_server(args.metrics_port)

    pool = _build_pool(args)
    pool.open()
    spark = None

    try:
        spark = create_spark_session(
            config.spark.app_name,
            config.spark.master,
            config.spark.shuffle_partitions,
        )
        SchemaManager(pool).ensure_silver_schema(config.silver_schema, config.entities)

        if config.bronze_source == "csv":
            reader = CSVBronzeReader(spark, config.bronze_dir)
        else:
            reader = PostgresBronzeReader(spark, pool, config.bronze_schema)

        pipeline = SilverPipeline(
            reader=reader,
            write_fn=SilverTableWriter(pool, config.silver_schema),
            error_sink=ErrorLogSink(pool, config.silver_schema),
            entities=config.entities,
        )
        summary = pipeline.run()
    finally:
        pool.close()
        if spark is not None:
            spark.stop()

    logger.info("=" * 60)
    logger.info("SILVER LOAD COMPLETE")
    logger.info("=" * 60)
    for result in summary.results:
        if result.succeeded:
            logger.info(f"{result.entity_name}: {result.rows_written} rows ({result.duration_seconds:.2f}s)")
        else:
            logger.error(f"{result.entity_name}: FAILED - {result.error_message}")
    logger.info(f"Errors: {summary.error_count}")
    logger.info("=" * 60)

    return EXIT_OK if summary.error_count == 0 else EXIT_PARTIAL


def init_schema_command(args) -> int:
    """Create the silver (and optionally bronze) tables."""
    config = _load_config(args)

    with _build_pool(args) as pool:
        manager = SchemaManager(pool)
        if args.with_bronze:
            manager.ensure_bronze_schema(config.bronze_schema, config.entities)
        manager.ensure_silver_schema(config.silver_schema, config.entities)

    return EXIT_OK


def errors_command(args) -> int:
    """Print recent error log entries."""
    config = _load_config(args)

    with _build_pool(args) as pool:
        entries = query_error_log(
            pool,
            schema=config.silver_schema,
            entity_name=args.entity_filter,
            limit=args.limit,
        )

    if not entries:
        print("No errors recorded.")
        return EXIT_OK

    for entry in entries:
        print(f"{entry.occurred_at.isoformat()}  {entry.entity_name:<20}  {entry.error_message}")
    return EXIT_OK


def _add_db_arguments(parser: argparse.ArgumentParser) -> None:
    """Database connection flags; unset flags fall back to DB_* env vars."""
    parser.add_argument("--db-host", help="Database host (default: $DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: $DB_PORT or 5432)")
    parser.add_argument("--db-name", help="Database name (default: $DB_NAME or datawarehouse)")
    parser.add_argument("--db-user", help="Database user (default: $DB_USER or pipeline)")
    parser.add_argument("--db-password", help="Database password (default: $DB_PASSWORD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="silver-etl",
        description="Bronze to silver cleaning pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load every entity from the bronze schema
  silver-etl run

  # Load two entities from CSV extracts
  silver-etl run --bronze-dir datasets/ --entity crm_cust_info --entity crm_sales_details

  # Create bronze and silver tables
  silver-etl init-schema --with-bronze

  # Show the latest failures for one entity
  silver-etl errors --entity crm_prd_info --limit 10
        """
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to pipeline YAML (default: config/pipeline.yaml when present)"
    )
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        help="Log level (default: $LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        help="Log output format (default: $LOG_FORMAT or json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Load silver tables from bronze")
    run_parser.add_argument(
        "--entity",
        action="append",
        help="Entity to load (repeatable, default: all configured entities)"
    )
    run_parser.add_argument(
        "--bronze-dir",
        help="Read raw batches from CSV extracts in this directory"
    )
    run_parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port during the run"
    )
    _add_db_arguments(run_parser)

    init_parser = subparsers.add_parser("init-schema", help="Create warehouse tables")
    init_parser.add_argument(
        "--with-bronze",
        action="store_true",
        help="Also create the bronze schema and tables"
    )
    _add_db_arguments(init_parser)

    errors_parser = subparsers.add_parser("errors", help="Show recent error log entries")
    errors_parser.add_argument("--entity", dest="entity_filter", help="Only this entity")
    errors_parser.add_argument("--limit", type=int, default=20, help="Maximum entries (default: 20)")
    _add_db_arguments(errors_parser)

    return parser


COMMANDS = {
    "run": run_command,
    "init-schema": init_schema_command,
    "errors": errors_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FATAL

    if args.log_level or args.log_format:
        setup_logger(level=args.log_level, format_type=args.log_format)

    try:
        return COMMANDS[args.command](args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_FATAL
    except StoreUnavailableError as e:
        logger.critical(f"Warehouse unavailable: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())

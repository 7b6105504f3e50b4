"""
Bronze -> silver cleaning pipeline.

Reads raw CRM and ERP extracts, cleans them entity by entity with Spark and
replaces the silver tables in PostgreSQL.
"""

__version__ = "1.0.0"

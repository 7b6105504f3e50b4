"""
PostgreSQL access: connection pool, schema management and the error log.
"""

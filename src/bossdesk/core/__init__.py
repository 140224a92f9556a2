"""bossdesk core -- errors, logging, settings and the database boundary.

Architecture::

    errors.py        Typed error hierarchy (BossDeskError, detection errors)
    logging.py       structlog configuration + get_logger
    settings.py      BossDeskSettings (pydantic-settings, BOSSDESK_*)
    connection.py    ConnectionConfig + schema name validation
    protocols.py     Executor protocol (execute / execute_write)
    executor.py      PostgresExecutor (psycopg2 ThreadedConnectionPool)
    cancellation.py  CancellationToken + RefreshLoop
"""

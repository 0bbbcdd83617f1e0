"""
==================================================
Database connectivity utilities for PostgreSQL.
==================================================

Provides the engine factory and driver-error classification shared by the
connection provider, the execution layer and database provisioning.

Key Features:
    - SQLAlchemy engine (connection pool) creation
    - Detection of "database does not exist" failures

Example:
    >>> from utils.database_utils import create_sqlalchemy_engine, is_missing_database_error
    >>>
    >>> engine = create_sqlalchemy_engine()
    >>> try:
    ...     with engine.connect() as conn:
    ...         conn.exec_driver_sql("SELECT 1")
    ... except SQLAlchemyError as e:
    ...     if is_missing_database_error(e, config.db_name):
    ...         print("Target database has not been created yet")
"""

import logging
import re
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from core.config import DatabaseConfig, config

logger = logging.getLogger(__name__)

# SQLSTATE invalid_catalog_name
MISSING_DATABASE_SQLSTATE = '3D000'

_MISSING_DATABASE_MESSAGE = re.compile(r'database "(?P<name>[^"]+)" does not exist')


class DatabaseConnectionError(Exception):
    """Exception raised when no database connection is available."""
    pass


def create_sqlalchemy_engine(
    db_config: Optional[DatabaseConfig] = None,
    admin: bool = False,
    echo: bool = False,
    isolation_level: Optional[str] = None,
    pool_size: int = 5,
    max_overflow: int = 10
) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    Args:
        db_config: Connection settings (defaults to config.db)
        admin: If True, connect to the administrative database
        echo: Enable SQL statement logging
        isolation_level: Optional isolation level (e.g. 'AUTOCOMMIT')
        pool_size: Connection pool size
        max_overflow: Maximum overflow connections

    Returns:
        Configured SQLAlchemy Engine
    """
    db_config = db_config or config.db

    connection_url = URL.create(
        drivername='postgresql',
        username=db_config.user,
        password=db_config.password,
        host=db_config.host,
        port=db_config.port,
        database=db_config.admin_db if admin else db_config.database
    )

    engine_kwargs = {
        'echo': echo,
        'pool_size': pool_size,
        'max_overflow': max_overflow,
        'pool_pre_ping': True
    }
    if isolation_level:
        engine_kwargs['isolation_level'] = isolation_level

    return create_engine(connection_url, **engine_kwargs)


def is_missing_database_error(error: BaseException, database_name: Optional[str] = None) -> bool:
    """
    Check whether a driver error means the target database does not exist.

    psycopg2 reports SQLSTATE 3D000 on ``pgcode`` for errors raised by the
    server, but connect-time failures only carry libpq's message text
    (``FATAL:  database "x" does not exist``), so both are checked.

    Args:
        error: SQLAlchemy or DBAPI exception
        database_name: If given, only a failure naming this database counts

    Returns:
        True if the error signals a missing database
    """
    original = getattr(error, 'orig', None) or error
    message = str(original)
    match = _MISSING_DATABASE_MESSAGE.search(message)

    if getattr(original, 'pgcode', None) == MISSING_DATABASE_SQLSTATE:
        return database_name is None or match is None or match.group('name') == database_name

    if match is None:
        return False

    return database_name is None or match.group('name') == database_name

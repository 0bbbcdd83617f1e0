"""
==================================
Connection provider.
==================================

``Database`` owns the one SQLAlchemy engine (connection pool) shared by every
builder created from it. Create it once at startup and pass it around; the
engine is built lazily on first use and replaced only by the execution layer
when it recreates a missing database.

Two entry points:

- ``table(name)``: a ``TableQuery`` bound to this database
- ``query(sql)``: raw SQL, split on ``;`` and run statement by statement,
  returning a ``{'status', 'message', 'data'}`` dictionary instead of raising

Example:
    >>> from db import Database
    >>>
    >>> db = Database()
    >>> db.table('users').insert([{'name': 'Alice', 'age': 28}])
    >>> db.query('SELECT COUNT(*) AS total FROM users;')
    {'status': 'success', 'message': 'Query executed successfully', 'data': [{'total': 1}]}
    >>> db.close()
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.engine import Engine

from core.config import DatabaseConfig, config
from db.executor import StatementExecutor
from db.table_query import TableQuery
from setup.create_database import DatabaseCreator
from utils.database_utils import DatabaseConnectionError, create_sqlalchemy_engine

logger = logging.getLogger(__name__)

SUCCESS = 'success'
ERROR = 'error'


class Database:
    """Shared connection handle for one PostgreSQL database.

    Attributes:
        db_config: Connection settings (defaults to the global config)
        echo: Pass-through for SQLAlchemy statement echo
        engine: Current engine, None until first use
        executor: Execution layer used by builders and column operations
    """

    def __init__(self, db_config: Optional[DatabaseConfig] = None, echo: bool = False):
        self.db_config = db_config or config.db
        self.echo = echo
        self.engine: Optional[Engine] = None
        self.executor = StatementExecutor(self)
        self._closed = False

    def __enter__(self) -> 'Database':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def get_engine(self) -> Engine:
        """
        Return the shared engine, creating it on first use.

        Raises:
            DatabaseConnectionError: If the database has been closed
        """
        if self._closed:
            raise DatabaseConnectionError('Database connection pool is not available.')
        if self.engine is None:
            self.engine = create_sqlalchemy_engine(self.db_config, echo=self.echo)
            logger.debug(
                f"Created engine for {self.db_config.host}:{self.db_config.port}/{self.db_config.database}"
            )
        return self.engine

    def table(self, table_name: str) -> TableQuery:
        """Start a query against ``table_name``."""
        return TableQuery(table_name, self)

    def query(self, sql_query: str) -> Dict[str, Any]:
        """
        Run raw SQL and report the outcome without raising.

        The text is split on ``;`` (also inside string literals) and each
        non-blank fragment runs as its own statement, in order.

        Args:
            sql_query: One or more SQL statements

        Returns:
            Dictionary with ``status`` ('success' or 'error'), ``message`` and
            ``data``: the rows of the single statement, a list of row lists
            when several ran, or None on error
        """
        if not isinstance(sql_query, str):
            return {'status': ERROR, 'message': 'The SQL query must be a string.', 'data': None}

        commands = [command for command in sql_query.split(';') if command.strip()]

        try:
            results = [self.executor.execute(f"{command};") for command in commands]
        except Exception as e:
            message = str(getattr(e, 'orig', None) or e).strip()
            logger.error(f"❌ Raw query failed: {message}")
            return {
                'status': ERROR,
                'message': message or 'An error occurred while executing the query.',
                'data': None
            }

        return {
            'status': SUCCESS,
            'message': 'Query executed successfully',
            'data': results[0] if len(results) == 1 else results
        }

    def ensure_database(self) -> bool:
        """
        Create the target database ahead of time if it does not exist.

        Returns:
            True if the database was created, False if it already existed
        """
        creator = DatabaseCreator(self.db_config)
        try:
            return creator.ensure_database()
        finally:
            creator.close_connections()

    def close(self) -> None:
        """Dispose the engine. Later queries raise DatabaseConnectionError."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
        self._closed = True

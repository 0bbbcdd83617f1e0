"""
=============================================
Statement execution with database recovery.
=============================================

Every statement produced by the builder and the column operations runs
through ``StatementExecutor.execute()``. The executor has two states:

NORMAL
    Take the provider's engine, run the statement in its own transaction,
    return the rows as dictionaries.

RECOVERING
    Entered when a statement fails because the target database does not
    exist. The current engine is disposed, the database is created through
    the administrative database, a new engine is installed on the provider
    and the statement is run once more. A failure while recovering is raised
    to the caller; there is never a second recovery for the same call.

The executor is the only code that replaces ``Database.engine`` after the
provider has created it.

Known limitation:
    There is no lock around the recovery sequence. Two callers hitting the
    missing database at the same time may both try to create it; the loser
    gets the server's "already exists" error as a DatabaseCreationError.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from setup.create_database import DatabaseCreator
from utils.database_utils import create_sqlalchemy_engine, is_missing_database_error

if TYPE_CHECKING:
    from db.provider import Database

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class StatementExecutor:
    """Runs SQL text against a ``Database`` and creates the database on demand.

    Attributes:
        database: Provider owning the shared engine
    """

    def __init__(self, database: 'Database'):
        self.database = database

    def execute(self, sql: str) -> List[Row]:
        """
        Execute one statement and return its rows.

        Args:
            sql: Complete SQL statement

        Returns:
            List of rows as dictionaries (empty for statements without a result set)

        Raises:
            DatabaseConnectionError: If the provider has been closed
            DatabaseCreationError: If the database was missing and could not be created
            SQLAlchemyError: Any other driver or server error, unchanged
        """
        engine = self.database.get_engine()
        target_db = self.database.db_config.database

        try:
            return self._run(engine, sql)
        except SQLAlchemyError as e:
            if not is_missing_database_error(e, target_db):
                logger.error(f"❌ Query failed: {e}")
                raise
            logger.warning(f"⚠️  Database {target_db} does not exist, creating it")

        engine = self._recover()

        try:
            return self._run(engine, sql)
        except SQLAlchemyError as e:
            logger.error(f"❌ Query failed after creating database {target_db}: {e}")
            raise

    def _recover(self) -> Engine:
        """Dispose the engine, create the database, install a fresh engine."""
        db_config = self.database.db_config

        if self.database.engine is not None:
            self.database.engine.dispose()
            self.database.engine = None

        creator = DatabaseCreator(db_config)
        try:
            creator.create_database()
        finally:
            creator.close_connections()

        self.database.engine = create_sqlalchemy_engine(db_config, echo=self.database.echo)
        logger.info(f"Reconnected to database {db_config.database}")
        return self.database.engine

    @staticmethod
    def _run(engine: Engine, sql: str) -> List[Row]:
        logger.debug(f"Executing SQL: {sql}")
        with engine.begin() as conn:
            # no_parameters: hand the text to the driver untouched, so '%' and ':' are literal
            result = conn.exec_driver_sql(sql, execution_options={'no_parameters': True})
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

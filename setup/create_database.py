"""
==================================================
Database provisioning for the target database.
==================================================

Creates the configured target database when it does not exist. Used by the
execution layer's recovery path and by ``Database.ensure_database()``.

CREATE DATABASE cannot run inside a transaction block and cannot run while
connected to the database being created, so this module connects to the
administrative database (typically 'postgres') with AUTOCOMMIT and issues the
statement on the raw psycopg2 connection.

Key Features:
    - Database existence checking
    - Database creation through the administrative database
    - Admin engine lifecycle (created lazily, disposed after use)

Prerequisites:
    - A reachable PostgreSQL server
    - A user with CREATE DATABASE privileges

Example:
    >>> from core.config import config
    >>> from setup.create_database import DatabaseCreator
    >>>
    >>> creator = DatabaseCreator(config.db)
    >>> try:
    ...     if not creator.check_database_exists():
    ...         creator.create_database()
    ... finally:
    ...     creator.close_connections()
"""

import logging
from typing import Optional

import psycopg2
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from core.config import DatabaseConfig
from sql.ddl import create_database_sql
from sql.query_builder import check_database_exists_sql
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class DatabaseCreationError(Exception):
    """Exception raised when checking for or creating the database fails."""
    pass


class DatabaseCreator:
    """Creates the target database through the administrative database.

    Attributes:
        db_config: Connection settings; ``database`` is the database to create
            and ``admin_db`` the one connected to while creating it
    """

    def __init__(self, db_config: DatabaseConfig):
        self.db_config = db_config
        self.target_db = db_config.database

        self._admin_engine: Optional[Engine] = None

    def _get_admin_engine(self) -> Engine:
        """Get SQLAlchemy engine connected to admin database."""
        if self._admin_engine is None:
            self._admin_engine = create_sqlalchemy_engine(
                self.db_config,
                admin=True,
                isolation_level='AUTOCOMMIT'
            )
        return self._admin_engine

    def check_database_exists(self) -> bool:
        """
        Check if target database exists.

        Returns:
            True if database exists, False otherwise

        Raises:
            DatabaseCreationError: If the catalog query fails
        """
        try:
            engine = self._get_admin_engine()
            with engine.connect() as conn:
                result = conn.execute(text(check_database_exists_sql(self.target_db)))
                return result.fetchone() is not None

        except SQLAlchemyError as e:
            logger.error(f"Error checking database existence: {e}")
            raise DatabaseCreationError(f"Failed to check database existence: {e}") from e

    def create_database(self) -> None:
        """
        Create target database.

        Raises:
            DatabaseCreationError: If creation fails
        """
        create_sql = create_database_sql(database_name=self.target_db)

        try:
            engine = self._get_admin_engine()
            with engine.connect() as conn:
                raw_conn = conn.connection.driver_connection
                raw_conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)

                with raw_conn.cursor() as cursor:
                    logger.info(f"Creating database {self.target_db}")
                    cursor.execute(create_sql)

            logger.info(f"✅ Successfully created database {self.target_db}")

        except (SQLAlchemyError, psycopg2.Error) as e:
            logger.error(f"❌ Error creating database: {e}")
            raise DatabaseCreationError(f"Failed to create database: {e}") from e

    def ensure_database(self) -> bool:
        """
        Create the target database unless it already exists.

        Returns:
            True if the database was created, False if it already existed
        """
        if self.check_database_exists():
            logger.info(f"Database {self.target_db} already exists")
            return False
        self.create_database()
        return True

    def close_connections(self) -> None:
        """Dispose the admin engine."""
        if self._admin_engine:
            self._admin_engine.dispose()
            self._admin_engine = None

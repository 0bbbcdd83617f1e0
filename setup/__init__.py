"""
===================================
Database provisioning package.
===================================

Creates the configured target database on the server. The execution layer
calls into this package when a statement fails because the database does not
exist yet.

Modules:
    create_database: Database existence check and creation

Example:
    >>> from core.config import config
    >>> from setup import DatabaseCreator
    >>>
    >>> creator = DatabaseCreator(config.db)
    >>> creator.ensure_database()

Requirements:
    - SQLAlchemy >= 2.0.0
    - psycopg2-binary >= 2.9.0
    - python-dotenv >= 1.0.0
"""

__version__ = "0.1.0"
__all__ = [
    'DatabaseCreator',
    'DatabaseCreationError'
]

from .create_database import DatabaseCreationError, DatabaseCreator

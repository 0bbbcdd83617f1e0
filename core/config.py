"""
=================================================
Configuration management for the query builder.
=================================================

Loads connection settings from environment variables (.env file) once at
import time and exposes them through a centralized Config instance.

The configuration system ensures:
- Single source of truth for connection settings
- Type conversion for numeric values
- Separate target and administrative databases (the latter is used to
  provision the target when it does not exist yet)

Example:
    >>> from core.config import config
    >>>
    >>> # Connection settings for the engine factory
    >>> db_config = config.db
    >>>
    >>> # Access individual settings
    >>> print(f"Host: {config.db_host}, Port: {config.db_port}")
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        host: PostgreSQL server hostname or IP address
        port: PostgreSQL server port number
        user: Database username
        password: Database password
        database: Target database the query builder works against
        admin_db: Administrative database used for CREATE DATABASE
    """

    host: str
    port: int
    user: str
    password: str
    database: str
    admin_db: str = 'postgres'


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with database connection settings
        log_level: Default root log level

    Example:
        >>> config = Config()
        >>> print(f"Connecting to {config.db_host}:{config.db_port}/{config.db_name}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            database=os.getenv('POSTGRES_DATABASE', 'postgres'),
            admin_db=os.getenv('POSTGRES_ADMIN_DB', 'postgres')
        )
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    @property
    def db_name(self) -> str:
        """Get target database name."""
        return self.db.database

    @property
    def admin_db_name(self) -> str:
        """Get administrative database name."""
        return self.db.admin_db


# Global configuration instance
config = Config()

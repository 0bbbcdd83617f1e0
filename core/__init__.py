"""
==============================================
Core infrastructure package for the builder.
==============================================

This package provides centralized configuration management and logging
infrastructure used by the SQL, provisioning and database packages.

Modules:
    config: Connection settings loaded from environment variables
    logger: Centralized logging configuration and utilities

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db_host}")
"""

__version__ = "0.1.0"
__all__ = ['get_logger', 'setup_logging', 'config', 'Config', 'DatabaseConfig']

from core.config import Config, DatabaseConfig, config
from core.logger import get_logger, setup_logging

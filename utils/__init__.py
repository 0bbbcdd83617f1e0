"""
==========================
Utility Functions Package.
==========================

Reusable helpers for database connectivity.

Modules:
    database_utils: Engine creation and driver-error classification
"""

__version__ = "1.0.0"
__all__ = [
    'DatabaseConnectionError',
    'create_sqlalchemy_engine',
    'is_missing_database_error'
]

from .database_utils import (
    DatabaseConnectionError,
    create_sqlalchemy_engine,
    is_missing_database_error,
)

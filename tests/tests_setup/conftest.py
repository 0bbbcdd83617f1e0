"""
Shared fixtures and mocking helpers for tests.

Key fixtures:
- patch_create_engine: patches the engine factory used by create_database to return a fake engine.
- dummy_sql_module: patches sql.ddl and sql.query_builder functions used by create_database.
- db_creator_factory: returns a DatabaseCreator instance wired to the patched engine.
"""

from unittest.mock import patch

import pytest

from core.config import DatabaseConfig


@pytest.fixture(autouse=False)
def patch_create_engine():
    """
    Patch the admin engine factory and yield the mock.
    Use in tests that need to simulate engine/connection behavior.
    """
    with patch("setup.create_database.create_sqlalchemy_engine") as mock_create_engine:
        yield mock_create_engine


@pytest.fixture
def dummy_sql_module(monkeypatch):
    """
    Patch sql.ddl and sql.query_builder functions used by create_database.
    Returns a dict of the strings these functions will return so tests can assert executed SQL.
    """
    payload = {
        "create_sql": 'CREATE DATABASE "dummydb"',
        "exists_sql": "SELECT 1 FROM pg_database WHERE datname = 'dummydb'",
    }

    monkeypatch.setattr("setup.create_database.create_database_sql", lambda **kwargs: payload["create_sql"])
    monkeypatch.setattr("setup.create_database.check_database_exists_sql", lambda db: payload["exists_sql"])

    return payload


@pytest.fixture
def db_creator_factory():
    """
    Factory that creates a DatabaseCreator with default params. Tests will patch the engine factory separately.
    """
    from setup.create_database import DatabaseCreator

    def factory(**overrides):
        params = dict(
            host="localhost",
            port=5432,
            user="postgres",
            password="secret",
            database="dummydb",
            admin_db="postgres"
        )
        params.update(overrides)
        return DatabaseCreator(DatabaseConfig(**params))

    return factory

"""
Shared fixtures and mocking helpers for the db package tests.

Key fixtures:
- db_config: connection settings for a throwaway database name.
- fake_database: a Database whose executor records SQL and replays scripted rows.
"""

import re

import pytest

from core.config import DatabaseConfig
from db.provider import Database


class FakeExecutor:
    """
    Records every statement and answers from a list of (pattern, rows) rules.

    The first rule whose regex matches the SQL wins; rules are consumed when
    registered with once=True. Unmatched statements return [].
    """
    def __init__(self):
        self.statements = []
        self._rules = []

    def respond(self, pattern, rows, once=False):
        self._rules.append([re.compile(pattern), rows, once])
        return self

    def execute(self, sql):
        self.statements.append(sql)
        for rule in self._rules:
            regex, rows, once = rule
            if regex.search(sql):
                if once:
                    self._rules.remove(rule)
                if isinstance(rows, Exception):
                    raise rows
                return rows
        return []


@pytest.fixture
def db_config():
    """Connection settings for the database under test."""
    return DatabaseConfig(
        host='localhost',
        port=5432,
        user='postgres',
        password='secret',
        database='builder_test',
        admin_db='postgres'
    )


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def fake_database(db_config, fake_executor):
    """Database whose statements go to fake_executor instead of a server."""
    database = Database(db_config)
    database.executor = fake_executor
    return database

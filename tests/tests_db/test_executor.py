"""
===========================================
Comprehensive pytest suite for executor.py
===========================================

Sections:
---------
1. Unit tests - Statement execution and row conversion
2. Integration tests - Database recovery path
3. Edge case tests - Failures during and outside recovery

Available markers:
------------------
unit, integration, edge_case

Mocks and helpers:
------------------
- FakeEngine: simulates Engine.begin() yielding a FakeConnection
- FakeConnection: replays FakeResult objects or raises scripted errors
- FakeDriverError: psycopg2-like error with pgcode

How to Execute:
---------------
All tests:          python -m pytest tests/tests_db/test_executor.py -v
By category:        python -m pytest tests/tests_db/test_executor.py -m integration
With coverage:      python -m pytest tests/tests_db/test_executor.py --cov=db.executor
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from db.provider import Database
from setup.create_database import DatabaseCreationError
from utils.database_utils import DatabaseConnectionError


class FakeDriverError(Exception):
    """Mock psycopg2 error carrying an optional SQLSTATE."""
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


class FakeResult:
    """Mock CursorResult supporting returns_rows and mappings()."""
    def __init__(self, rows=None):
        self._rows = rows
        self.returns_rows = rows is not None

    def mappings(self):
        return iter(self._rows or [])


class FakeConnection:
    """Connection yielded by FakeEngine.begin(); replays outcomes in order."""
    def __init__(self, engine):
        self.engine = engine

    def exec_driver_sql(self, sql, parameters=None, execution_options=None):
        self.engine.executed.append(sql)
        self.engine.execution_options.append(execution_options)
        outcome = self.engine.outcomes.pop(0) if self.engine.outcomes else FakeResult()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeEngine:
    """
    Mock SQLAlchemy Engine whose begin() yields a FakeConnection.

    Attributes:
        outcomes (list): FakeResult or exception per statement, consumed in order.
        executed (list): SQL passed to exec_driver_sql().
        disposed (bool): Set once dispose() has been called.
    """
    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.executed = []
        self.execution_options = []
        self.disposed = False

    def begin(self):
        parent = self
        class _Ctx:
            def __enter__(self_inner):
                return FakeConnection(parent)
            def __exit__(self_inner, exc_type, exc, tb):
                return False
        return _Ctx()

    def dispose(self):
        self.disposed = True


def missing_database_error(name='builder_test'):
    """OperationalError as raised when connecting to a database that does not exist."""
    return OperationalError(
        None, None,
        FakeDriverError(f'FATAL:  database "{name}" does not exist', pgcode='3D000')
    )


@pytest.fixture
def database(db_config):
    return Database(db_config)


@pytest.fixture
def recovery_mocks():
    """Patch database creation and engine construction used by the recovery path."""
    with patch('db.executor.DatabaseCreator') as mock_creator_cls, \
         patch('db.executor.create_sqlalchemy_engine') as mock_create_engine:
        yield mock_creator_cls, mock_create_engine


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_execute_returns_rows_as_dicts(database):
    database.engine = FakeEngine([FakeResult([{'id': 1, 'name': 'Alice'}])])

    rows = database.executor.execute('SELECT * FROM "users"')

    assert rows == [{'id': 1, 'name': 'Alice'}]
    assert database.engine.executed == ['SELECT * FROM "users"']


@pytest.mark.unit
def test_execute_without_result_set_returns_empty_list(database):
    database.engine = FakeEngine([FakeResult()])

    assert database.executor.execute('DROP TABLE IF EXISTS "users"') == []


@pytest.mark.unit
def test_execute_passes_sql_untouched_to_driver(database):
    """Statements are sent without parameter processing."""
    database.engine = FakeEngine([FakeResult([])])

    database.executor.execute("SELECT * FROM \"users\" WHERE name LIKE 'A%'")

    assert database.engine.execution_options == [{'no_parameters': True}]


@pytest.mark.unit
def test_engine_created_lazily(database):
    with patch('db.provider.create_sqlalchemy_engine') as mock_create_engine:
        mock_create_engine.return_value = FakeEngine([FakeResult([])])

        database.executor.execute('SELECT 1')
        database.executor.execute('SELECT 1')

        mock_create_engine.assert_called_once_with(database.db_config, echo=False)


# ======================
# 2. INTEGRATION TESTS
# ======================

@pytest.mark.integration
def test_missing_database_is_created_and_statement_retried(database, recovery_mocks):
    mock_creator_cls, mock_create_engine = recovery_mocks
    old_engine = FakeEngine([missing_database_error()])
    new_engine = FakeEngine([FakeResult([{'id': 1}])])
    database.engine = old_engine
    mock_create_engine.return_value = new_engine

    rows = database.executor.execute('INSERT INTO "users" ("name") VALUES (\'Alice\') RETURNING *')

    assert rows == [{'id': 1}]
    assert old_engine.disposed is True
    assert database.engine is new_engine
    mock_creator_cls.assert_called_once_with(database.db_config)
    mock_creator_cls.return_value.create_database.assert_called_once_with()
    mock_creator_cls.return_value.close_connections.assert_called_once_with()
    assert new_engine.executed == old_engine.executed


@pytest.mark.integration
def test_recovered_engine_serves_later_statements(database, recovery_mocks):
    _, mock_create_engine = recovery_mocks
    database.engine = FakeEngine([missing_database_error()])
    new_engine = FakeEngine([FakeResult([]), FakeResult([{'n': 2}])])
    mock_create_engine.return_value = new_engine

    database.executor.execute('SELECT 1')

    assert database.executor.execute('SELECT 2 AS n') == [{'n': 2}]
    assert mock_create_engine.call_count == 1


# ===================
# 3. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_other_errors_propagate_without_recovery(database, recovery_mocks):
    mock_creator_cls, _ = recovery_mocks
    error = ProgrammingError('SELEC 1', None, FakeDriverError('syntax error at or near "SELEC"', pgcode='42601'))
    database.engine = FakeEngine([error])

    with pytest.raises(ProgrammingError):
        database.executor.execute('SELEC 1')

    mock_creator_cls.assert_not_called()


@pytest.mark.edge_case
def test_missing_other_database_is_not_recovered(database, recovery_mocks):
    """Only the configured database is created on demand."""
    mock_creator_cls, _ = recovery_mocks
    database.engine = FakeEngine([missing_database_error('some_other_db')])

    with pytest.raises(OperationalError):
        database.executor.execute('SELECT 1')

    mock_creator_cls.assert_not_called()


@pytest.mark.edge_case
def test_second_missing_database_failure_propagates(database, recovery_mocks):
    """Recovery runs at most once per statement."""
    mock_creator_cls, mock_create_engine = recovery_mocks
    database.engine = FakeEngine([missing_database_error()])
    mock_create_engine.return_value = FakeEngine([missing_database_error()])

    with pytest.raises(OperationalError):
        database.executor.execute('SELECT 1')

    assert mock_creator_cls.return_value.create_database.call_count == 1


@pytest.mark.edge_case
def test_creation_failure_propagates(database, recovery_mocks):
    mock_creator_cls, mock_create_engine = recovery_mocks
    database.engine = FakeEngine([missing_database_error()])
    mock_creator_cls.return_value.create_database.side_effect = DatabaseCreationError('permission denied')

    with pytest.raises(DatabaseCreationError, match='permission denied'):
        database.executor.execute('SELECT 1')

    mock_creator_cls.return_value.close_connections.assert_called_once_with()
    mock_create_engine.assert_not_called()
    assert database.engine is None


@pytest.mark.edge_case
def test_closed_database_refuses_statements(database):
    database.engine = MagicMock()
    database.close()

    with pytest.raises(DatabaseConnectionError, match='Database connection pool is not available.'):
        database.executor.execute('SELECT 1')

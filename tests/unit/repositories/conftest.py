"""Shared fixtures for repository unit tests."""
import pytest
from unittest.mock import MagicMock


@pytest.fixture
def mock_db():
    """Mock Database handle whose connection() context manager yields (connection, cursor).

    Usage in tests:
        def test_something(self, mock_db):
            database, conn, cur = mock_db
            cur.fetchone.return_value = {"id": 1}
            # ... call repository method ...
            cur.execute.assert_called_once()
    """
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)

    database = MagicMock()
    database.connection.return_value.__enter__ = MagicMock(return_value=mock_conn)
    database.connection.return_value.__exit__ = MagicMock(return_value=False)
    return database, mock_conn, mock_cursor

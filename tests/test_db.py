import os
from unittest.mock import patch, MagicMock

import pytest

from bid_server import db
from bid_server.models import Bid

@pytest.fixture
def mock_conn(monkeypatch):
    conn = MagicMock()
    monkeypatch.setattr(db, "_conn", None)
    with patch("bid_server.db.psycopg.connect", return_value=conn) as connect:
        yield conn, connect
    db._conn = None

def test_enabled_reads_environment():
    with patch.dict(os.environ, {"AUDIT_LOG": "1"}):
        assert db.enabled()
    with patch.dict(os.environ, {"AUDIT_LOG": "0"}):
        assert not db.enabled()

def test_connection_is_a_singleton(mock_conn):
    conn, connect = mock_conn
    with patch.dict(os.environ, {"DB_HOST": "dbhost", "DB_PORT": "6543"}):
        assert db.get_connection() is conn
        assert db.get_connection() is conn
    connect.assert_called_once()
    assert connect.call_args.kwargs["host"] == "dbhost"
    assert connect.call_args.kwargs["port"] == 6543

def test_init_db_creates_tables(mock_conn):
    conn, _ = mock_conn
    db.init_db()
    statements = [c.args[0] for c in conn.cursor.return_value.execute.call_args_list]
    assert any("CREATE TABLE IF NOT EXISTS logins" in s for s in statements)
    assert any("CREATE TABLE IF NOT EXISTS bids" in s for s in statements)
    conn.commit.assert_called_once()

def test_log_login(mock_conn):
    conn, _ = mock_conn
    db.log_login(42)
    sql, params = conn.cursor.return_value.execute.call_args.args
    assert "INSERT INTO logins" in sql
    assert params[0] == 42
    conn.commit.assert_called_once()

def test_log_bid(mock_conn):
    conn, _ = mock_conn
    db.log_bid(3, Bid(user_id=9, amount=12.5), True)
    sql, params = conn.cursor.return_value.execute.call_args.args
    assert "INSERT INTO bids" in sql
    assert params[:4] == (3, 9, 12.5, True)

import os
import threading
from datetime import datetime, timezone
import psycopg

# Ensure thread-safe DB access
_db_lock = threading.Lock()

# Singleton connection
_conn = None

def enabled() -> bool:
    """Audit logging is opt-in via AUDIT_LOG=1."""
    return os.getenv("AUDIT_LOG", "0") == "1"

def get_connection():
    global _conn
    if _conn is None:
        host = os.getenv("DB_HOST", "localhost")
        port = int(os.getenv("DB_PORT", "5432"))
        dbname = os.getenv("DB_NAME", "auction")
        user = os.getenv("DB_USER", "auction")
        password = os.getenv("DB_PASSWORD", "secret_password")
        _conn = psycopg.connect(
            host=host,
            port=port,
            dbname=dbname,
            user=user,
            password=password,
        )
    return _conn

def init_db():
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS logins(
                login_id SERIAL PRIMARY KEY,
                user_id BIGINT NOT NULL,
                timestamp TIMESTAMP WITH TIME ZONE
            );
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS bids(
                bid_id SERIAL PRIMARY KEY,
                item_id BIGINT NOT NULL,
                user_id BIGINT NOT NULL,
                amount DOUBLE PRECISION NOT NULL,
                ranked BOOLEAN NOT NULL,
                timestamp TIMESTAMP WITH TIME ZONE
            );
        ''')
        conn.commit()

def log_login(user_id: int):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO logins(user_id, timestamp)
            VALUES (%s, %s)''',
            (user_id, datetime.now(timezone.utc))
        )
        conn.commit()

def log_bid(item_id: int, bid, ranked: bool):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO bids(item_id, user_id, amount, ranked, timestamp)
            VALUES (%s, %s, %s, %s, %s)''',
            (item_id, bid.user_id, bid.amount, ranked, datetime.now(timezone.utc))
        )
        conn.commit()

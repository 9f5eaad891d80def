"""
core/database.py -- Engine construction shared by the auth and catalog stores.

Each store owns its own Engine built here from Settings.connection_uri.
SQLite connections get check_same_thread=False (route handlers run in a
thread pool) and WAL journal mode.
"""

import secrets

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block on writers.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def new_object_id() -> str:
    """Return a fresh 24-hex-char record id (same shape as a Mongo ObjectId)."""
    return secrets.token_hex(12)

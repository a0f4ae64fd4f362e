from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager

logger = logging.getLogger(__name__)


def quote_ident(name: str) -> str:
    """Double-quote an SQL identifier, doubling any embedded quotes."""
    return '"' + str(name).replace('"', '""') + '"'


@contextmanager
def savepoint(conn: sqlite3.Connection, name: str):
    """
    Run a block of statements atomically.

    DDL in Python's sqlite3 module does not open an implicit transaction, so a
    SAVEPOINT is used; on error every statement of the block is rolled back and
    the exception re-raised.
    """
    sp = quote_ident(name)
    conn.execute(f"SAVEPOINT {sp}")
    try:
        yield conn
    except Exception:
        logger.warning("Rolling back %s", name)
        conn.execute(f"ROLLBACK TO {sp}")
        conn.execute(f"RELEASE {sp}")
        raise
    conn.execute(f"RELEASE {sp}")

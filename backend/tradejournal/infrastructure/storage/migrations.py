"""Versioned schema migrations for trading_journal.db.

Applied once at startup, before anything reads or writes the journal tables.
Applied versions are recorded in `_migrations`; a failure is fatal for the caller.
"""

from __future__ import annotations

import hashlib
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from tradejournal.infrastructure.logging.logging import get_logger
from tradejournal.infrastructure.utils.timeutils import utc_now_iso


class MigrationKind(str, Enum):
    UP = "up"
    DOWN = "down"


class MigrationError(RuntimeError):
    """Schema could not be brought up to date."""


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    sql: str
    kind: MigrationKind = MigrationKind.UP

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode("utf-8")).hexdigest()


CREATE_INITIAL_TABLES = """
CREATE TABLE IF NOT EXISTS profile (
  id INTEGER PRIMARY KEY,
  name TEXT NOT NULL,
  email TEXT,
  experience TEXT NOT NULL,
  currency TEXT NOT NULL,
  timezone TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS accounts (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  type TEXT NOT NULL,
  initial_balance REAL NOT NULL,
  current_balance REAL NOT NULL,
  broker TEXT NOT NULL,
  leverage TEXT NOT NULL,
  instruments TEXT
);

CREATE TABLE IF NOT EXISTS trades (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  account_id INTEGER NOT NULL,
  symbol TEXT NOT NULL,
  type TEXT NOT NULL,
  entry_price REAL NOT NULL,
  exit_price REAL,
  take_profit REAL NOT NULL,
  stop_loss REAL NOT NULL,
  lot_size REAL NOT NULL,
  volume REAL NOT NULL,
  profit REAL NOT NULL,
  commission REAL DEFAULT 0,
  rr_ratio TEXT,
  strategy TEXT,
  session TEXT,
  duration TEXT,
  date TEXT NOT NULL,
  FOREIGN KEY (account_id) REFERENCES accounts (id)
);
"""

MIGRATIONS: List[Migration] = [
    Migration(
        version=1,
        description="create initial tables",
        sql=CREATE_INITIAL_TABLES,
        kind=MigrationKind.UP,
    ),
]

JOURNAL_TABLES = ("profile", "accounts", "trades")


def _ensure_bookkeeping(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS _migrations (
          version INTEGER PRIMARY KEY,
          description TEXT NOT NULL,
          installed_on TEXT NOT NULL,
          checksum TEXT NOT NULL
        );
        """
    )
    conn.commit()


def applied_versions(conn: sqlite3.Connection) -> dict[int, str]:
    """version -> checksum of every migration already recorded."""
    _ensure_bookkeeping(conn)
    rows = conn.execute("SELECT version, checksum FROM _migrations ORDER BY version").fetchall()
    return {int(r[0]): str(r[1]) for r in rows}


def _run_script(conn: sqlite3.Connection, migration: Migration) -> None:
    # executescript() commits first and ignores isolation_level, so the
    # transaction is spelled out in the script itself.
    conn.executescript(
        "BEGIN;\n"
        + migration.sql
        + "\nINSERT INTO _migrations(version, description, installed_on, checksum) VALUES("
        + f"{int(migration.version)}, {_quote(migration.description)}, {_quote(utc_now_iso())}, {_quote(migration.checksum)});\n"
        + "COMMIT;"
    )


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def apply_migrations(conn: sqlite3.Connection, migrations: Sequence[Migration] = MIGRATIONS) -> List[int]:
    """Apply pending UP migrations in version order. Returns the versions applied now."""
    log = get_logger("migrations")
    try:
        done = applied_versions(conn)
    except sqlite3.Error as e:
        raise MigrationError(f"cannot read migration history: {e}") from e

    applied: List[int] = []
    for migration in sorted(migrations, key=lambda m: m.version):
        if migration.kind is not MigrationKind.UP:
            continue

        recorded = done.get(migration.version)
        if recorded is not None:
            if recorded != migration.checksum:
                raise MigrationError(
                    f"migration {migration.version} was previously applied but has been modified"
                )
            log.debug("migration_skipped", version=migration.version)
            continue

        try:
            _run_script(conn, migration)
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            log.error("migration_failed", version=migration.version, error=str(e))
            raise MigrationError(f"migration {migration.version} ({migration.description}) failed: {e}") from e

        log.info("migration_applied", version=migration.version, description=migration.description)
        applied.append(migration.version)

    return applied

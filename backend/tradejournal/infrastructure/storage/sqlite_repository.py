"""SQLite repository for the journal tables.

Carries the queries the frontend issues through the SQL plugin: the generic
`execute` / `select` pair plus typed helpers for profile, accounts and trades.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from tradejournal.infrastructure.storage.migrations import MIGRATIONS, Migration, apply_migrations
from tradejournal.models.journal_models import Account, Profile, Trade


JsonDict = Dict[str, Any]

PROFILE_ROW_ID = 1


@dataclass(frozen=True)
class QueryResult:
    rows_affected: int
    last_insert_id: Optional[int]

    def to_wire(self) -> JsonDict:
        return {"rowsAffected": self.rows_affected, "lastInsertId": self.last_insert_id}


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path.as_posix(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


class JournalRepository:
    def __init__(self, db_path: Path, migrations: Sequence[Migration] = MIGRATIONS) -> None:
        self._path = db_path
        self._conn = connect(db_path)
        try:
            self.applied_migrations = apply_migrations(self._conn, migrations)
        except Exception:
            self._conn.close()
            raise

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        self._conn.close()

    # --------- generic plugin contract ---------
    def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        cur = self._conn.cursor()
        try:
            cur.execute(sql, tuple(params))
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            raise
        return QueryResult(rows_affected=max(cur.rowcount, 0), last_insert_id=cur.lastrowid)

    def select(self, sql: str, params: Sequence[Any] = ()) -> List[JsonDict]:
        cur = self._conn.cursor()
        try:
            rows = cur.execute(sql, tuple(params)).fetchall()
            # `INSERT ... RETURNING` opens a transaction on the shared connection
            if self._conn.in_transaction:
                self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            raise
        return [dict(r) for r in rows]

    # --------- profile ---------
    def save_profile(self, profile: Profile) -> None:
        self.execute(
            """
            INSERT OR REPLACE INTO profile(id, name, email, experience, currency, timezone)
            VALUES(?,?,?,?,?,?)
            """,
            (
                PROFILE_ROW_ID,
                profile.name,
                profile.email,
                profile.experience,
                profile.currency,
                profile.timezone,
            ),
        )

    def load_profile(self) -> Optional[Profile]:
        row = self._conn.execute("SELECT * FROM profile WHERE id = ?", (PROFILE_ROW_ID,)).fetchone()
        if row is None:
            return None
        return Profile.from_row(row)

    # --------- accounts ---------
    def insert_account(self, account: Account) -> int:
        row = account.to_row()
        result = self.execute(
            """
            INSERT INTO accounts(name, type, initial_balance, current_balance, broker, leverage, instruments)
            VALUES(?,?,?,?,?,?,?)
            """,
            (
                row["name"],
                row["type"],
                row["initial_balance"],
                row["current_balance"],
                row["broker"],
                row["leverage"],
                row["instruments"],
            ),
        )
        return int(result.last_insert_id or 0)

    def list_accounts(self) -> List[Account]:
        rows = self._conn.execute("SELECT * FROM accounts ORDER BY id DESC").fetchall()
        return [Account.from_row(r) for r in rows]

    # --------- trades ---------
    def insert_trade(self, trade: Trade) -> int:
        """Insert a trade; raises sqlite3.IntegrityError if accountId has no account."""
        row = trade.to_row()
        columns = list(row.keys())
        result = self.execute(
            f"INSERT INTO trades({', '.join(columns)}) VALUES({','.join('?' for _ in columns)})",
            [row[c] for c in columns],
        )
        return int(result.last_insert_id or 0)

    def list_trades(self, account_id: int) -> List[Trade]:
        rows = self._conn.execute(
            "SELECT * FROM trades WHERE account_id = ? ORDER BY date DESC",
            (account_id,),
        ).fetchall()
        return [Trade.from_row(r) for r in rows]

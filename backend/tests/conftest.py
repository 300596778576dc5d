from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from tradejournal.infrastructure.storage.sqlite_repository import JournalRepository


@pytest.fixture
def profile_payload() -> Dict[str, Any]:
    return {
        "name": "Ada",
        "email": None,
        "experience": "intermediate",
        "currency": "USD",
        "timezone": "UTC",
    }


@pytest.fixture
def account_payload() -> Dict[str, Any]:
    return {
        "name": "Demo",
        "type": "forex",
        "initialBalance": 1000.0,
        "currentBalance": 1000.0,
        "broker": "X",
        "leverage": "1:100",
    }


@pytest.fixture
def trade_payload() -> Dict[str, Any]:
    return {
        "accountId": 1,
        "symbol": "EURUSD",
        "type": "buy",
        "entryPrice": 1.1,
        "exitPrice": 1.105,
        "takeProfit": 1.11,
        "stopLoss": 1.095,
        "lotSize": 0.1,
        "volume": 10000.0,
        "profit": 50.0,
        "commission": 0.0,
        "rrRatio": "1:2.00",
        "strategy": "breakout",
        "session": "london",
        "duration": "2h",
        "date": "2025-01-02T09:00:00Z",
    }


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "trading_journal.db"


@pytest.fixture
def repo(db_path: Path):
    r = JournalRepository(db_path)
    yield r
    r.close()

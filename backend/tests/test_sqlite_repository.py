import sqlite3

import pytest

from tradejournal.infrastructure.storage.migrations import Migration, MigrationError
from tradejournal.infrastructure.storage.sqlite_repository import JournalRepository
from tradejournal.models.journal_models import Account, Profile, Trade


def test_opening_creates_file_and_applies_migrations(db_path):
    repo = JournalRepository(db_path)
    try:
        assert db_path.exists()
        assert repo.applied_migrations == [1]
    finally:
        repo.close()

    reopened = JournalRepository(db_path)
    try:
        assert reopened.applied_migrations == []
    finally:
        reopened.close()


def test_broken_migration_aborts_open(db_path):
    with pytest.raises(MigrationError):
        JournalRepository(db_path, [Migration(version=1, description="bad", sql="CREATE TABLE (;")])


def test_profile_is_a_single_row(repo, profile_payload):
    assert repo.load_profile() is None

    repo.save_profile(Profile.model_validate(profile_payload))
    repo.save_profile(Profile.model_validate({**profile_payload, "currency": "EUR"}))

    loaded = repo.load_profile()
    assert loaded is not None
    assert loaded.currency == "EUR"
    assert loaded.name == "Ada"
    assert repo.select("SELECT COUNT(*) AS n FROM profile") == [{"n": 1}]


def test_accounts_get_ids_and_list_newest_first(repo, account_payload):
    first = repo.insert_account(Account.model_validate(account_payload))
    second = repo.insert_account(Account.model_validate({**account_payload, "name": "Live", "instruments": "EURUSD"}))
    assert (first, second) == (1, 2)

    accounts = repo.list_accounts()
    assert [a.id for a in accounts] == [2, 1]
    assert accounts[0].instruments == "EURUSD"
    assert accounts[1].instruments == ""
    assert accounts[1].account_type == "forex"
    assert accounts[1].initial_balance == 1000.0


def test_trades_round_trip_through_snake_case_columns(repo, account_payload, trade_payload):
    account_id = repo.insert_account(Account.model_validate(account_payload))
    trade_id = repo.insert_trade(Trade.model_validate({**trade_payload, "accountId": account_id}))

    row = repo.select("SELECT account_id, entry_price, lot_size, rr_ratio FROM trades WHERE id = ?", [trade_id])
    assert row == [{"account_id": account_id, "entry_price": 1.1, "lot_size": 0.1, "rr_ratio": "1:2.00"}]

    [trade] = repo.list_trades(account_id)
    assert trade.to_wire() == {**trade_payload, "id": trade_id, "accountId": account_id}


def test_trades_filtered_by_account_and_sorted_by_date_desc(repo, account_payload, trade_payload):
    a = repo.insert_account(Account.model_validate(account_payload))
    b = repo.insert_account(Account.model_validate(account_payload))
    for date in ("2025-01-01T00:00:00Z", "2025-03-01T00:00:00Z", "2025-02-01T00:00:00Z"):
        repo.insert_trade(Trade.model_validate({**trade_payload, "accountId": a, "date": date}))
    repo.insert_trade(Trade.model_validate({**trade_payload, "accountId": b}))

    assert [t.date[:7] for t in repo.list_trades(a)] == ["2025-03", "2025-02", "2025-01"]
    assert len(repo.list_trades(b)) == 1
    assert repo.list_trades(999) == []


def test_missing_optional_trade_text_is_stored_empty(repo, account_payload, trade_payload):
    a = repo.insert_account(Account.model_validate(account_payload))
    for key in ("rrRatio", "strategy", "session", "duration", "exitPrice"):
        trade_payload.pop(key)
    repo.insert_trade(Trade.model_validate({**trade_payload, "accountId": a}))

    [row] = repo.select("SELECT rr_ratio, strategy, session, duration, exit_price FROM trades")
    assert row == {"rr_ratio": "", "strategy": "", "session": "", "duration": "", "exit_price": None}


def test_trade_for_unknown_account_violates_foreign_key(repo, trade_payload):
    with pytest.raises(sqlite3.IntegrityError):
        repo.insert_trade(Trade.model_validate({**trade_payload, "accountId": 404}))
    assert repo.select("SELECT * FROM trades") == []


def test_execute_reports_rows_and_last_id(repo):
    res = repo.execute(
        "INSERT INTO accounts(name, type, initial_balance, current_balance, broker, leverage, instruments) "
        "VALUES(?,?,?,?,?,?,?)",
        ["Demo", "demo", 100.0, 100.0, "X", "1:30", ""],
    )
    assert res.to_wire() == {"rowsAffected": 1, "lastInsertId": 1}

    res = repo.execute("UPDATE accounts SET current_balance = ? WHERE id = ?", [150.0, 1])
    assert res.rows_affected == 1
    assert repo.list_accounts()[0].current_balance == 150.0


def test_select_returns_plain_dicts(repo):
    assert repo.select("SELECT 1 AS test") == [{"test": 1}]


def test_select_with_returning_commits_the_write(repo, db_path):
    rows = repo.select(
        "INSERT INTO accounts(name, type, initial_balance, current_balance, broker, leverage) "
        "VALUES(?,?,?,?,?,?) RETURNING id",
        ["Demo", "demo", 100.0, 100.0, "X", "1:30"],
    )
    assert rows == [{"id": 1}]
    assert repo._conn.in_transaction is False

    other = JournalRepository(db_path)
    try:
        assert other.select("SELECT COUNT(*) AS n FROM accounts") == [{"n": 1}]
    finally:
        other.close()


def test_accounts_read_back_from_rows(repo):
    repo.execute(
        "INSERT INTO accounts(name, type, initial_balance, current_balance, broker, leverage, instruments) "
        "VALUES(?,?,?,?,?,?,?)",
        ["Live", "live", 250, 250, "Y", "1:50", None],
    )
    [account] = repo.list_accounts()
    assert account.account_type == "live"
    assert account.initial_balance == 250.0
    assert account.instruments is None


def test_bad_sql_raises_driver_error(repo):
    with pytest.raises(sqlite3.OperationalError):
        repo.execute("INSERT INTO nowhere VALUES (1)")

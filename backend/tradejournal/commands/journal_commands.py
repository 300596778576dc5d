"""Journal commands invoked by the UI.

These are placeholders: "save" commands serialize the payload back to the
caller and "get" commands return nothing. Real persistence goes through the
SQL surface (`JournalRepository.execute` / `select`), not through these.
"""

from __future__ import annotations

from typing import List, Optional

from tradejournal.commands.registry import CommandError, CommandRegistry
from tradejournal.models.journal_models import Account, JournalModel, Profile, Trade


registry = CommandRegistry()


def _echo(payload: JournalModel) -> str:
    try:
        return payload.to_json()
    except ValueError as e:
        raise CommandError(str(e))


@registry.command
async def save_profile(profile: Profile) -> str:
    return _echo(profile)


@registry.command
async def get_profile() -> Optional[Profile]:
    return None


@registry.command
async def save_account(account: Account) -> str:
    return _echo(account)


@registry.command
async def get_accounts() -> List[Account]:
    return []


@registry.command
async def save_trade(trade: Trade) -> str:
    return _echo(trade)


@registry.command
async def get_trades(account_id: int) -> List[Trade]:
    return []

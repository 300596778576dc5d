# tradejournal/api/state.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tradejournal.commands.registry import CommandRegistry
from tradejournal.infrastructure.storage.sqlite_repository import JournalRepository
from tradejournal.infrastructure.utils.config import JournalConfig


@dataclass
class AppState:
    config: JournalConfig
    repo: JournalRepository
    commands: CommandRegistry


_state: Optional[AppState] = None


def set_state(state: Optional[AppState]) -> None:
    global _state
    _state = state


def get_state() -> AppState:
    if _state is None:
        raise RuntimeError("API state not initialized. Run migrations/startup first.")
    return _state

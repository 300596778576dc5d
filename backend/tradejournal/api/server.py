# tradejournal/api/server.py
"""Local HTTP bridge between the desktop UI and the journal backend.

- /invoke/{command}: the command surface (same names and arguments as the shell IPC).
- /sql/execute, /sql/select: direct SQL against trading_journal.db.
"""

from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from tradejournal.api.state import AppState, get_state, set_state
from tradejournal.commands.journal_commands import registry as journal_registry
from tradejournal.commands.registry import CommandError, UnknownCommandError
from tradejournal.infrastructure.logging.logging import get_logger
from tradejournal.infrastructure.storage.migrations import MigrationError
from tradejournal.infrastructure.storage.sqlite_repository import JournalRepository
from tradejournal.infrastructure.utils.config import JournalConfig, get_config
from tradejournal.services.analytics.journal_stats import compute_stats
from tradejournal.services.analytics.risk_reward import risk_reward_ratio


JsonDict = Dict[str, Any]


# --------- Schemas ---------
class SqlPayload(BaseModel):
    query: str = Field(..., min_length=1)
    values: List[Any] = Field(default_factory=list)


# --------- App ---------
def create_app(config: Optional[JournalConfig] = None) -> FastAPI:
    cfg = config or get_config()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log = get_logger("api")
        try:
            repo = JournalRepository(cfg.db_path)
        except MigrationError as e:
            log.error("startup_failed", db=str(cfg.db_path), error=str(e))
            raise
        log.info("startup", db=str(cfg.db_path), migrations_applied=repo.applied_migrations)
        set_state(AppState(config=cfg, repo=repo, commands=journal_registry))
        try:
            yield
        finally:
            set_state(None)
            repo.close()

    app = FastAPI(title="Trading Journal API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --------- Routes ---------
    @app.get("/health")
    def health() -> JsonDict:
        s = get_state()
        return {"ok": True, "db": str(s.repo.path), "commands": s.commands.names()}

    @app.post("/invoke/{command}")
    async def invoke(command: str, args: Optional[JsonDict] = Body(default=None)) -> Any:
        s = get_state()
        try:
            return await s.commands.invoke(command, args or {})
        except UnknownCommandError as e:
            raise HTTPException(status_code=404, detail=e.message)
        except CommandError as e:
            raise HTTPException(status_code=400, detail=e.message)

    @app.post("/sql/execute")
    def sql_execute(payload: SqlPayload) -> JsonDict:
        s = get_state()
        try:
            return s.repo.execute(payload.query, payload.values).to_wire()
        except sqlite3.Error as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/sql/select")
    def sql_select(payload: SqlPayload) -> List[JsonDict]:
        s = get_state()
        try:
            return s.repo.select(payload.query, payload.values)
        except sqlite3.Error as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.get("/journal/stats/{account_id}")
    def journal_stats(account_id: int) -> JsonDict:
        s = get_state()
        return compute_stats(s.repo.list_trades(account_id)).to_wire()

    @app.get("/journal/rr")
    def journal_rr(entry: float, tp: float, sl: float) -> JsonDict:
        return {"rrRatio": risk_reward_ratio(entry, tp, sl)}

    return app

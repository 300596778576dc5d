"""Entrypoint.

Usage:
  python -m tradejournal.app.main api                          # run the local API for the UI
  python -m tradejournal.app.main migrate                      # create/upgrade trading_journal.db and exit
  python -m tradejournal.app.main invoke save_account '{"account": {...}}'
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from tradejournal.commands.journal_commands import registry
from tradejournal.commands.registry import CommandError
from tradejournal.infrastructure.logging.logging import configure_logging, get_logger
from tradejournal.infrastructure.storage.migrations import MigrationError
from tradejournal.infrastructure.storage.sqlite_repository import JournalRepository
from tradejournal.infrastructure.utils.config import reload_config


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser("trading-journal")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("api", help="Run the local HTTP API")
    sub.add_parser("migrate", help="Apply schema migrations and exit")

    invoke_p = sub.add_parser("invoke", help="Invoke a journal command")
    invoke_p.add_argument("name", choices=registry.names())
    invoke_p.add_argument("args", nargs="?", default="{}", help="JSON object with the command arguments")

    args = parser.parse_args(argv)

    config = reload_config(args.config)
    configure_logging(config.log_level, json_logs=config.json_logs)
    log = get_logger("cli")

    if args.command == "api":
        from tradejournal.api.server import create_app

        uvicorn.run(create_app(config), host=config.api.host, port=config.api.port, reload=False)
        return 0

    if args.command == "migrate":
        try:
            repo = JournalRepository(config.db_path)
        except MigrationError as e:
            log.error("migrate_failed", db=str(config.db_path), error=str(e))
            return 1
        repo.close()
        log.info("migrate_done", db=str(config.db_path), applied=repo.applied_migrations)
        return 0

    if args.command == "invoke":
        try:
            payload = json.loads(args.args)
        except json.JSONDecodeError as e:
            parser.error(f"args must be a JSON object: {e}")
        if not isinstance(payload, dict):
            parser.error("args must be a JSON object")

        try:
            result = asyncio.run(registry.invoke(args.name, payload))
        except CommandError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(json.dumps(result))
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())

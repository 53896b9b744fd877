"""Application entry point for the romscope search bot."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from telethon import events

from romscope import settings
from romscope.adapters.sqlite_catalog import SQLiteCatalog
from romscope.adapters.telegram_mapper import build_command
from romscope.adapters.telegram_transport import TelegramTransport
from romscope.client import build_client
from romscope.core.dispatcher import CommandDispatcher
from romscope.core.errors import QueryError
from romscope.core.executor import CatalogQueryExecutor
from romscope.core.filters import compile_filter
from romscope.core.ingest import records_from_lines
from romscope.core.terms import parse_terms
from romscope.get_session import authorize

NAME = "ROMSCOPE"
FONT = "tarty-1"

SECRET_ENV_VARS = ("API_HASH", "BOT_TOKEN", "2FA", "PHONE")


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", SECRET_ENV_VARS):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    load_dotenv()
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/romscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    if not settings.ROOM:
        raise RuntimeError("config.json must name the room to answer in")

    started_at = datetime.now(timezone.utc)
    logger.info("Starting romscope in %s", settings.ROOM)

    catalog = SQLiteCatalog(settings.DB_PATH)
    catalog.init_db()

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client))
    me = client.loop.run_until_complete(client.get_me())

    dispatcher = CommandDispatcher(
        executor=CatalogQueryExecutor(catalog),
        transport=TelegramTransport(client, settings.REACTIONS),
        own_id=me.id,
        allowed_rooms=[settings.ROOM],
        started_at=started_at,
        search_config=settings.SEARCH,
    )

    # Single handler keeps Telethon integration minimal and defers all
    # filtering to the dispatcher.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            await dispatcher.handle(build_command(event.message))
        except Exception:
            logger.exception("Error while processing command")

    logger.info("Bot is running! Listening for %s commands...", settings.SEARCH.command)
    client.run_until_disconnected()


def _ingest(path: str, db_path: str) -> None:
    _configure_logging()
    logger = logging.getLogger(__name__)

    catalog = SQLiteCatalog(db_path)
    catalog.init_db()
    with open(path, "r", encoding="utf-8") as handle:
        inserted = catalog.ingest(
            records_from_lines(handle, settings.LINK_PREFIX, settings.LINK_EXTENSIONS)
        )
    logger.info("Done! Inserted %s rows into %s", inserted, db_path)


def _search(query: str, db_path: str) -> int:
    _configure_logging()
    console = Console()

    terms = parse_terms(query)
    spec = compile_filter(terms.positives, terms.negatives, settings.SEARCH.max_results)
    try:
        results = CatalogQueryExecutor(SQLiteCatalog(db_path)).execute(spec)
    except QueryError as exc:
        console.print(f"[red]Search error: {escape(str(exc))}[/red]")
        return 1

    if len(results) > spec.max_results:
        console.print(f"Too many results: {results.total_matches}")
        return 1

    table = Table(title=escape(f"{len(results)} results for {query!r}"))
    table.add_column("section")
    table.add_column("console")
    table.add_column("file")
    for record in results:
        table.add_row(escape(record.section), escape(record.console), escape(record.file))
    console.print(table)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="romscope")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the search bot")

    ingest_parser = subparsers.add_parser("ingest", help="Load a link list into the catalog")
    ingest_parser.add_argument("linklist", help="Text file with one resource URL per line")
    ingest_parser.add_argument("--db", default=None, help="Catalog database path")

    search_parser = subparsers.add_parser("search", help="Search the catalog from the terminal")
    search_parser.add_argument("--db", default=None, help="Catalog database path")
    # REMAINDER keeps "-term" exclusions out of option parsing.
    search_parser.add_argument("query", nargs=argparse.REMAINDER, help="Search terms, quoted or -negated")

    args = parser.parse_args(argv)
    if args.command == "ingest":
        _ingest(args.linklist, args.db or settings.DB_PATH)
        return
    if args.command == "search":
        raise SystemExit(_search(" ".join(args.query), args.db or settings.DB_PATH))
    _run()


if __name__ == "__main__":
    main()

"""Static configuration for romscope.

All user-editable settings (room, search limits, catalog, reactions,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay in ``.env``.
"""

import json
import os

from dotenv import load_dotenv

from romscope.core.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_COMMAND,
    DEFAULT_MAX_RESULTS,
    ReactionConfig,
    SearchConfig,
)
from romscope.core.ingest import DEFAULT_EXTENSIONS, DEFAULT_LINK_PREFIX

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# ROMSCOPE_CONFIG lets deployments keep config.json outside the checkout.
CONFIG_PATH = os.getenv("ROMSCOPE_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# The single room the bot answers in: "@username" or "chat_id:<id>".
ROOM = str(_CONFIG.get("room", "")).strip()

# Command verb and result limits; SearchConfig validates them.
_search = _CONFIG.get("search", {})
SEARCH = SearchConfig(
    command=_search.get("command", DEFAULT_COMMAND),
    max_results=int(_search.get("max_results", DEFAULT_MAX_RESULTS)),
    batch_size=int(_search.get("batch_size", DEFAULT_BATCH_SIZE)),
)

# Catalog database and the link list format used by `romscope ingest`.
_catalog = _CONFIG.get("catalog", {})
DB_PATH = _resolve_path(_catalog.get("db_path", "links.db"))
LINK_PREFIX = _catalog.get("link_prefix", DEFAULT_LINK_PREFIX)
LINK_EXTENSIONS = tuple(_catalog.get("extensions", DEFAULT_EXTENSIONS))

# Telegram only accepts reactions from its fixed emoji set.
_reactions = _CONFIG.get("reactions", {})
REACTIONS = ReactionConfig(
    accept=_reactions.get("accept", ReactionConfig.accept),
    reject=_reactions.get("reject", ReactionConfig.reject),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})

"""Telegram client factory for romscope.

We explicitly manage the client's lifecycle (connect/run_until_disconnected)
so it is obvious when the session is created and when it ends.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient


def build_client() -> TelegramClient:
    """Create a Telethon client from environment variables.

    API_ID/API_HASH come from .env via python-dotenv. The session name
    defaults to "romscope", which creates a local .session file that keeps
    the login between runs.
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = os.getenv("SESSION_NAME", "romscope")

    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    logging.getLogger(__name__).info("Initializing Telegram client (session %s)", session_name)

    # Sequential updates: one command is answered completely before the next.
    return TelegramClient(session_name, int(api_id), api_hash, sequential_updates=True)

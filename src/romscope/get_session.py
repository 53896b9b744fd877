"""Session login for the romscope Telegram client.

Bot accounts sign in with BOT_TOKEN. User accounts fall back to an
interactive QR or phone-code login. Either way Telethon persists the session
file, so later runs skip this step.
"""

from __future__ import annotations

import asyncio
import logging
import os
from getpass import getpass

import qrcode
from dotenv import load_dotenv
from telethon import TelegramClient, errors

from romscope.client import build_client

LOGGER = logging.getLogger(__name__)


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _resolve_2fa_password() -> str:
    password = os.getenv("2FA")
    if password:
        return password
    return getpass("2FA password: ")


async def _authorize_with_qr(client: TelegramClient) -> None:
    qr = await client.qr_login()
    _print_qr(qr.url)
    await qr.wait(timeout=120)


async def _authorize_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def _pick_login_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in {"qr", "phone"}:
        return method
    while True:
        print("")
        print("Login methods:")
        print("[1] QR code")
        print("[2] Phone code")
        print("[3] Exit")
        choice = input("romscope > ").strip()
        if choice == "1":
            return "qr"
        if choice == "2":
            return "phone"
        if choice == "3":
            raise SystemExit(0)
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient) -> None:
    """Make sure ``client`` is logged in, as a bot when BOT_TOKEN is set."""

    load_dotenv()
    if await client.is_user_authorized():
        return

    bot_token = os.getenv("BOT_TOKEN")
    if bot_token:
        await client.sign_in(bot_token=bot_token)
        LOGGER.info("Signed in with bot token")
        return

    try:
        if _pick_login_method() == "phone":
            await _authorize_with_phone(client)
        else:
            await _authorize_with_qr(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_resolve_2fa_password())
    LOGGER.info("Signed in as user")


async def main() -> None:
    client = build_client()
    await client.connect()
    await authorize(client)

    me = await client.get_me()
    LOGGER.info("Logged in as: %s", getattr(me, "username", None) or me.id)

    await client.disconnect()


if __name__ == "__main__":
    asyncio.run(main())

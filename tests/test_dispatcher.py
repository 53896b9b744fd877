from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from fakes import FakeCatalog, FakeTransport, make_records
from romscope.core.config import SearchConfig
from romscope.core.dispatcher import CommandDispatcher, extract_query
from romscope.core.executor import CatalogQueryExecutor
from romscope.core.models import CatalogRecord, IncomingCommand
from romscope.core.payloads import ErrorNotice, OverflowNotice, ReactionKey, ThreadedReply

BOT_ID = 777
ROOM_ID = -1001234567890
STARTED = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _dispatcher(catalog: FakeCatalog, transport: FakeTransport, **search) -> CommandDispatcher:
    return CommandDispatcher(
        executor=CatalogQueryExecutor(catalog),
        transport=transport,
        own_id=BOT_ID,
        allowed_rooms=["chat_id:-1001234567890"],
        started_at=STARTED,
        search_config=SearchConfig(**search),
    )


def _command(
    text: str,
    *,
    sender_id: int = 1,
    room_id: int = ROOM_ID,
    room_key: str = "chat_id:-1001234567890",
    date: datetime = STARTED + timedelta(seconds=5),
) -> IncomingCommand:
    return IncomingCommand(
        text=text,
        message_id=50,
        room_id=room_id,
        room_key=room_key,
        sender_id=sender_id,
        date=date,
    )


def test_end_to_end_single_match() -> None:
    catalog = FakeCatalog([CatalogRecord("SNES", "Nintendo", "Mario.zip", "u1")])
    transport = FakeTransport()
    report = asyncio.run(_dispatcher(catalog, transport).handle(_command("!roms mario -demo")))

    where, _, limit = catalog.queries[0]
    assert limit == 1001
    assert len(where.clauses) == 2
    assert report.batches_sent == 1
    assert [room for room, _ in transport.reactions] == [ROOM_ID]
    assert transport.reactions[0][1].key == ReactionKey.ACCEPT
    assert transport.reactions[0][1].target_id == 50
    room_id, reply = transport.messages[0]
    assert room_id == ROOM_ID
    assert isinstance(reply, ThreadedReply)
    assert reply.body == "SNES - Nintendo - Mario.zip\n"
    assert reply.html == 'SNES - Nintendo - <a href="u1">Mario.zip</a><br>'
    assert reply.thread_root_id == reply.reply_to_id == 50


def test_ignores_own_messages_other_rooms_and_backlog() -> None:
    catalog = FakeCatalog(make_records(2))
    transport = FakeTransport()
    dispatcher = _dispatcher(catalog, transport)

    ignored = [
        _command("!roms game", sender_id=BOT_ID),
        _command("!roms game", room_id=-1009, room_key="chat_id:-1009"),
        _command("!roms game", date=STARTED - timedelta(seconds=1)),
        _command("hello there"),
        _command("!romsgame"),
        _command("!help"),
    ]
    for command in ignored:
        assert asyncio.run(dispatcher.handle(command)) is None
    assert catalog.queries == []
    assert transport.messages == [] and transport.reactions == []


def test_command_in_startup_second_is_answered() -> None:
    catalog = FakeCatalog(make_records(1))
    transport = FakeTransport()
    dispatcher = CommandDispatcher(
        executor=CatalogQueryExecutor(catalog),
        transport=transport,
        own_id=BOT_ID,
        allowed_rooms=["chat_id:-1001234567890"],
        started_at=STARTED.replace(microsecond=700000),
        search_config=SearchConfig(),
    )
    assert asyncio.run(dispatcher.handle(_command("!roms game", date=STARTED))) is not None
    assert asyncio.run(dispatcher.handle(_command("!roms game", date=STARTED - timedelta(seconds=1)))) is None


def test_room_matches_any_chat_id_variant() -> None:
    catalog = FakeCatalog(make_records(1))
    transport = FakeTransport()
    dispatcher = _dispatcher(catalog, transport)
    report = asyncio.run(dispatcher.handle(_command("!roms game", room_key="@romsroom")))
    assert report is not None
    report = asyncio.run(dispatcher.handle(_command("!roms game", room_key="chat_id:1234567890")))
    assert report is not None


def test_overflow_uses_configured_limits() -> None:
    catalog = FakeCatalog(make_records(30))
    transport = FakeTransport()
    report = asyncio.run(
        _dispatcher(catalog, transport, max_results=20, batch_size=5).handle(_command("!roms game"))
    )
    assert report.overflow
    assert transport.reactions[0][1].key == ReactionKey.REJECT
    _, notice = transport.messages[0]
    assert isinstance(notice, OverflowNotice)
    assert notice.count == 30


def test_query_error_is_reported_in_room() -> None:
    transport = FakeTransport()
    report = asyncio.run(
        _dispatcher(FakeCatalog([], fail=True), transport).handle(_command("!roms mario"))
    )
    assert report is None
    assert transport.reactions == []
    _, notice = transport.messages[0]
    assert isinstance(notice, ErrorNotice)
    assert notice.body == "Search error: database is locked"


def test_bare_command_lists_whole_catalog() -> None:
    catalog = FakeCatalog(make_records(7))
    transport = FakeTransport()
    report = asyncio.run(_dispatcher(catalog, transport, batch_size=3).handle(_command("!roms")))
    assert report.records_sent == 7
    assert report.batches_sent == 3


def test_extract_query() -> None:
    assert extract_query("!roms  mario  kart ", "!roms") == "mario  kart"
    assert extract_query("  !roms\t\"a b\"", "!roms") == '"a b"'
    assert extract_query("!roms", "!roms") == ""
    assert extract_query("!romsfoo", "!roms") is None
    assert extract_query("", "!roms") is None

from __future__ import annotations

from romscope.core.room_keys import build_room_key, expand_room_key, expand_room_keys


def test_build_room_key_prefers_username() -> None:
    assert build_room_key(-100123, "RomsRoom") == "@romsroom"
    assert build_room_key(-100123, None) == "chat_id:-100123"
    assert build_room_key(-100123, "") == "chat_id:-100123"


def test_expand_chat_id_variants_positive() -> None:
    variants = expand_room_key("chat_id:123")
    assert "chat_id:123" in variants
    assert "chat_id:-123" in variants
    assert "chat_id:-1000000000123" in variants


def test_expand_chat_id_variants_negative_100() -> None:
    variants = expand_room_key("chat_id:-100987654321")
    assert variants == {"chat_id:-100987654321", "chat_id:987654321"}


def test_usernames_and_unknown_keys_pass_through() -> None:
    assert expand_room_key(" @RomsRoom ") == {"@romsroom"}
    assert expand_room_key("chat_id:abc") == {"chat_id:abc"}


def test_expand_room_keys_skips_empty_entries() -> None:
    assert expand_room_keys(["", "chat_id:-42"]) == {"chat_id:-42", "chat_id:42"}

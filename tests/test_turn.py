import re

import pytest

from src.models.turn import Turn, said_at_now, turn_id
from src.utils.slack_text import MENTION_PATTERN, strip_mentions


def test_said_at_format_has_nanoseconds():
    stamp = said_at_now()
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{9}Z", stamp)


def test_said_at_sorts_chronologically():
    first = said_at_now()
    second = said_at_now()
    assert first <= second


def test_turn_id_joins_message_role_and_user():
    assert turn_id("abc-123", "user", "U111") == "abc-123#user#U111"


def test_turn_round_trips_through_item():
    turn = Turn(id="a#user#U1", thread_ts="1.0", content="hi", said_at="2026-10-19T00:00:00.000000000Z", role="user")
    item = turn.to_item()
    assert item["threadTs"] == "1.0"
    assert item["saidAt"] == "2026-10-19T00:00:00.000000000Z"
    assert Turn.from_item(item) == turn


def test_turn_rejects_invalid_role():
    with pytest.raises(ValueError):
        Turn(id="a#bot#U1", thread_ts="1.0", content="hi", said_at="x", role="bot")


def test_turn_rejects_empty_thread():
    with pytest.raises(ValueError):
        Turn(id="a#user#U1", thread_ts="", content="hi", said_at="x", role="user")


def test_from_item_missing_field_raises_value_error():
    with pytest.raises(ValueError):
        Turn.from_item({"id": "a#user#U1", "content": "hi", "role": "user"})


def test_to_message_keeps_only_role_and_content():
    turn = Turn(id="a#assistant#U1", thread_ts="1.0", content="hello", said_at="x", role="assistant")
    assert turn.to_message() == {"role": "assistant", "content": "hello"}


def test_strip_mentions_removes_markup_and_whitespace():
    result = strip_mentions("  <@U0AGAKQ1V54> what's <@U222|sarah> up?  ")
    assert result == "what's  up?"
    assert not MENTION_PATTERN.search(result)


def test_strip_mentions_handles_none():
    assert strip_mentions(None) == ""


def test_strip_mentions_removes_mentions_spliced_by_removal():
    result = strip_mentions("hey <<@U1>@U2> there")
    assert result == "hey  there"
    assert not MENTION_PATTERN.search(result)


def test_strip_mentions_handles_deep_nesting():
    result = strip_mentions("<<<@U1>@U2>@U3> ok")
    assert result == "ok"

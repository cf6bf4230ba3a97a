# tests/test_history.py
from datetime import timedelta

from vocab_srs.config import HISTORY_KEY, HISTORY_LIMIT
from vocab_srs.history import add_to_history, clear_history, get_history
from vocab_srs.models import LexicalEntry
from vocab_srs.storage import MemoryStorage


def test_history_empty(storage):
    assert get_history(storage) == []


def test_add_to_history_newest_first(storage, now):
    add_to_history(storage, "猫", {"simplified": "猫"}, now=now)
    add_to_history(storage, "狗", {"simplified": "狗"}, now=now + timedelta(minutes=1))
    assert [i.query for i in get_history(storage)] == ["狗", "猫"]


def test_repeated_query_moves_to_top(storage, now):
    add_to_history(storage, "猫", {"simplified": "猫"}, now=now)
    add_to_history(storage, "狗", {"simplified": "狗"}, now=now)
    add_to_history(storage, "猫", {"simplified": "猫", "definitions": ["cat"]}, now=now)
    items = get_history(storage)
    assert [i.query for i in items] == ["猫", "狗"]
    assert items[0].entry["definitions"] == ["cat"]


def test_history_is_capped(storage, now):
    for i in range(HISTORY_LIMIT + 5):
        add_to_history(storage, f"q{i}", {"simplified": f"q{i}"}, now=now)
    items = get_history(storage)
    assert len(items) == HISTORY_LIMIT
    assert items[0].query == f"q{HISTORY_LIMIT + 4}"


def test_history_accepts_lexical_entry(storage):
    item = add_to_history(storage, "书", LexicalEntry(simplified="书", definitions=["book"]))
    assert item.entry["definitions"] == ["book"]


def test_clear_history(storage):
    add_to_history(storage, "猫", {"simplified": "猫"})
    clear_history(storage)
    assert get_history(storage) == []


def test_corrupt_history_reads_empty():
    assert get_history(MemoryStorage({HISTORY_KEY: "garbage"})) == []
    assert get_history(MemoryStorage({HISTORY_KEY: '[{"query": 1}]'})) == []

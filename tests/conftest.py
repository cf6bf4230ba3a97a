from datetime import datetime, timezone

import pytest

from vocab_srs.storage import MemoryStorage
from vocab_srs.store import CardStore


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_vocab.db")
    return db_path


@pytest.fixture
def now():
    return datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, now):
    """Card store on in-memory storage with a frozen clock."""
    return CardStore(storage, clock=lambda: now)


def entry(word, definition="meaning", pinyin=""):
    return {"simplified": word, "pinyin": pinyin, "definitions": [definition]}

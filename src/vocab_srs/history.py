"""Lookup history: most recent query first, one entry per query."""
import logging
import uuid

from vocab_srs.config import HISTORY_KEY, HISTORY_LIMIT
from vocab_srs.models import HistoryItem, utcnow
from vocab_srs.storage import read_json, write_json

logger = logging.getLogger(__name__)


def get_history(storage) -> list[HistoryItem]:
    records = read_json(storage, HISTORY_KEY, [])
    if not isinstance(records, list):
        return []
    try:
        return [HistoryItem.from_dict(r) for r in records]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Search history is corrupt, starting fresh: %s", e)
        return []


def add_to_history(storage, query: str, entry, now=None) -> HistoryItem:
    """Record a lookup. Repeating a query moves it to the top instead of duplicating it."""
    if hasattr(entry, "to_dict"):
        entry = entry.to_dict()
    items = [i for i in get_history(storage) if i.query != query]
    item = HistoryItem(id=uuid.uuid4().hex, query=query, entry=entry, searched_at=now or utcnow())
    items = [item] + items
    write_json(storage, HISTORY_KEY, [i.to_dict() for i in items[:HISTORY_LIMIT]])
    return item


def clear_history(storage) -> None:
    write_json(storage, HISTORY_KEY, [])

"""Flashcard deck persisted through a key/value storage backend."""
from __future__ import annotations

import logging
import threading
from datetime import datetime

from vocab_srs import scheduler
from vocab_srs.config import FLASHCARDS_KEY
from vocab_srs.errors import CardNotFoundError, InvalidCardError
from vocab_srs.models import Card, entry_key, utcnow
from vocab_srs.sm2 import quality_for
from vocab_srs.storage import read_json, write_json

logger = logging.getLogger(__name__)


class CardStore:
    """Owns the deck: add, remove, lookup, listing and persisted reviews.

    The whole deck is stored as one JSON array under ``key``, newest card
    first. Every mutating call is a synchronous read-modify-write under a
    lock, so the stored deck always matches the last completed call.
    Unreadable stored state is treated as an empty deck.
    """

    def __init__(self, storage, key: str = FLASHCARDS_KEY, item_key=entry_key, clock=utcnow):
        self.storage = storage
        self.key = key
        self.item_key = item_key
        self.clock = clock
        self._lock = threading.RLock()

    def _load(self) -> list:
        records = read_json(self.storage, self.key, [])
        if not isinstance(records, list):
            logger.warning("Deck under %r is not a list, starting with an empty deck", self.key)
            return []
        try:
            return [Card.from_dict(r) for r in records]
        except InvalidCardError as e:
            logger.warning("Deck under %r is corrupt, starting with an empty deck: %s", self.key, e)
            return []

    def _save(self, cards: list) -> None:
        write_json(self.storage, self.key, [c.to_dict() for c in cards])

    def list(self) -> list:
        """All cards, most recently added first."""
        with self._lock:
            return self._load()

    def get(self, card_id: str) -> Card | None:
        with self._lock:
            for card in self._load():
                if card.id == card_id:
                    return card
        return None

    def find_by_item(self, item) -> Card | None:
        key = self.item_key(item)
        with self._lock:
            for card in self._load():
                if self.item_key(card.item) == key:
                    return card
        return None

    def add(self, item) -> Card:
        """Add a card for ``item``, or return the existing card for the same item key."""
        if hasattr(item, "to_dict"):
            item = item.to_dict()
        key = self.item_key(item)
        with self._lock:
            cards = self._load()
            for card in cards:
                if self.item_key(card.item) == key:
                    logger.debug("Card for %r already in deck (%s)", key, card.id)
                    return card
            card = Card.new(item, now=self.clock())
            self._save([card] + cards)
        logger.debug("Added card %s for %r", card.id, key)
        return card

    def remove(self, card_id: str) -> None:
        with self._lock:
            cards = self._load()
            self._save([c for c in cards if c.id != card_id])
        logger.debug("Removed card %s", card_id)

    def review(self, card_id: str, grade, now: datetime | None = None) -> Card:
        """Grade a card, persist the rescheduled deck and return the updated card."""
        quality_for(grade)
        with self._lock:
            now = now or self.clock()
            cards = self._load()
            for idx, card in enumerate(cards):
                if card.id == card_id:
                    break
            else:
                raise CardNotFoundError(card_id)
            updated = scheduler.review(card, grade, now)
            cards[idx] = updated
            self._save(cards)
        logger.debug(
            "Reviewed %s as %s: interval=%d ease=%.2f reps=%d",
            card_id, grade, updated.interval, updated.ease_factor, updated.repetitions,
        )
        return updated

    def due(self, now: datetime | None = None) -> list:
        return scheduler.select_due(self.list(), now or self.clock())

    def merge(self, remote_cards) -> list:
        """Fold in a deck from another device, last review wins per card id."""
        with self._lock:
            merged = scheduler.merge_last_write_wins(self._load(), remote_cards, item_key=self.item_key)
            self._save(merged)
        return merged

    def clear(self) -> None:
        with self._lock:
            self._save([])

    def __len__(self) -> int:
        return len(self.list())


# Operations consumed by the CLI layer.

def add_card(store: CardStore, item) -> Card:
    return store.add(item)


def remove_card(store: CardStore, card_id: str) -> None:
    store.remove(card_id)


def list_cards(store: CardStore) -> list:
    return store.list()


def select_due_cards(store: CardStore, now: datetime | None = None) -> list:
    return store.due(now)


def review_card(store: CardStore, card_id: str, grade, now: datetime | None = None) -> Card:
    return store.review(card_id, grade, now)

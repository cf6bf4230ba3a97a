"""Data classes for cards, lexical entries and search history."""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional

from vocab_srs.errors import InvalidCardError
from vocab_srs.sm2 import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _as_list(value) -> list:
    # a lone string or object is one element, not a sequence of characters
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    return list(value)


def _count(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCardError(f"{name} must be a whole number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidCardError(f"{name} must be a whole number, got {value!r}")
    if value < 0:
        raise InvalidCardError(f"{name} must not be negative, got {value!r}")
    return int(value)


@dataclass
class LexicalEntry:
    simplified: str
    definitions: list = field(default_factory=list)
    traditional: str = ""
    pinyin: str = ""
    part_of_speech: list = field(default_factory=list)
    example_sentences: list = field(default_factory=list)
    usage_note: str = ""
    hsk_level: Optional[int] = None
    jlpt_level: Optional[int] = None
    japanese: Optional[str] = None
    reading: Optional[str] = None
    romanized: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "simplified": self.simplified,
            "traditional": self.traditional,
            "pinyin": self.pinyin,
            "partOfSpeech": list(self.part_of_speech),
            "definitions": list(self.definitions),
            "exampleSentences": list(self.example_sentences),
            "usageNote": self.usage_note,
        }
        optional = {
            "hskLevel": self.hsk_level,
            "jlptLevel": self.jlpt_level,
            "japanese": self.japanese,
            "reading": self.reading,
            "romanized": self.romanized,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LexicalEntry":
        return cls(
            simplified=data["simplified"],
            definitions=_as_list(data.get("definitions")),
            traditional=data.get("traditional", ""),
            pinyin=data.get("pinyin", ""),
            part_of_speech=_as_list(data.get("partOfSpeech")),
            example_sentences=_as_list(data.get("exampleSentences")),
            usage_note=data.get("usageNote", ""),
            hsk_level=data.get("hskLevel"),
            jlpt_level=data.get("jlptLevel"),
            japanese=data.get("japanese"),
            reading=data.get("reading"),
            romanized=data.get("romanized"),
        )


def entry_key(item: Any) -> str:
    """Natural key of a card payload, used to deduplicate the deck."""
    if isinstance(item, LexicalEntry):
        return item.simplified
    if isinstance(item, dict) and "simplified" in item:
        return item["simplified"]
    return str(item)


@dataclass
class Card:
    """Scheduling record bound to one learned item.

    ``item`` is opaque here; it only has to be JSON-serializable so the deck
    can be persisted.
    """
    id: str
    item: Any
    added_at: datetime
    due_date: datetime
    interval: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    last_review: Optional[datetime] = None

    @classmethod
    def new(cls, item: Any, now: datetime, card_id: Optional[str] = None) -> "Card":
        return cls(
            id=card_id or uuid.uuid4().hex,
            item=item,
            added_at=now,
            due_date=now,
        )

    def copy(self, **changes) -> "Card":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "item": self.item,
            "addedAt": format_timestamp(self.added_at),
            "dueDate": format_timestamp(self.due_date),
            "interval": self.interval,
            "easeFactor": self.ease_factor,
            "repetitions": self.repetitions,
        }
        if self.last_review is not None:
            data["lastReview"] = format_timestamp(self.last_review)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        try:
            last_review = data.get("lastReview")
            card = cls(
                id=str(data["id"]),
                item=data["item"],
                added_at=parse_timestamp(data["addedAt"]),
                due_date=parse_timestamp(data["dueDate"]),
                interval=_count(data["interval"], "interval"),
                ease_factor=float(data["easeFactor"]),
                repetitions=_count(data["repetitions"], "repetitions"),
                last_review=parse_timestamp(last_review) if last_review else None,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidCardError(f"Malformed card record: {e}") from e
        if not card.ease_factor >= MIN_EASE_FACTOR - 1e-9:
            raise InvalidCardError(f"Card {card.id} has ease factor {card.ease_factor} below {MIN_EASE_FACTOR}")
        return card


@dataclass
class HistoryItem:
    id: str
    query: str
    entry: Any
    searched_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "query": self.query,
            "entry": self.entry,
            "searchedAt": format_timestamp(self.searched_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryItem":
        return cls(
            id=data["id"],
            query=data["query"],
            entry=data["entry"],
            searched_at=parse_timestamp(data["searchedAt"]),
        )

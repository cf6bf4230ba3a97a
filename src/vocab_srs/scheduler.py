"""Card review scheduling and due-set selection.

Everything here is a pure function of its arguments: no clock reads, no
storage access, and input cards are never mutated.
"""
from datetime import datetime, timedelta
from enum import Enum

from vocab_srs.errors import InvalidCardError
from vocab_srs.models import Card
from vocab_srs.sm2 import MIN_EASE_FACTOR, quality_for, sm2_update


class Stage(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    YOUNG = "young"
    MATURE = "mature"


def _check_card(card: Card) -> None:
    if not isinstance(card, Card):
        raise InvalidCardError(f"Expected a Card, got {type(card).__name__}")
    if card.interval < 0 or card.repetitions < 0:
        raise InvalidCardError(f"Card {card.id} has a negative interval or repetition count")
    # Small tolerance for ease values that went through a float round-trip
    if card.ease_factor < MIN_EASE_FACTOR - 1e-9:
        raise InvalidCardError(f"Card {card.id} has ease factor {card.ease_factor} below {MIN_EASE_FACTOR}")


def _check_now(now) -> None:
    if not isinstance(now, datetime):
        raise InvalidCardError(f"Review time must be a datetime, got {now!r}")
    if now.tzinfo is None or now.utcoffset() is None:
        raise InvalidCardError(f"Review time must be timezone-aware, got {now!r}")


def review(card: Card, grade, now: datetime) -> Card:
    """Return a copy of ``card`` rescheduled after a review graded ``grade``."""
    quality = quality_for(grade)
    _check_card(card)
    _check_now(now)

    updated = sm2_update(
        quality=quality,
        repetitions=card.repetitions,
        ease_factor=card.ease_factor,
        interval=card.interval,
    )
    return card.copy(
        interval=updated["interval"],
        repetitions=updated["repetitions"],
        ease_factor=updated["ease_factor"],
        last_review=now,
        due_date=now + timedelta(days=updated["interval"]),
    )


def is_due(card: Card, now: datetime) -> bool:
    return card.due_date <= now


def select_due(cards, now: datetime) -> list:
    """Cards with ``due_date <= now``, in input order.

    Display order (shuffling, limits) is left to the caller.
    """
    _check_now(now)
    return [card for card in cards if is_due(card, now)]


def card_stage(card: Card) -> Stage:
    if card.repetitions == 0:
        return Stage.NEW if card.interval == 0 else Stage.LEARNING
    if card.repetitions == 1:
        return Stage.LEARNING
    if card.repetitions == 2:
        return Stage.YOUNG
    return Stage.MATURE


def _newer(candidate: Card, current: Card) -> bool:
    if candidate.last_review is None:
        return False
    if current.last_review is None:
        return True
    return candidate.last_review > current.last_review


def merge_last_write_wins(local, remote, item_key=None) -> list:
    """Merge two copies of a deck, keeping the most recently reviewed card per id.

    Ties keep the local card. Remote-only cards are appended in the order
    their id first appears in ``remote``. With ``item_key``, a remote card
    whose item matches a card already merged under another id replaces it
    only when reviewed later, so the result holds one card per word.
    """
    remote_by_id = {}
    for card in remote:
        current = remote_by_id.get(card.id)
        if current is None or _newer(card, current):
            remote_by_id[card.id] = card

    merged = []
    for card in local:
        other = remote_by_id.pop(card.id, None)
        merged.append(other if other is not None and _newer(other, card) else card)

    if item_key is None:
        merged.extend(remote_by_id.values())
        return merged

    position = {item_key(card.item): idx for idx, card in enumerate(merged)}
    for card in remote_by_id.values():
        key = item_key(card.item)
        idx = position.get(key)
        if idx is None:
            position[key] = len(merged)
            merged.append(card)
        elif _newer(card, merged[idx]):
            merged[idx] = card
    return merged

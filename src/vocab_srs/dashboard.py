"""Deck statistics for the stats screen."""
from datetime import datetime, timedelta

from vocab_srs.scheduler import Stage, card_stage, is_due


def stage_color(stage: Stage) -> str:
    return {
        Stage.NEW: "cyan",
        Stage.LEARNING: "red",
        Stage.YOUNG: "yellow",
        Stage.MATURE: "green",
    }[stage]


def get_deck_stats(cards: list, now: datetime) -> dict:
    stages = {stage: 0 for stage in Stage}
    for card in cards:
        stages[card_stage(card)] += 1
    avg_ease = sum(c.ease_factor for c in cards) / len(cards) if cards else 0.0
    return {
        "total": len(cards),
        "due": sum(1 for c in cards if is_due(c, now)),
        "stages": {stage.value: count for stage, count in stages.items()},
        "avg_ease": round(avg_ease, 2),
    }


def due_forecast(cards: list, now: datetime, days: int = 7) -> list[int]:
    """Number of cards falling due on each of the next ``days`` days.

    Day 0 covers everything already due plus the rest of the first 24 hours.
    """
    counts = [0] * days
    for card in cards:
        offset = (card.due_date - now) // timedelta(days=1)
        if offset < 0:
            offset = 0
        if offset < days:
            counts[offset] += 1
    return counts

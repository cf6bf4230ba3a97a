"""SM-2 spaced repetition algorithm."""
import math
from enum import Enum

from vocab_srs.errors import InvalidGradeError

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
PASSING_QUALITY = 3


class Grade(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


GRADE_QUALITY = {
    Grade.AGAIN: 0,
    Grade.HARD: 2,
    Grade.GOOD: 4,
    Grade.EASY: 5,
}


def quality_for(grade) -> int:
    """Map a grade (enum member or its name) to an SM-2 quality score."""
    try:
        return GRADE_QUALITY[Grade(grade)]
    except ValueError:
        raise InvalidGradeError(
            f"Invalid grade {grade!r}; expected one of: {', '.join(g.value for g in Grade)}"
        ) from None


def round_half_up(value: float) -> int:
    # Intervals are positive, so half-up and half-away-from-zero agree.
    return int(math.floor(value + 0.5))


def sm2_update(
    quality: int,
    repetitions: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters using SM-2.

    Interval and ease are both derived from the values passed in, so the
    interval growth of this step uses the ease factor from before the
    review.

    Args:
        quality: Rating 0-5 (0=complete blackout, 5=perfect)
        repetitions: Number of consecutive correct reviews
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 5:
        raise InvalidGradeError(f"Quality must be an integer 0-5, got {quality!r}")

    if quality >= PASSING_QUALITY:
        # Correct response
        if repetitions == 0:
            new_interval = 1
        elif repetitions == 1:
            new_interval = 6
        else:
            new_interval = round_half_up(interval * ease_factor)
        new_repetitions = repetitions + 1
    else:
        # Lapse: no partial credit for a long streak
        new_repetitions = 0
        new_interval = 1

    new_ef = ease_factor + 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
    new_ef = max(MIN_EASE_FACTOR, new_ef)

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": new_ef,
    }

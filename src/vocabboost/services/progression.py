"""Progression engine: mastery level transitions for a single review."""
import logging
from typing import Sequence, Tuple, Union

from vocabboost.models.srs_models import (
    GRADUATED,
    MasteryLevel,
    ReviewOutcome,
    ReviewTime,
)

logger = logging.getLogger(__name__)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS

# Delay after a correct answer at level 0, 1 and 2. Level 3 graduates.
STEP_DELAYS_MS = (6 * MINUTE_MS, 1 * HOUR_MS, 1 * HOUR_MS)
# Delay after a miss at any level
RELEARN_DELAY_MS = 6 * MINUTE_MS


class InvalidStateError(ValueError):
    """Raised when review state is outside what the scheduler accepts."""


def _check_level(current_level: int) -> int:
    if isinstance(current_level, bool) or not isinstance(current_level, int):
        raise InvalidStateError(f"Mastery level must be an integer, got {current_level!r}")
    if current_level < 0:
        raise InvalidStateError(f"Mastery level cannot be negative, got {current_level}")
    return current_level


def advance(
    current_level: int,
    outcome: Union[ReviewOutcome, bool],
    now: int,
    step_delays_ms: Sequence[int] = STEP_DELAYS_MS,
    relearn_delay_ms: int = RELEARN_DELAY_MS,
) -> Tuple[MasteryLevel, ReviewTime]:
    """Compute the level and next review time after one review.

    A miss always lands on level 1, ``relearn_delay_ms`` from now, no matter
    how far the word had progressed. A correct answer climbs one rung of the
    ladder; from level 3 onward the word graduates and is never due again.
    Levels above 4 are treated as graduated.

    Args:
        current_level: Level before the review (0-4).
        outcome: ``ReviewOutcome`` or a bool meaning "known".
        now: Review instant in epoch milliseconds.
        step_delays_ms: Delays for a correct answer at levels 0, 1 and 2.
        relearn_delay_ms: Delay after a miss.

    Returns:
        Tuple of the new level and the next review time.
    """
    level = _check_level(current_level)
    if isinstance(outcome, bool):
        outcome = ReviewOutcome.from_known(outcome)

    if outcome is ReviewOutcome.UNKNOWN:
        return MasteryLevel.FIRST, ReviewTime.at(now + relearn_delay_ms)

    if level < MasteryLevel.THIRD:
        return MasteryLevel(level + 1), ReviewTime.at(now + step_delays_ms[level])

    if level > MasteryLevel.GRADUATED:
        logger.warning(f"Level {level} is out of range, treating word as graduated")
    return MasteryLevel.GRADUATED, GRADUATED

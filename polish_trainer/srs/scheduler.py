"""
SRS Scheduler - Pure Algorithm Logic

This module contains the spaced-repetition algorithm with NO database
dependencies. All functions are pure: they take a progress row plus the
answer outcome and return new values.

The algorithm is an SM-2 variant:
- Correct answers grow the interval (1 day, 6 days, then interval * EF)
- Wrong answers reset the interval to 1 day and lower the easiness factor
- Fast correct answers and self-reported ease nudge the easiness factor up
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from polish_trainer.errors import SRSCalculationError
from polish_trainer.schemas import ConceptProgress
from polish_trainer.srs.constants import (
    MAX_DIFFICULTY_RATING,
    MIN_DIFFICULTY_RATING,
    NEUTRAL_DIFFICULTY_RATING,
    ScoringWeights,
    SRSParameters,
)
from polish_trainer.srs.progress_state import get_days_overdue

DEFAULT_PARAMETERS = SRSParameters()
DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class SRSResult:
    """Outcome of one scheduling step."""
    next_review: datetime
    new_easiness_factor: float
    new_interval_days: int
    mastery_level_change: float
    new_consecutive_correct: int


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def validate_difficulty_rating(difficulty_rating: Optional[int]) -> None:
    """Raise SRSCalculationError unless the rating is None or within 1..5."""
    if difficulty_rating is None:
        return
    if not MIN_DIFFICULTY_RATING <= difficulty_rating <= MAX_DIFFICULTY_RATING:
        raise SRSCalculationError(
            f"difficulty_rating must be between {MIN_DIFFICULTY_RATING} and "
            f"{MAX_DIFFICULTY_RATING}, got {difficulty_rating}"
        )


def calculate_next_review(
    progress: ConceptProgress,
    is_correct: bool,
    response_time_ms: int = 0,
    difficulty_rating: Optional[int] = None,
    now: Optional[datetime] = None,
    params: SRSParameters = DEFAULT_PARAMETERS
) -> SRSResult:
    """
    Calculate the next review schedule for a concept after one answer.

    Args:
        progress: Current progress row (not modified)
        is_correct: Whether the answer was correct
        response_time_ms: Time the learner took to answer
        difficulty_rating: Optional self-reported difficulty (1-5)
        now: Reference time (defaults to now)
        params: Algorithm parameters

    Returns:
        SRSResult with the new schedule and the mastery delta

    Raises:
        SRSCalculationError: If difficulty_rating is outside 1..5
    """
    validate_difficulty_rating(difficulty_rating)

    if now is None:
        now = datetime.now(timezone.utc)

    easiness_factor = progress.easiness_factor
    interval_days = progress.interval_days

    if is_correct:
        consecutive_correct = progress.consecutive_correct + 1
        mastery_change = params.mastery_gain

        if consecutive_correct == 1:
            interval_days = params.first_interval_days
        elif consecutive_correct == 2:
            interval_days = params.second_interval_days
        else:
            # Grown from the previous interval with the EF before this answer
            interval_days = round(progress.interval_days * progress.easiness_factor)

        if response_time_ms < params.fast_response_ms:
            easiness_factor += params.fast_response_bonus

        if difficulty_rating is not None:
            easiness_factor += (NEUTRAL_DIFFICULTY_RATING - difficulty_rating) * params.rating_step
    else:
        consecutive_correct = 0
        mastery_change = -params.mastery_loss
        interval_days = params.first_interval_days

        easiness_factor -= params.incorrect_penalty
        if response_time_ms > params.slow_response_ms:
            easiness_factor -= params.slow_incorrect_penalty

    easiness_factor = _clamp(
        easiness_factor, params.min_easiness_factor, params.max_easiness_factor
    )
    interval_days = int(_clamp(
        interval_days, params.min_interval_days, params.max_interval_days
    ))

    return SRSResult(
        next_review=now + timedelta(days=interval_days),
        new_easiness_factor=easiness_factor,
        new_interval_days=interval_days,
        mastery_level_change=mastery_change,
        new_consecutive_correct=consecutive_correct,
    )


def apply_srs_result(
    progress: ConceptProgress,
    result: SRSResult,
    is_correct: bool,
    now: Optional[datetime] = None
) -> ConceptProgress:
    """
    Apply an SRSResult to a progress row (modifies in place).

    Updates the schedule, increments total_attempts, clamps mastery to
    [0, 1] and folds the answer into success_rate as an exact running mean.

    Returns:
        The same progress object, for chaining
    """
    if now is None:
        now = datetime.now(timezone.utc)

    progress.last_practiced = now
    progress.next_review = result.next_review
    progress.easiness_factor = result.new_easiness_factor
    progress.interval_days = result.new_interval_days
    progress.consecutive_correct = result.new_consecutive_correct

    previous_attempts = progress.total_attempts
    progress.total_attempts = previous_attempts + 1

    progress.mastery_level = _clamp(
        progress.mastery_level + result.mastery_level_change, 0.0, 1.0
    )

    correct_answers = progress.success_rate * previous_attempts + (1 if is_correct else 0)
    progress.success_rate = correct_answers / progress.total_attempts

    return progress


def calculate_priority(
    progress: ConceptProgress,
    now: Optional[datetime] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS
) -> float:
    """
    Score how urgently a concept should be practiced (higher = sooner).

    Formula:
        2 * whole days overdue (only when > 0)
        + 10 * (1 - mastery) + 5 * (1 - success_rate) + 2 * (2.5 - EF)

    Never negative.
    """
    days_overdue = math.floor(get_days_overdue(progress, now))

    priority = 0.0
    if days_overdue > 0:
        priority += days_overdue * weights.overdue_day

    priority += (1 - progress.mastery_level) * weights.mastery
    priority += (1 - progress.success_rate) * weights.success
    priority += (weights.max_easiness_factor - progress.easiness_factor) * weights.easiness

    return max(0.0, priority)

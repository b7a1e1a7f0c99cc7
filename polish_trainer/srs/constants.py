"""
SRS Constants and Parameters

All tunable parameters for the SM-2 style scheduler and the review
priority score in one place. The module constants are the defaults; the
frozen dataclasses let callers inject a different parameter set.
"""

from dataclasses import dataclass


# ---- Easiness Factor ----

INITIAL_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
MAX_EASINESS_FACTOR = 2.5


# ---- Intervals (days) ----

FIRST_INTERVAL_DAYS = 1    # After the first correct answer in a row
SECOND_INTERVAL_DAYS = 6   # After the second correct answer in a row
MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365


# ---- Mastery ----

MASTERY_GAIN_ON_CORRECT = 0.1
MASTERY_LOSS_ON_INCORRECT = 0.2


# ---- Response Time Adjustments ----

FAST_RESPONSE_MS = 5000       # Correct answers faster than this earn a bonus
FAST_RESPONSE_BONUS = 0.05
SLOW_RESPONSE_MS = 15000      # Wrong answers slower than this earn a penalty
INCORRECT_EF_PENALTY = 0.2
SLOW_INCORRECT_EF_PENALTY = 0.1


# ---- Self-Reported Difficulty (rating below 3 raises EF, above 3 lowers it) ----

MIN_DIFFICULTY_RATING = 1
MAX_DIFFICULTY_RATING = 5
NEUTRAL_DIFFICULTY_RATING = 3
DIFFICULTY_RATING_STEP = 0.05


# ---- Priority Weights ----

OVERDUE_DAY_WEIGHT = 2.0
MASTERY_WEIGHT = 10.0
SUCCESS_WEIGHT = 5.0
EASINESS_WEIGHT = 2.0


@dataclass(frozen=True)
class SRSParameters:
    """Parameter set for calculate_next_review."""
    min_easiness_factor: float = MIN_EASINESS_FACTOR
    max_easiness_factor: float = MAX_EASINESS_FACTOR
    first_interval_days: int = FIRST_INTERVAL_DAYS
    second_interval_days: int = SECOND_INTERVAL_DAYS
    min_interval_days: int = MIN_INTERVAL_DAYS
    max_interval_days: int = MAX_INTERVAL_DAYS
    mastery_gain: float = MASTERY_GAIN_ON_CORRECT
    mastery_loss: float = MASTERY_LOSS_ON_INCORRECT
    fast_response_ms: int = FAST_RESPONSE_MS
    fast_response_bonus: float = FAST_RESPONSE_BONUS
    slow_response_ms: int = SLOW_RESPONSE_MS
    incorrect_penalty: float = INCORRECT_EF_PENALTY
    slow_incorrect_penalty: float = SLOW_INCORRECT_EF_PENALTY
    rating_step: float = DIFFICULTY_RATING_STEP


@dataclass(frozen=True)
class ScoringWeights:
    """Coefficients of the review priority score."""
    overdue_day: float = OVERDUE_DAY_WEIGHT
    mastery: float = MASTERY_WEIGHT
    success: float = SUCCESS_WEIGHT
    easiness: float = EASINESS_WEIGHT
    max_easiness_factor: float = MAX_EASINESS_FACTOR

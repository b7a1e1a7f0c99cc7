"""
Weakness scoring for drill selection.

A concept without any practice history always scores NO_HISTORY_SCORE,
which is strictly above the largest score a practiced concept can reach
(100 with the default weights).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from polish_trainer.schemas import ConceptProgress

# ---- Weakness Configuration ----
NO_HISTORY_SCORE = 1000.0
MASTERY_WEAKNESS_WEIGHT = 0.5
SUCCESS_WEAKNESS_WEIGHT = 0.3
INCORRECT_WEAKNESS_WEIGHT = 0.2
POINTS_PER_INCORRECT = 10       # Each wrong attempt adds this many points
MAX_INCORRECT_POINTS = 100

# Days reported for concepts that were never practiced
NEVER_PRACTICED_DAYS = 999


@dataclass(frozen=True)
class WeaknessWeights:
    """Coefficients of the weakness score."""
    no_history_score: float = NO_HISTORY_SCORE
    mastery: float = MASTERY_WEAKNESS_WEIGHT
    success: float = SUCCESS_WEAKNESS_WEIGHT
    incorrect: float = INCORRECT_WEAKNESS_WEIGHT
    points_per_incorrect: float = POINTS_PER_INCORRECT
    max_incorrect_points: float = MAX_INCORRECT_POINTS


DEFAULT_WEAKNESS_WEIGHTS = WeaknessWeights()


def estimate_incorrect_attempts(progress: ConceptProgress) -> int:
    """Number of wrong answers implied by total_attempts and success_rate."""
    return round(progress.total_attempts * (1 - progress.success_rate))


def calculate_weakness_score(
    progress: Optional[ConceptProgress],
    weights: WeaknessWeights = DEFAULT_WEAKNESS_WEIGHTS
) -> float:
    """
    Score how weak the learner is on a concept (higher = weaker).

    Formula (for a practiced concept):
        0.5 * (1 - mastery) * 100
        + 0.3 * (1 - success_rate) * 100
        + 0.2 * min(incorrect * 10, 100)

    Args:
        progress: Progress row, or None when the concept was never practiced
        weights: Score coefficients

    Returns:
        Weakness score
    """
    if progress is None:
        return weights.no_history_score

    mastery_weakness = (1 - progress.mastery_level) * 100
    success_weakness = (1 - progress.success_rate) * 100
    incorrect_weakness = min(
        estimate_incorrect_attempts(progress) * weights.points_per_incorrect,
        weights.max_incorrect_points,
    )

    return (
        mastery_weakness * weights.mastery
        + success_weakness * weights.success
        + incorrect_weakness * weights.incorrect
    )

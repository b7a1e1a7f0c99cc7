"""
SRS - Spaced Repetition for concept progress

SM-2 style scheduling of grammar and vocabulary concepts.

Quick start:
    from polish_trainer import srs

    # Pure algorithm (no I/O)
    result = srs.calculate_next_review(progress, is_correct=True, response_time_ms=3000)

    # With persistence
    tracker = srs.ProgressTracker(progress_store)
    await tracker.update_concept_progress("genitive", True, 3000, user_id="default")
"""

# Core scheduler API (algorithm logic)
from polish_trainer.srs.scheduler import (
    SRSResult,
    calculate_next_review,
    apply_srs_result,
    calculate_priority,
    validate_difficulty_rating,
)

# Persistence-aware API
from polish_trainer.srs.tracker import ProgressTracker

# Constants and parameters
from polish_trainer.srs.constants import (
    SRSParameters,
    ScoringWeights,
    INITIAL_EASINESS_FACTOR,
    MIN_EASINESS_FACTOR,
    MAX_EASINESS_FACTOR,
    MAX_INTERVAL_DAYS,
)

# Progress state helpers
from polish_trainer.srs.progress_state import (
    initialize_new_progress,
    due_cutoff,
    overdue_cutoff,
    get_days_overdue,
    get_days_since_review,
)


__all__ = [
    # Core algorithm
    "SRSResult",
    "calculate_next_review",
    "apply_srs_result",
    "calculate_priority",
    "validate_difficulty_rating",

    # Persistence
    "ProgressTracker",

    # Parameters
    "SRSParameters",
    "ScoringWeights",
    "INITIAL_EASINESS_FACTOR",
    "MIN_EASINESS_FACTOR",
    "MAX_EASINESS_FACTOR",
    "MAX_INTERVAL_DAYS",

    # Progress state
    "initialize_new_progress",
    "due_cutoff",
    "overdue_cutoff",
    "get_days_overdue",
    "get_days_since_review",
]

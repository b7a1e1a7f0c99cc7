"""
Progress State - initial state and day boundaries

Helpers around ConceptProgress that do not touch the database:
- lazy initialization of a new progress row
- calendar-day cutoffs used for "due today" and "overdue"
- days overdue for the priority score
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional

from polish_trainer.schemas import ConceptProgress
from polish_trainer.srs.constants import INITIAL_EASINESS_FACTOR, FIRST_INTERVAL_DAYS

SECONDS_PER_DAY = 86400


def initialize_new_progress(
    concept_id: str,
    user_id: str,
    now: Optional[datetime] = None
) -> ConceptProgress:
    """
    Build the progress row for a concept the user has never practiced.

    The concept is immediately due (next_review = now).
    """
    if now is None:
        now = datetime.now(timezone.utc)

    return ConceptProgress(
        user_id=user_id,
        concept_id=concept_id,
        mastery_level=0.0,
        success_rate=0.0,
        total_attempts=0,
        consecutive_correct=0,
        easiness_factor=INITIAL_EASINESS_FACTOR,
        interval_days=FIRST_INTERVAL_DAYS,
        last_practiced=None,
        next_review=now,
        is_active=True,
    )


def start_of_day(now: datetime) -> datetime:
    """Midnight at the start of the given day (same timezone)."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(now: datetime) -> datetime:
    """Last microsecond of the given day (same timezone)."""
    return now.replace(hour=23, minute=59, second=59, microsecond=999999)


def due_cutoff(now: Optional[datetime] = None) -> datetime:
    """Anything scheduled at or before this instant is due today."""
    if now is None:
        now = datetime.now(timezone.utc)
    return end_of_day(now)


def overdue_cutoff(now: Optional[datetime] = None) -> datetime:
    """Anything scheduled strictly before this instant is overdue."""
    if now is None:
        now = datetime.now(timezone.utc)
    return start_of_day(now)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes come from stores created without tz_aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_days_overdue(
    progress: ConceptProgress,
    now: Optional[datetime] = None
) -> float:
    """
    Fractional days since next_review (negative when not yet due).

    Args:
        progress: Progress row
        now: Reference time (defaults to now)

    Returns:
        Days overdue as a float
    """
    if now is None:
        now = datetime.now(timezone.utc)

    delta: timedelta = _as_utc(now) - _as_utc(progress.next_review)
    return delta.total_seconds() / SECONDS_PER_DAY


def get_days_since_review(
    progress: Optional[ConceptProgress],
    now: Optional[datetime] = None
) -> Optional[int]:
    """Whole days since last practice, or None when never practiced."""
    if progress is None or progress.last_practiced is None:
        return None
    if now is None:
        now = datetime.now(timezone.utc)
    return (_as_utc(now) - _as_utc(progress.last_practiced)).days

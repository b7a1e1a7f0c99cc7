"""
Types for practice statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RecentActivity:
    """Activity over the recent window (last 7 days)."""
    practice_sessions_this_week: int = 0
    concepts_practiced_this_week: int = 0
    average_accuracy: float = 0.0


@dataclass(frozen=True)
class PracticeStats:
    """
    Snapshot of a learner's practice state.

    The all-defaults instance is the safe-empty result returned when the
    stores cannot be read.
    """
    total_concepts: int = 0
    due_concepts: int = 0
    overdue_concepts: int = 0
    average_mastery: float = 0.0
    question_bank_size: int = 0
    concepts_with_progress: int = 0
    recent_activity: RecentActivity = field(default_factory=RecentActivity)

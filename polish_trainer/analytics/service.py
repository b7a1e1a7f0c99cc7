"""
Service layer to assemble practice statistics for a user.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from polish_trainer.analytics.constants import RECENT_ACTIVITY_DAYS
from polish_trainer.analytics.metrics import (
    compute_average_accuracy,
    compute_average_mastery,
    filter_practiced_since,
)
from polish_trainer.analytics.queries import progress_to_df
from polish_trainer.analytics.types import PracticeStats, RecentActivity
from polish_trainer.repos.interfaces import ConceptStore, QuestionBankStore
from polish_trainer.srs.tracker import ProgressTracker


async def build_practice_stats(
    user_id: str,
    concept_store: ConceptStore,
    question_store: QuestionBankStore,
    tracker: ProgressTracker,
    now: Optional[datetime] = None
) -> PracticeStats:
    """
    Build the practice statistics for a user.

    Store errors propagate; the engine converts them to empty stats.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    total_concepts = await concept_store.count()
    due = await tracker.get_concepts_due_for_review(user_id, now)
    overdue = await tracker.get_overdue_concepts(user_id, now)
    progress_df = progress_to_df(await tracker.get_all_progress(user_id))
    question_bank_size = await question_store.count()

    recent_df = filter_practiced_since(progress_df, now - timedelta(days=RECENT_ACTIVITY_DAYS))

    return PracticeStats(
        total_concepts=total_concepts,
        due_concepts=len(due),
        overdue_concepts=len(overdue),
        average_mastery=compute_average_mastery(progress_df),
        question_bank_size=question_bank_size,
        concepts_with_progress=len(progress_df),
        recent_activity=RecentActivity(
            # No session tracking yet
            practice_sessions_this_week=0,
            concepts_practiced_this_week=len(recent_df),
            average_accuracy=compute_average_accuracy(recent_df),
        ),
    )

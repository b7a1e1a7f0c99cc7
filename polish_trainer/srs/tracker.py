"""
Progress Tracker - SRS with persistence

Ties the pure scheduler to a ConceptProgressStore. This is the only place
where ConceptProgress rows are created or updated.

Main workflow:
1. Learner answers a question
2. Load the progress row (or lazily create it)
3. Calculate the next review with the scheduler
4. Save the updated row (upsert)
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional

from pymongo import ASCENDING

from polish_trainer.repos.interfaces import ConceptProgressStore
from polish_trainer.schemas import ConceptProgress
from polish_trainer.srs import progress_state
from polish_trainer.srs.constants import ScoringWeights, SRSParameters
from polish_trainer.srs.scheduler import (
    apply_srs_result,
    calculate_next_review,
    calculate_priority,
)


class ProgressTracker:
    """
    Reads and updates per-user concept progress.

    Args:
        progress_store: Persistence for ConceptProgress rows
        params: Scheduler parameters
        weights: Priority score weights
        logger: Optional logger (defaults to this module's logger)
    """

    def __init__(
        self,
        progress_store: ConceptProgressStore,
        params: Optional[SRSParameters] = None,
        weights: Optional[ScoringWeights] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.progress_store = progress_store
        self.params = params or SRSParameters()
        self.weights = weights or ScoringWeights()
        self.logger = logger or logging.getLogger(__name__)

    async def initialize_concept_progress(
        self,
        concept_id: str,
        user_id: str,
        now: Optional[datetime] = None
    ) -> ConceptProgress:
        """
        Create the progress row for a concept if it does not exist yet.

        Idempotent: an existing row is returned unchanged.
        """
        existing = await self.progress_store.find_one(user_id, concept_id)
        if existing is not None:
            return existing

        progress = progress_state.initialize_new_progress(concept_id, user_id, now)
        await self.progress_store.save(progress)
        self.logger.debug("[SRS] Initialized progress for %s (user=%s)", concept_id, user_id)
        return progress

    async def update_concept_progress(
        self,
        concept_id: str,
        is_correct: bool,
        response_time_ms: int,
        user_id: str,
        difficulty_rating: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> ConceptProgress:
        """
        Record one answer for a concept and reschedule it.

        Args:
            concept_id: Concept that was practiced
            is_correct: Whether the answer was correct
            response_time_ms: Answer latency in milliseconds
            user_id: Learner id
            difficulty_rating: Optional self-reported difficulty (1-5)
            now: Timestamp of the answer (defaults to now)

        Returns:
            The saved progress row

        Raises:
            SRSCalculationError: If difficulty_rating is outside 1..5
        """
        if now is None:
            now = datetime.now(timezone.utc)

        progress = await self.progress_store.find_one(user_id, concept_id)
        if progress is None:
            progress = await self.initialize_concept_progress(concept_id, user_id, now)

        result = calculate_next_review(
            progress,
            is_correct,
            response_time_ms=response_time_ms,
            difficulty_rating=difficulty_rating,
            now=now,
            params=self.params,
        )
        apply_srs_result(progress, result, is_correct, now)

        saved = await self.progress_store.save(progress)
        self.logger.info(
            "[SRS] %s %s: interval=%dd ef=%.2f mastery=%.2f",
            concept_id,
            "correct" if is_correct else "incorrect",
            saved.interval_days,
            saved.easiness_factor,
            saved.mastery_level,
        )
        return saved

    async def get_concepts_due_for_review(
        self,
        user_id: str,
        now: Optional[datetime] = None
    ) -> list[ConceptProgress]:
        """Active progress rows due by the end of today, oldest due first."""
        return await self.progress_store.find(
            user_id,
            next_review_lte=progress_state.due_cutoff(now),
            sort=[("next_review", ASCENDING)],
        )

    async def get_overdue_concepts(
        self,
        user_id: str,
        now: Optional[datetime] = None
    ) -> list[ConceptProgress]:
        """Active progress rows scheduled before today, oldest due first."""
        return await self.progress_store.find(
            user_id,
            next_review_lt=progress_state.overdue_cutoff(now),
            sort=[("next_review", ASCENDING)],
        )

    async def get_progress_for_concepts(
        self,
        concept_ids: list[str],
        user_id: str
    ) -> dict[str, ConceptProgress]:
        """Map concept id -> progress row for the concepts that have one."""
        rows = await self.progress_store.find(user_id, concept_ids=concept_ids)
        return {row.concept_id: row for row in rows}

    async def get_all_progress(self, user_id: str) -> list[ConceptProgress]:
        """All active progress rows for a user."""
        return await self.progress_store.find(user_id)

    def calculate_priority(
        self,
        progress: ConceptProgress,
        now: Optional[datetime] = None
    ) -> float:
        """Priority score using this tracker's weights."""
        return calculate_priority(progress, now, self.weights)

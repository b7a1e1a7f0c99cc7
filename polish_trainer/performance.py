"""
Performance updates after a learner answers a question.

Two independent writes happen per answer: the question's usage statistics
and the SRS progress of every concept it targets. There is no shared
transaction; each write is last-writer-wins on its own document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from polish_trainer.repos.interfaces import QuestionBankStore
from polish_trainer.schemas import ConceptProgress, QuestionBankEntry
from polish_trainer.srs.scheduler import validate_difficulty_rating
from polish_trainer.srs.tracker import ProgressTracker


def next_success_rate(success_rate: float, times_used: int, is_correct: bool) -> float:
    """Exact running mean after one more answer."""
    correct = success_rate * times_used + (1 if is_correct else 0)
    return correct / (times_used + 1)


@dataclass
class AnswerOutcome:
    """What record_answer changed."""
    question_updated: bool
    progress: list[ConceptProgress] = field(default_factory=list)


class PerformanceUpdater:
    """
    Records answers against the question bank and concept progress.

    Args:
        question_store: Question bank
        tracker: Progress tracker (SRS update path)
        logger: Optional logger
    """

    def __init__(
        self,
        question_store: QuestionBankStore,
        tracker: ProgressTracker,
        logger: Optional[logging.Logger] = None
    ):
        self.question_store = question_store
        self.tracker = tracker
        self.logger = logger or logging.getLogger(__name__)

    async def update_question_performance(
        self,
        question_id: str,
        is_correct: bool,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Fold one answer into a question's statistics.

        Returns:
            True when the question was updated, False when it does not exist
        """
        if now is None:
            now = datetime.now(timezone.utc)

        question = await self.question_store.find_one(question_id)
        if question is None:
            self.logger.warning("[PERFORMANCE] Question %s not found for performance update", question_id)
            return False

        success_rate = next_success_rate(question.success_rate, question.times_used, is_correct)
        updated = await self.question_store.update_one(question_id, {
            "times_used": question.times_used + 1,
            "success_rate": success_rate,
            "last_used": now,
        })
        if updated:
            self.logger.info(
                "[PERFORMANCE] Question %s success rate now %.1f%%", question_id, success_rate * 100
            )
        return updated

    async def record_answer(
        self,
        question: QuestionBankEntry,
        is_correct: bool,
        response_time_ms: int,
        user_id: str,
        difficulty_rating: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> AnswerOutcome:
        """
        Update the question and the progress of every concept it targets.

        Each write is attempted on its own: a failed question update or a
        failed concept update is logged and the remaining writes still run.

        Raises:
            SRSCalculationError: If difficulty_rating is outside 1..5
        """
        validate_difficulty_rating(difficulty_rating)

        try:
            question_updated = await self.update_question_performance(question.id, is_correct, now)
        except Exception:
            self.logger.exception("[PERFORMANCE] Failed to update question %s", question.id)
            question_updated = False

        progress = []
        for concept_id in dict.fromkeys(question.target_concepts):
            try:
                progress.append(await self.tracker.update_concept_progress(
                    concept_id,
                    is_correct,
                    response_time_ms,
                    user_id,
                    difficulty_rating=difficulty_rating,
                    now=now,
                ))
            except Exception:
                self.logger.exception(
                    "[PERFORMANCE] Failed to update progress for concept %s (user %s)",
                    concept_id, user_id
                )

        return AnswerOutcome(question_updated=question_updated, progress=progress)

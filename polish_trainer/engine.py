"""
PracticeEngine - single entry point for practice sessions

Wires the selector, provisioner, context builder, performance updater and
progress tracker onto one set of stores. Every public method logs store
failures and returns a safe empty result instead of raising. Invalid input
still raises: SRSCalculationError for an out-of-range difficulty rating and
ConceptSelectionError for an unknown drill mode.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from pymongo.asynchronous.database import AsyncDatabase

from polish_trainer.analytics import PracticeStats, build_practice_stats
from polish_trainer.config import DEFAULT_USER_ID
from polish_trainer.context_builder import GENERAL_PRACTICE_CONTEXT, ContextBuilder
from polish_trainer.performance import AnswerOutcome, PerformanceUpdater
from polish_trainer.questions.generator import QuestionGenerator
from polish_trainer.questions.provisioner import DEFAULT_MAX_QUESTIONS, QuestionProvisioner
from polish_trainer.repos import (
    ConceptGroupStore,
    ConceptProgressStore,
    ConceptStore,
    CourseConceptStore,
    MongoConceptGroupStore,
    MongoConceptProgressStore,
    MongoConceptStore,
    MongoCourseConceptStore,
    MongoQuestionBankStore,
    QuestionBankStore,
)
from polish_trainer.schemas import Concept, ConceptGroup, PracticeMode, QuestionBankEntry
from polish_trainer.selection import ConceptSelection, ConceptSelector, DrillMode, WeaknessReport
from polish_trainer.selection.scoring import DEFAULT_WEAKNESS_WEIGHTS, WeaknessWeights
from polish_trainer.selection.selector import DEFAULT_DRILL_MAX_CONCEPTS, DEFAULT_MAX_CONCEPTS
from polish_trainer.srs import ProgressTracker, SRSParameters, ScoringWeights
from polish_trainer.srs.scheduler import validate_difficulty_rating


class PracticeEngine:
    """
    Facade over the practice components.

    Args:
        concept_store: Concept catalogue
        progress_store: Per-user concept progress
        question_store: Question bank
        group_store: Concept groups
        course_store: Course to concept mappings
        generator: Question generator; None disables shortfall generation
        srs_params: Scheduler parameters
        scoring_weights: Priority score weights
        weakness_weights: Weakness drill coefficients
        logger: Optional logger shared by every component
    """

    def __init__(
        self,
        concept_store: ConceptStore,
        progress_store: ConceptProgressStore,
        question_store: QuestionBankStore,
        group_store: ConceptGroupStore,
        course_store: CourseConceptStore,
        generator: Optional[QuestionGenerator] = None,
        srs_params: Optional[SRSParameters] = None,
        scoring_weights: Optional[ScoringWeights] = None,
        weakness_weights: WeaknessWeights = DEFAULT_WEAKNESS_WEIGHTS,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.concept_store = concept_store
        self.question_store = question_store

        self.tracker = ProgressTracker(
            progress_store, params=srs_params, weights=scoring_weights, logger=logger
        )
        self.context_builder = ContextBuilder(concept_store, group_store, logger=logger)
        self.selector = ConceptSelector(
            concept_store,
            self.tracker,
            group_store,
            course_store,
            weakness_weights=weakness_weights,
            logger=logger,
        )
        self.provisioner = QuestionProvisioner(
            question_store,
            concept_store,
            self.tracker,
            self.context_builder,
            generator=generator,
            logger=logger,
        )
        self.performance = PerformanceUpdater(question_store, self.tracker, logger=logger)

    @classmethod
    def from_mongo(
        cls,
        db: Optional[AsyncDatabase] = None,
        generator: Optional[QuestionGenerator] = None,
        logger: Optional[logging.Logger] = None
    ) -> "PracticeEngine":
        """Build an engine on the MongoDB stores (MONGO_URI must be set)."""
        return cls(
            concept_store=MongoConceptStore(db),
            progress_store=MongoConceptProgressStore(db),
            question_store=MongoQuestionBankStore(db),
            group_store=MongoConceptGroupStore(db),
            course_store=MongoCourseConceptStore(db),
            generator=generator,
            logger=logger,
        )

    # ---- Selection ----

    async def select_practice_concepts_for_user(
        self,
        user_id: str = DEFAULT_USER_ID,
        max_concepts: int = DEFAULT_MAX_CONCEPTS
    ) -> ConceptSelection:
        return await self.selector.select_practice_concepts_for_user(user_id, max_concepts)

    async def select_concepts_from_course(
        self,
        course_id: int,
        max_concepts: int = DEFAULT_MAX_CONCEPTS
    ) -> ConceptSelection:
        return await self.selector.select_concepts_from_course(course_id, max_concepts)

    async def select_drill_concepts(
        self,
        mode: DrillMode,
        user_id: str = DEFAULT_USER_ID,
        course_id: Optional[int] = None,
        group_id: Optional[str] = None,
        group_ids: Optional[Sequence[str]] = None,
        max_concepts: int = DEFAULT_DRILL_MAX_CONCEPTS
    ) -> ConceptSelection:
        return await self.selector.select_drill_concepts(
            mode,
            user_id,
            course_id=course_id,
            group_id=group_id,
            group_ids=group_ids,
            max_concepts=max_concepts,
        )

    async def get_groups_for_concepts(self, concept_ids: Sequence[str]) -> list[ConceptGroup]:
        try:
            return await self.selector.get_groups_for_concepts(concept_ids)
        except Exception:
            self.logger.exception("[ENGINE] Failed to load groups for concepts")
            return []

    async def get_concepts_in_group(self, group_id: str) -> list[Concept]:
        try:
            return await self.selector.get_concepts_in_group(group_id)
        except Exception:
            self.logger.exception("[ENGINE] Failed to load concepts in group %s", group_id)
            return []

    async def list_concepts_by_weakness(self, user_id: str = DEFAULT_USER_ID) -> WeaknessReport:
        """Every active concept ranked weakest first, with a summary."""
        try:
            entries = await self.selector.rank_concepts_by_weakness(user_id)
        except Exception:
            self.logger.exception("[ENGINE] Failed to rank concepts by weakness for %s", user_id)
            return WeaknessReport()
        return WeaknessReport(entries=entries, summary=self.selector.summarize_weakness(entries))

    # ---- Questions ----

    async def get_questions_for_concepts(
        self,
        concept_ids: Sequence[str],
        mode: PracticeMode = PracticeMode.NORMAL,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        user_id: str = DEFAULT_USER_ID
    ) -> list[QuestionBankEntry]:
        try:
            return await self.provisioner.get_questions_for_concepts(
                concept_ids, mode, max_questions, user_id
            )
        except Exception:
            self.logger.exception("[ENGINE] Failed to provide questions")
            return []

    async def build_context_for_concepts(self, concept_ids: Sequence[str]) -> str:
        try:
            return await self.context_builder.build_context_for_concepts(concept_ids)
        except Exception:
            self.logger.exception("[ENGINE] Failed to build concept context")
            return GENERAL_PRACTICE_CONTEXT

    # ---- Answers ----

    async def update_question_performance(self, question_id: str, is_correct: bool) -> bool:
        try:
            return await self.performance.update_question_performance(question_id, is_correct)
        except Exception:
            self.logger.exception("[ENGINE] Failed to update question %s", question_id)
            return False

    async def record_answer(
        self,
        question: QuestionBankEntry,
        is_correct: bool,
        response_time_ms: int,
        user_id: str = DEFAULT_USER_ID,
        difficulty_rating: Optional[int] = None
    ) -> AnswerOutcome:
        """
        Record an answer for the question and its target concepts.

        Raises:
            SRSCalculationError: If difficulty_rating is outside 1..5
        """
        validate_difficulty_rating(difficulty_rating)
        try:
            return await self.performance.record_answer(
                question, is_correct, response_time_ms, user_id, difficulty_rating
            )
        except Exception:
            self.logger.exception("[ENGINE] Failed to record answer for question %s", question.id)
            return AnswerOutcome(question_updated=False)

    # ---- Stats ----

    async def get_practice_stats(self, user_id: str = DEFAULT_USER_ID) -> PracticeStats:
        try:
            return await build_practice_stats(
                user_id, self.concept_store, self.question_store, self.tracker
            )
        except Exception:
            self.logger.exception("[ENGINE] Failed to build practice stats for %s", user_id)
            return PracticeStats()

"""
Question Provisioner - questions for a set of target concepts

Modes:
1. NORMAL: manual/generated questions first (least used, best success),
   padded with momentary questions only when short
2. PREVIOUS: questions the learner has already seen, oldest first
3. DRILL: strict; only questions overlapping the drill set, ranked by
   relevance; never falls back to unrelated questions

Any shortfall is filled by generating momentary questions, which are
saved to the bank before being returned. The public method never raises:
failures are logged and whatever was found so far is returned.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence

from pymongo import ASCENDING, DESCENDING

from polish_trainer.config import DEFAULT_USER_ID
from polish_trainer.context_builder import ContextBuilder
from polish_trainer.questions.generator import QuestionGenerator, is_valid_question_for_type
from polish_trainer.questions.ranking import infer_difficulty, rank_drill_candidates, split_shortfall
from polish_trainer.repos.interfaces import ConceptStore, QuestionBankStore
from polish_trainer.schemas import (
    MOMENTARY_QUESTION_TYPES,
    GeneratedQuestion,
    PracticeMode,
    QuestionBankEntry,
    QuestionSource,
)
from polish_trainer.srs.tracker import ProgressTracker

# ---- Provisioning Configuration ----
DEFAULT_MAX_QUESTIONS = 10

BANK_SOURCES = [QuestionSource.MANUAL.value, QuestionSource.GENERATED.value]
MOMENTARY_SOURCES = [QuestionSource.MOMENTARY.value]

NORMAL_SORT = [("source", ASCENDING), ("times_used", ASCENDING), ("success_rate", DESCENDING)]
MOMENTARY_SORT = [("times_used", ASCENDING), ("success_rate", DESCENDING)]
PREVIOUS_SORT = [("last_used", ASCENDING), ("success_rate", ASCENDING)]
NEWEST_FIRST_SORT = [("created_date", DESCENDING)]


def _dedupe(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class QuestionProvisioner:
    """
    Provides questions for practice sessions.

    Args:
        question_store: Question bank
        concept_store: Concept catalogue (for generation)
        tracker: Progress tracker (PREVIOUS mode fallback)
        context_builder: Builds generation briefings
        generator: Question generator; None disables shortfall generation
        momentary_types: Question types used for shortfall generation
        logger: Optional logger
    """

    def __init__(
        self,
        question_store: QuestionBankStore,
        concept_store: ConceptStore,
        tracker: ProgressTracker,
        context_builder: ContextBuilder,
        generator: Optional[QuestionGenerator] = None,
        momentary_types: Optional[Sequence[str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.question_store = question_store
        self.concept_store = concept_store
        self.tracker = tracker
        self.context_builder = context_builder
        self.generator = generator
        self.momentary_types = list(momentary_types or [t.value for t in MOMENTARY_QUESTION_TYPES])
        self.logger = logger or logging.getLogger(__name__)

    async def get_questions_for_concepts(
        self,
        concept_ids: Sequence[str],
        mode: PracticeMode,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        user_id: str = DEFAULT_USER_ID
    ) -> list[QuestionBankEntry]:
        """
        Get up to max_questions questions for the concepts.

        Args:
            concept_ids: Target concept ids (may be empty)
            mode: NORMAL, PREVIOUS or DRILL
            max_questions: Maximum number of questions to return
            user_id: Learner id (PREVIOUS mode fallback)

        Returns:
            Questions from the bank followed by newly generated ones
        """
        mode = PracticeMode(mode)
        if max_questions <= 0:
            return []

        concept_ids = _dedupe(concept_ids)
        self.logger.info(
            "[PROVISION] mode=%s concepts=%s max=%d", mode.value, ",".join(concept_ids), max_questions
        )

        try:
            if not concept_ids:
                if mode == PracticeMode.DRILL:
                    self.logger.info("[PROVISION] Drill without concepts, returning nothing")
                    return []
                if mode == PracticeMode.PREVIOUS:
                    return await self.get_previous_fallback_questions(user_id, max_questions)
                return await self.get_any_active_questions(max_questions)

            if mode == PracticeMode.NORMAL:
                questions = await self.get_normal_pool(concept_ids, max_questions)
            elif mode == PracticeMode.DRILL:
                questions = await self.get_drill_pool(concept_ids, max_questions)
            else:
                questions = await self.get_previous_pool(concept_ids, max_questions)
        except Exception:
            self.logger.exception("[PROVISION] Failed to load questions from the bank")
            questions = []

        questions = questions[:max_questions]
        shortfall = max_questions - len(questions)
        if shortfall > 0:
            generated = await self.generate_momentary_questions(concept_ids, shortfall, mode)
            questions.extend(generated)
            self.logger.info(
                "[PROVISION] %d from bank + %d generated", len(questions) - len(generated), len(generated)
            )

        return questions

    # ---- Candidate pools ----

    async def get_any_active_questions(self, max_questions: int) -> list[QuestionBankEntry]:
        """Any active questions, most recently created first."""
        return await self.question_store.find(sort=NEWEST_FIRST_SORT, limit=max_questions)

    async def get_normal_pool(
        self,
        concept_ids: Sequence[str],
        max_questions: int
    ) -> list[QuestionBankEntry]:
        """Manual and generated questions first, momentary ones only to pad."""
        questions = await self.question_store.find(
            target_concepts=concept_ids,
            sources=BANK_SOURCES,
            sort=NORMAL_SORT,
            limit=max_questions,
        )
        if len(questions) < max_questions:
            questions += await self.question_store.find(
                target_concepts=concept_ids,
                sources=MOMENTARY_SOURCES,
                sort=MOMENTARY_SORT,
                limit=max_questions - len(questions),
            )
        return questions

    async def get_drill_pool(
        self,
        concept_ids: Sequence[str],
        max_questions: int
    ) -> list[QuestionBankEntry]:
        """Questions overlapping the drill set, most relevant first."""
        candidates = await self.question_store.find(target_concepts=concept_ids)
        return rank_drill_candidates(candidates, concept_ids)[:max_questions]

    async def get_previous_pool(
        self,
        concept_ids: Optional[Sequence[str]],
        max_questions: int
    ) -> list[QuestionBankEntry]:
        """Previously answered questions, least recently used and least successful first."""
        return await self.question_store.find(
            target_concepts=concept_ids,
            min_times_used=1,
            sort=PREVIOUS_SORT,
            limit=max_questions,
        )

    async def get_previous_fallback_questions(
        self,
        user_id: str,
        max_questions: int
    ) -> list[QuestionBankEntry]:
        """
        PREVIOUS mode without explicit concepts.

        Tries, in order: concepts due for the user, concepts the user has
        progress on, any active concepts, all previously used questions,
        any active questions. The first tier with results wins.
        """
        due_ids = [p.concept_id for p in await self.tracker.get_concepts_due_for_review(user_id)]
        questions = await self._previous_for("due concepts", due_ids, max_questions)
        if questions:
            return questions

        progress_ids = [p.concept_id for p in await self.tracker.get_all_progress(user_id)]
        questions = await self._previous_for("practiced concepts", progress_ids, max_questions)
        if questions:
            return questions

        active_ids = [c.id for c in await self.concept_store.find()]
        questions = await self._previous_for("active concepts", active_ids, max_questions)
        if questions:
            return questions

        questions = await self.get_previous_pool(None, max_questions)
        if questions:
            self.logger.info("[PROVISION] Previous questions from the whole bank")
            return questions

        self.logger.info("[PROVISION] No previous questions, using any available questions")
        return await self.get_any_active_questions(max_questions)

    async def _previous_for(
        self,
        label: str,
        concept_ids: list[str],
        max_questions: int
    ) -> list[QuestionBankEntry]:
        if not concept_ids:
            return []
        questions = await self.get_previous_pool(concept_ids, max_questions)
        if questions:
            self.logger.info("[PROVISION] Previous questions from %s", label)
        return questions

    # ---- Generation ----

    async def _build_instructions(self, concept_ids: Sequence[str], mode: PracticeMode) -> str:
        try:
            if mode == PracticeMode.DRILL:
                return await self.context_builder.build_drill_context(concept_ids)
            return await self.context_builder.build_context_for_concepts(concept_ids)
        except Exception as e:
            self.logger.warning("[PROVISION] Context build failed, generating without it: %s", e)
            return ""

    def _to_bank_entry(
        self,
        generated: GeneratedQuestion,
        concept_ids: Sequence[str],
        mode: PracticeMode
    ) -> QuestionBankEntry:
        if mode == PracticeMode.DRILL:
            targets = list(concept_ids)
        else:
            targets = list(generated.target_concepts) or list(concept_ids)

        return QuestionBankEntry(
            question=generated.question,
            correct_answer=generated.correct_answer,
            question_type=generated.question_type,
            target_concepts=targets,
            difficulty=generated.difficulty,
            times_used=0,
            success_rate=0.0,
            source=QuestionSource.MOMENTARY,
            options=generated.options,
            audio_url=generated.audio_url,
            image_url=generated.image_url,
        )

    async def generate_momentary_questions(
        self,
        concept_ids: Sequence[str],
        count: int,
        mode: PracticeMode
    ) -> list[QuestionBankEntry]:
        """
        Generate and save up to count questions for the concepts.

        The count is split evenly over the momentary question types. A
        failing type is logged and skipped.
        """
        if count <= 0 or not concept_ids or self.generator is None:
            return []

        try:
            concepts = await self.concept_store.find(ids=list(concept_ids))
        except Exception:
            self.logger.exception("[PROVISION] Could not load concepts for generation")
            return []

        if not concepts:
            self.logger.info("[PROVISION] No active concepts found, cannot generate questions")
            return []

        difficulty = infer_difficulty(concepts)
        instructions = await self._build_instructions(concept_ids, mode)
        saved: list[QuestionBankEntry] = []

        for question_type, quantity in split_shortfall(count, self.momentary_types):
            try:
                generated = await self.generator.generate(
                    concepts,
                    question_type=question_type,
                    difficulty=difficulty,
                    quantity=quantity,
                    special_instructions=instructions,
                )
            except Exception as e:
                self.logger.warning("[PROVISION] Generation failed for %s: %s", question_type, e)
                continue

            accepted = 0
            for question in generated:
                if accepted >= quantity:
                    break
                if not is_valid_question_for_type(question):
                    self.logger.debug("[PROVISION] Discarded invalid %s question", question_type)
                    continue
                try:
                    entry = await self.question_store.create(
                        self._to_bank_entry(question, concept_ids, mode)
                    )
                except Exception as e:
                    self.logger.warning("[PROVISION] Could not save generated question: %s", e)
                    continue
                saved.append(entry)
                accepted += 1

        self.logger.info("[PROVISION] Generated %d of %d requested questions", len(saved), count)
        return saved

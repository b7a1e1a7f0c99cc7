"""
Question generation via OpenAI structured outputs.

The provisioner depends only on the QuestionGenerator interface; the
OpenAI implementation asks the model for a batch of questions of one type,
maps the concept names it returns back to concept ids, and drops questions
that do not satisfy the structural rules of their type.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from openai import AsyncOpenAI

from polish_trainer.config import OPENAI_MODEL, get_openai_api_key
from polish_trainer.errors import QuestionGenerationError
from polish_trainer.questions.prompts import SYSTEM_PROMPT, format_generation_prompt
from polish_trainer.schemas import (
    AIGeneratedQuestion,
    AIQuestionBatch,
    CHOICE_QUESTION_TYPES,
    Concept,
    GeneratedQuestion,
    QuestionType,
)

CLOZE_GAP = "_____"
CLOZE_QUESTION_TYPES = {QuestionType.BASIC_CLOZE.value, QuestionType.MULTI_CLOZE.value}
MIN_CHOICE_OPTIONS = 2
MIN_ARRANGEMENT_OPTIONS = 3


def is_valid_question_for_type(question: GeneratedQuestion) -> bool:
    """
    Structural check for a generated question.

    Rules:
        - choice questions need at least 2 options
        - cloze questions need a _____ gap
        - word arrangement needs at least 3 options
    """
    options = question.options or []
    if question.question_type in CHOICE_QUESTION_TYPES:
        return len(options) >= MIN_CHOICE_OPTIONS
    if question.question_type in CLOZE_QUESTION_TYPES:
        return CLOZE_GAP in question.question
    if question.question_type == QuestionType.WORD_ARRANGEMENT.value:
        return len(options) >= MIN_ARRANGEMENT_OPTIONS
    return True


def map_concept_names_to_ids(names: Sequence[str], concepts: Sequence[Concept]) -> list[str]:
    """
    Convert concept names returned by the LLM to ids.

    Unknown names are ignored; if nothing matches, all concept ids are used.
    """
    id_by_name = {c.name: c.id for c in concepts}
    ids = []
    for name in names:
        concept_id = id_by_name.get(name)
        if concept_id is not None and concept_id not in ids:
            ids.append(concept_id)
    return ids or [c.id for c in concepts]


class QuestionGenerator(ABC):
    """External collaborator that writes new questions."""

    @abstractmethod
    async def generate(
        self,
        concepts: Sequence[Concept],
        question_type: str,
        difficulty: str,
        quantity: int,
        special_instructions: Optional[str] = None,
    ) -> list[GeneratedQuestion]:
        """
        Generate up to quantity questions of one type for the concepts.

        Raises:
            QuestionGenerationError: If the generator fails
        """


class OpenAIQuestionGenerator(QuestionGenerator):
    """
    QuestionGenerator backed by OpenAI structured outputs.

    Args:
        client: AsyncOpenAI client (created from OPENAI_API_KEY when omitted)
        model: Model name (must support structured outputs)
        logger: Optional logger
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = OPENAI_MODEL,
        logger: Optional[logging.Logger] = None
    ):
        self._client = client
        self.model = model
        self.logger = logger or logging.getLogger(__name__)

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=get_openai_api_key())
        return self._client

    async def generate(
        self,
        concepts: Sequence[Concept],
        question_type: str,
        difficulty: str,
        quantity: int,
        special_instructions: Optional[str] = None,
    ) -> list[GeneratedQuestion]:
        if quantity <= 0 or not concepts:
            return []

        prompt = format_generation_prompt(
            question_type=question_type,
            quantity=quantity,
            concept_lines=[f"{c.name}: {c.description}" for c in concepts],
            difficulty=difficulty,
            special_instructions=special_instructions or "",
        )

        try:
            completion = await self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format=AIQuestionBatch,
            )
        except Exception as e:
            raise QuestionGenerationError(f"OpenAI request failed for {question_type}: {e}") from e

        batch = completion.choices[0].message.parsed
        if batch is None:
            raise QuestionGenerationError(f"Failed to parse structured output for {question_type}")

        questions = []
        for raw in batch.questions[:quantity]:
            question = self._to_generated_question(raw, concepts, question_type, difficulty)
            if question is not None and is_valid_question_for_type(question):
                questions.append(question)
            else:
                self.logger.debug("[GENERATE] Dropped invalid %s question", question_type)

        self.logger.info(
            "[GENERATE] %d/%d valid %s questions", len(questions), len(batch.questions), question_type
        )
        return questions

    @staticmethod
    def _to_generated_question(
        raw: AIGeneratedQuestion,
        concepts: Sequence[Concept],
        question_type: str,
        difficulty: str
    ) -> Optional[GeneratedQuestion]:
        text = raw.question.strip()
        answer = raw.correct_answer.strip()
        if not text or not answer:
            return None

        return GeneratedQuestion(
            question=text,
            correct_answer=answer,
            question_type=question_type,
            difficulty=difficulty,
            target_concepts=map_concept_names_to_ids(raw.concept_names, concepts),
            options=raw.options,
        )

"""
Pydantic models for the Polish practice engine.

These models define the structure of the MongoDB documents (concepts,
per-user progress, the question bank, groups and course mappings) and the
structured output returned by the question generator.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_question_id() -> str:
    """Generate a unique question id (UUID4)."""
    return str(uuid.uuid4())


class CEFRLevel(str, Enum):
    """Common European Framework of Reference for Languages levels."""
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"


# Ordered from easiest to hardest
CEFR_ORDER = [level.value for level in CEFRLevel]


class ConceptCategory(str, Enum):
    """Top-level concept category."""
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"


class PracticeMode(str, Enum):
    """How questions are provisioned for a session."""
    NORMAL = "normal"       # Fresh and lightly used questions first
    PREVIOUS = "previous"   # Revisit questions the learner has already answered
    DRILL = "drill"         # Strict concept-set drill


class QuestionSource(str, Enum):
    """Where a question bank entry came from."""
    MANUAL = "manual"
    GENERATED = "generated"
    MOMENTARY = "momentary"  # Generated on demand to fill a shortfall


class QuestionType(str, Enum):
    """Supported question formats."""
    BASIC_CLOZE = "basic_cloze"
    MULTI_CLOZE = "multi_cloze"
    VOCAB_CHOICE = "vocab_choice"
    MULTI_SELECT = "multi_select"
    CONJUGATION_TABLE = "conjugation_table"
    CASE_TRANSFORM = "case_transform"
    SENTENCE_TRANSFORM = "sentence_transform"
    WORD_ARRANGEMENT = "word_arrangement"
    TRANSLATION_PL = "translation_pl"
    TRANSLATION_EN = "translation_en"
    AUDIO_COMPREHENSION = "audio_comprehension"
    VISUAL_VOCABULARY = "visual_vocabulary"
    DIALOGUE_COMPLETE = "dialogue_complete"
    ASPECT_PAIRS = "aspect_pairs"
    DIMINUTIVE_FORMS = "diminutive_forms"
    SCENARIO_RESPONSE = "scenario_response"
    CULTURAL_CONTEXT = "cultural_context"
    Q_A = "q_a"


# Types generated on demand when the bank runs short
MOMENTARY_QUESTION_TYPES = [
    QuestionType.BASIC_CLOZE,
    QuestionType.MULTI_CLOZE,
    QuestionType.VOCAB_CHOICE,
    QuestionType.MULTI_SELECT,
]

# Types that are unusable without at least two options
CHOICE_QUESTION_TYPES = {
    QuestionType.VOCAB_CHOICE.value,
    QuestionType.MULTI_SELECT.value,
}


class GroupType(str, Enum):
    """Kind of concepts a group collects."""
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    MIXED = "mixed"


# ---- Concepts ----

class Concept(BaseModel):
    """A single grammar or vocabulary learning unit."""
    id: str = Field(..., description="Stable concept identifier")
    name: str = Field(..., description="Display name, e.g. 'Genitive case'")
    category: ConceptCategory
    description: str = ""
    examples: list[str] = Field(default_factory=list, description="Ordered example sentences")
    difficulty: CEFRLevel = CEFRLevel.A1
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True

    class Config:
        use_enum_values = True  # Store enum values as strings in MongoDB
        validate_default = True


class ConceptProgress(BaseModel):
    """
    Per-user memory state for one concept.

    Created lazily on first selection or first answer and only mutated by
    the SRS update path. Never deleted.
    """
    user_id: str
    concept_id: str
    mastery_level: float = Field(default=0.0, ge=0.0, le=1.0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    total_attempts: int = Field(default=0, ge=0)
    consecutive_correct: int = Field(default=0, ge=0)
    easiness_factor: float = Field(default=2.5, ge=1.3, le=2.5)
    interval_days: int = Field(default=1, ge=1, le=365)
    last_practiced: Optional[datetime] = None
    next_review: datetime = Field(default_factory=_utc_now)
    is_active: bool = True


# ---- Question bank ----

class QuestionBankEntry(BaseModel):
    """A stored question with its usage statistics."""
    id: str = Field(default_factory=generate_question_id)
    question: str
    correct_answer: str
    question_type: QuestionType
    target_concepts: list[str] = Field(default_factory=list)
    difficulty: CEFRLevel = CEFRLevel.A1
    times_used: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    last_used: Optional[datetime] = None
    created_date: datetime = Field(default_factory=_utc_now)
    is_active: bool = True
    source: QuestionSource = QuestionSource.MANUAL
    options: Optional[list[str]] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        use_enum_values = True
        validate_default = True


class GeneratedQuestion(BaseModel):
    """A question returned by the generator, before it is persisted."""
    question: str = Field(..., description="Question text; cloze gaps are written as _____")
    correct_answer: str = Field(..., description="The expected answer")
    question_type: QuestionType
    difficulty: CEFRLevel = CEFRLevel.A1
    target_concepts: list[str] = Field(default_factory=list)
    options: Optional[list[str]] = Field(None, description="Answer options for choice questions")
    audio_url: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        use_enum_values = True
        validate_default = True


# ---- Groups and course mappings ----

class ConceptGroup(BaseModel):
    """A named set of related concepts."""
    id: str
    name: str
    description: str = ""
    member_concepts: list[str] = Field(default_factory=list)
    group_type: GroupType = GroupType.MIXED
    parent_group: Optional[str] = None
    child_groups: list[str] = Field(default_factory=list)
    level: int = 1
    difficulty: Optional[CEFRLevel] = None
    is_active: bool = True

    class Config:
        use_enum_values = True
        validate_default = True


class CourseConcept(BaseModel):
    """Mapping from a course to a concept extracted from its content."""
    course_id: int
    concept_id: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    is_active: bool = True
    source_content: Optional[str] = None


# ---- AI structured output ----

class AIGeneratedQuestion(BaseModel):
    """
    One question as returned by the LLM.

    All fields are required for structured outputs; optional values come
    back as null.
    """
    question: str = Field(..., description="Question text; cloze gaps are written as _____")
    correct_answer: str
    options: Optional[list[str]] = Field(..., description="Answer options, or null for open questions")
    concept_names: list[str] = Field(..., description="Names of the target concepts this question practices")


class AIQuestionBatch(BaseModel):
    """Structured output for one generation request."""
    questions: list[AIGeneratedQuestion]

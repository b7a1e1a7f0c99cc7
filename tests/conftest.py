import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from polish_trainer.engine import PracticeEngine
from polish_trainer.errors import QuestionGenerationError, StoreUnavailableError
from polish_trainer.questions.generator import QuestionGenerator
from polish_trainer.repos.interfaces import (
    ConceptGroupStore,
    ConceptProgressStore,
    ConceptStore,
    CourseConceptStore,
    QuestionBankStore,
)
from polish_trainer.schemas import (
    CHOICE_QUESTION_TYPES,
    Concept,
    ConceptGroup,
    ConceptProgress,
    CourseConcept,
    GeneratedQuestion,
    QuestionBankEntry,
    QuestionType,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


# ---- Builders ----

def make_concept(concept_id, name=None, category="grammar", difficulty="A1", **kwargs) -> Concept:
    return Concept(
        id=concept_id,
        name=name or concept_id.replace("_", " ").title(),
        category=category,
        difficulty=difficulty,
        description=kwargs.pop("description", f"About {concept_id}"),
        **kwargs,
    )


def make_progress(concept_id, user_id="u1", next_review=NOW, **kwargs) -> ConceptProgress:
    return ConceptProgress(user_id=user_id, concept_id=concept_id, next_review=next_review, **kwargs)


def make_question(question_id, targets, source="manual", question_type="q_a", **kwargs) -> QuestionBankEntry:
    return QuestionBankEntry(
        id=question_id,
        question=kwargs.pop("question", f"Question {question_id}"),
        correct_answer=kwargs.pop("correct_answer", "tak"),
        question_type=question_type,
        target_concepts=list(targets),
        source=source,
        **kwargs,
    )


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


# ---- In-memory stores ----

def _sort_value(value):
    # None sorts before everything else, as in MongoDB
    return (value is not None, value)


def apply_sort(rows: list, sort=None, limit: Optional[int] = None) -> list:
    rows = list(rows)
    for field, direction in reversed(list(sort or [])):
        rows.sort(key=lambda row: _sort_value(getattr(row, field)), reverse=direction < 0)
    if limit:
        rows = rows[:limit]
    return rows


class FakeConceptStore(ConceptStore):
    def __init__(self, concepts: Sequence[Concept] = ()):
        self.concepts = {c.id: c for c in concepts}

    async def find(
        self,
        ids=None,
        categories=None,
        difficulty=None,
        exclude_ids=None,
        active_only=True,
        sort=None,
        limit=None,
    ):
        rows = [
            c for c in self.concepts.values()
            if (not active_only or c.is_active)
            and (ids is None or c.id in ids)
            and (not categories or c.category in categories)
            and (not difficulty or c.difficulty == difficulty)
            and (not exclude_ids or c.id not in exclude_ids)
        ]
        return apply_sort(rows, sort, limit)

    async def count(self, active_only=True):
        return len([c for c in self.concepts.values() if not active_only or c.is_active])


class FakeProgressStore(ConceptProgressStore):
    def __init__(self, rows: Sequence[ConceptProgress] = ()):
        self.rows = {(r.user_id, r.concept_id): r for r in rows}
        self.saves = 0

    async def find_one(self, user_id, concept_id):
        row = self.rows.get((user_id, concept_id))
        return row.model_copy(deep=True) if row is not None else None

    async def find(
        self,
        user_id,
        concept_ids=None,
        next_review_lte=None,
        next_review_lt=None,
        last_practiced_gte=None,
        active_only=True,
        sort=None,
    ):
        rows = [
            r.model_copy(deep=True) for r in self.rows.values()
            if r.user_id == user_id
            and (not active_only or r.is_active)
            and (concept_ids is None or r.concept_id in concept_ids)
            and (next_review_lte is None or r.next_review <= next_review_lte)
            and (next_review_lt is None or r.next_review < next_review_lt)
            and (last_practiced_gte is None or (
                r.last_practiced is not None and r.last_practiced >= last_practiced_gte
            ))
        ]
        return apply_sort(rows, sort)

    async def save(self, progress):
        self.saves += 1
        self.rows[(progress.user_id, progress.concept_id)] = progress.model_copy(deep=True)
        return progress


class FakeQuestionStore(QuestionBankStore):
    def __init__(self, questions: Sequence[QuestionBankEntry] = ()):
        self.questions = {q.id: q for q in questions}
        self.created: list[QuestionBankEntry] = []

    async def find(
        self,
        target_concepts=None,
        sources=None,
        min_times_used=None,
        active_only=True,
        sort=None,
        limit=None,
    ):
        rows = [
            q.model_copy(deep=True) for q in self.questions.values()
            if (not active_only or q.is_active)
            and (target_concepts is None or set(q.target_concepts) & set(target_concepts))
            and (sources is None or q.source in sources)
            and (min_times_used is None or q.times_used >= min_times_used)
        ]
        return apply_sort(rows, sort, limit)

    async def find_one(self, question_id):
        question = self.questions.get(question_id)
        return question.model_copy(deep=True) if question is not None else None

    async def create(self, entry):
        self.questions[entry.id] = entry.model_copy(deep=True)
        self.created.append(entry)
        return entry

    async def update_one(self, question_id, changes: dict[str, Any]):
        question = self.questions.get(question_id)
        if question is None:
            return False
        self.questions[question_id] = question.model_copy(update=changes)
        return True

    async def count(self, active_only=True):
        return len([q for q in self.questions.values() if not active_only or q.is_active])


class FakeGroupStore(ConceptGroupStore):
    def __init__(self, groups: Sequence[ConceptGroup] = ()):
        self.groups = {g.id: g for g in groups}

    async def find(self, member_of=None, ids=None, active_only=True):
        return [
            g for g in self.groups.values()
            if (not active_only or g.is_active)
            and (member_of is None or set(g.member_concepts) & set(member_of))
            and (ids is None or g.id in ids)
        ]

    async def find_one(self, group_id, active_only=True):
        group = self.groups.get(group_id)
        if group is None or (active_only and not group.is_active):
            return None
        return group


class FakeCourseStore(CourseConceptStore):
    def __init__(self, mappings: Sequence[CourseConcept] = ()):
        self.mappings = list(mappings)

    async def find(self, course_ids, active_only=True, limit=None):
        rows = [
            m for m in self.mappings
            if m.course_id in course_ids and (not active_only or m.is_active)
        ]
        return apply_sort(rows, [("confidence", -1)], limit)


def break_store(store, *methods):
    """Make the named store methods raise StoreUnavailableError."""
    async def fail(*args, **kwargs):
        raise StoreUnavailableError("store offline")

    for name in methods:
        setattr(store, name, fail)
    return store


# ---- Generator ----

def valid_generated_question(question_type, concepts, difficulty="A1", index=0) -> GeneratedQuestion:
    options = None
    text = f"Generated {question_type} #{index}"
    if question_type in (QuestionType.BASIC_CLOZE.value, QuestionType.MULTI_CLOZE.value):
        text = f"Ala ma _____ ({index})"
    if question_type in CHOICE_QUESTION_TYPES:
        options = ["kota", "psa", "rybę"]
    return GeneratedQuestion(
        question=text,
        correct_answer="kota",
        question_type=question_type,
        difficulty=difficulty,
        target_concepts=[concepts[0].id],
        options=options,
    )


class FakeGenerator(QuestionGenerator):
    """Returns valid questions unless told otherwise."""

    def __init__(self, outputs=None, failing_types=()):
        self.outputs = outputs or {}
        self.failing_types = set(failing_types)
        self.calls: list[dict] = []

    async def generate(self, concepts, question_type, difficulty, quantity, special_instructions=None):
        self.calls.append({
            "concept_ids": [c.id for c in concepts],
            "question_type": question_type,
            "difficulty": difficulty,
            "quantity": quantity,
            "special_instructions": special_instructions,
        })
        if question_type in self.failing_types:
            raise QuestionGenerationError(f"{question_type} unavailable")
        if question_type in self.outputs:
            return list(self.outputs[question_type])
        return [
            valid_generated_question(question_type, concepts, difficulty, i)
            for i in range(quantity)
        ]


# ---- Fixtures ----

@pytest.fixture
def logger():
    return logging.getLogger("polish_trainer.tests")


@pytest.fixture
def concepts():
    return [
        make_concept("genitive", "Genitive case", "grammar", "A1", examples=["Nie ma kota", "Szklanka wody"]),
        make_concept("aspect", "Verb aspect", "grammar", "A2"),
        make_concept("food", "Food vocabulary", "vocabulary", "A1", examples=["chleb", "masło"]),
        make_concept("family", "Family members", "vocabulary", "A1"),
        make_concept("instrumental", "Instrumental case", "grammar", "B1"),
    ]


@pytest.fixture
def groups():
    return [
        ConceptGroup(id="cases", name="Noun cases", member_concepts=["genitive", "instrumental"], group_type="grammar"),
        ConceptGroup(id="home", name="At home", member_concepts=["food", "family"], group_type="vocabulary"),
    ]


@pytest.fixture
def concept_store(concepts):
    return FakeConceptStore(concepts)


@pytest.fixture
def progress_store():
    return FakeProgressStore()


@pytest.fixture
def question_store():
    return FakeQuestionStore()


@pytest.fixture
def group_store(groups):
    return FakeGroupStore(groups)


@pytest.fixture
def course_store():
    return FakeCourseStore([
        CourseConcept(course_id=7, concept_id="food", confidence=0.6),
        CourseConcept(course_id=7, concept_id="genitive", confidence=0.9),
        CourseConcept(course_id=7, concept_id="family", confidence=0.3, is_active=False),
    ])


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def engine(concept_store, progress_store, question_store, group_store, course_store, generator):
    return PracticeEngine(
        concept_store=concept_store,
        progress_store=progress_store,
        question_store=question_store,
        group_store=group_store,
        course_store=course_store,
        generator=generator,
    )

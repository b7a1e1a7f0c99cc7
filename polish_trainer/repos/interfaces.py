"""
Store interfaces used by the practice engine.

Every component talks to persistence through these abstract classes so the
engine can run against MongoDB in production and in-memory fakes in tests.
All methods are coroutines. Filters are keyword arguments; None means
"no filter".

Sort specifications are lists of (field, direction) pairs where direction is
pymongo.ASCENDING (1) or pymongo.DESCENDING (-1). Missing/None values sort
first when ascending, as in MongoDB.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from polish_trainer.schemas import (
    Concept,
    ConceptGroup,
    ConceptProgress,
    CourseConcept,
    QuestionBankEntry,
)

SortSpec = Sequence[tuple[str, int]]


class ConceptStore(ABC):
    """Read access to the concept catalogue."""

    @abstractmethod
    async def find(
        self,
        ids: Optional[Sequence[str]] = None,
        categories: Optional[Sequence[str]] = None,
        difficulty: Optional[str] = None,
        exclude_ids: Optional[Sequence[str]] = None,
        active_only: bool = True,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> list[Concept]:
        """Find concepts matching all given filters."""

    @abstractmethod
    async def count(self, active_only: bool = True) -> int:
        """Count concepts."""


class ConceptProgressStore(ABC):
    """Per-user progress rows, keyed by (user_id, concept_id)."""

    @abstractmethod
    async def find_one(self, user_id: str, concept_id: str) -> Optional[ConceptProgress]:
        """Load one progress row."""

    @abstractmethod
    async def find(
        self,
        user_id: str,
        concept_ids: Optional[Sequence[str]] = None,
        next_review_lte: Optional[datetime] = None,
        next_review_lt: Optional[datetime] = None,
        last_practiced_gte: Optional[datetime] = None,
        active_only: bool = True,
        sort: Optional[SortSpec] = None,
    ) -> list[ConceptProgress]:
        """Find progress rows for one user."""

    @abstractmethod
    async def save(self, progress: ConceptProgress) -> ConceptProgress:
        """Insert or replace the row for (user_id, concept_id)."""


class QuestionBankStore(ABC):
    """Stored questions and their usage statistics."""

    @abstractmethod
    async def find(
        self,
        target_concepts: Optional[Sequence[str]] = None,
        sources: Optional[Sequence[str]] = None,
        min_times_used: Optional[int] = None,
        active_only: bool = True,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> list[QuestionBankEntry]:
        """
        Find questions.

        target_concepts matches entries sharing at least one concept id.
        min_times_used keeps entries with times_used >= the value.
        """

    @abstractmethod
    async def find_one(self, question_id: str) -> Optional[QuestionBankEntry]:
        """Load one question by id."""

    @abstractmethod
    async def create(self, entry: QuestionBankEntry) -> QuestionBankEntry:
        """Persist a new question."""

    @abstractmethod
    async def update_one(self, question_id: str, changes: dict[str, Any]) -> bool:
        """Set fields on one question. Returns False when the id is unknown."""

    @abstractmethod
    async def count(self, active_only: bool = True) -> int:
        """Count questions."""


class ConceptGroupStore(ABC):
    """Named groups of concepts."""

    @abstractmethod
    async def find(
        self,
        member_of: Optional[Sequence[str]] = None,
        ids: Optional[Sequence[str]] = None,
        active_only: bool = True,
    ) -> list[ConceptGroup]:
        """
        Find groups.

        member_of matches groups containing at least one of the concept ids.
        """

    @abstractmethod
    async def find_one(self, group_id: str, active_only: bool = True) -> Optional[ConceptGroup]:
        """Load one group by id."""


class CourseConceptStore(ABC):
    """Course to concept mappings."""

    @abstractmethod
    async def find(
        self,
        course_ids: Sequence[int],
        active_only: bool = True,
        limit: Optional[int] = None,
    ) -> list[CourseConcept]:
        """Mappings for the given courses, highest confidence first."""

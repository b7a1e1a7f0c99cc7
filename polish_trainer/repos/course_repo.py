"""
MongoDB repository for course to concept mappings.
"""

from __future__ import annotations

from typing import Optional, Sequence

from pymongo import DESCENDING

from polish_trainer.repos.interfaces import CourseConceptStore
from polish_trainer.repos.mongo import COURSE_CONCEPTS, MongoRepository
from polish_trainer.schemas import CourseConcept


def build_course_concept_query(course_ids: Sequence[int], active_only: bool = True) -> dict:
    """Build the MongoDB filter for course mappings."""
    query: dict = {"course_id": {"$in": list(course_ids)}}
    if active_only:
        query["is_active"] = True
    return query


class MongoCourseConceptStore(MongoRepository, CourseConceptStore):
    collection_name = COURSE_CONCEPTS

    async def find(
        self,
        course_ids: Sequence[int],
        active_only: bool = True,
        limit: Optional[int] = None,
    ) -> list[CourseConcept]:
        docs = await self._find_docs(
            build_course_concept_query(course_ids, active_only),
            sort=[("confidence", DESCENDING)],
            limit=limit,
        )
        return [CourseConcept.model_validate(doc) for doc in docs]

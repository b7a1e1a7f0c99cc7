"""
MongoDB repository for per-user concept progress.

Rows are keyed by (user_id, concept_id) and written with an upsert, so the
last writer wins when two answers for the same concept race.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from polish_trainer.repos.interfaces import ConceptProgressStore, SortSpec
from polish_trainer.repos.mongo import CONCEPT_PROGRESS, MongoRepository
from polish_trainer.schemas import ConceptProgress


def build_progress_query(
    user_id: str,
    concept_ids: Optional[Sequence[str]] = None,
    next_review_lte: Optional[datetime] = None,
    next_review_lt: Optional[datetime] = None,
    last_practiced_gte: Optional[datetime] = None,
    active_only: bool = True
) -> dict:
    """Build the MongoDB filter for a progress lookup."""
    query: dict = {"user_id": user_id}
    if active_only:
        query["is_active"] = True
    if concept_ids is not None:
        query["concept_id"] = {"$in": list(concept_ids)}

    review_filter: dict = {}
    if next_review_lte is not None:
        review_filter["$lte"] = next_review_lte
    if next_review_lt is not None:
        review_filter["$lt"] = next_review_lt
    if review_filter:
        query["next_review"] = review_filter

    if last_practiced_gte is not None:
        query["last_practiced"] = {"$gte": last_practiced_gte}

    return query


class MongoConceptProgressStore(MongoRepository, ConceptProgressStore):
    collection_name = CONCEPT_PROGRESS

    async def find_one(self, user_id: str, concept_id: str) -> Optional[ConceptProgress]:
        doc = await self.collection.find_one({"user_id": user_id, "concept_id": concept_id})
        if doc is None:
            return None
        return ConceptProgress.model_validate(doc)

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
        query = build_progress_query(
            user_id,
            concept_ids=concept_ids,
            next_review_lte=next_review_lte,
            next_review_lt=next_review_lt,
            last_practiced_gte=last_practiced_gte,
            active_only=active_only,
        )
        docs = await self._find_docs(query, sort=sort)
        return [ConceptProgress.model_validate(doc) for doc in docs]

    async def save(self, progress: ConceptProgress) -> ConceptProgress:
        await self.collection.replace_one(
            {"user_id": progress.user_id, "concept_id": progress.concept_id},
            progress.model_dump(),
            upsert=True,
        )
        return progress

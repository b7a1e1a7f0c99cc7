"""
MongoDB repository for concepts.
"""

from __future__ import annotations

from typing import Optional, Sequence

from polish_trainer.repos.interfaces import ConceptStore, SortSpec
from polish_trainer.repos.mongo import CONCEPTS, MongoRepository
from polish_trainer.schemas import Concept


def build_concept_query(
    ids: Optional[Sequence[str]] = None,
    categories: Optional[Sequence[str]] = None,
    difficulty: Optional[str] = None,
    exclude_ids: Optional[Sequence[str]] = None,
    active_only: bool = True
) -> dict:
    """
    Build the MongoDB filter for a concept lookup.

    Example:
        >>> build_concept_query(ids=["c1"], exclude_ids=["c2"])
        {'is_active': True, 'id': {'$in': ['c1'], '$nin': ['c2']}}
    """
    query: dict = {}
    if active_only:
        query["is_active"] = True

    id_filter: dict = {}
    if ids is not None:
        id_filter["$in"] = list(ids)
    if exclude_ids:
        id_filter["$nin"] = list(exclude_ids)
    if id_filter:
        query["id"] = id_filter

    if categories:
        query["category"] = {"$in": list(categories)}
    if difficulty:
        query["difficulty"] = difficulty

    return query


class MongoConceptStore(MongoRepository, ConceptStore):
    collection_name = CONCEPTS

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
        query = build_concept_query(ids, categories, difficulty, exclude_ids, active_only)
        docs = await self._find_docs(query, sort=sort, limit=limit)
        return [Concept.model_validate(doc) for doc in docs]

    async def count(self, active_only: bool = True) -> int:
        query = {"is_active": True} if active_only else {}
        return await self.collection.count_documents(query)

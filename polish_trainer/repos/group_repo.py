"""
MongoDB repository for concept groups.
"""

from __future__ import annotations

from typing import Optional, Sequence

from polish_trainer.repos.interfaces import ConceptGroupStore
from polish_trainer.repos.mongo import CONCEPT_GROUPS, MongoRepository
from polish_trainer.schemas import ConceptGroup


def build_group_query(
    member_of: Optional[Sequence[str]] = None,
    ids: Optional[Sequence[str]] = None,
    active_only: bool = True
) -> dict:
    """Build the MongoDB filter for a group lookup."""
    query: dict = {}
    if active_only:
        query["is_active"] = True
    if member_of is not None:
        query["member_concepts"] = {"$in": list(member_of)}
    if ids is not None:
        query["id"] = {"$in": list(ids)}
    return query


class MongoConceptGroupStore(MongoRepository, ConceptGroupStore):
    collection_name = CONCEPT_GROUPS

    async def find(
        self,
        member_of: Optional[Sequence[str]] = None,
        ids: Optional[Sequence[str]] = None,
        active_only: bool = True,
    ) -> list[ConceptGroup]:
        docs = await self._find_docs(build_group_query(member_of, ids, active_only))
        return [ConceptGroup.model_validate(doc) for doc in docs]

    async def find_one(self, group_id: str, active_only: bool = True) -> Optional[ConceptGroup]:
        query = build_group_query(ids=[group_id], active_only=active_only)
        doc = await self.collection.find_one(query)
        if doc is None:
            return None
        return ConceptGroup.model_validate(doc)

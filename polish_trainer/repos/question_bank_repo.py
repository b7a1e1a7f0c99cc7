"""
MongoDB repository for the question bank.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from polish_trainer.repos.interfaces import QuestionBankStore, SortSpec
from polish_trainer.repos.mongo import QUESTION_BANK, MongoRepository
from polish_trainer.schemas import QuestionBankEntry


def build_question_query(
    target_concepts: Optional[Sequence[str]] = None,
    sources: Optional[Sequence[str]] = None,
    min_times_used: Optional[int] = None,
    active_only: bool = True
) -> dict:
    """
    Build the MongoDB filter for a question lookup.

    Example:
        >>> build_question_query(["c1"], sources=["manual"], min_times_used=1)
        {'is_active': True, 'target_concepts': {'$in': ['c1']}, 'source': {'$in': ['manual']}, 'times_used': {'$gte': 1}}
    """
    query: dict = {}
    if active_only:
        query["is_active"] = True
    if target_concepts is not None:
        query["target_concepts"] = {"$in": list(target_concepts)}
    if sources is not None:
        query["source"] = {"$in": list(sources)}
    if min_times_used is not None:
        query["times_used"] = {"$gte": min_times_used}
    return query


class MongoQuestionBankStore(MongoRepository, QuestionBankStore):
    collection_name = QUESTION_BANK

    async def find(
        self,
        target_concepts: Optional[Sequence[str]] = None,
        sources: Optional[Sequence[str]] = None,
        min_times_used: Optional[int] = None,
        active_only: bool = True,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> list[QuestionBankEntry]:
        query = build_question_query(target_concepts, sources, min_times_used, active_only)
        docs = await self._find_docs(query, sort=sort, limit=limit)
        return [QuestionBankEntry.model_validate(doc) for doc in docs]

    async def find_one(self, question_id: str) -> Optional[QuestionBankEntry]:
        doc = await self.collection.find_one({"id": question_id})
        if doc is None:
            return None
        return QuestionBankEntry.model_validate(doc)

    async def create(self, entry: QuestionBankEntry) -> QuestionBankEntry:
        await self.collection.insert_one(entry.model_dump())
        return entry

    async def update_one(self, question_id: str, changes: dict[str, Any]) -> bool:
        result = await self.collection.update_one({"id": question_id}, {"$set": changes})
        return result.matched_count > 0

    async def count(self, active_only: bool = True) -> int:
        query = {"is_active": True} if active_only else {}
        return await self.collection.count_documents(query)

"""
Persistence layer for the practice engine.

Abstract store interfaces plus their MongoDB implementations.
"""

from polish_trainer.repos.interfaces import (
    ConceptStore,
    ConceptProgressStore,
    QuestionBankStore,
    ConceptGroupStore,
    CourseConceptStore,
)
from polish_trainer.repos.mongo import get_client, get_database, close_client, ensure_indexes
from polish_trainer.repos.concept_repo import MongoConceptStore
from polish_trainer.repos.progress_repo import MongoConceptProgressStore
from polish_trainer.repos.question_bank_repo import MongoQuestionBankStore
from polish_trainer.repos.group_repo import MongoConceptGroupStore
from polish_trainer.repos.course_repo import MongoCourseConceptStore


__all__ = [
    # Interfaces
    "ConceptStore",
    "ConceptProgressStore",
    "QuestionBankStore",
    "ConceptGroupStore",
    "CourseConceptStore",

    # Connection
    "get_client",
    "get_database",
    "close_client",
    "ensure_indexes",

    # MongoDB stores
    "MongoConceptStore",
    "MongoConceptProgressStore",
    "MongoQuestionBankStore",
    "MongoConceptGroupStore",
    "MongoCourseConceptStore",
]

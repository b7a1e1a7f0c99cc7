from conftest import NOW
from polish_trainer.repos.concept_repo import build_concept_query
from polish_trainer.repos.course_repo import build_course_concept_query
from polish_trainer.repos.group_repo import build_group_query
from polish_trainer.repos.progress_repo import build_progress_query
from polish_trainer.repos.question_bank_repo import build_question_query
from polish_trainer.repos.mongo import INDEXES


def test_concept_query():
    assert build_concept_query() == {"is_active": True}
    assert build_concept_query(
        ids=["a"], categories=["grammar"], difficulty="A1", exclude_ids=["b"], active_only=False
    ) == {
        "id": {"$in": ["a"], "$nin": ["b"]},
        "category": {"$in": ["grammar"]},
        "difficulty": "A1",
    }


def test_empty_id_list_matches_nothing():
    assert build_concept_query(ids=[]) == {"is_active": True, "id": {"$in": []}}


def test_progress_query():
    assert build_progress_query("u1", next_review_lte=NOW) == {
        "user_id": "u1",
        "is_active": True,
        "next_review": {"$lte": NOW},
    }
    assert build_progress_query("u1", concept_ids=["a"], last_practiced_gte=NOW, active_only=False) == {
        "user_id": "u1",
        "concept_id": {"$in": ["a"]},
        "last_practiced": {"$gte": NOW},
    }


def test_question_query():
    assert build_question_query(["a"], sources=["manual"], min_times_used=1) == {
        "is_active": True,
        "target_concepts": {"$in": ["a"]},
        "source": {"$in": ["manual"]},
        "times_used": {"$gte": 1},
    }
    assert build_question_query(active_only=False) == {}


def test_group_and_course_queries():
    assert build_group_query(member_of=["a"]) == {"is_active": True, "member_concepts": {"$in": ["a"]}}
    assert build_group_query(ids=["g"], active_only=False) == {"id": {"$in": ["g"]}}
    assert build_course_concept_query([3]) == {"course_id": {"$in": [3]}, "is_active": True}


def test_every_collection_has_indexes():
    assert set(INDEXES) == {
        "concepts", "concept_progress", "question_bank", "concept_groups", "course_concepts",
    }

import asyncio
from datetime import timedelta

import pytest

from conftest import NOW, FakeProgressStore, FakeQuestionStore, days_ago, make_progress, make_question
from polish_trainer.analytics import PracticeStats, build_practice_stats
from polish_trainer.analytics.metrics import compute_average_mastery, filter_practiced_since
from polish_trainer.analytics.queries import progress_to_df
from polish_trainer.srs import ProgressTracker


@pytest.fixture
def progress_rows():
    return [
        make_progress("genitive", mastery_level=0.4, success_rate=0.5,
                      last_practiced=days_ago(2), next_review=days_ago(1)),
        make_progress("food", mastery_level=0.8, success_rate=1.0,
                      last_practiced=days_ago(10), next_review=NOW + timedelta(hours=2)),
        make_progress("aspect", next_review=NOW + timedelta(days=5)),
    ]


def test_practice_stats(concept_store, progress_rows):
    questions = FakeQuestionStore([
        make_question("a", ["genitive"]),
        make_question("b", ["food"]),
        make_question("c", ["food"], source="momentary"),
        make_question("d", ["food"], is_active=False),
    ])
    tracker = ProgressTracker(FakeProgressStore(progress_rows))

    stats = asyncio.run(build_practice_stats("u1", concept_store, questions, tracker, now=NOW))

    assert stats.total_concepts == 5
    assert stats.due_concepts == 2
    assert stats.overdue_concepts == 1
    assert stats.average_mastery == pytest.approx(0.4)
    assert stats.question_bank_size == 3
    assert stats.concepts_with_progress == 3
    assert stats.recent_activity.practice_sessions_this_week == 0
    assert stats.recent_activity.concepts_practiced_this_week == 1
    assert stats.recent_activity.average_accuracy == pytest.approx(0.5)


def test_stats_for_user_without_progress(concept_store):
    tracker = ProgressTracker(FakeProgressStore())

    stats = asyncio.run(build_practice_stats("u1", concept_store, FakeQuestionStore(), tracker, now=NOW))

    assert stats == PracticeStats(total_concepts=5)


def test_progress_dataframe_handles_never_practiced_rows(progress_rows):
    df = progress_to_df(progress_rows)

    assert list(df["concept_id"]) == ["genitive", "food", "aspect"]
    assert df["last_practiced"].isna().sum() == 1
    assert compute_average_mastery(df) == pytest.approx(0.4)
    assert list(filter_practiced_since(df, days_ago(7))["concept_id"]) == ["genitive"]


def test_empty_dataframe():
    df = progress_to_df([])

    assert df.empty
    assert compute_average_mastery(df) == 0.0
    assert filter_practiced_since(df, NOW).empty

import asyncio

import pytest

from conftest import NOW, FakeProgressStore, FakeQuestionStore, break_store, make_progress, make_question
from polish_trainer.errors import SRSCalculationError, StoreUnavailableError
from polish_trainer.performance import PerformanceUpdater, next_success_rate
from polish_trainer.srs import ProgressTracker


@pytest.fixture
def stores():
    questions = FakeQuestionStore([
        make_question("q1", ["genitive", "food", "genitive"], times_used=3, success_rate=2 / 3),
    ])
    progress = FakeProgressStore([make_progress("genitive", consecutive_correct=1, total_attempts=1, success_rate=1.0)])
    return questions, progress


@pytest.fixture
def updater(stores):
    questions, progress = stores
    return PerformanceUpdater(questions, ProgressTracker(progress))


def test_success_rate_is_exact_running_mean():
    assert next_success_rate(0.0, 0, True) == 1.0
    assert next_success_rate(2 / 3, 3, False) == pytest.approx(0.5)
    rate = 0.0
    for times_used, correct in enumerate([True, False, True, True, False]):
        rate = next_success_rate(rate, times_used, correct)
    assert rate == pytest.approx(3 / 5)


def test_update_question_performance(updater, stores):
    questions, _ = stores

    assert asyncio.run(updater.update_question_performance("q1", True, NOW)) is True

    stored = questions.questions["q1"]
    assert stored.times_used == 4
    assert stored.success_rate == pytest.approx(0.75)
    assert stored.last_used == NOW


def test_missing_question_is_reported_not_raised(updater):
    assert asyncio.run(updater.update_question_performance("nope", True, NOW)) is False


def test_record_answer_updates_each_target_once(updater, stores):
    questions, progress = stores
    question = questions.questions["q1"]

    outcome = asyncio.run(updater.record_answer(question, True, 2500, "u1", now=NOW))

    assert outcome.question_updated
    assert [p.concept_id for p in outcome.progress] == ["genitive", "food"]
    assert progress.rows[("u1", "genitive")].interval_days == 6
    assert progress.rows[("u1", "genitive")].total_attempts == 2
    assert progress.rows[("u1", "food")].total_attempts == 1
    assert questions.questions["q1"].times_used == 4


def test_record_answer_rejects_bad_rating_before_writing(updater, stores):
    questions, progress = stores
    question = questions.questions["q1"]

    with pytest.raises(SRSCalculationError):
        asyncio.run(updater.record_answer(question, True, 2500, "u1", difficulty_rating=7, now=NOW))

    assert questions.questions["q1"].times_used == 3
    assert progress.saves == 0


def test_question_store_failure_still_schedules_concepts(updater, stores):
    questions, progress = stores
    question = questions.questions["q1"]
    break_store(questions, "find_one")

    outcome = asyncio.run(updater.record_answer(question, True, 2500, "u1", now=NOW))

    assert outcome.question_updated is False
    assert [p.concept_id for p in outcome.progress] == ["genitive", "food"]
    assert progress.rows[("u1", "genitive")].total_attempts == 2
    assert progress.rows[("u1", "food")].total_attempts == 1


class _FlakyProgressStore(FakeProgressStore):
    """Refuses saves for one concept."""

    def __init__(self, failing_concept):
        super().__init__()
        self.failing_concept = failing_concept

    async def save(self, progress):
        if progress.concept_id == self.failing_concept:
            raise StoreUnavailableError("store offline")
        return await super().save(progress)


def test_one_concept_failure_does_not_block_the_others():
    questions = FakeQuestionStore([make_question("q1", ["genitive", "food", "aspect"])])
    progress = _FlakyProgressStore("food")
    updater = PerformanceUpdater(questions, ProgressTracker(progress))

    outcome = asyncio.run(updater.record_answer(questions.questions["q1"], False, 4000, "u1", now=NOW))

    assert outcome.question_updated
    assert [p.concept_id for p in outcome.progress] == ["genitive", "aspect"]
    assert ("u1", "food") not in progress.rows
    assert progress.rows[("u1", "aspect")].total_attempts == 1

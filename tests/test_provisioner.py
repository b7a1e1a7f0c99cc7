import asyncio

import pytest

from conftest import (
    FakeGenerator,
    FakeQuestionStore,
    break_store,
    days_ago,
    make_progress,
    make_question,
    valid_generated_question,
)
from polish_trainer.context_builder import ContextBuilder
from polish_trainer.questions import QuestionProvisioner
from polish_trainer.schemas import GeneratedQuestion, PracticeMode
from polish_trainer.srs import ProgressTracker


def _provisioner(question_store, concept_store, progress_store, group_store, generator=None):
    return QuestionProvisioner(
        question_store,
        concept_store,
        ProgressTracker(progress_store),
        ContextBuilder(concept_store, group_store),
        generator=generator,
    )


@pytest.fixture
def provisioner(question_store, concept_store, progress_store, group_store, generator):
    return _provisioner(question_store, concept_store, progress_store, group_store, generator)


def _ids(questions):
    return [q.id for q in questions]


# ---- NORMAL ----

def test_bank_questions_first_then_best_momentary(concept_store, progress_store, group_store, generator):
    bank = [
        make_question("g1", ["genitive"], source="generated", times_used=3),
        make_question("g2", ["genitive"], source="generated", times_used=0),
        make_question("man1", ["genitive"], source="manual", times_used=1, success_rate=0.2),
        make_question("man2", ["genitive"], source="manual", times_used=1, success_rate=0.9),
    ]
    momentary = [
        make_question(f"m{i}", ["genitive"], source="momentary", times_used=i // 4, success_rate=(i % 4) / 4)
        for i in range(20)
    ]
    store = FakeQuestionStore(bank + momentary)
    provisioner = _provisioner(store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 10))

    assert _ids(questions) == ["g2", "g1", "man2", "man1", "m3", "m2", "m1", "m0", "m7", "m6"]
    assert generator.calls == []


def test_normal_shortfall_is_generated_across_momentary_types(provisioner, question_store, generator):
    questions = asyncio.run(
        provisioner.get_questions_for_concepts(["genitive", "food"], PracticeMode.NORMAL, 6)
    )

    assert [(c["question_type"], c["quantity"]) for c in generator.calls] == [
        ("basic_cloze", 2), ("multi_cloze", 2), ("vocab_choice", 1), ("multi_select", 1),
    ]
    assert len(questions) == 6
    assert question_store.created == questions
    for question in questions:
        assert question.source == "momentary"
        assert question.times_used == 0
        assert question.success_rate == 0.0
        assert question.target_concepts == ["genitive"]
        assert question.difficulty == "A1"
    assert "TARGET CONCEPTS" in generator.calls[0]["special_instructions"]


def test_generation_uses_highest_concept_level(provisioner, generator):
    asyncio.run(provisioner.get_questions_for_concepts(["food", "instrumental"], PracticeMode.NORMAL, 1))

    assert generator.calls[0]["difficulty"] == "B1"


def test_failing_type_does_not_stop_other_types(question_store, concept_store, progress_store, group_store):
    generator = FakeGenerator(failing_types={"basic_cloze"})
    provisioner = _provisioner(question_store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 6))

    assert len(questions) == 4
    assert {q.question_type for q in questions} == {"multi_cloze", "vocab_choice", "multi_select"}


def test_invalid_and_surplus_generated_questions_are_dropped(
    question_store, concept_store, progress_store, group_store, concepts
):
    no_gap = GeneratedQuestion(question="Brak luki", correct_answer="x", question_type="basic_cloze")
    one_option = GeneratedQuestion(
        question="Wybierz", correct_answer="kot", question_type="vocab_choice", options=["kot"]
    )
    generator = FakeGenerator(outputs={
        "basic_cloze": [no_gap, valid_generated_question("basic_cloze", concepts)],
        "vocab_choice": [one_option],
        "multi_select": [valid_generated_question("multi_select", concepts, index=i) for i in range(3)],
    })
    provisioner = _provisioner(question_store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 6))

    assert [q.question_type for q in questions] == [
        "basic_cloze", "multi_cloze", "multi_cloze", "multi_select",
    ]


def test_save_failure_skips_question(question_store, concept_store, progress_store, group_store, generator):
    break_store(question_store, "create")
    provisioner = _provisioner(question_store, concept_store, progress_store, group_store, generator)

    assert asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 4)) == []


def test_bank_failure_falls_through_to_generation(question_store, concept_store, progress_store, group_store, generator):
    break_store(question_store, "find")
    provisioner = _provisioner(question_store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 4))

    assert len(questions) == 4


def test_no_generator_returns_bank_only(concept_store, progress_store, group_store):
    store = FakeQuestionStore([make_question("man1", ["genitive"])])
    provisioner = _provisioner(store, concept_store, progress_store, group_store)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 5))

    assert _ids(questions) == ["man1"]


def test_normal_without_concepts_returns_newest_questions(concept_store, progress_store, group_store, generator):
    store = FakeQuestionStore([
        make_question("old", ["genitive"], created_date=days_ago(10)),
        make_question("new", ["food"], created_date=days_ago(1)),
        make_question("retired", ["food"], created_date=days_ago(0), is_active=False),
    ])
    provisioner = _provisioner(store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts([], PracticeMode.NORMAL, 5))

    assert _ids(questions) == ["new", "old"]
    assert generator.calls == []


def test_zero_max_questions(provisioner, generator):
    assert asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.NORMAL, 0)) == []
    assert generator.calls == []


# ---- DRILL ----

@pytest.fixture
def drill_store():
    return FakeQuestionStore([
        make_question("q1", ["genitive", "food"]),
        make_question("q2", ["genitive"]),
        make_question("q3", ["aspect"]),
        make_question("q4", []),
        make_question("q5", ["food", "aspect", "instrumental"]),
    ])


def test_multi_concept_drill_rewards_coverage(drill_store, concept_store, progress_store, group_store, generator):
    provisioner = _provisioner(drill_store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive", "food"], PracticeMode.DRILL, 3))

    assert _ids(questions) == ["q1", "q5", "q2"]
    assert generator.calls == []


def test_single_concept_drill_rewards_focus(drill_store, concept_store, progress_store, group_store, generator):
    provisioner = _provisioner(drill_store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.DRILL, 2))

    assert _ids(questions) == ["q2", "q1"]


def test_drill_generation_targets_exact_drill_set(drill_store, concept_store, progress_store, group_store, generator):
    provisioner = _provisioner(drill_store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive", "food"], PracticeMode.DRILL, 5))

    assert _ids(questions)[:3] == ["q1", "q5", "q2"]
    generated = questions[3:]
    assert len(generated) == 2
    for question in generated:
        assert question.target_concepts == ["genitive", "food"]
    assert "DRILL SESSION FOCUS" in generator.calls[0]["special_instructions"]


def test_drill_without_concepts_is_empty(drill_store, concept_store, progress_store, group_store, generator):
    provisioner = _provisioner(drill_store, concept_store, progress_store, group_store, generator)

    assert asyncio.run(provisioner.get_questions_for_concepts([], PracticeMode.DRILL, 5)) == []
    assert generator.calls == []


# ---- PREVIOUS ----

@pytest.fixture
def previous_store():
    return FakeQuestionStore([
        make_question("p1", ["genitive"], times_used=2, last_used=days_ago(1), success_rate=0.5),
        make_question("p2", ["genitive"], times_used=1, last_used=days_ago(5), success_rate=0.9),
        make_question("p3", ["genitive"], times_used=0),
        make_question("p4", ["genitive"], times_used=3, success_rate=0.1),
        make_question("f1", ["food"], times_used=1, last_used=days_ago(2)),
    ])


def test_previous_mode_orders_by_last_use(previous_store, concept_store, progress_store, group_store):
    provisioner = _provisioner(previous_store, concept_store, progress_store, group_store)

    questions = asyncio.run(provisioner.get_questions_for_concepts(["genitive"], PracticeMode.PREVIOUS, 10))

    assert _ids(questions) == ["p4", "p2", "p1"]


def test_previous_without_concepts_prefers_due_concepts(previous_store, concept_store, progress_store, group_store):
    progress_store.rows[("u1", "food")] = make_progress("food", next_review=days_ago(1))
    provisioner = _provisioner(previous_store, concept_store, progress_store, group_store)

    questions = asyncio.run(
        provisioner.get_questions_for_concepts([], PracticeMode.PREVIOUS, 10, user_id="u1")
    )

    assert _ids(questions) == ["f1"]


def test_previous_without_progress_uses_active_concepts(previous_store, concept_store, progress_store, group_store):
    provisioner = _provisioner(previous_store, concept_store, progress_store, group_store)

    questions = asyncio.run(
        provisioner.get_questions_for_concepts([], PracticeMode.PREVIOUS, 10, user_id="u1")
    )

    assert set(_ids(questions)) == {"p1", "p2", "p4", "f1"}


def test_previous_falls_back_to_any_questions(concept_store, progress_store, group_store, generator):
    store = FakeQuestionStore([
        make_question("a", ["genitive"], created_date=days_ago(3)),
        make_question("b", ["food"], created_date=days_ago(1)),
    ])
    provisioner = _provisioner(store, concept_store, progress_store, group_store, generator)

    questions = asyncio.run(
        provisioner.get_questions_for_concepts([], PracticeMode.PREVIOUS, 10, user_id="u1")
    )

    assert _ids(questions) == ["b", "a"]
    assert generator.calls == []

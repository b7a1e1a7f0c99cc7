import asyncio

from scripts.practice_preview import parse_args, select_concepts


def test_course_drill_receives_course_id(engine):
    args = parse_args(["--drill", "course", "--course", "7"])

    selection = asyncio.run(select_concepts(engine, args))

    assert selection.concept_ids == ["genitive", "food"]
    assert dict(selection.priorities) == {"genitive": 1.0, "food": 1.0}


def test_course_without_drill_uses_course_selection(engine):
    args = parse_args(["--course", "7", "--max-concepts", "1"])

    selection = asyncio.run(select_concepts(engine, args))

    assert selection.concept_ids == ["genitive"]
    assert dict(selection.priorities) == {"genitive": 0.9}


def test_group_drill_takes_first_group(engine):
    args = parse_args(["--drill", "group", "--group", "home"])

    selection = asyncio.run(select_concepts(engine, args))

    assert selection.concept_ids == ["food", "family"]

"""
Preview a practice session from the command line.

Prints the selected concepts, the rationale and the questions the engine
would serve. With --generate, shortfalls are filled through OpenAI.

Usage:
    python -m scripts.practice_preview --user default --max-concepts 5
    python -m scripts.practice_preview --drill weakness --mode drill
    python -m scripts.practice_preview --drill course --course 3 --mode drill
    python -m scripts.practice_preview --course 3 --generate
    python -m scripts.practice_preview --stats
"""

import argparse
import asyncio

from polish_trainer import DrillMode, OpenAIQuestionGenerator, PracticeEngine, PracticeMode
from polish_trainer.config import DEFAULT_USER_ID, configure_logging
from polish_trainer.repos.mongo import close_client


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview a practice session")
    parser.add_argument("--user", default=DEFAULT_USER_ID, help="Learner id")
    parser.add_argument("--max-concepts", type=int, default=5)
    parser.add_argument("--max-questions", type=int, default=10)
    parser.add_argument(
        "--mode",
        choices=[m.value for m in PracticeMode],
        default=PracticeMode.NORMAL.value,
        help="Question provisioning mode",
    )
    parser.add_argument("--course", type=int, help="Course id (course selection or drill course)")
    parser.add_argument(
        "--drill", choices=[m.value for m in DrillMode], help="Select concepts for a drill"
    )
    parser.add_argument("--group", action="append", default=[], help="Group id (drill group/groups)")
    parser.add_argument("--generate", action="store_true", help="Generate questions on shortfall")
    parser.add_argument("--stats", action="store_true", help="Print practice statistics only")
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


async def select_concepts(engine: PracticeEngine, args: argparse.Namespace):
    """Run the selection policy the arguments ask for."""
    if args.drill:
        return await engine.select_drill_concepts(
            DrillMode(args.drill),
            args.user,
            course_id=args.course,
            group_id=args.group[0] if args.group else None,
            group_ids=args.group,
            max_concepts=args.max_concepts,
        )
    if args.course is not None:
        return await engine.select_concepts_from_course(args.course, args.max_concepts)
    return await engine.select_practice_concepts_for_user(args.user, args.max_concepts)


async def preview(args: argparse.Namespace) -> None:
    generator = OpenAIQuestionGenerator() if args.generate else None
    engine = PracticeEngine.from_mongo(generator=generator)

    try:
        if args.stats:
            stats = await engine.get_practice_stats(args.user)
            print(f"Concepts: {stats.total_concepts} ({stats.concepts_with_progress} with progress)")
            print(f"Due: {stats.due_concepts}, overdue: {stats.overdue_concepts}")
            print(f"Average mastery: {stats.average_mastery:.0%}")
            print(f"Question bank: {stats.question_bank_size}")
            recent = stats.recent_activity
            print(
                f"This week: {recent.concepts_practiced_this_week} concepts, "
                f"{recent.average_accuracy:.0%} accuracy"
            )
            return

        selection = await select_concepts(engine, args)

        print("=" * 60)
        print(selection.rationale)
        print("=" * 60)
        for concept in selection.concepts:
            priority = selection.priorities.get(concept.id)
            suffix = f" (priority {priority:.2f})" if priority is not None else ""
            print(f"  - [{concept.difficulty}] {concept.name}{suffix}")

        questions = await engine.get_questions_for_concepts(
            selection.concept_ids, PracticeMode(args.mode), args.max_questions, args.user
        )
        print(f"\n{len(questions)} questions:")
        for i, question in enumerate(questions, 1):
            print(f"{i:2d}. [{question.question_type}/{question.source}] {question.question}")
    finally:
        await close_client()


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    asyncio.run(preview(args))


if __name__ == "__main__":
    main()

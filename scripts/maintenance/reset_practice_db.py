"""
Reset practice progress.

DANGEROUS: This deletes all concept progress and every momentary question!
Manual and generated bank questions are kept. Only use when you want to
start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_practice_db
"""

import asyncio

from polish_trainer.config import configure_logging
from polish_trainer.repos.mongo import CONCEPT_PROGRESS, QUESTION_BANK, close_client, get_database
from polish_trainer.schemas import QuestionSource


async def reset_practice_db() -> tuple[int, int]:
    """Delete progress rows and momentary questions. Returns the deleted counts."""
    db = get_database()
    try:
        progress = await db[CONCEPT_PROGRESS].delete_many({})
        momentary = await db[QUESTION_BANK].delete_many({"source": QuestionSource.MOMENTARY.value})
        return progress.deleted_count, momentary.deleted_count
    finally:
        await close_client()


def main():
    configure_logging()

    print("=" * 60)
    print("WARNING: Reset Practice Database")
    print("=" * 60)
    print()
    print("This will DELETE:")
    print("  - All concept progress (mastery, intervals, review dates)")
    print("  - All momentary questions generated during practice")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        progress_count, question_count = asyncio.run(reset_practice_db())
        print(f"✓ Removed {progress_count} progress rows and {question_count} momentary questions")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()

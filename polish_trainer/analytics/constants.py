"""
Constants for practice statistics.
"""

RECENT_ACTIVITY_DAYS = 7

PROGRESS_COLUMNS = [
    "concept_id",
    "mastery_level",
    "success_rate",
    "total_attempts",
    "last_practiced",
    "next_review",
]

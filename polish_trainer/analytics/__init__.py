"""Practice statistics built with pandas."""

from polish_trainer.analytics.service import build_practice_stats
from polish_trainer.analytics.types import PracticeStats, RecentActivity

__all__ = [
    "build_practice_stats",
    "PracticeStats",
    "RecentActivity",
]

"""
Metric computations over a progress DataFrame.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd


def compute_average_mastery(progress_df: pd.DataFrame) -> float:
    """
    Mean mastery level across progress rows (0 when there are none).
    """
    if progress_df.empty:
        return 0.0
    return float(progress_df["mastery_level"].mean())


def filter_practiced_since(progress_df: pd.DataFrame, since: datetime) -> pd.DataFrame:
    """
    Rows whose last_practiced is at or after since (never-practiced rows excluded).
    """
    if progress_df.empty:
        return progress_df
    practiced = progress_df["last_practiced"]
    return progress_df[practiced.notna() & (practiced >= pd.Timestamp(since))]


def compute_average_accuracy(progress_df: pd.DataFrame) -> float:
    """Mean success rate across rows (0 when there are none)."""
    if progress_df.empty:
        return 0.0
    return float(progress_df["success_rate"].mean())

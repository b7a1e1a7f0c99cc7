"""
Load progress rows into pandas.
"""

from __future__ import annotations

import pandas as pd

from polish_trainer.analytics.constants import PROGRESS_COLUMNS
from polish_trainer.schemas import ConceptProgress


def progress_to_df(rows: list[ConceptProgress]) -> pd.DataFrame:
    """
    Convert progress rows to a DataFrame with UTC datetime columns.
    """
    if not rows:
        return pd.DataFrame(columns=PROGRESS_COLUMNS)

    df = pd.DataFrame([row.model_dump(include=set(PROGRESS_COLUMNS)) for row in rows])
    for column in ("last_practiced", "next_review"):
        df[column] = pd.to_datetime(df[column], utc=True)
    return df[PROGRESS_COLUMNS]

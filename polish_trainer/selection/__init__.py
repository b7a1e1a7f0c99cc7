"""Concept selection policies for practice and drill sessions."""

from polish_trainer.selection.selector import ConceptSelector
from polish_trainer.selection.types import (
    ConceptSelection,
    DrillMode,
    WeaknessEntry,
    WeaknessSummary,
    WeaknessReport,
)
from polish_trainer.selection.scoring import (
    WeaknessWeights,
    calculate_weakness_score,
    estimate_incorrect_attempts,
)

__all__ = [
    "ConceptSelector",
    "ConceptSelection",
    "DrillMode",
    "WeaknessEntry",
    "WeaknessSummary",
    "WeaknessReport",
    "WeaknessWeights",
    "calculate_weakness_score",
    "estimate_incorrect_attempts",
]

"""
Typed results shared across the concept selectors.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from polish_trainer.schemas import Concept, ConceptGroup, ConceptProgress


class DrillMode(str, Enum):
    """Scope of a drill session."""
    WEAKNESS = "weakness"
    COURSE = "course"
    GROUP = "group"
    GROUPS = "groups"


@dataclass(frozen=True)
class ConceptSelection:
    """
    Concepts chosen for a session plus a human-readable rationale.

    An empty selection is a valid result; the rationale then explains why
    nothing was selected.
    """
    concepts: list[Concept]
    rationale: str
    priorities: Mapping[str, float] = field(default_factory=dict)
    groups: list[ConceptGroup] = field(default_factory=list)
    ungrouped_concepts: list[Concept] = field(default_factory=list)

    def __post_init__(self):
        """Freeze the priority map."""
        object.__setattr__(self, "priorities", MappingProxyType(dict(self.priorities)))

    @property
    def concept_ids(self) -> list[str]:
        return [concept.id for concept in self.concepts]

    @property
    def is_empty(self) -> bool:
        return not self.concepts


@dataclass
class WeaknessEntry:
    """One concept in the weakness listing."""
    concept: Concept
    progress: Optional[ConceptProgress]
    weakness_score: float
    is_overdue: bool
    days_since_review: int


@dataclass
class WeaknessSummary:
    """Aggregate numbers for a weakness listing."""
    total_concepts: int
    concepts_without_history: int
    concepts_with_history: int
    average_weakness: float


@dataclass
class WeaknessReport:
    """All active concepts ranked by weakness, with a summary."""
    entries: list[WeaknessEntry] = field(default_factory=list)
    summary: WeaknessSummary = field(default_factory=lambda: WeaknessSummary(0, 0, 0, 0.0))

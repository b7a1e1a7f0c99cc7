"""
Pure helpers for question provisioning: drill relevance ranking,
difficulty inference and shortfall distribution.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from polish_trainer.schemas import CEFR_ORDER, CEFRLevel, Concept, QuestionBankEntry


@dataclass(frozen=True)
class DrillCandidate:
    """A question scored against a drill concept set."""
    entry: QuestionBankEntry
    relevance: float
    matched: int
    total: int


def score_drill_candidate(
    entry: QuestionBankEntry,
    drill_concept_ids: Sequence[str]
) -> Optional[DrillCandidate]:
    """
    Score one question for a drill.

    Multi-concept drills reward coverage (matched / drill size); single
    concept drills reward focus (matched / concepts on the question).

    Returns:
        DrillCandidate, or None when the question does not overlap the drill
        (including questions without any target concepts)
    """
    drill_set = set(drill_concept_ids)
    targets = set(entry.target_concepts)
    matched = len(targets & drill_set)
    if not targets or matched == 0:
        return None

    if len(drill_set) > 1:
        relevance = matched / len(drill_set)
    else:
        relevance = matched / len(targets)

    return DrillCandidate(entry=entry, relevance=relevance, matched=matched, total=len(targets))


def rank_drill_candidates(
    entries: Sequence[QuestionBankEntry],
    drill_concept_ids: Sequence[str]
) -> list[QuestionBankEntry]:
    """
    Keep overlapping questions and order them for a drill.

    Sort: relevance desc, matched desc, then total concepts desc for
    multi-concept drills and asc for single-concept drills.
    """
    multi_concept = len(set(drill_concept_ids)) > 1
    candidates = [
        candidate for candidate in
        (score_drill_candidate(entry, drill_concept_ids) for entry in entries)
        if candidate is not None
    ]

    def sort_key(candidate: DrillCandidate):
        total = -candidate.total if multi_concept else candidate.total
        return (-candidate.relevance, -candidate.matched, total)

    return [candidate.entry for candidate in sorted(candidates, key=sort_key)]


def infer_difficulty(concepts: Sequence[Concept]) -> str:
    """Highest CEFR level among the concepts (A1 when empty)."""
    levels = [CEFR_ORDER.index(c.difficulty) for c in concepts if c.difficulty in CEFR_ORDER]
    if not levels:
        return CEFRLevel.A1.value
    return CEFR_ORDER[max(levels)]


def split_shortfall(count: int, question_types: Sequence[str]) -> list[tuple[str, int]]:
    """
    Distribute count evenly over the types; the remainder goes to the first types.

    Types that receive zero are omitted.

    Example:
        >>> split_shortfall(6, ["a", "b", "c", "d"])
        [('a', 2), ('b', 2), ('c', 1), ('d', 1)]
    """
    if count <= 0 or not question_types:
        return []

    base, remainder = divmod(count, len(question_types))
    plan = []
    for index, question_type in enumerate(question_types):
        quantity = base + (1 if index < remainder else 0)
        if quantity > 0:
            plan.append((question_type, quantity))
    return plan

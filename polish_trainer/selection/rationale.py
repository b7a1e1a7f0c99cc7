"""
Human-readable rationales for concept selections.
"""

from __future__ import annotations

from polish_trainer.schemas import Concept, ConceptGroup, ConceptProgress

LOW_MASTERY_THRESHOLD = 0.5

NOTHING_DUE_RATIONALE = "No concepts are currently due for practice. Great job keeping up!"
SCHEDULE_RATIONALE = "Selected concepts based on spaced repetition schedule"
BOOTSTRAP_A1_RATIONALE = "Starting with fundamental A1-level concepts to build your foundation"
BOOTSTRAP_ANY_RATIONALE = "Starting with available concepts to begin your learning journey"
BOOTSTRAP_EMPTY_RATIONALE = "No active concepts are available for practice yet"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def generate_selection_rationale(
    selected: list[ConceptProgress],
    overdue_count: int
) -> str:
    """
    Describe an SRS-based selection.

    Example:
        "Selected 2 overdue concepts, 1 concept due today, focusing on
        3 concepts that need more practice for optimal learning"
    """
    if not selected:
        return NOTHING_DUE_RATIONALE

    parts = []
    if overdue_count > 0:
        parts.append(_plural(overdue_count, "overdue concept"))

    due_count = len(selected) - overdue_count
    if due_count > 0:
        parts.append(f"{_plural(due_count, 'concept')} due today")

    low_mastery = sum(1 for p in selected if p.mastery_level < LOW_MASTERY_THRESHOLD)
    if low_mastery > 0:
        parts.append(f"focusing on {_plural(low_mastery, 'concept')} that need more practice")

    if not parts:
        return SCHEDULE_RATIONALE

    return f"Selected {', '.join(parts)} for optimal learning"


def organize_concepts_by_groups(
    concepts: list[Concept],
    groups: list[ConceptGroup]
) -> tuple[list[Concept], list[Concept]]:
    """
    Split concepts into (grouped, ungrouped) by group membership.

    Order of the input list is preserved in both outputs.
    """
    grouped_ids = {concept_id for group in groups for concept_id in group.member_concepts}
    grouped = [c for c in concepts if c.id in grouped_ids]
    ungrouped = [c for c in concepts if c.id not in grouped_ids]
    return grouped, ungrouped


def generate_group_aware_rationale(
    selected: list[ConceptProgress],
    overdue_count: int,
    groups: list[ConceptGroup],
    ungrouped: list[Concept]
) -> str:
    """Selection rationale with a suffix naming the groups involved."""
    base = generate_selection_rationale(selected, overdue_count)

    group_info = []
    if groups:
        group_info.append(f"organized by {', '.join(g.name for g in groups)}")
    if ungrouped:
        group_info.append(_plural(len(ungrouped), "individual concept"))

    if group_info:
        return f"{base} ({' and '.join(group_info)})"
    return base

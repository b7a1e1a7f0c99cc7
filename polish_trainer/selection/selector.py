"""
Concept Selector - which concepts a session should target

Selection policies:
1. Adaptive: overdue + due concepts ranked by SRS priority
   (new users are bootstrapped with A1 concepts)
2. Course: concepts extracted from one course, by extraction confidence
3. Drill: weakness / course / group / groups, uniform priority

Every policy returns a ConceptSelection with a non-empty rationale. Store
failures are logged and turned into an empty selection.
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from pymongo import ASCENDING

from polish_trainer.errors import ConceptSelectionError
from polish_trainer.repos.interfaces import (
    ConceptGroupStore,
    ConceptStore,
    CourseConceptStore,
)
from polish_trainer.schemas import CEFRLevel, Concept, ConceptGroup, ConceptProgress
from polish_trainer.selection import rationale as rationale_text
from polish_trainer.selection.scoring import (
    DEFAULT_WEAKNESS_WEIGHTS,
    NEVER_PRACTICED_DAYS,
    WeaknessWeights,
    calculate_weakness_score,
)
from polish_trainer.selection.types import (
    ConceptSelection,
    DrillMode,
    WeaknessEntry,
    WeaknessSummary,
)
from polish_trainer.srs import progress_state
from polish_trainer.srs.tracker import ProgressTracker

# ---- Selection Configuration ----
DEFAULT_MAX_CONCEPTS = 5
DEFAULT_DRILL_MAX_CONCEPTS = 10
DRILL_PRIORITY = 1.0


def _cap(items: list, max_items: int) -> list:
    """Limit a list; max_items <= 0 means unlimited."""
    if max_items <= 0:
        return list(items)
    return list(items[:max_items])


def _order_by_ids(concepts: list[Concept], ids: Sequence[str]) -> list[Concept]:
    """Reorder concepts to follow ids (concepts missing from ids are dropped)."""
    by_id = {concept.id: concept for concept in concepts}
    return [by_id[concept_id] for concept_id in ids if concept_id in by_id]


def _dedupe(ids: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for concept_id in ids:
        if concept_id not in seen:
            seen.add(concept_id)
            unique.append(concept_id)
    return unique


class ConceptSelector:
    """
    Chooses concepts for practice sessions.

    Args:
        concept_store: Concept catalogue
        tracker: Progress tracker (SRS reads and lazy initialization)
        group_store: Concept groups
        course_store: Course to concept mappings
        weakness_weights: Coefficients for the weakness drill
        logger: Optional logger
    """

    def __init__(
        self,
        concept_store: ConceptStore,
        tracker: ProgressTracker,
        group_store: ConceptGroupStore,
        course_store: CourseConceptStore,
        weakness_weights: WeaknessWeights = DEFAULT_WEAKNESS_WEIGHTS,
        logger: Optional[logging.Logger] = None
    ):
        self.concept_store = concept_store
        self.tracker = tracker
        self.group_store = group_store
        self.course_store = course_store
        self.weakness_weights = weakness_weights
        self.logger = logger or logging.getLogger(__name__)

    # ---- Adaptive selection ----

    async def select_practice_concepts_for_user(
        self,
        user_id: str,
        max_concepts: int = DEFAULT_MAX_CONCEPTS,
        now: Optional[datetime] = None
    ) -> ConceptSelection:
        """
        Pick the most urgent due concepts for a user.

        Overdue rows come first, then rows due today (no duplicates). Each is
        scored with the SRS priority and the top max_concepts are returned.
        A user with nothing due is bootstrapped with basic concepts.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        try:
            overdue = await self.tracker.get_overdue_concepts(user_id, now)
            due = await self.tracker.get_concepts_due_for_review(user_id, now)

            seen: set[str] = set()
            candidates: list[ConceptProgress] = []
            for progress in overdue + due:
                if progress.concept_id not in seen:
                    seen.add(progress.concept_id)
                    candidates.append(progress)

            # Progress rows can outlive a deactivated concept
            active: dict[str, Concept] = {}
            if candidates:
                active = {
                    concept.id: concept
                    for concept in await self.concept_store.find(
                        ids=[p.concept_id for p in candidates]
                    )
                }
                candidates = [p for p in candidates if p.concept_id in active]

            self.logger.info("[SELECT] %d concepts due for user %s", len(candidates), user_id)

            if not candidates:
                return await self._initialize_new_user_practice(user_id, max_concepts, now)

            priorities = {
                p.concept_id: self.tracker.calculate_priority(p, now) for p in candidates
            }
            # Stable sort keeps overdue-first order among equal priorities
            ranked = sorted(candidates, key=lambda p: priorities[p.concept_id], reverse=True)
            selected = _cap(ranked, max_concepts)
            selected_ids = [p.concept_id for p in selected]

            concepts = [active[concept_id] for concept_id in selected_ids]
            groups = await self.get_groups_for_concepts(selected_ids)
            _, ungrouped = rationale_text.organize_concepts_by_groups(concepts, groups)

            cutoff = progress_state.overdue_cutoff(now)
            overdue_count = sum(1 for p in selected if p.next_review < cutoff)
            rationale = rationale_text.generate_group_aware_rationale(
                selected, overdue_count, groups, ungrouped
            )

            self.logger.info(
                "[SELECT] Selected %d concepts in %d groups", len(concepts), len(groups)
            )
            return ConceptSelection(
                concepts=concepts,
                rationale=rationale,
                priorities={cid: priorities[cid] for cid in selected_ids},
                groups=groups,
                ungrouped_concepts=ungrouped,
            )
        except Exception:
            self.logger.exception("[SELECT] Failed to select practice concepts for %s", user_id)
            return ConceptSelection([], "Unable to select practice concepts right now")

    async def _initialize_new_user_practice(
        self,
        user_id: str,
        max_concepts: int,
        now: datetime
    ) -> ConceptSelection:
        """Bootstrap a user with A1 concepts (or any concepts if there are none)."""
        self.logger.info("[SELECT] Nothing due, bootstrapping user %s", user_id)
        limit = max_concepts if max_concepts > 0 else None

        concepts = await self.concept_store.find(
            difficulty=CEFRLevel.A1.value, sort=[("name", ASCENDING)], limit=limit
        )
        rationale = rationale_text.BOOTSTRAP_A1_RATIONALE

        if not concepts:
            concepts = await self.concept_store.find(sort=[("name", ASCENDING)], limit=limit)
            rationale = rationale_text.BOOTSTRAP_ANY_RATIONALE

        if not concepts:
            return ConceptSelection([], rationale_text.BOOTSTRAP_EMPTY_RATIONALE)

        for concept in concepts:
            await self.tracker.initialize_concept_progress(concept.id, user_id, now)

        self.logger.info("[SELECT] Initialized progress for %d concepts", len(concepts))
        return ConceptSelection(concepts=concepts, rationale=rationale)

    # ---- Course selection ----

    async def select_concepts_from_course(
        self,
        course_id: int,
        max_concepts: int = DEFAULT_MAX_CONCEPTS
    ) -> ConceptSelection:
        """Concepts extracted from a course, highest extraction confidence first."""
        try:
            mappings = await self.course_store.find([course_id])
            if mappings:
                ids = [m.concept_id for m in mappings]
                active = await self.concept_store.find(ids=ids)
                active_ids = {concept.id for concept in active}
                mappings = _cap(
                    [m for m in mappings if m.concept_id in active_ids], max_concepts
                )
            if not mappings:
                self.logger.info("[SELECT] No concepts for course %s", course_id)
                return ConceptSelection(
                    [], f"No concepts have been extracted from course {course_id} yet"
                )

            ids = [m.concept_id for m in mappings]
            concepts = _order_by_ids(active, ids)
            priorities = {m.concept_id: m.confidence for m in mappings}

            return ConceptSelection(
                concepts=concepts,
                rationale=f"Practice session focused on concepts from Course {course_id}",
                priorities=priorities,
            )
        except Exception:
            self.logger.exception("[SELECT] Failed to load concepts for course %s", course_id)
            return ConceptSelection([], f"Error loading concepts from course {course_id}")

    # ---- Groups ----

    async def get_groups_for_concepts(self, concept_ids: Sequence[str]) -> list[ConceptGroup]:
        """Active groups containing at least one of the concepts."""
        if not concept_ids:
            return []
        return await self.group_store.find(member_of=list(concept_ids))

    async def get_concepts_in_group(self, group_id: str) -> list[Concept]:
        """Active member concepts of a group, in member order."""
        group = await self.group_store.find_one(group_id)
        if group is None:
            self.logger.info("[SELECT] Group %s not found", group_id)
            return []
        concepts = await self.concept_store.find(ids=group.member_concepts)
        return _order_by_ids(concepts, group.member_concepts)

    # ---- Drill selection ----

    async def get_drill_concepts_by_weakness(
        self,
        user_id: str,
        max_concepts: int = DEFAULT_DRILL_MAX_CONCEPTS
    ) -> list[str]:
        """Active concept ids, weakest first."""
        entries = await self.rank_concepts_by_weakness(user_id)
        return _cap([entry.concept.id for entry in entries], max_concepts)

    async def get_drill_concepts_by_course(
        self,
        course_id: int,
        max_concepts: int = DEFAULT_DRILL_MAX_CONCEPTS
    ) -> list[str]:
        mappings = await self.course_store.find(
            [course_id], limit=max_concepts if max_concepts > 0 else None
        )
        return _dedupe([m.concept_id for m in mappings])

    async def get_drill_concepts_by_group(
        self,
        group_id: str,
        max_concepts: int = DEFAULT_DRILL_MAX_CONCEPTS
    ) -> list[str]:
        concepts = await self.get_concepts_in_group(group_id)
        return _cap(_dedupe([c.id for c in concepts]), max_concepts)

    async def get_drill_concepts_by_groups(
        self,
        group_ids: Sequence[str],
        max_concepts: int = DEFAULT_DRILL_MAX_CONCEPTS
    ) -> list[str]:
        """Union of the groups' members, first-seen order, capped."""
        collected: list[str] = []
        for group_id in group_ids:
            collected.extend(await self.get_drill_concepts_by_group(group_id, max_concepts))
        return _cap(_dedupe(collected), max_concepts)

    async def select_drill_concepts(
        self,
        mode: DrillMode,
        user_id: str,
        course_id: Optional[int] = None,
        group_id: Optional[str] = None,
        group_ids: Optional[Sequence[str]] = None,
        max_concepts: int = DEFAULT_DRILL_MAX_CONCEPTS
    ) -> ConceptSelection:
        """
        Select concepts for an explicit drill.

        Args:
            mode: Drill scope
            user_id: Learner id (weakness mode)
            course_id: Course to drill (course mode)
            group_id: Group to drill (group mode)
            group_ids: Groups to drill (groups mode)
            max_concepts: Cap on the number of concepts (<= 0 is unlimited)

        Returns:
            ConceptSelection where every concept has priority 1.0

        Raises:
            ConceptSelectionError: If mode is not a known drill mode
        """
        try:
            mode = DrillMode(mode)
        except ValueError as e:
            raise ConceptSelectionError(f"Unknown drill mode: {mode}") from e

        try:
            concept_ids: list[str] = []
            rationale = ""

            if mode == DrillMode.WEAKNESS:
                concept_ids = await self.get_drill_concepts_by_weakness(user_id, max_concepts)
                rationale = "Drill session focusing on concepts that need more practice"
            elif mode == DrillMode.COURSE:
                if course_id is not None:
                    concept_ids = await self.get_drill_concepts_by_course(course_id, max_concepts)
                    rationale = f"Drill session for Course {course_id}"
            elif mode == DrillMode.GROUP:
                if group_id:
                    concept_ids = await self.get_drill_concepts_by_group(group_id, max_concepts)
                    group = await self.group_store.find_one(group_id, active_only=False)
                    rationale = f"Drill session for group: {group.name if group else group_id}"
            elif mode == DrillMode.GROUPS:
                if group_ids:
                    concept_ids = await self.get_drill_concepts_by_groups(group_ids, max_concepts)
                    groups = await self.group_store.find(ids=list(group_ids), active_only=False)
                    names = ", ".join(g.name for g in groups) or ", ".join(group_ids)
                    rationale = f"Drill session for groups: {names}"

            if not concept_ids:
                return ConceptSelection([], f"No concepts found for drill mode: {mode.value}")

            concepts = _order_by_ids(await self.concept_store.find(ids=concept_ids), concept_ids)
            if not concepts:
                return ConceptSelection([], f"No concepts found for drill mode: {mode.value}")

            self.logger.info("[DRILL] Selected %d concepts for %s drill", len(concepts), mode.value)
            return ConceptSelection(
                concepts=concepts,
                rationale=rationale,
                priorities={concept.id: DRILL_PRIORITY for concept in concepts},
            )
        except Exception:
            self.logger.exception("[DRILL] Failed to select concepts for %s drill", mode.value)
            return ConceptSelection([], f"Error loading concepts for drill mode: {mode.value}")

    # ---- Weakness listing ----

    async def rank_concepts_by_weakness(
        self,
        user_id: str,
        now: Optional[datetime] = None
    ) -> list[WeaknessEntry]:
        """
        Score every active concept by weakness, weakest first.

        Concepts with equal scores keep name order.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        concepts = await self.concept_store.find(sort=[("name", ASCENDING)])
        progress_by_id = await self.tracker.get_progress_for_concepts(
            [c.id for c in concepts], user_id
        )

        entries = []
        for concept in concepts:
            progress = progress_by_id.get(concept.id)
            days_since = progress_state.get_days_since_review(progress, now)
            entries.append(WeaknessEntry(
                concept=concept,
                progress=progress,
                weakness_score=calculate_weakness_score(progress, self.weakness_weights),
                is_overdue=progress is not None and progress_state.get_days_overdue(progress, now) > 0,
                days_since_review=NEVER_PRACTICED_DAYS if days_since is None else days_since,
            ))

        entries.sort(key=lambda entry: entry.weakness_score, reverse=True)
        return entries

    def summarize_weakness(self, entries: list[WeaknessEntry]) -> WeaknessSummary:
        """Counts and average score for a weakness listing."""
        no_history = self.weakness_weights.no_history_score
        without_history = sum(1 for e in entries if e.weakness_score >= no_history)
        average = (
            sum(e.weakness_score for e in entries) / len(entries) if entries else 0.0
        )
        return WeaknessSummary(
            total_concepts=len(entries),
            concepts_without_history=without_history,
            concepts_with_history=len(entries) - without_history,
            average_weakness=average,
        )

"""
Context Builder - text briefings for question generation.

Turns a set of target concepts into a compact briefing for the LLM:
target concepts with examples, a few related "context" concepts,
session objectives and, for multi-concept sessions, interleaving
instructions.

Context concepts come from shared groups first. When the concepts are not
grouped (or the group lookup fails) up to three concepts of the same
category are used instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

from polish_trainer.repos.interfaces import ConceptGroupStore, ConceptStore
from polish_trainer.schemas import Concept, ConceptCategory

# Configuration
MAX_EXAMPLES_PER_CONCEPT = 3
MAX_CONTEXT_CONCEPTS = 3

GENERAL_PRACTICE_CONTEXT = "General Polish language practice session."

QuestionFocus = Literal["grammar_focus", "vocabulary_focus", "mixed"]

FOCUS_INSTRUCTIONS = {
    "grammar_focus": (
        "\nFOCUS: Create questions that test grammatical understanding and application. "
        "Include sentence transformation, conjugation, or syntax questions."
    ),
    "vocabulary_focus": (
        "\nFOCUS: Create questions that test vocabulary knowledge and usage. "
        "Include context clues, word formation, or meaning-in-context questions."
    ),
    "mixed": (
        "\nFOCUS: Create questions that integrate both grammar and vocabulary. "
        "Focus on real-world language use and communication."
    ),
}

INTERLEAVING_INSTRUCTIONS = [
    "Create questions that combine multiple concepts when possible",
    "Focus on practical application rather than isolated rules",
    "Vary question difficulty to match concept levels",
]

DRILL_INSTRUCTIONS = [
    "Target areas where student showed difficulty",
    "Create slightly easier questions to build confidence",
    "Focus on fundamental understanding before complexity",
]


# ---- Types ----

@dataclass
class ConceptSummary:
    """Lightweight view of a concept for prompts."""
    id: str
    name: str
    category: str
    description: str = ""
    key_examples: list[str] = field(default_factory=list)
    difficulty: str = ""

    @classmethod
    def from_concept(cls, concept: Concept) -> "ConceptSummary":
        return cls(
            id=concept.id,
            name=concept.name,
            category=concept.category,
            description=concept.description,
            key_examples=list(concept.examples[:MAX_EXAMPLES_PER_CONCEPT]),
            difficulty=concept.difficulty,
        )


@dataclass
class SmartContext:
    target_concepts: list[ConceptSummary]
    context_concepts: list[ConceptSummary]
    session_objectives: list[str]
    interleaving: bool


@dataclass
class GroupCluster:
    group_id: str
    group_name: str
    concepts: list[str]


@dataclass
class ConceptOrganization:
    """How a set of concepts clusters, for session planning."""
    clusters: list[list[str]]
    groups: list[GroupCluster]
    combinations: list[list[str]]


# ---- Pure helpers ----

def generate_session_objectives(targets: Sequence[ConceptSummary]) -> list[str]:
    """
    Derive learning objectives from the target concepts.

    Single concept: mastery framing. Several concepts: grammar/vocabulary
    integration framing plus a concept-switching objective.
    """
    if not targets:
        return ["Practice general Polish language skills"]

    if len(targets) == 1:
        concept = targets[0]
        return [
            f"Master {concept.name} ({concept.category})",
            f"Apply {concept.name} in context",
        ]

    objectives = []
    grammar = [c for c in targets if c.category == ConceptCategory.GRAMMAR.value]
    vocabulary = [c for c in targets if c.category == ConceptCategory.VOCABULARY.value]

    if grammar and vocabulary:
        objectives.append("Practice grammar and vocabulary together in context")
        objectives.append("Build fluency through concept integration")
    elif len(grammar) > 1:
        objectives.append("Master multiple grammar patterns")
        objectives.append("Apply grammatical concepts in varied contexts")
    elif len(vocabulary) > 1:
        objectives.append("Expand vocabulary across topics")
        objectives.append("Use new vocabulary in sentences")

    objectives.append("Practice concept switching and mental flexibility")
    return objectives


def format_context(context: SmartContext) -> str:
    """Render a SmartContext as the LLM briefing text."""
    text = "PRACTICE SESSION CONTEXT:\n\n"

    text += "TARGET CONCEPTS:\n"
    for concept in context.target_concepts:
        text += f"• {concept.name} ({concept.category}, {concept.difficulty})\n"
        text += f"  Description: {concept.description}\n"
        if concept.key_examples:
            text += f"  Examples: {', '.join(concept.key_examples)}\n"
        text += "\n"

    if context.context_concepts:
        text += "CONTEXT CONCEPTS (for reference):\n"
        for concept in context.context_concepts:
            text += f"• {concept.name}: {concept.description}\n"
        text += "\n"

    text += "SESSION OBJECTIVES:\n"
    for objective in context.session_objectives:
        text += f"• {objective}\n"
    text += "\n"

    if context.interleaving:
        text += "SPECIAL INSTRUCTIONS:\n"
        for instruction in INTERLEAVING_INSTRUCTIONS:
            text += f"• {instruction}\n"
        text += "\n"

    return text


def cluster_by_category(concepts: Sequence[Concept]) -> list[list[str]]:
    """Concept ids split into a grammar cluster and a vocabulary cluster (non-empty only)."""
    clusters = []
    for category in (ConceptCategory.GRAMMAR.value, ConceptCategory.VOCABULARY.value):
        ids = [c.id for c in concepts if c.category == category]
        if ids:
            clusters.append(ids)
    return clusters


def grammar_vocabulary_combinations(concepts: Sequence[Concept]) -> list[list[str]]:
    """Every (grammar id, vocabulary id) pair."""
    grammar = [c for c in concepts if c.category == ConceptCategory.GRAMMAR.value]
    vocabulary = [c for c in concepts if c.category == ConceptCategory.VOCABULARY.value]
    return [[g.id, v.id] for g in grammar for v in vocabulary]


# ---- Builder ----

class ContextBuilder:
    """
    Assembles generation briefings from the concept and group stores.

    Args:
        concept_store: Concept catalogue
        group_store: Concept groups (optional lookups; failures degrade)
        logger: Optional logger
    """

    def __init__(
        self,
        concept_store: ConceptStore,
        group_store: ConceptGroupStore,
        logger: Optional[logging.Logger] = None
    ):
        self.concept_store = concept_store
        self.group_store = group_store
        self.logger = logger or logging.getLogger(__name__)

    async def get_concept_summaries(self, concept_ids: Sequence[str]) -> list[ConceptSummary]:
        """Summaries of the active concepts, in the order of concept_ids."""
        if not concept_ids:
            return []
        concepts = await self.concept_store.find(ids=list(concept_ids))
        by_id = {c.id: c for c in concepts}
        return [ConceptSummary.from_concept(by_id[cid]) for cid in concept_ids if cid in by_id]

    async def get_context_concepts(self, concept_ids: Sequence[str]) -> list[ConceptSummary]:
        """
        Up to three related concepts that are not targets.

        Args:
            concept_ids: Target concept ids

        Returns:
            Summaries of group mates, or of same-category concepts when the
            targets share no group
        """
        targets = await self.concept_store.find(ids=list(concept_ids))
        if not targets:
            return []

        target_set = set(concept_ids)
        context_ids: list[str] = []
        try:
            groups = await self.group_store.find(member_of=list(concept_ids))
            for group in groups:
                for member_id in group.member_concepts:
                    if member_id not in target_set and member_id not in context_ids:
                        context_ids.append(member_id)
        except Exception as e:
            self.logger.warning("[CONTEXT] Could not load group-based context concepts: %s", e)
            context_ids = []

        if context_ids:
            summaries = await self.get_concept_summaries(context_ids)
            if summaries:
                return summaries[:MAX_CONTEXT_CONCEPTS]

        categories = list(dict.fromkeys(c.category for c in targets))
        same_category = await self.concept_store.find(
            categories=categories,
            exclude_ids=list(concept_ids),
            limit=MAX_CONTEXT_CONCEPTS,
        )
        return [ConceptSummary.from_concept(c) for c in same_category[:MAX_CONTEXT_CONCEPTS]]

    async def build_context_for_concepts(self, concept_ids: Sequence[str]) -> str:
        """Full briefing for a set of target concepts."""
        if not concept_ids:
            return GENERAL_PRACTICE_CONTEXT

        targets = await self.get_concept_summaries(concept_ids)
        context = SmartContext(
            target_concepts=targets,
            context_concepts=await self.get_context_concepts(concept_ids),
            session_objectives=generate_session_objectives(targets),
            interleaving=len(targets) > 1,
        )
        return format_context(context)

    async def build_context_for_question_type(
        self,
        concept_ids: Sequence[str],
        focus: QuestionFocus
    ) -> str:
        """Briefing plus a grammar, vocabulary or mixed focus line."""
        base = await self.build_context_for_concepts(concept_ids)
        return base + FOCUS_INSTRUCTIONS.get(focus, "")

    async def build_drill_context(
        self,
        concept_ids: Sequence[str],
        weakness_areas: Sequence[str] = ()
    ) -> str:
        """Briefing for a drill session, optionally listing weak areas."""
        text = await self.build_context_for_concepts(concept_ids)

        text += "\nDRILL SESSION FOCUS:\n"
        for instruction in DRILL_INSTRUCTIONS:
            text += f"• {instruction}\n"

        if weakness_areas:
            text += "\nSPECIFIC WEAKNESS AREAS:\n"
            for area in weakness_areas:
                text += f"• {area}\n"

        return text

    async def analyze_concept_organization(self, concept_ids: Sequence[str]) -> ConceptOrganization:
        """Category clusters, group membership and grammar x vocabulary pairs."""
        concepts = await self.concept_store.find(ids=list(concept_ids))
        by_id = {c.id: c for c in concepts}
        concepts = [by_id[cid] for cid in concept_ids if cid in by_id]

        groups: list[GroupCluster] = []
        try:
            for group in await self.group_store.find(member_of=list(concept_ids)):
                members = [cid for cid in concept_ids if cid in group.member_concepts]
                if members:
                    groups.append(GroupCluster(group.id, group.name, members))
        except Exception as e:
            self.logger.warning("[CONTEXT] Could not load group organization: %s", e)

        return ConceptOrganization(
            clusters=cluster_by_category(concepts),
            groups=groups,
            combinations=grammar_vocabulary_combinations(concepts),
        )

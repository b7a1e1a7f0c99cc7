"""
polish_trainer - adaptive practice selection and spaced repetition

Picks grammar and vocabulary concepts to practice, provides questions for
them (generating on shortfall) and reschedules concepts after each answer.

Quick start:
    from polish_trainer import PracticeEngine, PracticeMode

    engine = PracticeEngine.from_mongo(generator=OpenAIQuestionGenerator())
    selection = await engine.select_practice_concepts_for_user("default")
    questions = await engine.get_questions_for_concepts(
        selection.concept_ids, PracticeMode.NORMAL
    )
"""

# Facade
from polish_trainer.engine import PracticeEngine

# Data model
from polish_trainer.schemas import (
    CEFRLevel,
    Concept,
    ConceptCategory,
    ConceptGroup,
    ConceptProgress,
    CourseConcept,
    GeneratedQuestion,
    PracticeMode,
    QuestionBankEntry,
    QuestionSource,
    QuestionType,
)

# Results
from polish_trainer.selection import (
    ConceptSelection,
    DrillMode,
    WeaknessEntry,
    WeaknessReport,
    WeaknessSummary,
)
from polish_trainer.analytics import PracticeStats, RecentActivity
from polish_trainer.performance import AnswerOutcome

# Generation
from polish_trainer.questions import OpenAIQuestionGenerator, QuestionGenerator

# Errors
from polish_trainer.errors import (
    PracticeEngineError,
    ConceptSelectionError,
    SRSCalculationError,
    QuestionGenerationError,
    StoreUnavailableError,
)


__all__ = [
    # Facade
    "PracticeEngine",

    # Data model
    "CEFRLevel",
    "Concept",
    "ConceptCategory",
    "ConceptGroup",
    "ConceptProgress",
    "CourseConcept",
    "GeneratedQuestion",
    "PracticeMode",
    "QuestionBankEntry",
    "QuestionSource",
    "QuestionType",

    # Results
    "ConceptSelection",
    "DrillMode",
    "WeaknessEntry",
    "WeaknessReport",
    "WeaknessSummary",
    "PracticeStats",
    "RecentActivity",
    "AnswerOutcome",

    # Generation
    "OpenAIQuestionGenerator",
    "QuestionGenerator",

    # Errors
    "PracticeEngineError",
    "ConceptSelectionError",
    "SRSCalculationError",
    "QuestionGenerationError",
    "StoreUnavailableError",
]

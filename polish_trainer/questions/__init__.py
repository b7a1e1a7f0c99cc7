"""Question provisioning and generation."""

from polish_trainer.questions.provisioner import QuestionProvisioner
from polish_trainer.questions.generator import (
    QuestionGenerator,
    OpenAIQuestionGenerator,
    is_valid_question_for_type,
    map_concept_names_to_ids,
)
from polish_trainer.questions.ranking import (
    infer_difficulty,
    rank_drill_candidates,
    split_shortfall,
)

__all__ = [
    "QuestionProvisioner",
    "QuestionGenerator",
    "OpenAIQuestionGenerator",
    "is_valid_question_for_type",
    "map_concept_names_to_ids",
    "infer_difficulty",
    "rank_drill_candidates",
    "split_shortfall",
]

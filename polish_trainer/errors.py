"""
Exception types raised by the practice engine.
"""


class PracticeEngineError(Exception):
    """Base class for practice engine errors."""


class ConceptSelectionError(PracticeEngineError):
    """Raised when a concept selection cannot be computed."""


class SRSCalculationError(PracticeEngineError):
    """Raised on invalid input to the spaced-repetition calculator."""


class QuestionGenerationError(PracticeEngineError):
    """Raised when the question generator fails or returns unusable output."""


class StoreUnavailableError(PracticeEngineError):
    """Raised when a persistence store cannot be reached."""

"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse, HealthResponse
from .speaking import (
    DIFFICULTY_LEVELS,
    SCENARIO_CATEGORIES,
    Evaluation,
    Feedback,
    FluencyFeedback,
    GrammarError,
    PronunciationIssue,
    RelevanceAnalysis,
    Scenario,
    Scores,
    Transcription,
    TranscriptionWord,
)

__all__ = [
    "DIFFICULTY_LEVELS",
    "SCENARIO_CATEGORIES",
    "ErrorResponse",
    "Evaluation",
    "Feedback",
    "FluencyFeedback",
    "GrammarError",
    "HealthResponse",
    "PronunciationIssue",
    "RelevanceAnalysis",
    "Scenario",
    "Scores",
    "Transcription",
    "TranscriptionWord",
]

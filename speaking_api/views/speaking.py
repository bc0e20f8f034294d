"""Pydantic schemas for scenarios, transcriptions and evaluations.

These classes are the single source of truth for every structured value the
service exchanges with the language model and with HTTP clients. The JSON
Schema sent to the provider is derived from them in
``speaking_api.services.response_contract`` so validation and generation can
never drift apart. Wire names are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ScenarioCategory = Literal[
    "daily",
    "business",
    "travel",
    "shopping",
    "dining",
    "medical",
    "social",
    "education",
]
Difficulty = Literal["beginner", "intermediate", "advanced"]
Severity = Literal["minor", "moderate", "major"]

SCENARIO_CATEGORIES: tuple[str, ...] = ScenarioCategory.__args__
DIFFICULTY_LEVELS: tuple[str, ...] = Difficulty.__args__


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Scenario(_WireModel):
    """A speaking prompt shown to the learner."""

    prompt: str = Field(..., description="The scenario prompt for the user")
    context: str = Field(..., description="Background context for the scenario")
    category: ScenarioCategory = Field(..., description="Category of the scenario")
    difficulty: Difficulty = Field(..., description="Difficulty level")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TranscriptionWord(_WireModel):
    word: str
    start: float = Field(..., ge=0, description="Start offset in seconds")
    end: float = Field(..., ge=0, description="End offset in seconds")

    @model_validator(mode="after")
    def check_bounds(self) -> "TranscriptionWord":
        if self.end < self.start:
            raise ValueError(f"word '{self.word}' ends before it starts")
        return self


class Transcription(_WireModel):
    """Speech-to-text output with optional word timings."""

    text: str
    words: Optional[List[TranscriptionWord]] = None

    @model_validator(mode="after")
    def check_word_order(self) -> "Transcription":
        if self.words:
            previous = 0.0
            for item in self.words:
                if item.start < previous:
                    raise ValueError("word timestamps must be non-decreasing")
                previous = item.start
        return self


class GrammarError(_WireModel):
    original: str = Field(..., description="The incorrect phrase")
    correction: str = Field(..., description="The corrected phrase")
    explanation: str = Field(..., description="Why it's wrong and how to fix it")
    severity: Severity = Field(..., description="How serious the error is")


class PronunciationIssue(_WireModel):
    word: str = Field(..., description="The word with pronunciation issue")
    issue: str = Field(..., description="What's wrong with the pronunciation")
    suggestion: str = Field(..., description="How to improve")
    common_mistake: str = Field(
        default="",
        alias="commonMistake",
        description=(
            "Common mistake pattern (e.g., 'th' sounds like 's'). "
            "Use empty string if none."
        ),
    )

    @field_validator("common_mistake", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value


class RelevanceAnalysis(_WireModel):
    is_relevant: bool = Field(
        ...,
        alias="isRelevant",
        description="Whether the response fits the scenario",
    )
    analysis: str = Field(..., description="Detailed explanation of relevance")
    missing_points: List[str] = Field(
        default_factory=list,
        alias="missingPoints",
        description=(
            "Important points that should have been mentioned. "
            "Use an empty array when nothing is missing."
        ),
    )

    @field_validator("missing_points", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return [] if value is None else value


class FluencyFeedback(_WireModel):
    issues: List[str] = Field(..., description="Fluency issues identified")
    suggestions: List[str] = Field(..., description="How to improve fluency")


class Scores(_WireModel):
    pronunciation: float = Field(..., ge=0, le=100, description="Pronunciation score")
    grammar: float = Field(..., ge=0, le=100, description="Grammar score")
    relevance: float = Field(..., ge=0, le=100, description="Relevance to scenario score")
    fluency: float = Field(..., ge=0, le=100, description="Fluency and naturalness score")
    overall: float = Field(..., ge=0, le=100, description="Overall score")


class Feedback(_WireModel):
    grammar: List[GrammarError] = Field(..., description="Grammar errors found")
    pronunciation: List[PronunciationIssue] = Field(..., description="Pronunciation issues")
    relevance: RelevanceAnalysis = Field(..., description="Scenario relevance analysis")
    fluency: FluencyFeedback = Field(..., description="Fluency feedback")


class Evaluation(_WireModel):
    """Full scored feedback for one transcribed response."""

    transcription: str = Field(..., description="The transcribed text from the audio")
    scores: Scores = Field(..., description="Numerical scores for different aspects")
    feedback: Feedback = Field(..., description="Detailed feedback")
    suggested_response: str = Field(
        ...,
        alias="suggestedResponse",
        description="A model response for this scenario",
    )
    summary: str = Field(..., description="Overall encouraging feedback and key takeaways")
    next_scenario: Scenario = Field(
        ...,
        alias="nextScenario",
        description="Next practice scenario",
    )


__all__ = [
    "DIFFICULTY_LEVELS",
    "SCENARIO_CATEGORIES",
    "Difficulty",
    "Evaluation",
    "Feedback",
    "FluencyFeedback",
    "GrammarError",
    "PronunciationIssue",
    "RelevanceAnalysis",
    "Scenario",
    "ScenarioCategory",
    "Scores",
    "Severity",
    "Transcription",
    "TranscriptionWord",
]

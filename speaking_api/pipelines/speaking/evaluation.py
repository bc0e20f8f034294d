"""Evaluation stage: score a transcript against its scenario."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from speaking_api.services import openai_client
from speaking_api.services.credentials import resolve_api_key
from speaking_api.services.errors import CoachError, CoachValidationError
from speaking_api.services.prompt_builder import evaluation_prompts
from speaking_api.services.response_contract import (
    describe_validation_error,
    parse_contract,
    strict_json_schema,
)
from speaking_api.views.speaking import Evaluation, Scenario

from .types import check_temperature

logger = logging.getLogger("speaking_api.pipeline")

EVALUATION_SCHEMA = strict_json_schema(Evaluation)
DEFAULT_EVALUATION_TEMPERATURE = 0.7


def coerce_scenario(scenario: Scenario | Mapping[str, Any]) -> Scenario:
    if isinstance(scenario, Scenario):
        return scenario
    if not isinstance(scenario, Mapping):
        raise CoachValidationError(
            "Invalid scenario",
            details=f"expected a scenario object, got {type(scenario).__name__}",
        )
    try:
        return Scenario.model_validate(dict(scenario))
    except ValidationError as exc:
        raise CoachValidationError(
            "Invalid scenario",
            details=describe_validation_error(exc),
        ) from exc


async def evaluate_speech(
    scenario: Scenario | Mapping[str, Any],
    transcript_text: str,
    api_key: str | None = None,
    temperature: float = DEFAULT_EVALUATION_TEMPERATURE,
) -> Evaluation:
    """Evaluate ``transcript_text`` for ``scenario``.

    The ``transcription`` field of the result is always the transcript that was
    passed in; whatever the model echoes back is discarded.
    """

    if not isinstance(transcript_text, str) or not transcript_text.strip():
        raise CoachValidationError("Transcription is required")

    current = coerce_scenario(scenario)
    temperature = check_temperature(temperature)
    resolved_key = resolve_api_key(api_key)
    prompts = evaluation_prompts(current, transcript_text)

    try:
        payload = await openai_client.complete_structured(
            resolved_key,
            prompts.system_prompt,
            prompts.user_prompt,
            EVALUATION_SCHEMA,
            temperature,
            schema_name="evaluation_result",
        )
        if isinstance(payload, Mapping):
            payload = {**payload, "transcription": transcript_text}
        evaluation = parse_contract(Evaluation, payload)
    except CoachError as exc:
        logger.error(
            "Evaluation failed category=%s difficulty=%s: %s",
            current.category,
            current.difficulty,
            exc,
        )
        raise

    logger.info(
        "Evaluation complete category=%s overall=%.1f next=%s/%s",
        current.category,
        evaluation.scores.overall,
        evaluation.next_scenario.category,
        evaluation.next_scenario.difficulty,
    )
    return evaluation


__all__ = [
    "DEFAULT_EVALUATION_TEMPERATURE",
    "EVALUATION_SCHEMA",
    "coerce_scenario",
    "evaluate_speech",
]

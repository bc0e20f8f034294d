"""Two-stage evaluation pipeline: transcribe the recording, then evaluate it.

Stage two consumes stage one's ``text``. A failure in either stage aborts the
whole request; there is nothing to roll back because no stage writes state.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from speaking_api.services.errors import CoachValidationError
from speaking_api.views.speaking import Evaluation, Scenario

from .evaluation import coerce_scenario, evaluate_speech
from .transcription import transcribe_audio
from .types import AudioUpload

logger = logging.getLogger("speaking_api.pipeline")


async def run_evaluation_pipeline(
    audio: AudioUpload,
    scenario: Scenario | Mapping[str, Any],
    api_key: str | None = None,
    language_code: str = "en",
) -> Evaluation:
    """Transcribe ``audio`` and evaluate the transcript against ``scenario``."""

    current = coerce_scenario(scenario)
    transcription = await transcribe_audio(audio, api_key=api_key, language_code=language_code)
    if not transcription.text.strip():
        raise CoachValidationError("No speech detected in the recording")

    logger.info("Evaluating transcript chars=%s category=%s", len(transcription.text), current.category)
    return await evaluate_speech(current, transcription.text, api_key=api_key)


__all__ = ["run_evaluation_pipeline"]

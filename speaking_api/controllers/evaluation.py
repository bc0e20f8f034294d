"""Speech evaluation endpoint.

The POST ``/api/evaluate`` pipeline performs:

1. Validation of the uploaded recording and the JSON-encoded scenario.
2. Transcription of the recording.
3. Evaluation of the transcript against the scenario, which also yields the
   next scenario to practise.

A failure in step 2 means step 3 never runs.
"""

import logging

from fastapi import APIRouter, File, Form, UploadFile

from speaking_api.controllers.dependencies import ApiKeyDep, handler_failure
from speaking_api.pipelines.speaking import (
    parse_scenario_field,
    read_audio_upload,
    run_evaluation_pipeline,
)
from speaking_api.services.errors import CoachError
from speaking_api.views import ErrorResponse, Evaluation

router = APIRouter(prefix="/api", tags=["evaluation"])

logger = logging.getLogger(__name__)

_AUDIO_FILE_UPLOAD = File(None)
_SCENARIO_FORM = Form(None)


@router.post(
    "/evaluate",
    response_model=Evaluation,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def evaluate(
    api_key: ApiKeyDep = None,
    audio: UploadFile | None = _AUDIO_FILE_UPLOAD,
    scenario: str | None = _SCENARIO_FORM,
) -> Evaluation:
    """Transcribe the recording and evaluate it against the scenario."""

    upload = await read_audio_upload(audio)
    current_scenario = parse_scenario_field(scenario)

    try:
        evaluation = await run_evaluation_pipeline(upload, current_scenario, api_key=api_key)
    except CoachError as exc:
        logger.exception("Evaluation error")
        raise handler_failure("Failed to evaluate speech", exc) from exc

    logger.info(
        "Evaluation served file=%s overall=%.1f",
        upload.filename,
        evaluation.scores.overall,
    )
    return evaluation

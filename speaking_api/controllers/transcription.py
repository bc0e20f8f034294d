"""Audio transcription endpoint (useful on its own for debugging recordings)."""

import logging

from fastapi import APIRouter, File, UploadFile

from speaking_api.controllers.dependencies import ApiKeyDep, handler_failure
from speaking_api.pipelines.speaking import read_audio_upload, transcribe_audio
from speaking_api.services.errors import CoachError
from speaking_api.views import ErrorResponse, Transcription

router = APIRouter(prefix="/api", tags=["transcription"])

logger = logging.getLogger(__name__)

_AUDIO_FILE_UPLOAD = File(None)


@router.post(
    "/transcribe",
    response_model=Transcription,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def transcribe(
    api_key: ApiKeyDep = None,
    audio: UploadFile | None = _AUDIO_FILE_UPLOAD,
) -> Transcription:
    """Transcribe an uploaded recording with word-level timestamps."""

    upload = await read_audio_upload(audio)
    try:
        return await transcribe_audio(upload, api_key=api_key, language_code="en")
    except CoachError as exc:
        logger.exception("Transcription error")
        raise handler_failure("Failed to transcribe audio", exc) from exc

"""Transcription stage of the speaking pipeline."""

from __future__ import annotations

import logging
from typing import Any

from speaking_api.services import openai_client
from speaking_api.services.credentials import resolve_api_key
from speaking_api.services.errors import CoachError, CoachValidationError
from speaking_api.views.speaking import Transcription

from .types import ensure_audio_upload

logger = logging.getLogger("speaking_api.pipeline")
transcript_logger = logging.getLogger("speaking_api.logs.transcript")


async def transcribe_audio(
    audio: Any,
    api_key: str | None = None,
    language_code: str = "en",
) -> Transcription:
    """Resolve the credential, validate the upload and run speech-to-text."""

    resolved_key = resolve_api_key(api_key)
    upload = ensure_audio_upload(audio)
    if not isinstance(language_code, str) or not language_code.strip():
        raise CoachValidationError("Invalid language code", details="language code is required")

    try:
        transcription = await openai_client.transcribe(
            resolved_key,
            bytes(upload.content),
            filename=upload.provider_filename,
            language_code=language_code.strip(),
        )
    except CoachError as exc:
        logger.error("Transcription failed file=%s: %s", upload.filename, exc)
        raise

    word_count = len(transcription.words) if transcription.words else 0
    logger.info(
        "Transcription complete file=%s bytes=%s words=%s",
        upload.filename,
        upload.size,
        word_count,
    )
    transcript_logger.info("learner | file=%s | text=%s", upload.filename, transcription.text)
    return transcription


__all__ = ["transcribe_audio"]

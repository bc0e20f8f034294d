"""Request ingestion helpers (first stage of the speaking pipeline)."""

from __future__ import annotations

import mimetypes
import os
from typing import Final

from fastapi import HTTPException, UploadFile, status
from pydantic import ValidationError

from speaking_api.config.settings import settings
from speaking_api.services.response_contract import describe_validation_error
from speaking_api.views.speaking import Scenario

from .types import AudioUpload

# Formats accepted by the Whisper endpoint.
_ALLOWED_CONTENT_TYPES: Final[set[str]] = {
    "audio/flac",
    "audio/x-flac",
    "audio/m4a",
    "audio/x-m4a",
    "audio/mp3",
    "audio/mp4",
    "audio/mpeg",
    "audio/mpga",
    "audio/ogg",
    "audio/wav",
    "audio/wave",
    "audio/x-wav",
    "audio/webm",
    "video/mp4",
    "video/webm",
}
_ALLOWED_EXTENSIONS: Final[set[str]] = {
    ".flac",
    ".m4a",
    ".mp3",
    ".mp4",
    ".mpeg",
    ".mpga",
    ".oga",
    ".ogg",
    ".wav",
    ".webm",
}


def resolve_content_type(audio_file: UploadFile) -> str:
    """Accept Whisper-compatible uploads, falling back to the filename extension."""

    declared = (audio_file.content_type or "").split(";", 1)[0].strip().lower()
    if declared in _ALLOWED_CONTENT_TYPES:
        return declared

    filename = audio_file.filename or ""
    extension = os.path.splitext(filename)[1].lower()
    if extension in _ALLOWED_EXTENSIONS:
        guessed_type, _ = mimetypes.guess_type(filename)
        return guessed_type or declared or "application/octet-stream"

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Unsupported audio format. Use mp3, mp4, m4a, wav, webm, ogg or flac.",
    )


async def read_audio_upload(audio_file: UploadFile | None) -> AudioUpload:
    """Load the upload fully into memory, rejecting missing, empty or oversized payloads."""

    if audio_file is None or not audio_file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No audio file provided",
        )

    content_type = resolve_content_type(audio_file)
    limit = settings.max_upload_bytes
    audio_bytes = await audio_file.read(limit + 1)
    await audio_file.close()

    if not audio_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded audio file is empty",
        )
    if len(audio_bytes) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded audio file exceeds the {limit // (1024 * 1024)} MB limit",
        )
    return AudioUpload(
        filename=audio_file.filename,
        content=audio_bytes,
        content_type=content_type,
    )


def parse_scenario_field(raw: str | None) -> Scenario:
    """Decode the JSON-encoded ``scenario`` form field."""

    if raw is None or not raw.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No scenario provided",
        )
    try:
        return Scenario.model_validate_json(raw)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid scenario JSON", "details": describe_validation_error(exc)},
        ) from exc


__all__ = ["parse_scenario_field", "read_audio_upload", "resolve_content_type"]

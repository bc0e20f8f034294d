"""Typed containers shared across the speaking pipeline.

These live in their own module so the ingestion, transcription and agent
layers can import them without creating circular dependencies.
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from typing import Any

from speaking_api.services.errors import CoachValidationError, InvalidInputError

# Extensions Whisper recognises; mimetypes has no entry for several of these.
_EXTENSION_BY_CONTENT_TYPE = {
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
    "audio/m4a": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/mp3": ".mp3",
    "audio/mpeg": ".mp3",
    "audio/mpga": ".mpga",
    "audio/mp4": ".m4a",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
    "audio/wave": ".wav",
    "audio/x-wav": ".wav",
    "audio/webm": ".webm",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
}


@dataclass(frozen=True)
class AudioUpload:
    """Raw audio bytes plus the filename the provider uses to detect the format."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def provider_filename(self) -> str:
        """Filename sent upstream, with an extension derived from the content type if missing.

        Browsers upload recorded blobs as ``blob``; the provider detects the
        format from the extension only.
        """

        if os.path.splitext(self.filename)[1] or not self.content_type:
            return self.filename
        extension = _EXTENSION_BY_CONTENT_TYPE.get(self.content_type) or mimetypes.guess_extension(
            self.content_type
        )
        return f"{self.filename}{extension}" if extension else self.filename


def ensure_audio_upload(audio: Any) -> AudioUpload:
    """Reject anything that is not a named, non-empty ``AudioUpload``."""

    if not isinstance(audio, AudioUpload):
        raise InvalidInputError(
            "Invalid audio input",
            details=f"expected an uploaded audio file, got {type(audio).__name__}",
        )
    if not isinstance(audio.filename, str) or not audio.filename.strip():
        raise InvalidInputError("Invalid audio input", details="audio file has no name")
    if not isinstance(audio.content, (bytes, bytearray)):
        raise InvalidInputError("Invalid audio input", details="audio content is not bytes")
    if not audio.content:
        raise InvalidInputError("Invalid audio input", details="audio file is empty")
    return audio


def check_temperature(temperature: float) -> float:
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        raise CoachValidationError("Invalid temperature", details="temperature must be a number")
    if not 0.0 <= temperature <= 1.0:
        raise CoachValidationError(
            "Invalid temperature",
            details=f"temperature must be between 0 and 1, got {temperature}",
        )
    return float(temperature)


__all__ = ["AudioUpload", "check_temperature", "ensure_audio_upload"]

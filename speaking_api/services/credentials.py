"""OpenAI credential resolution."""

from __future__ import annotations

import os

from speaking_api.config.settings import settings

from .errors import CredentialMissingError

API_KEY_ENV = "OPENAI_API_KEY"


def resolve_api_key(explicit: str | None = None) -> str:
    """Pick the explicit key, then the process environment, then ``.env`` config."""

    configured = settings.openai.api_key
    candidates = (
        explicit,
        os.environ.get(API_KEY_ENV),
        configured.get_secret_value() if configured is not None else None,
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    raise CredentialMissingError("OpenAI API key not provided")


__all__ = ["API_KEY_ENV", "resolve_api_key"]

"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Header, HTTPException, status

from speaking_api.services.errors import CoachError, CredentialMissingError

API_KEY_HEADER = "X-OpenAI-Api-Key"

# Optional pass-through credential; the configured OPENAI_API_KEY applies when absent.
ApiKeyDep = Annotated[str | None, Header(alias=API_KEY_HEADER)]


def handler_failure(summary: str, exc: CoachError) -> HTTPException:
    """Map a capability-handler failure to the JSON 500 body clients expect."""

    if isinstance(exc, CredentialMissingError):
        detail = {"error": "OpenAI API key not configured"}
    else:
        detail = {"error": summary, "details": str(exc)}
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )


__all__ = ["API_KEY_HEADER", "ApiKeyDep", "handler_failure"]

"""Error taxonomy shared by the speaking pipeline, the HTTP layer and the agent tools.

Every failure raised by a capability handler derives from :class:`CoachError`
so controllers can map the whole family to a single response shape. The
``details`` attribute carries the upstream or validation message that is safe
to show to clients.
"""

from __future__ import annotations


class CoachError(RuntimeError):
    """Base class for failures raised while serving a speaking request."""

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details and self.details not in self.message:
            return f"{self.message}: {self.details}"
        return self.message


class CredentialMissingError(CoachError):
    """Raised when no OpenAI API key can be resolved for a request."""


class CoachValidationError(CoachError):
    """Raised when an input or a structured payload breaks its contract."""


class ResponseContractError(CoachValidationError):
    """Raised when the model output does not satisfy the schema registry."""


class InvalidInputError(CoachError):
    """Raised when an input has the wrong shape (e.g. not an audio upload)."""


class UpstreamError(CoachError):
    """Raised when the language-model provider call fails."""


class TranscriptionError(UpstreamError):
    """Raised when the speech-to-text call fails."""


class EmptyResponseError(UpstreamError):
    """Raised when the provider returns no content."""


class ParseError(UpstreamError):
    """Raised when the provider content is not valid JSON."""


__all__ = [
    "CoachError",
    "CredentialMissingError",
    "CoachValidationError",
    "ResponseContractError",
    "InvalidInputError",
    "UpstreamError",
    "TranscriptionError",
    "EmptyResponseError",
    "ParseError",
]

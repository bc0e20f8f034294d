"""Service layer helpers for external integrations."""

from .credentials import resolve_api_key
from .errors import (
    CoachError,
    CoachValidationError,
    CredentialMissingError,
    EmptyResponseError,
    InvalidInputError,
    ParseError,
    ResponseContractError,
    TranscriptionError,
    UpstreamError,
)
from .openai_client import (
    OpenAIClientRegistry,
    close_clients,
    complete_structured,
    get_client,
    get_client_registry,
    transcribe,
)
from .response_contract import inline_json_schema, parse_contract, strict_json_schema

__all__ = [
    "CoachError",
    "CoachValidationError",
    "CredentialMissingError",
    "EmptyResponseError",
    "InvalidInputError",
    "OpenAIClientRegistry",
    "ParseError",
    "ResponseContractError",
    "TranscriptionError",
    "UpstreamError",
    "close_clients",
    "complete_structured",
    "get_client",
    "get_client_registry",
    "inline_json_schema",
    "parse_contract",
    "resolve_api_key",
    "strict_json_schema",
    "transcribe",
]

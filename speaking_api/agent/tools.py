"""Speaking capabilities exposed as tools for an autonomous agent.

Each tool wraps one capability handler with a pydantic input/output contract,
so an agent framework can call the same code paths as the HTTP router.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from speaking_api.pipelines.speaking import (
    AudioUpload,
    evaluate_speech,
    generate_scenario,
    transcribe_audio,
)
from speaking_api.services.errors import CoachValidationError
from speaking_api.services.response_contract import (
    describe_validation_error,
    inline_json_schema,
)
from speaking_api.views.speaking import Evaluation, Scenario, Transcription

# Credentials come from the caller, never from the model.
_HIDDEN_PARAMETERS = ("apiKey",)


class _ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    api_key: Optional[str] = Field(
        default=None,
        alias="apiKey",
        description="Optional OpenAI API key override",
    )


class ScenarioToolInput(_ToolInput):
    temperature: float = Field(
        default=0.9,
        ge=0,
        le=1,
        description="Sampling temperature for scenario creativity",
    )


class EvaluationToolInput(_ToolInput):
    scenario: Scenario = Field(..., description="Scenario used for the student's response")
    transcription: str = Field(
        ...,
        min_length=1,
        description="Transcribed student response",
    )
    temperature: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Sampling temperature when generating evaluation",
    )


class TranscribeToolInput(_ToolInput):
    audio_base64: str = Field(
        ...,
        alias="audioBase64",
        min_length=1,
        description="Base64-encoded audio file to transcribe",
    )
    filename: str = Field(
        default="recording.webm",
        min_length=1,
        description="Original filename; its extension tells the provider the format",
    )
    language: str = Field(default="en", description="Language code (e.g., 'en' for English)")


@dataclass(frozen=True)
class Tool:
    """One agent-callable capability."""

    id: str
    description: str
    input_model: Type[_ToolInput]
    output_model: Type[BaseModel]
    execute: Callable[[Any], Awaitable[BaseModel]]

    def definition(self) -> Dict[str, Any]:
        """Render the OpenAI function-tool specification."""

        parameters = inline_json_schema(self.input_model)
        parameters.pop("title", None)
        properties = parameters.get("properties", {})
        for hidden in _HIDDEN_PARAMETERS:
            properties.pop(hidden, None)
        parameters["required"] = [
            name for name in parameters.get("required", []) if name in properties
        ]
        return {
            "type": "function",
            "function": {
                "name": self.id,
                "description": self.description,
                "parameters": parameters,
            },
        }


async def _run_generate_scenario(payload: ScenarioToolInput) -> Scenario:
    return await generate_scenario(api_key=payload.api_key, temperature=payload.temperature)


async def _run_evaluate_speech(payload: EvaluationToolInput) -> Evaluation:
    return await evaluate_speech(
        payload.scenario,
        payload.transcription,
        api_key=payload.api_key,
        temperature=payload.temperature,
    )


async def _run_transcribe(payload: TranscribeToolInput) -> Transcription:
    try:
        audio_bytes = base64.b64decode(payload.audio_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CoachValidationError("Invalid audio input", details="audioBase64 is not valid base64") from exc
    upload = AudioUpload(filename=payload.filename, content=audio_bytes)
    return await transcribe_audio(upload, api_key=payload.api_key, language_code=payload.language)


GENERATE_SCENARIO_TOOL = Tool(
    id="generate_scenario",
    description="Generate a creative ESL speaking practice scenario with context, category, and difficulty.",
    input_model=ScenarioToolInput,
    output_model=Scenario,
    execute=_run_generate_scenario,
)

EVALUATE_SPEECH_TOOL = Tool(
    id="evaluate_spoken_english",
    description="Evaluate a spoken English response, returning structured scores, feedback, and next scenario.",
    input_model=EvaluationToolInput,
    output_model=Evaluation,
    execute=_run_evaluate_speech,
)

TRANSCRIBE_TOOL = Tool(
    id="transcribe_audio",
    description=(
        "Convert speech audio to text using OpenAI Whisper. "
        "Returns transcribed text with optional word-level timestamps."
    ),
    input_model=TranscribeToolInput,
    output_model=Transcription,
    execute=_run_transcribe,
)

TOOLS: Dict[str, Tool] = {
    tool.id: tool
    for tool in (GENERATE_SCENARIO_TOOL, EVALUATE_SPEECH_TOOL, TRANSCRIBE_TOOL)
}


def tool_definitions(tools: Mapping[str, Tool] | None = None) -> List[Dict[str, Any]]:
    return [tool.definition() for tool in (tools or TOOLS).values()]


async def run_tool(
    tool_id: str,
    arguments: Mapping[str, Any] | str | None,
    *,
    api_key: str | None = None,
    tools: Mapping[str, Tool] | None = None,
) -> Dict[str, Any]:
    """Validate ``arguments`` for ``tool_id``, execute it and return the wire dict.

    When ``api_key`` is given it replaces any ``apiKey`` in ``arguments``, so a
    model-originated call can never pick the credential.
    """

    registry = tools or TOOLS
    tool = registry.get(tool_id)
    if tool is None:
        raise CoachValidationError("Unknown tool", details=tool_id)

    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments) if arguments.strip() else {}
        except json.JSONDecodeError as exc:
            raise CoachValidationError("Invalid tool arguments", details=str(exc)) from exc
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise CoachValidationError("Invalid tool arguments", details="arguments must be an object")

    try:
        payload = tool.input_model.model_validate(dict(arguments))
    except ValidationError as exc:
        raise CoachValidationError(
            "Invalid tool arguments",
            details=describe_validation_error(exc),
        ) from exc

    if api_key is not None:
        payload = payload.model_copy(update={"api_key": api_key})

    result = await tool.execute(payload)
    return result.model_dump(by_alias=True, exclude_none=True)


__all__ = [
    "EVALUATE_SPEECH_TOOL",
    "GENERATE_SCENARIO_TOOL",
    "TOOLS",
    "TRANSCRIBE_TOOL",
    "EvaluationToolInput",
    "ScenarioToolInput",
    "Tool",
    "TranscribeToolInput",
    "run_tool",
    "tool_definitions",
]

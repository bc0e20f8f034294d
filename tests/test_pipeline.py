"""Capability handlers and the transcribe-then-evaluate pipeline."""

from __future__ import annotations

import httpx
import openai
import pytest
from pydantic import SecretStr

from speaking_api.config.settings import settings
from speaking_api.pipelines.speaking import (
    AudioUpload,
    evaluate_speech,
    generate_scenario,
    run_evaluation_pipeline,
    transcribe_audio,
)
from speaking_api.services.credentials import resolve_api_key
from speaking_api.services.errors import (
    CoachValidationError,
    CredentialMissingError,
    InvalidInputError,
    ResponseContractError,
    TranscriptionError,
)

from tests.fakes import SCENARIO_PAYLOAD, evaluation_payload

AUDIO = AudioUpload(filename="answer.webm", content=b"\x1aE\xdf\xa3fake", content_type="audio/webm")


@pytest.mark.asyncio
async def test_generate_scenario_returns_model_output(fake_openai, api_key):
    fake_openai.chat_responses.append(SCENARIO_PAYLOAD)

    scenario = await generate_scenario()

    assert scenario.model_dump() == SCENARIO_PAYLOAD
    call = fake_openai.chat_calls[0]
    assert call["temperature"] == 0.9
    assert call["response_format"]["json_schema"]["name"] == "scenario"


@pytest.mark.asyncio
async def test_generate_scenario_rejects_off_schema_output(fake_openai, api_key):
    fake_openai.chat_responses.append({**SCENARIO_PAYLOAD, "difficulty": "expert"})

    with pytest.raises(ResponseContractError):
        await generate_scenario()


@pytest.mark.asyncio
@pytest.mark.parametrize("temperature", [-0.1, 1.5])
async def test_temperature_out_of_range(fake_openai, api_key, temperature):
    with pytest.raises(CoachValidationError):
        await generate_scenario(temperature=temperature)

    assert fake_openai.call_count == 0


@pytest.mark.asyncio
async def test_evaluation_keeps_input_transcript(fake_openai, api_key):
    fake_openai.chat_responses.append(evaluation_payload())

    evaluation = await evaluate_speech(SCENARIO_PAYLOAD, "I want a coffee")

    assert evaluation.transcription == "I want a coffee"
    assert evaluation.scores.overall == 87
    assert fake_openai.chat_calls[0]["temperature"] == 0.7


@pytest.mark.asyncio
async def test_evaluation_fills_missing_points(fake_openai, api_key):
    payload = evaluation_payload()
    del payload["feedback"]["relevance"]["missingPoints"]
    fake_openai.chat_responses.append(payload)

    evaluation = await evaluate_speech(SCENARIO_PAYLOAD, "I want a coffee")

    assert evaluation.feedback.relevance.missing_points == []
    assert evaluation.model_dump(by_alias=True)["feedback"]["relevance"]["missingPoints"] == []


@pytest.mark.asyncio
async def test_evaluation_rejects_out_of_range_score(fake_openai, api_key):
    payload = evaluation_payload()
    payload["scores"]["overall"] = 140
    fake_openai.chat_responses.append(payload)

    with pytest.raises(ResponseContractError):
        await evaluate_speech(SCENARIO_PAYLOAD, "I want a coffee")


@pytest.mark.asyncio
async def test_evaluation_requires_transcript(fake_openai, api_key):
    with pytest.raises(CoachValidationError):
        await evaluate_speech(SCENARIO_PAYLOAD, "   ")

    assert fake_openai.call_count == 0


@pytest.mark.asyncio
async def test_non_audio_input_is_rejected_before_any_call(fake_openai, api_key):
    with pytest.raises(InvalidInputError):
        await transcribe_audio("not an upload")

    with pytest.raises(InvalidInputError):
        await transcribe_audio(AudioUpload(filename="empty.wav", content=b""))

    assert fake_openai.call_count == 0


@pytest.mark.asyncio
async def test_missing_credential_fails_every_handler(fake_openai):
    with pytest.raises(CredentialMissingError):
        await generate_scenario()
    with pytest.raises(CredentialMissingError):
        await evaluate_speech(SCENARIO_PAYLOAD, "hello")
    with pytest.raises(CredentialMissingError):
        await transcribe_audio(AUDIO)
    with pytest.raises(CredentialMissingError):
        await run_evaluation_pipeline(AUDIO, SCENARIO_PAYLOAD)

    assert fake_openai.call_count == 0
    assert fake_openai.clients == []


@pytest.mark.parametrize(
    "upload, expected",
    [
        (AudioUpload(filename="blob", content=b"x", content_type="audio/webm"), "blob.webm"),
        (AudioUpload(filename="take", content=b"x", content_type="audio/x-m4a"), "take.m4a"),
        (AudioUpload(filename="answer.ogg", content=b"x", content_type="audio/webm"), "answer.ogg"),
        (AudioUpload(filename="blob", content=b"x"), "blob"),
    ],
)
def test_provider_filename(upload, expected):
    assert upload.provider_filename == expected


def test_credential_resolution_order(monkeypatch):
    monkeypatch.setattr(settings.openai, "api_key", SecretStr("from-dotenv"))
    assert resolve_api_key() == "from-dotenv"

    monkeypatch.setenv("OPENAI_API_KEY", "from-env")
    assert resolve_api_key() == "from-env"
    assert resolve_api_key("  explicit  ") == "explicit"


@pytest.mark.asyncio
async def test_pipeline_runs_both_stages(fake_openai):
    fake_openai.transcription_responses.append({"text": "I want a coffee"})
    fake_openai.chat_responses.append(evaluation_payload())

    evaluation = await run_evaluation_pipeline(AUDIO, SCENARIO_PAYLOAD, api_key="header-key")

    assert evaluation.transcription == "I want a coffee"
    assert [client.api_key for client in fake_openai.clients] == ["header-key"]
    user_prompt = fake_openai.chat_calls[0]["messages"][1]["content"]
    assert "I want a coffee" in user_prompt


@pytest.mark.asyncio
async def test_pipeline_stops_when_transcription_fails(fake_openai, api_key):
    fake_openai.transcription_responses.append(
        openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1"))
    )

    with pytest.raises(TranscriptionError):
        await run_evaluation_pipeline(AUDIO, SCENARIO_PAYLOAD)

    assert fake_openai.chat_calls == []


@pytest.mark.asyncio
async def test_pipeline_rejects_silent_recording(fake_openai, api_key):
    fake_openai.transcription_responses.append({"text": "  "})

    with pytest.raises(CoachValidationError):
        await run_evaluation_pipeline(AUDIO, SCENARIO_PAYLOAD)

    assert fake_openai.chat_calls == []

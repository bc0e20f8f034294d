"""HTTP routes exercised through the FastAPI test client."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from speaking_api.main import app

from tests.fakes import SCENARIO_PAYLOAD, chat_completion, evaluation_payload


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _audio_file(name: str = "answer.webm", content: bytes = b"fake-webm-bytes", content_type: str = "audio/webm"):
    return {"audio": (name, content, content_type)}


def test_health(client):
    for path in ("/", "/health"):
        response = client.get(path)

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "service": "English Speaking Practice API",
            "version": "1.0.0",
        }


def test_shutdown_closes_openai_clients(fake_openai, api_key):
    fake_openai.chat_responses.append(SCENARIO_PAYLOAD)

    with TestClient(app) as running:
        assert running.get("/api/scenario").status_code == 200
        assert fake_openai.clients[0].closed is False

    assert fake_openai.clients[0].closed is True


def test_metrics_endpoint(client):
    client.get("/health")
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text


def test_scenario_returns_model_output_verbatim(client, fake_openai, api_key):
    fake_openai.chat_responses.append(SCENARIO_PAYLOAD)

    response = client.get("/api/scenario")

    assert response.status_code == 200
    assert response.json() == SCENARIO_PAYLOAD


def test_scenario_without_credential(client, fake_openai):
    response = client.get("/api/scenario")

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key not configured"}
    assert fake_openai.call_count == 0


def test_scenario_uses_header_credential(client, fake_openai):
    fake_openai.chat_responses.append(SCENARIO_PAYLOAD)

    response = client.get("/api/scenario", headers={"X-OpenAI-Api-Key": "sk-from-header"})

    assert response.status_code == 200
    assert fake_openai.clients[0].api_key == "sk-from-header"


def test_evaluate_happy_path(client, fake_openai, api_key):
    fake_openai.transcription_responses.append({"text": "I want a coffee"})
    fake_openai.chat_responses.append(evaluation_payload())

    response = client.post(
        "/api/evaluate",
        data={"scenario": json.dumps(SCENARIO_PAYLOAD)},
        files=_audio_file(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["transcription"] == "I want a coffee"
    assert body["scores"]["overall"] == 87
    assert body["feedback"]["relevance"]["missingPoints"] == ["size of the drink"]
    assert body["nextScenario"]["category"] == "travel"
    assert body["suggestedResponse"].startswith("Hi!")


def test_evaluate_without_audio(client, fake_openai, api_key):
    response = client.post("/api/evaluate", data={"scenario": json.dumps(SCENARIO_PAYLOAD)})

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}
    assert fake_openai.call_count == 0


def test_evaluate_without_scenario(client, fake_openai, api_key):
    response = client.post("/api/evaluate", files=_audio_file())

    assert response.status_code == 400
    assert response.json() == {"error": "No scenario provided"}
    assert fake_openai.call_count == 0


def test_evaluate_with_invalid_scenario_json(client, fake_openai, api_key):
    response = client.post(
        "/api/evaluate",
        data={"scenario": "{not json"},
        files=_audio_file(),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid scenario JSON"
    assert fake_openai.call_count == 0


def test_evaluate_with_empty_audio(client, fake_openai, api_key):
    response = client.post(
        "/api/evaluate",
        data={"scenario": json.dumps(SCENARIO_PAYLOAD)},
        files=_audio_file(content=b""),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Uploaded audio file is empty"}


def test_evaluate_rejects_unsupported_format(client, fake_openai, api_key):
    response = client.post(
        "/api/evaluate",
        data={"scenario": json.dumps(SCENARIO_PAYLOAD)},
        files=_audio_file(name="notes.txt", content_type="text/plain"),
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Unsupported audio format")


def test_evaluate_with_malformed_model_json(client, fake_openai, api_key):
    fake_openai.transcription_responses.append({"text": "I want a coffee"})
    fake_openai.chat_responses.append(chat_completion("{\"scores\": "))

    response = client.post(
        "/api/evaluate",
        data={"scenario": json.dumps(SCENARIO_PAYLOAD)},
        files=_audio_file(),
    )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to evaluate speech"
    assert "invalid JSON" in body["details"]


def test_evaluate_with_out_of_range_score(client, fake_openai, api_key):
    payload = evaluation_payload()
    payload["scores"]["fluency"] = 101
    fake_openai.transcription_responses.append({"text": "I want a coffee"})
    fake_openai.chat_responses.append(payload)

    response = client.post(
        "/api/evaluate",
        data={"scenario": json.dumps(SCENARIO_PAYLOAD)},
        files=_audio_file(),
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to evaluate speech"


def test_transcribe_endpoint(client, fake_openai, api_key):
    fake_openai.transcription_responses.append(
        {"text": "hello there", "words": [{"word": "hello", "start": 0.0, "end": 0.4}]}
    )

    response = client.post("/api/transcribe", files=_audio_file(name="clip.mp3", content_type="audio/mpeg"))

    assert response.status_code == 200
    assert response.json() == {
        "text": "hello there",
        "words": [{"word": "hello", "start": 0.0, "end": 0.4}],
    }


def test_transcribe_omits_missing_words(client, fake_openai, api_key):
    fake_openai.transcription_responses.append({"text": "hello"})

    response = client.post("/api/transcribe", files=_audio_file())

    assert response.status_code == 200
    assert response.json() == {"text": "hello"}


def test_transcribe_names_browser_blob_by_content_type(client, fake_openai, api_key):
    fake_openai.transcription_responses.append({"text": "hello"})

    response = client.post(
        "/api/transcribe",
        files=_audio_file(name="blob", content=b"webm-bytes", content_type="audio/webm;codecs=opus"),
    )

    assert response.status_code == 200
    assert fake_openai.transcription_calls[0]["file"] == ("blob.webm", b"webm-bytes")


def test_transcribe_without_audio(client, fake_openai, api_key):
    response = client.post("/api/transcribe")

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}

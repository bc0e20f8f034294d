"""Fake OpenAI client and canned payloads used across the test suite."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List

SCENARIO_PAYLOAD: Dict[str, Any] = {
    "prompt": "Order a drink at a busy coffee shop.",
    "context": "You are in a hurry and the barista asks about sizes.",
    "category": "dining",
    "difficulty": "beginner",
}


def evaluation_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "transcription": "model echo that must be discarded",
        "scores": {
            "pronunciation": 85,
            "grammar": 90,
            "relevance": 95,
            "fluency": 80,
            "overall": 87,
        },
        "feedback": {
            "grammar": [
                {
                    "original": "I want a coffee",
                    "correction": "I would like a coffee",
                    "explanation": "'Would like' sounds more polite when ordering.",
                    "severity": "minor",
                }
            ],
            "pronunciation": [
                {
                    "word": "coffee",
                    "issue": "Stress on the second syllable",
                    "suggestion": "Stress the first syllable: COF-fee",
                    "commonMistake": "",
                }
            ],
            "relevance": {
                "isRelevant": True,
                "analysis": "The learner ordered a drink as asked.",
                "missingPoints": ["size of the drink"],
            },
            "fluency": {
                "issues": ["Very short answer"],
                "suggestions": ["Add a greeting and a size"],
            },
        },
        "suggestedResponse": "Hi! Could I get a medium latte, please?",
        "summary": "Nice and clear. Try adding more detail next time.",
        "nextScenario": {
            "prompt": "Ask a hotel receptionist for a late checkout.",
            "context": "Your flight leaves in the evening.",
            "category": "travel",
            "difficulty": "intermediate",
        },
    }
    payload.update(overrides)
    return payload


def chat_completion(content: str | None = None, *, tool_calls: List[Any] | None = None, refusal: str | None = None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls, refusal=refusal)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_call(call_id: str, name: str, arguments: Dict[str, Any] | str):
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return SimpleNamespace(id=call_id, type="function", function=SimpleNamespace(name=name, arguments=raw))


class FakeOpenAIBackend:
    """Scripted responses shared by every fake client built during a test.

    Queued items are returned in order. An ``Exception`` instance is raised,
    a ``dict`` chat item is JSON-encoded as the message content, a ``str`` is
    used verbatim and anything else is returned as the raw response object.
    """

    def __init__(self) -> None:
        self.chat_responses: List[Any] = []
        self.transcription_responses: List[Any] = []
        self.chat_calls: List[Dict[str, Any]] = []
        self.transcription_calls: List[Dict[str, Any]] = []
        self.clients: List["FakeAsyncOpenAI"] = []

    @property
    def call_count(self) -> int:
        return len(self.chat_calls) + len(self.transcription_calls)

    async def create_chat(self, **kwargs: Any) -> Any:
        self.chat_calls.append(kwargs)
        response = self.chat_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return chat_completion(json.dumps(response))
        if isinstance(response, str):
            return chat_completion(response)
        return response

    async def create_transcription(self, **kwargs: Any) -> Any:
        self.transcription_calls.append(kwargs)
        response = self.transcription_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return SimpleNamespace(**response)
        return response


class FakeAsyncOpenAI:
    def __init__(self, backend: FakeOpenAIBackend, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.api_key = kwargs.get("api_key")
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=backend.create_chat))
        self.closed = False
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=backend.create_transcription))
        backend.clients.append(self)

    async def close(self) -> None:
        self.closed = True


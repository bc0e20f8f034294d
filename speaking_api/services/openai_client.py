"""Thin OpenAI client wrapper for transcription and structured chat completions."""

from __future__ import annotations

import json
import logging
import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Dict, Mapping, Optional

import openai
from openai import AsyncOpenAI

from speaking_api.config.settings import settings
from speaking_api.telemetry import observe_upstream_call
from speaking_api.views.speaking import Transcription

from .errors import EmptyResponseError, ParseError, TranscriptionError, UpstreamError
from .response_contract import parse_contract

logger = logging.getLogger(__name__)


class OpenAIClientRegistry:
    """Process-lifetime cache of ``AsyncOpenAI`` handles keyed by credential.

    Each credential owns its handle, so a request using one key never sees a
    handle rebuilt for another key. The oldest handle is dropped once the
    cache grows past ``max_size``; requests already holding it keep working.
    """

    def __init__(self, max_size: int | None = None) -> None:
        self._max_size = max_size or settings.openai.client_cache_size
        self._clients: "OrderedDict[str, AsyncOpenAI]" = OrderedDict()
        self._lock = Lock()

    def get_client(self, api_key: str) -> AsyncOpenAI:
        """Return the cached handle for ``api_key``, creating it on first use."""

        with self._lock:
            client = self._clients.get(api_key)
            if client is not None:
                self._clients.move_to_end(api_key)
                return client

            client = AsyncOpenAI(
                api_key=api_key,
                base_url=settings.openai.base_url,
                timeout=settings.openai.timeout_seconds,
                max_retries=0,
            )
            self._clients[api_key] = client
            while len(self._clients) > self._max_size:
                self._clients.popitem(last=False)
            return client

    def reset(self) -> None:
        with self._lock:
            self._clients.clear()

    async def aclose(self) -> None:
        """Close and drop every cached handle, releasing their connection pools."""

        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            await client.close()

    def __len__(self) -> int:
        return len(self._clients)


_REGISTRY = OpenAIClientRegistry()


def get_client_registry() -> OpenAIClientRegistry:
    return _REGISTRY


def get_client(api_key: str) -> AsyncOpenAI:
    """Return the process-wide handle for ``api_key``."""

    return _REGISTRY.get_client(api_key)


async def close_clients() -> None:
    await _REGISTRY.aclose()


async def transcribe(
    api_key: str,
    audio_bytes: bytes,
    *,
    filename: str,
    language_code: str = "en",
) -> Transcription:
    """Run speech-to-text with word-level timestamps.

    Provider failures surface as ``TranscriptionError`` carrying the upstream
    message. Nothing is retried.
    """

    client = get_client(api_key)
    started = time.perf_counter()
    try:
        response = await client.audio.transcriptions.create(
            file=(filename, audio_bytes),
            model=settings.openai.transcription_model,
            language=language_code,
            response_format="verbose_json",
            timestamp_granularities=["word"],
        )
    except openai.OpenAIError as exc:
        observe_upstream_call("transcribe", type(exc).__name__, time.perf_counter() - started)
        logger.warning("Whisper transcription failed file=%s: %s", filename, exc.__class__.__name__)
        raise TranscriptionError(
            "Failed to transcribe audio",
            details=_upstream_message(exc, api_key),
        ) from exc

    observe_upstream_call("transcribe", "ok", time.perf_counter() - started)

    words = getattr(response, "words", None)
    payload: Dict[str, Any] = {"text": getattr(response, "text", None) or ""}
    if words is not None:
        payload["words"] = [_word_payload(item) for item in words]
    return parse_contract(Transcription, payload)


async def complete_structured(
    api_key: str,
    system_text: str,
    user_text: str,
    json_schema: Mapping[str, Any],
    temperature: float,
    *,
    schema_name: str = "structured_output",
    model: Optional[str] = None,
) -> Any:
    """Ask the chat model for output constrained to ``json_schema``.

    Returns the decoded JSON. Validation against the schema registry is left
    to the caller.
    """

    client = get_client(api_key)
    started = time.perf_counter()
    try:
        completion = await client.chat.completions.create(
            model=model or settings.openai.chat_model,
            messages=[
                {"role": "system", "content": system_text},
                {"role": "user", "content": user_text},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "strict": True,
                    "schema": dict(json_schema),
                },
            },
            temperature=temperature,
        )
    except openai.OpenAIError as exc:
        observe_upstream_call("complete_structured", type(exc).__name__, time.perf_counter() - started)
        logger.warning("Chat completion failed schema=%s: %s", schema_name, exc.__class__.__name__)
        raise UpstreamError(
            "OpenAI request failed",
            details=_upstream_message(exc, api_key),
        ) from exc

    observe_upstream_call("complete_structured", "ok", time.perf_counter() - started)

    message = completion.choices[0].message if completion.choices else None
    content = getattr(message, "content", None)
    if not content:
        refusal = getattr(message, "refusal", None)
        raise EmptyResponseError("No response from OpenAI", details=refusal or None)

    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError("OpenAI returned invalid JSON", details=str(exc)) from exc


def _word_payload(item: Any) -> Dict[str, Any]:
    if isinstance(item, Mapping):
        return {"word": item.get("word"), "start": item.get("start"), "end": item.get("end")}
    return {
        "word": getattr(item, "word", None),
        "start": getattr(item, "start", None),
        "end": getattr(item, "end", None),
    }


def _upstream_message(exc: Exception, api_key: str) -> str:
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    if api_key and api_key in message:
        message = message.replace(api_key, "***")
    return message


__all__ = [
    "OpenAIClientRegistry",
    "close_clients",
    "complete_structured",
    "get_client",
    "get_client_registry",
    "transcribe",
]

"""Tool-calling speaking coach built on the OpenAI chat completions API."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import openai

from speaking_api.config.settings import settings
from speaking_api.services import openai_client
from speaking_api.services.credentials import resolve_api_key
from speaking_api.services.errors import CoachError, EmptyResponseError, UpstreamError
from speaking_api.telemetry import observe_upstream_call

from .tools import TOOLS, Tool, run_tool

logger = logging.getLogger("speaking_api.pipeline")

COACH_INSTRUCTIONS = """You are an encouraging ESL speaking coach. Use the provided tools to:
- Generate creative practice scenarios when the learner needs something new.
- Transcribe uploaded audio before evaluating it.
- Evaluate the transcription with detailed feedback and scores.

Always be supportive, actionable, and reference the feedback returned by the tools."""


@dataclass
class ToolCallRecord:
    tool: str
    arguments: str
    result: Dict[str, Any]
    failed: bool = False


@dataclass
class AgentReply:
    text: str
    tool_calls: List[ToolCallRecord] = field(default_factory=list)


class SpeakingCoachAgent:
    """Conversational coach that can call the speaking tools on its own.

    ``respond`` alternates between the chat model and local tool execution
    until the model answers with plain text or ``max_steps`` rounds pass.
    """

    name = "speaking-coach"
    description = (
        "Helps ESL learners practise speaking, evaluate responses, and suggest new scenarios."
    )

    def __init__(
        self,
        *,
        model: Optional[str] = None,
        instructions: str = COACH_INSTRUCTIONS,
        tools: Optional[Mapping[str, Tool]] = None,
        max_steps: int = 5,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.model = model or settings.openai.agent_model
        self.instructions = instructions
        self.tools = dict(tools or TOOLS)
        self.max_steps = max_steps

    def tool_definitions(self) -> List[Dict[str, Any]]:
        return [tool.definition() for tool in self.tools.values()]

    async def respond(
        self,
        messages: Sequence[Mapping[str, Any]],
        api_key: Optional[str] = None,
    ) -> AgentReply:
        resolved_key = resolve_api_key(api_key)
        client = openai_client.get_client(resolved_key)

        conversation: List[Dict[str, Any]] = [{"role": "system", "content": self.instructions}]
        conversation.extend(dict(message) for message in messages)
        records: List[ToolCallRecord] = []

        for step in range(self.max_steps):
            started = time.perf_counter()
            try:
                completion = await client.chat.completions.create(
                    model=self.model,
                    messages=conversation,
                    tools=self.tool_definitions(),
                )
            except openai.OpenAIError as exc:
                observe_upstream_call("agent", type(exc).__name__, time.perf_counter() - started)
                raise UpstreamError("OpenAI request failed", details=str(exc)) from exc
            observe_upstream_call("agent", "ok", time.perf_counter() - started)

            message = completion.choices[0].message if completion.choices else None
            if message is None:
                raise EmptyResponseError("No response from OpenAI")

            tool_calls = list(getattr(message, "tool_calls", None) or [])
            if not tool_calls:
                return AgentReply(text=message.content or "", tool_calls=records)

            conversation.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in tool_calls
                    ],
                }
            )
            for call in tool_calls:
                record = await self._run_call(call, resolved_key)
                records.append(record)
                conversation.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(record.result),
                    }
                )
            logger.info("Coach step %s ran %s tool call(s)", step + 1, len(tool_calls))

        raise UpstreamError(
            "Agent did not finish",
            details=f"no final answer after {self.max_steps} steps",
        )

    async def _run_call(self, call: Any, api_key: str) -> ToolCallRecord:
        name = call.function.name
        arguments = call.function.arguments or ""
        try:
            result = await run_tool(name, arguments, api_key=api_key, tools=self.tools)
        except CoachError as exc:
            logger.warning("Coach tool %s failed: %s", name, exc)
            return ToolCallRecord(tool=name, arguments=arguments, result={"error": str(exc)}, failed=True)
        return ToolCallRecord(tool=name, arguments=arguments, result=result)


__all__ = ["AgentReply", "COACH_INSTRUCTIONS", "SpeakingCoachAgent", "ToolCallRecord"]

"""Agent-facing wrappers around the speaking capabilities."""

from .coach import AgentReply, SpeakingCoachAgent
from .tools import TOOLS, Tool, run_tool, tool_definitions

__all__ = [
    "AgentReply",
    "SpeakingCoachAgent",
    "TOOLS",
    "Tool",
    "run_tool",
    "tool_definitions",
]

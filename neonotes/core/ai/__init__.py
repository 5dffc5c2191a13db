"""AI features for neonotes: the notes agent and its tools."""

from __future__ import annotations

from neonotes.core.ai.agent import (
    EMPTY_REPLY,
    FALLBACK_REPLY,
    AgentAction,
    AgentContext,
    AgentResult,
    run_agent,
)

__all__ = [
    "EMPTY_REPLY",
    "FALLBACK_REPLY",
    "AgentAction",
    "AgentContext",
    "AgentResult",
    "run_agent",
]

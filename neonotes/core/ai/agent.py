"""Natural-language agent that manages notes through tool calls.

One call to ``run_agent`` is one bounded conversation with the model:
each round sends the working message list plus the tool definitions, runs
any requested tools in order and feeds their results back, until the
model answers in plain text or the round limit is reached.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from neonotes.config import get_config
from neonotes.core.llm import Message, ToolResult, get_llm_client

if TYPE_CHECKING:
    from neonotes.core.llm import LLMClient

_logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================


@dataclass(frozen=True)
class AgentAction:
    """One tool invocation in the action trail."""

    tool: str
    input: dict[str, Any]
    result: Any  # JSON-serializable value or {"error": str}

    @property
    def is_error(self) -> bool:
        return isinstance(self.result, dict) and "error" in self.result

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AgentContext:
    """Working state for one agent request.

    ``known_ids`` holds the note ids the model has been shown during this
    request; update and delete are refused for any other id when
    ``require_known_ids`` is set.
    """

    messages: list[Message] = field(default_factory=list)
    actions: list[AgentAction] = field(default_factory=list)
    known_ids: set[int] = field(default_factory=set)
    preview_chars: int = 160
    require_known_ids: bool = True
    input_tokens: int = 0
    output_tokens: int = 0
    rounds: int = 0

    def remember(self, note_ids: Iterable[int]) -> None:
        self.known_ids.update(note_ids)

    def forget(self, note_id: int) -> None:
        self.known_ids.discard(note_id)

    def may_modify(self, note_id: int) -> bool:
        return not self.require_known_ids or note_id in self.known_ids


@dataclass
class AgentResult:
    """Result of one agent request."""

    reply: str
    actions: list[AgentAction] = field(default_factory=list)
    rounds: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    completed: bool = True  # False when the round limit was hit

    def to_dict(self) -> dict[str, Any]:
        """The HTTP response shape: reply plus the action trail."""
        return {
            "reply": self.reply,
            "actions": [a.to_dict() for a in self.actions],
        }


# ============================================================================
# System Prompt
# ============================================================================


AGENT_SYSTEM_PROMPT = """\
You are Neo, a concise assistant that manages the user's personal notes.

Notes have an id, title, text, category ({categories}) and a hex color.

RULES:
1. Use the tools to read or change notes; never invent note contents or ids.
2. If the user refers to a note ambiguously, search or list first, and ask
   for clarification when several notes match before updating or deleting.
3. Only use ids that a tool returned during this conversation.
4. After making changes, summarize exactly what you changed.
5. Keep replies short.

Available tools:
{available_tools}
"""

EMPTY_REPLY = "I don't have anything to add. Check the actions below for what was done."

FALLBACK_REPLY = (
    "I couldn't finish that request within the allowed number of steps. "
    "Some changes may have been made; check the actions below and try again "
    "with a more specific request."
)


def build_system_prompt(extra: str | None = None) -> str:
    """Build the agent's fixed system instruction.

    ``extra`` (the configured ``llm.system_prompt``) is appended after the
    fixed rules and never replaces them.
    """
    from neonotes.core.ai.agent_tools import _format_tools_for_prompt, get_agent_tools
    from neonotes.models import Category

    prompt = AGENT_SYSTEM_PROMPT.format(
        categories=", ".join(Category.values()),
        available_tools=_format_tools_for_prompt(get_agent_tools()),
    )
    if extra and extra.strip():
        prompt += f"\nAdditional instructions:\n{extra.strip()}\n"
    return prompt


# ============================================================================
# History
# ============================================================================


def filter_history(history: object, limit: int | None = None) -> list[Message]:
    """Keep only well-formed user/assistant text turns.

    Malformed entries are dropped silently. When ``limit`` is given only the
    most recent ``limit`` turns survive.
    """
    if not isinstance(history, list):
        return []

    turns = []
    for entry in history:
        if not isinstance(entry, dict):
            continue
        role = entry.get("role")
        content = entry.get("content")
        if role not in ("user", "assistant"):
            continue
        if not isinstance(content, str) or not content.strip():
            continue
        turns.append(Message(role=role, content=content))

    if limit is not None:
        turns = turns[-limit:] if limit > 0 else []
    # Conversations must open with a user turn
    while turns and turns[0].role != "user":
        turns.pop(0)
    return turns


# ============================================================================
# Main Agent Function
# ============================================================================


def _result_content(result: Any) -> str:
    return json.dumps(result, ensure_ascii=False, default=str)


def run_agent(
    message: str,
    history: object = None,
    client: LLMClient | None = None,
) -> AgentResult:
    """Run one natural-language request against the notes.

    Args:
        message: The user's request.
        history: Optional prior turns as ``[{"role", "content"}]`` dicts.
        client: LLM client to use (defaults to one built from config).

    Returns:
        AgentResult with the final reply and every tool call made.

    Raises:
        ValueError: If the message is empty.
        LLMConfigError: If no model credential is configured.
        LLMAPIError: If the model service call fails.
    """
    from neonotes.core.ai.agent_tools import execute_agent_tool, get_agent_tools

    if not isinstance(message, str) or not message.strip():
        raise ValueError("Message must be a non-empty string")

    config = get_config()
    agent_config = config.agent
    if client is None:
        client = get_llm_client()

    tools = get_agent_tools()
    system_prompt = build_system_prompt(config.llm.system_prompt)

    context = AgentContext(
        preview_chars=agent_config.preview_chars,
        require_known_ids=agent_config.require_known_ids,
    )
    context.messages.extend(filter_history(history, agent_config.max_history))
    context.messages.append(Message(role="user", content=message.strip()))

    while context.rounds < agent_config.max_rounds:
        context.rounds += 1
        _logger.debug("Agent round %d/%d", context.rounds, agent_config.max_rounds)

        response = client.complete(
            messages=context.messages,
            system=system_prompt,
            tools=tools,
            temperature=agent_config.temperature,
        )
        context.input_tokens += response.input_tokens
        context.output_tokens += response.output_tokens

        if not response.tool_calls:
            return AgentResult(
                reply=response.content.strip() or EMPTY_REPLY,
                actions=list(context.actions),
                rounds=context.rounds,
                input_tokens=context.input_tokens,
                output_tokens=context.output_tokens,
            )

        context.messages.append(
            Message(
                role="assistant",
                content=response.content,
                tool_calls=response.tool_calls,
            )
        )

        for tool_call in response.tool_calls:
            _logger.debug("Dispatching %s %s", tool_call.name, tool_call.arguments)
            tool_input, result = execute_agent_tool(
                tool_call.name, tool_call.arguments, context
            )
            action = AgentAction(tool=tool_call.name, input=tool_input, result=result)
            context.actions.append(action)
            context.messages.append(
                Message(
                    role="tool",
                    content="",
                    tool_result=ToolResult(
                        tool_call_id=tool_call.id,
                        content=_result_content(result),
                        is_error=action.is_error,
                    ),
                )
            )

    _logger.info(
        "Agent stopped after %d rounds with %d actions",
        context.rounds,
        len(context.actions),
    )
    return AgentResult(
        reply=FALLBACK_REPLY,
        actions=list(context.actions),
        rounds=context.rounds,
        input_tokens=context.input_tokens,
        output_tokens=context.output_tokens,
        completed=False,
    )

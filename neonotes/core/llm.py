"""LLM client abstraction for the notes agent.

Uses httpx for direct API calls (not SDK) to keep the server light.
Supports Anthropic Claude and OpenAI GPT models with tool calling.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from neonotes.config import LLMConfig

_logger = logging.getLogger(__name__)

# API endpoints
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

# Anthropic API version
ANTHROPIC_VERSION = "2023-06-01"

# Default timeout for API calls (seconds)
DEFAULT_TIMEOUT = 120.0


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class LLMConfigError(LLMError):
    """Configuration error (e.g., missing API key)."""

    pass


class LLMAPIError(LLMError):
    """API request error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMRateLimitError(LLMAPIError):
    """Rate limit exceeded."""

    pass


@dataclass
class ToolDefinition:
    """Definition of a tool the LLM can call."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema for parameters


@dataclass
class ToolCall:
    """A tool call requested by the LLM.

    ``arguments`` is an empty dict when the model sent malformed JSON.
    """

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass
class ToolResult:
    """Result of a tool call to send back to the LLM."""

    tool_call_id: str
    content: str
    is_error: bool = False


@dataclass
class Message:
    """A message in a conversation."""

    role: str  # "user", "assistant", "system", or "tool"
    content: str
    tool_calls: list[ToolCall] | None = None  # For assistant messages with tool calls
    tool_result: ToolResult | None = None  # For tool result messages


@dataclass
class LLMResponse:
    """Response from an LLM API call."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    stop_reason: str | None = None
    tool_calls: list[ToolCall] | None = None  # Tools the LLM wants to call


def _decode_arguments(raw: Any) -> dict[str, Any]:
    """Decode tool arguments, treating anything but a JSON object as empty."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw or "{}")
        except json.JSONDecodeError:
            _logger.debug("Malformed tool arguments: %r", raw)
            return {}
        if isinstance(decoded, dict):
            return decoded
    return {}


class LLMClient:
    """Provider-agnostic LLM client.

    Supports Anthropic Claude and OpenAI GPT models via direct REST API calls.
    """

    def __init__(self, config: LLMConfig):
        """Initialize the LLM client.

        Args:
            config: LLM configuration from neonotes config.

        Raises:
            LLMConfigError: If API key is not configured.
        """
        self.config = config
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate the configuration."""
        if self.config.provider not in ("anthropic", "openai"):
            raise LLMConfigError(
                f"Unknown LLM provider '{self.config.provider}'. "
                "Use 'anthropic' or 'openai'."
            )
        if not self.config.api_key:
            env_var = (
                "ANTHROPIC_API_KEY"
                if self.config.provider == "anthropic"
                else "OPENAI_API_KEY"
            )
            raise LLMConfigError(
                f"No API key configured. Set the {env_var} environment variable "
                f"or add it to the neonotes .env file."
            )

    def _get_base_url(self) -> str:
        """Get the base URL for API calls."""
        if self.config.base_url:
            return self.config.base_url
        if self.config.provider == "anthropic":
            return ANTHROPIC_API_URL
        return OPENAI_API_URL

    def _build_anthropic_request(
        self,
        messages: list[Message],
        model: str,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> tuple[dict[str, str], dict[str, Any]]:
        """Build Anthropic API request headers and body."""
        headers = {
            "x-api-key": self.config.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        anthropic_messages: list[dict[str, Any]] = []
        for m in messages:
            if m.role == "system":
                continue
            if m.role == "tool" and m.tool_result:
                block = {
                    "type": "tool_result",
                    "tool_use_id": m.tool_result.tool_call_id,
                    "content": m.tool_result.content,
                    "is_error": m.tool_result.is_error,
                }
                # All results for one assistant turn go in a single user message
                previous = anthropic_messages[-1] if anthropic_messages else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                ):
                    previous["content"].append(block)
                else:
                    anthropic_messages.append({"role": "user", "content": [block]})
            elif m.tool_calls:
                content = []
                if m.content:
                    content.append({"type": "text", "text": m.content})
                for tc in m.tool_calls:
                    content.append(
                        {
                            "type": "tool_use",
                            "id": tc.id,
                            "name": tc.name,
                            "input": tc.arguments,
                        }
                    )
                anthropic_messages.append({"role": "assistant", "content": content})
            else:
                anthropic_messages.append({"role": m.role, "content": m.content})

        body: dict[str, Any] = {
            "model": model,
            "messages": anthropic_messages,
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        if temperature is not None:
            body["temperature"] = temperature
        elif self.config.temperature is not None:
            body["temperature"] = self.config.temperature

        if system:
            body["system"] = system

        if tools:
            body["tools"] = [
                {
                    "name": t.name,
                    "description": t.description,
                    "input_schema": t.parameters,
                }
                for t in tools
            ]

        return headers, body

    def _build_openai_request(
        self,
        messages: list[Message],
        model: str,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> tuple[dict[str, str], dict[str, Any]]:
        """Build OpenAI API request headers and body."""
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        openai_messages: list[dict[str, Any]] = []

        # System message goes first
        if system:
            openai_messages.append({"role": "system", "content": system})

        for m in messages:
            if m.role == "system":
                continue
            if m.role == "tool" and m.tool_result:
                openai_messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": m.tool_result.tool_call_id,
                        "content": m.tool_result.content,
                    }
                )
            elif m.tool_calls:
                openai_messages.append(
                    {
                        "role": "assistant",
                        "content": m.content or None,
                        "tool_calls": [
                            {
                                "id": tc.id,
                                "type": "function",
                                "function": {
                                    "name": tc.name,
                                    "arguments": json.dumps(tc.arguments),
                                },
                            }
                            for tc in m.tool_calls
                        ],
                    }
                )
            else:
                openai_messages.append({"role": m.role, "content": m.content})

        body: dict[str, Any] = {
            "model": model,
            "messages": openai_messages,
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        if temperature is not None:
            body["temperature"] = temperature
        elif self.config.temperature is not None:
            body["temperature"] = self.config.temperature

        if tools:
            body["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.parameters,
                    },
                }
                for t in tools
            ]
            body["tool_choice"] = "auto"

        return headers, body

    def _parse_anthropic_response(self, data: dict[str, Any]) -> LLMResponse:
        """Parse Anthropic API response."""
        content = ""
        tool_calls = []

        for block in data.get("content", []):
            if block.get("type") == "text":
                content += block.get("text", "")
            elif block.get("type") == "tool_use":
                tool_calls.append(
                    ToolCall(
                        id=block.get("id", ""),
                        name=block.get("name", ""),
                        arguments=_decode_arguments(block.get("input")),
                    )
                )

        usage = data.get("usage", {})
        return LLMResponse(
            content=content,
            model=data.get("model", ""),
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
            stop_reason=data.get("stop_reason"),
            tool_calls=tool_calls if tool_calls else None,
        )

    def _parse_openai_response(self, data: dict[str, Any]) -> LLMResponse:
        """Parse OpenAI API response."""
        choices = data.get("choices", [])
        content = ""
        stop_reason = None
        tool_calls = []

        if choices:
            message = choices[0].get("message", {})
            content = message.get("content", "") or ""
            stop_reason = choices[0].get("finish_reason")

            for tc in message.get("tool_calls") or []:
                if tc.get("type") == "function":
                    func = tc.get("function", {})
                    tool_calls.append(
                        ToolCall(
                            id=tc.get("id", ""),
                            name=func.get("name", ""),
                            arguments=_decode_arguments(func.get("arguments")),
                        )
                    )

        usage = data.get("usage", {})
        return LLMResponse(
            content=content,
            model=data.get("model", ""),
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
            stop_reason=stop_reason,
            tool_calls=tool_calls if tool_calls else None,
        )

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Handle error responses from the API."""
        try:
            data = response.json()
            error = data.get("error", {})
            if isinstance(error, dict):
                message = error.get("message", str(data))
            else:
                message = str(error)
        except ValueError:
            message = response.text

        if response.status_code == 429:
            raise LLMRateLimitError(f"Rate limit exceeded: {message}", 429)

        raise LLMAPIError(
            f"API error ({response.status_code}): {message}",
            response.status_code,
        )

    def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponse:
        """Send a completion request to the LLM.

        Args:
            messages: List of conversation messages.
            model: Model to use (defaults to config.models.smart).
            system: System prompt.
            max_tokens: Max response tokens (overrides config).
            temperature: Sampling temperature (overrides config).
            tools: Optional list of tools the LLM can call.

        Returns:
            LLMResponse with the generated content and metadata.
            If tools were called, response.tool_calls will contain them.

        Raises:
            LLMAPIError: If the API request fails or the service is unreachable.
        """
        if model is None:
            model = self.config.models.smart

        url = self._get_base_url()

        if self.config.provider == "anthropic":
            headers, body = self._build_anthropic_request(
                messages, model, system, max_tokens, temperature, tools=tools
            )
        else:
            headers, body = self._build_openai_request(
                messages, model, system, max_tokens, temperature, tools=tools
            )

        _logger.debug("POST %s model=%s messages=%d", url, model, len(messages))
        try:
            with httpx.Client(timeout=DEFAULT_TIMEOUT) as client:
                response = client.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise LLMAPIError(f"Request to {url} failed: {e}") from e

        if response.status_code != 200:
            self._handle_error_response(response)

        data = response.json()

        if self.config.provider == "anthropic":
            return self._parse_anthropic_response(data)
        return self._parse_openai_response(data)


def get_llm_client() -> LLMClient:
    """Get an LLM client using the global config.

    Returns:
        Configured LLMClient instance.

    Raises:
        LLMConfigError: If LLM is not properly configured.
    """
    from neonotes.config import get_config

    config = get_config()
    return LLMClient(config.llm)

"""Tool definitions and implementations for the notes agent.

The tool set is closed: every member of ``NoteTool`` has exactly one
``ToolSpec`` holding its description, argument model and handler. The
argument models double as the JSON schema given to the model, and all
validation and execution happens here, server-side.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from neonotes.core import notes as note_service
from neonotes.core.llm import ToolDefinition
from neonotes.models import Category

if TYPE_CHECKING:
    from neonotes.core.ai.agent import AgentContext

_logger = logging.getLogger(__name__)


class NoteTool(str, Enum):
    """Names of the tools the agent may request."""

    LIST_NOTES = "list_notes"
    SEARCH_NOTES = "search_notes"
    CREATE_NOTE = "create_note"
    UPDATE_NOTE = "update_note"
    DELETE_NOTE = "delete_note"


# ============================================================================
# Argument Models
# ============================================================================

_CATEGORY_HELP = f"One of: {', '.join(Category.values())}. Defaults to general."


class _ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ListNotesInput(_ToolInput):
    """No arguments."""


class SearchNotesInput(_ToolInput):
    query: str = Field(description="Text to look for in note titles and bodies")


class CreateNoteInput(_ToolInput):
    title: str | None = Field(default=None, description="Note title")
    text: str | None = Field(default=None, description="Note body")
    category: str | None = Field(default=None, description=_CATEGORY_HELP)
    color: str | None = Field(default=None, description="Hex color, e.g. #fff59d")


class UpdateNoteInput(_ToolInput):
    id: int = Field(description="Id of the note, from list_notes or search_notes")
    title: str | None = Field(default=None, description="New title")
    text: str | None = Field(default=None, description="New body (replaces it)")
    category: str | None = Field(default=None, description=_CATEGORY_HELP)
    color: str | None = Field(default=None, description="New hex color")


class DeleteNoteInput(_ToolInput):
    id: int = Field(description="Id of the note, from list_notes or search_notes")


# ============================================================================
# Handlers
# ============================================================================


def _unknown_id_error(note_id: int) -> dict[str, str]:
    return {
        "error": f"Note {note_id} has not been looked up yet. "
        "Call list_notes or search_notes first."
    }


def _list_notes(args: ListNotesInput, context: AgentContext) -> list[dict[str, Any]]:
    found = note_service.list_notes()
    context.remember(n.id for n in found)
    return [note_service.summarize_note(n, context.preview_chars) for n in found]


def _search_notes(
    args: SearchNotesInput, context: AgentContext
) -> list[dict[str, Any]]:
    found = note_service.search_notes(args.query)
    context.remember(n.id for n in found)
    return [note_service.summarize_note(n, context.preview_chars) for n in found]


def _create_note(args: CreateNoteInput, context: AgentContext) -> dict[str, Any]:
    note = note_service.create_note(args.model_dump(exclude_none=True))
    context.remember([note.id])
    return note.to_dict()


def _update_note(
    args: UpdateNoteInput, context: AgentContext
) -> dict[str, Any] | None:
    if not context.may_modify(args.id):
        return _unknown_id_error(args.id)
    note = note_service.update_note(
        args.id, args.model_dump(exclude={"id"}, exclude_none=True)
    )
    return note.to_dict() if note else None


def _delete_note(args: DeleteNoteInput, context: AgentContext) -> bool | dict[str, str]:
    if not context.may_modify(args.id):
        return _unknown_id_error(args.id)
    deleted = note_service.delete_note(args.id)
    if deleted:
        context.forget(args.id)
    return deleted


# ============================================================================
# Registry
# ============================================================================


@dataclass(frozen=True)
class ToolSpec:
    """Everything the agent needs to offer and run one tool."""

    description: str
    input_model: type[_ToolInput]
    handler: Callable[[Any, AgentContext], Any]

    def definition(self, tool: NoteTool) -> ToolDefinition:
        return ToolDefinition(
            name=tool.value,
            description=self.description,
            parameters=self.input_model.model_json_schema(),
        )


TOOL_SPECS: dict[NoteTool, ToolSpec] = {
    NoteTool.LIST_NOTES: ToolSpec(
        description="List every note with id, title, category, last update and a short preview.",
        input_model=ListNotesInput,
        handler=_list_notes,
    ),
    NoteTool.SEARCH_NOTES: ToolSpec(
        description="Find notes whose title or text contains the query (case-insensitive).",
        input_model=SearchNotesInput,
        handler=_search_notes,
    ),
    NoteTool.CREATE_NOTE: ToolSpec(
        description="Create a note. All fields are optional; returns the full new note.",
        input_model=CreateNoteInput,
        handler=_create_note,
    ),
    NoteTool.UPDATE_NOTE: ToolSpec(
        description="Change fields of an existing note by id. Omitted fields stay as they are.",
        input_model=UpdateNoteInput,
        handler=_update_note,
    ),
    NoteTool.DELETE_NOTE: ToolSpec(
        description="Delete a note by id. Returns true when a note was removed.",
        input_model=DeleteNoteInput,
        handler=_delete_note,
    ),
}


def _check_registry() -> None:
    missing = [t.value for t in NoteTool if t not in TOOL_SPECS]
    if missing:
        raise RuntimeError(f"Tools without a spec: {', '.join(missing)}")
    stray = [key for key in TOOL_SPECS if not isinstance(key, NoteTool)]
    if stray:
        raise RuntimeError(f"Specs for unknown tools: {stray}")


_check_registry()


def get_agent_tools() -> list[ToolDefinition]:
    """Get all tool definitions for the agent, in declaration order."""
    return [TOOL_SPECS[tool].definition(tool) for tool in NoteTool]


def _summarize_validation_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def execute_agent_tool(
    name: str, arguments: dict[str, Any], context: AgentContext
) -> tuple[dict[str, Any], Any]:
    """Validate and run one tool call.

    Failures never raise: unknown tools, invalid arguments and handler
    exceptions all come back as ``{"error": ...}`` results. A handler result
    of None or False becomes ``{"error": "No result"}``.

    Args:
        name: Tool name requested by the model.
        arguments: Decoded arguments (empty when the model sent malformed JSON).
        context: The agent context for this request.

    Returns:
        Tuple of (input as recorded in the action trail, JSON-serializable result).
    """
    try:
        tool = NoteTool(name)
    except ValueError:
        return arguments, {"error": f"Unknown tool: {name}"}

    spec = TOOL_SPECS[tool]
    try:
        validated = spec.input_model.model_validate(arguments)
    except ValidationError as e:
        return arguments, {
            "error": f"Invalid arguments for {name}: {_summarize_validation_errors(e)}"
        }

    recorded_input = validated.model_dump(exclude_none=True)
    try:
        result = spec.handler(validated, context)
    except Exception as e:
        _logger.warning("Tool %s failed", name, exc_info=True)
        return recorded_input, {"error": f"Tool error: {e}"}

    if result is None or result is False:
        result = {"error": "No result"}
    return recorded_input, result


def _format_tools_for_prompt(tools: list[ToolDefinition]) -> str:
    """Format tool list for system prompt."""
    return "\n".join(f"- {tool.name}: {tool.description}" for tool in tools)

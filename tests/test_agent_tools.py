"""Tests for the agent tool registry and dispatch."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from neonotes.core import notes as notes_module
from neonotes.core.ai.agent import AgentContext
from neonotes.core.ai.agent_tools import (
    TOOL_SPECS,
    NoteTool,
    _format_tools_for_prompt,
    execute_agent_tool,
    get_agent_tools,
)


@pytest.fixture
def context() -> AgentContext:
    return AgentContext()


class TestRegistry:
    def test_every_tool_is_registered(self):
        assert set(TOOL_SPECS) == set(NoteTool)

    def test_definitions_in_declaration_order(self):
        names = [t.name for t in get_agent_tools()]
        assert names == [
            "list_notes",
            "search_notes",
            "create_note",
            "update_note",
            "delete_note",
        ]

    def test_schemas_forbid_extra_properties(self):
        for tool in get_agent_tools():
            assert tool.parameters["type"] == "object"
            assert tool.parameters["additionalProperties"] is False

    def test_required_arguments(self):
        schemas = {t.name: t.parameters for t in get_agent_tools()}
        assert schemas["search_notes"]["required"] == ["query"]
        assert schemas["update_note"]["required"] == ["id"]
        assert schemas["delete_note"]["required"] == ["id"]
        assert "required" not in schemas["create_note"]

    def test_format_tools_for_prompt(self):
        text = _format_tools_for_prompt(get_agent_tools())
        assert text.splitlines()[0].startswith("- list_notes: ")
        assert len(text.splitlines()) == len(NoteTool)


class TestDispatchErrors:
    def test_unknown_tool(self, mock_config, context):
        tool_input, result = execute_agent_tool("explode", {"a": 1}, context)

        assert tool_input == {"a": 1}
        assert result == {"error": "Unknown tool: explode"}

    def test_missing_required_argument(self, mock_config, context):
        tool_input, result = execute_agent_tool("search_notes", {}, context)

        assert tool_input == {}
        assert result["error"].startswith("Invalid arguments for search_notes: query")

    def test_extra_argument_rejected(self, mock_config, context):
        _, result = execute_agent_tool("list_notes", {"limit": 5}, context)

        assert result["error"].startswith("Invalid arguments for list_notes")

    def test_wrong_type(self, mock_config, context):
        _, result = execute_agent_tool("delete_note", {"id": "abc"}, context)

        assert "Invalid arguments for delete_note" in result["error"]

    def test_handler_exception_is_contained(self, mock_config, context):
        with patch.object(notes_module, "list_notes", side_effect=OSError("disk gone")):
            tool_input, result = execute_agent_tool("list_notes", {}, context)

        assert tool_input == {}
        assert result == {"error": "Tool error: disk gone"}


class TestHandlers:
    def test_list_notes_returns_summaries(self, make_note, context):
        note = make_note(title="Plan", text="x" * 300, category="work")

        _, result = execute_agent_tool("list_notes", {}, context)

        assert result == [
            {
                "id": note.id,
                "title": "Plan",
                "category": "work",
                "updatedAt": note.updated_at,
                "preview": "x" * 160 + "...",
            }
        ]
        assert note.id in context.known_ids

    def test_list_notes_empty_is_not_an_error(self, mock_config, context):
        _, result = execute_agent_tool("list_notes", {}, context)

        assert result == []

    def test_preview_budget_from_context(self, make_note):
        make_note(text="abcdefghij")
        ctx = AgentContext(preview_chars=4)

        _, result = execute_agent_tool("list_notes", {}, ctx)

        assert result[0]["preview"] == "abcd..."

    def test_search_notes(self, make_note, context):
        hit = make_note(title="Milk run")
        make_note(title="Other")

        tool_input, result = execute_agent_tool(
            "search_notes", {"query": "milk"}, context
        )

        assert tool_input == {"query": "milk"}
        assert [r["id"] for r in result] == [hit.id]
        assert context.known_ids == {hit.id}

    def test_create_note(self, mock_config, context):
        tool_input, result = execute_agent_tool(
            "create_note", {"title": "New", "category": "ideas"}, context
        )

        assert tool_input == {"title": "New", "category": "ideas"}
        assert result["title"] == "New"
        assert result["category"] == "ideas"
        assert result["color"] == "#ffffff"
        assert result["id"] in context.known_ids
        assert notes_module.get_note(result["id"]) is not None

    def test_update_known_note(self, make_note, context):
        note = make_note(title="Old")
        context.remember([note.id])

        tool_input, result = execute_agent_tool(
            "update_note", {"id": note.id, "title": "New"}, context
        )

        assert tool_input == {"id": note.id, "title": "New"}
        assert result["title"] == "New"
        assert notes_module.get_note(note.id).title == "New"

    def test_update_missing_known_id_is_no_result(self, mock_config, context):
        context.remember([42])

        _, result = execute_agent_tool("update_note", {"id": 42}, context)

        assert result == {"error": "No result"}

    def test_delete_known_note(self, make_note, context):
        note = make_note(title="Bye")
        context.remember([note.id])

        _, result = execute_agent_tool("delete_note", {"id": note.id}, context)

        assert result is True
        assert notes_module.get_note(note.id) is None
        assert note.id not in context.known_ids

    def test_delete_missing_known_id_is_no_result(self, mock_config, context):
        context.remember([42])

        _, result = execute_agent_tool("delete_note", {"id": 42}, context)

        assert result == {"error": "No result"}


class TestIdGate:
    def test_update_unseen_id_refused(self, make_note, context):
        note = make_note(title="Keep")

        _, result = execute_agent_tool(
            "update_note", {"id": note.id, "title": "Hijack"}, context
        )

        assert result == {
            "error": f"Note {note.id} has not been looked up yet. "
            "Call list_notes or search_notes first."
        }
        assert notes_module.get_note(note.id).title == "Keep"

    def test_delete_unseen_id_refused(self, make_note, context):
        note = make_note(title="Keep")

        _, result = execute_agent_tool("delete_note", {"id": note.id}, context)

        assert "has not been looked up yet" in result["error"]
        assert notes_module.get_note(note.id) is not None

    def test_list_then_delete_allowed(self, make_note, context):
        note = make_note(title="Gone soon")

        execute_agent_tool("list_notes", {}, context)
        _, result = execute_agent_tool("delete_note", {"id": note.id}, context)

        assert result is True

    def test_gate_disabled(self, make_note):
        note = make_note(title="Open")
        ctx = AgentContext(require_known_ids=False)

        _, result = execute_agent_tool("delete_note", {"id": note.id}, ctx)

        assert result is True

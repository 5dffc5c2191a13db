"""Tests for the neonotes CLI."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from neonotes import __version__
from neonotes.cli import cli
from neonotes.cli.config_cmd import _mask_api_key
from neonotes.core import notes as notes_module
from neonotes.core.ai import AgentAction, AgentResult
from neonotes.core.llm import LLMAPIError, LLMConfigError


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner."""
    return CliRunner()


class TestRoot:
    def test_version(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("serve", "list", "add", "edit", "delete", "search", "ask", "config"):
            assert name in result.output

    def test_first_run_writes_config(self, cli_runner: CliRunner, mock_config):
        cli_runner.invoke(cli, ["list"])

        assert mock_config.config_path.exists()


class TestNoteCommands:
    def test_list_empty(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "No notes found" in result.output

    def test_add_then_list(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(
            cli, ["add", "Groceries", "-t", "milk", "-c", "personal"]
        )

        assert result.exit_code == 0
        assert "Created note" in result.output
        notes = notes_module.list_notes()
        assert len(notes) == 1
        assert notes[0].category.value == "personal"

        listing = cli_runner.invoke(cli, ["ls"])
        assert "Groceries" in listing.output

    def test_add_without_title(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["add", "-t", "just text"])

        assert result.exit_code == 0
        assert notes_module.list_notes()[0].title == "Untitled"

    def test_list_by_category(self, cli_runner: CliRunner, make_note):
        make_note(title="Job", category="work")
        make_note(title="Home", category="personal")

        result = cli_runner.invoke(cli, ["list", "-c", "work"])

        assert "Job" in result.output
        assert "Home" not in result.output

    def test_show(self, cli_runner: CliRunner, make_note):
        note = make_note(title="Readme", text="full body")

        result = cli_runner.invoke(cli, ["show", str(note.id)])

        assert result.exit_code == 0
        assert "Readme" in result.output
        assert "full body" in result.output

    def test_show_missing(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["show", "999"])

        assert result.exit_code == 1
        assert "Note not found" in result.output

    def test_edit(self, cli_runner: CliRunner, make_note):
        note = make_note(title="Old", text="keep")

        result = cli_runner.invoke(cli, ["edit", str(note.id), "--title", "New"])

        assert result.exit_code == 0
        updated = notes_module.get_note(note.id)
        assert updated.title == "New"
        assert updated.text == "keep"

    def test_edit_missing(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["edit", "999", "--title", "x"])

        assert result.exit_code == 1

    def test_delete_with_yes(self, cli_runner: CliRunner, make_note):
        note = make_note(title="Bye")

        result = cli_runner.invoke(cli, ["delete", str(note.id), "-y"])

        assert result.exit_code == 0
        assert notes_module.get_note(note.id) is None

    def test_delete_cancelled(self, cli_runner: CliRunner, make_note):
        note = make_note(title="Stay")

        result = cli_runner.invoke(cli, ["delete", str(note.id)], input="n\n")

        assert "Cancelled" in result.output
        assert notes_module.get_note(note.id) is not None

    def test_search(self, cli_runner: CliRunner, make_note):
        make_note(title="Shopping", text="milk and eggs")
        make_note(title="Work")

        result = cli_runner.invoke(cli, ["search", "milk"])

        assert "Shopping" in result.output
        assert "Work" not in result.output

    def test_search_no_results(self, cli_runner: CliRunner, make_note):
        make_note(title="Work")

        result = cli_runner.invoke(cli, ["search", "zebra"])

        assert "No notes match" in result.output


class TestAskCommand:
    def test_prints_reply_and_actions(self, cli_runner: CliRunner, mock_config):
        agent_result = AgentResult(
            reply="Created it.",
            actions=[
                AgentAction(tool="create_note", input={"title": "X"}, result={"id": 1})
            ],
            rounds=2,
        )

        with patch("neonotes.core.ai.run_agent", return_value=agent_result):
            result = cli_runner.invoke(cli, ["ask", "add a note X"])

        assert result.exit_code == 0
        assert "Created it." in result.output
        assert "create_note" in result.output
        assert "2 round(s)" in result.output

    def test_config_error(self, cli_runner: CliRunner, mock_config):
        with patch(
            "neonotes.core.ai.run_agent", side_effect=LLMConfigError("No API key")
        ):
            result = cli_runner.invoke(cli, ["ask", "hi"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert "config api-keys" in result.output

    def test_api_error(self, cli_runner: CliRunner, mock_config):
        with patch("neonotes.core.ai.run_agent", side_effect=LLMAPIError("down", 503)):
            result = cli_runner.invoke(cli, ["ask", "hi"])

        assert result.exit_code == 1
        assert "LLM error" in result.output


class TestServeCommand:
    def test_help(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["serve", "--help"])

        assert result.exit_code == 0
        assert "--port" in result.output
        assert "--no-open" in result.output

    def test_uses_config_defaults(self, cli_runner: CliRunner, mock_config):
        mock_config.server.port = 4567

        with patch("neonotes.webserver.run_server") as run_server:
            result = cli_runner.invoke(cli, ["serve", "--no-open"])

        assert result.exit_code == 0
        run_server.assert_called_once_with(
            host="127.0.0.1", port=4567, open_browser=False
        )

    def test_port_option_overrides(self, cli_runner: CliRunner, mock_config):
        with patch("neonotes.webserver.run_server") as run_server:
            cli_runner.invoke(cli, ["serve", "-p", "9999", "--host", "0.0.0.0"])

        run_server.assert_called_once_with(host="0.0.0.0", port=9999, open_browser=True)


class TestConfigCommands:
    def test_path(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0
        assert "config.yaml" in result.output

    def test_show(self, cli_runner: CliRunner, mock_config):
        result = cli_runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "agent.max_rounds" in result.output
        assert "test-key" not in result.output

    def test_api_keys_masked(self, cli_runner: CliRunner, mock_config, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-1234567890abcdef")

        result = cli_runner.invoke(cli, ["config", "api-keys"])

        assert result.exit_code == 0
        assert "sk-ant-1234567890abcdef" not in result.output
        assert "sk-a" in result.output


@pytest.mark.parametrize(
    "key, expected",
    [
        ("short", "*****"),
        ("sk-ant-1234567890abcdef", "sk-a" + "*" * 15 + "cdef"),
    ],
)
def test_mask_api_key(key, expected):
    assert _mask_api_key(key) == expected

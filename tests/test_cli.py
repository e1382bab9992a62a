"""Tests for the bridge CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from agent_bridge import __version__
from agent_bridge.cli import app, sanitize_for_terminal
from agent_bridge.config import BridgeConfig


@pytest.fixture
def runner(bridge_config: BridgeConfig) -> CliRunner:
    """CLI runner whose session stores all live under tmp_path."""
    return CliRunner(
        env={
            "NO_COLOR": "1",
            "FORCE_COLOR": None,
            "BRIDGE_CODEX_SESSIONS_DIR": str(bridge_config.codex_base),
            "BRIDGE_CLAUDE_PROJECTS_DIR": str(bridge_config.claude_base),
            "BRIDGE_GEMINI_TMP_DIR": str(bridge_config.gemini_base),
            "BRIDGE_CURSOR_DATA_DIR": str(bridge_config.cursor_base),
        }
    )


@pytest.fixture
def codex_session(bridge_config, write_jsonl, codex_entries, project_dir) -> Path:
    return write_jsonl(
        bridge_config.codex_base / "2024" / "05" / "01" / "rollout-2024-05-01-abcdef12.jsonl",
        [
            codex_entries["meta"](project_dir),
            codex_entries["response"]("user", "What is the key?"),
            codex_entries["agent"]("First answer"),
            codex_entries["agent"]("Use OPENAI key sk-THISISASECRETKEYXXXXXXXXXXXX please"),
        ],
    )


@pytest.fixture
def claude_session(bridge_config, write_jsonl, claude_entry, project_dir) -> Path:
    return write_jsonl(
        bridge_config.claude_base / "-workspace-demo" / "c0ffee00.jsonl",
        [claude_entry("user", "q", cwd=project_dir), claude_entry("assistant", "Looks good")],
    )


class TestCLI:
    """Tests for the CLI entry point."""

    def test_main_help(self, runner: CliRunner) -> None:
        """Test that main --help works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("read", "compare", "report", "list", "search"):
            assert command in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        """Test that --version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"agent-bridge {__version__}" in result.output


class TestReadCommand:
    """Tests for `bridge read`."""

    def test_text_output(self, runner: CliRunner, codex_session: Path, project_dir: Path) -> None:
        """Test read with the default text output."""
        result = runner.invoke(app, ["read", "--agent", "codex", "--cwd", str(project_dir)])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0].startswith("SOURCE: Codex Session (")
        assert lines[0].endswith("rollout-2024-05-01-abcdef12.jsonl)")
        assert lines[1] == "---"
        assert lines[2] == "Use OPENAI key sk-[REDACTED] please"
        assert "THISISASECRETKEY" not in result.output

    def test_json_output(self, runner: CliRunner, codex_session: Path, project_dir: Path) -> None:
        """Test read with --json."""
        result = runner.invoke(
            app, ["read", "--agent", "codex", "--cwd", str(project_dir), "--last", "2", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["agent"] == "codex"
        assert data["session_id"] == "sess-0001"
        assert data["cwd"] == str(project_dir)
        assert data["message_count"] == 2
        assert data["messages_returned"] == 2
        assert data["content"].startswith("First answer")
        assert data["warnings"] == []

    def test_agent_name_is_case_insensitive(
        self, runner: CliRunner, claude_session: Path, project_dir: Path
    ) -> None:
        """Test that agent names are case-insensitive."""
        result = runner.invoke(app, ["read", "--agent", "Claude", "--cwd", str(project_dir)])

        assert result.exit_code == 0
        assert "Looks good" in result.stdout

    def test_session_id(self, runner: CliRunner, codex_session: Path) -> None:
        """Test read selecting a session by id."""
        result = runner.invoke(app, ["read", "--agent", "codex", "--id", "abcdef12", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["source"].endswith("abcdef12.jsonl")

    def test_cwd_fallback_warning(
        self, runner: CliRunner, codex_session: Path, other_project_dir: Path
    ) -> None:
        """Test that the cwd fallback warning is shown."""
        result = runner.invoke(app, ["read", "--agent", "codex", "--cwd", str(other_project_dir)])

        assert result.exit_code == 0
        assert "no Codex session matched cwd" in result.output
        assert "SOURCE: Codex Session" in result.stdout

    def test_not_found_json_payload(self, runner: CliRunner, project_dir: Path) -> None:
        """Test the JSON error payload when no session exists."""
        result = runner.invoke(app, ["read", "--agent", "gemini", "--cwd", str(project_dir), "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout) == {
            "error_code": "NOT_FOUND",
            "message": "No Gemini session found.",
        }

    def test_not_found_text(self, runner: CliRunner, project_dir: Path) -> None:
        """Test the text error when no session exists."""
        result = runner.invoke(app, ["read", "--agent", "cursor", "--cwd", str(project_dir)])

        assert result.exit_code == 1
        assert "No Cursor session found." in result.output

    def test_unsupported_agent_json(self, runner: CliRunner) -> None:
        """Test the payload for an unsupported agent."""
        result = runner.invoke(app, ["read", "--agent", "copilot", "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["error_code"] == "UNSUPPORTED_AGENT"
        assert payload["message"] == "Unsupported agent: copilot"

    def test_control_characters_stripped(
        self, runner: CliRunner, bridge_config: BridgeConfig, write_jsonl, codex_entries
    ) -> None:
        """Test that control characters are stripped from output."""
        write_jsonl(
            bridge_config.codex_base / "rollout-x.jsonl",
            [codex_entries["agent"]("\x1b[31mred\x1b[0m\ttab")],
        )

        result = runner.invoke(app, ["read", "--agent", "codex"])

        assert result.exit_code == 0
        assert "\x1b" not in result.stdout
        assert "[31mred[0m\ttab" in result.stdout

    def test_config_file(self, tmp_path: Path, write_jsonl, codex_entries) -> None:
        """An explicit --config points the adapters at its directories."""
        sessions = tmp_path / "alt-sessions"
        write_jsonl(sessions / "rollout-1.jsonl", [codex_entries["agent"]("from config")])
        config_file = tmp_path / "bridge.toml"
        config_file.write_text(f'[paths]\ncodex_sessions_dir = "{sessions}"\n')

        runner = CliRunner(env={"NO_COLOR": "1", "FORCE_COLOR": None, "BRIDGE_CODEX_SESSIONS_DIR": None})
        result = runner.invoke(app, ["read", "--agent", "codex", "--config", str(config_file), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["content"] == "from config"


class TestCompareCommand:
    """Tests for `bridge compare`."""

    def test_markdown(
        self, runner: CliRunner, codex_session: Path, claude_session: Path, project_dir: Path
    ) -> None:
        """Test compare with markdown output."""
        result = runner.invoke(
            app,
            ["compare", "--source", "codex", "--source", "claude", "--cwd", str(project_dir)],
        )

        assert result.exit_code == 0
        assert result.stdout.startswith("### Agent Bridge Coordinator Report")
        assert "**Mode:** analyze" in result.stdout
        assert "**Task:** Compare agent outputs" in result.stdout
        assert "**Verdict:** ANALYSIS_COMPLETE" in result.stdout
        assert "Divergent agent outputs detected" in result.stdout

    def test_json(self, runner: CliRunner, claude_session: Path, project_dir: Path) -> None:
        """Test compare with JSON output."""
        result = runner.invoke(
            app,
            ["compare", "--source", "claude:c0ffee00", "--cwd", str(project_dir), "--json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["mode"] == "analyze"
        assert data["sources_used"][0].startswith("[claude:c0ffee00] ")
        assert data["findings"][-1]["summary"] == "Insufficient comparable sources"

    def test_unknown_source_agent(self, runner: CliRunner) -> None:
        """Test compare with an unknown source agent."""
        result = runner.invoke(app, ["compare", "--source", "copilot", "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_code"] == "UNSUPPORTED_AGENT"


class TestReportCommand:
    """Tests for `bridge report`."""

    def test_handoff(
        self, runner: CliRunner, codex_session: Path, project_dir: Path, tmp_path: Path
    ) -> None:
        """Test report from a handoff file."""
        handoff = tmp_path / "handoff.json"
        handoff.write_text(
            json.dumps(
                {
                    "mode": "verify",
                    "task": "Check the key rotation",
                    "success_criteria": ["Key is rotated"],
                    "sources": [{"agent": "codex", "current_session": True, "cwd": str(project_dir)}],
                    "constraints": ["no downtime"],
                }
            )
        )

        result = runner.invoke(app, ["report", "--handoff", str(handoff), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["verdict"] == "PASS"
        assert data["task"] == "Check the key rotation"
        assert data["recommended_next_actions"] == ["Verify recommendations against constraints: no downtime."]

    def test_invalid_mode(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test report with an unsupported mode."""
        handoff = tmp_path / "handoff.json"
        handoff.write_text(
            json.dumps(
                {
                    "mode": "invalidmode",
                    "task": "t",
                    "success_criteria": ["c"],
                    "sources": [{"agent": "codex", "current_session": True}],
                }
            )
        )

        result = runner.invoke(app, ["report", "--handoff", str(handoff), "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout) == {
            "error_code": "UNSUPPORTED_MODE",
            "message": "Unsupported mode: invalidmode",
        }

    def test_invalid_handoff_text(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test report with an invalid handoff file."""
        handoff = tmp_path / "handoff.json"
        handoff.write_text("[]")

        result = runner.invoke(app, ["report", "--handoff", str(handoff)])

        assert result.exit_code == 1
        assert "Invalid handoff: must be a JSON object" in result.output


class TestListAndSearch:
    """Tests for `bridge list` and `bridge search`."""

    def test_list_json(self, runner: CliRunner, codex_session: Path, project_dir: Path) -> None:
        """Test list with --json."""
        result = runner.invoke(app, ["list", "--agent", "codex", "--cwd", str(project_dir), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data) == 1
        assert data[0]["agent"] == "codex"
        assert data[0]["session_id"] == "rollout-2024-05-01-abcdef12"
        assert data[0]["cwd"] == str(project_dir)

    def test_list_text_is_one_object_per_line(
        self, runner: CliRunner, codex_session: Path, claude_session: Path
    ) -> None:
        """Test that text listing prints one object per line."""
        result = runner.invoke(app, ["list", "--agent", "claude"])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["session_id"] == "c0ffee00"

    def test_list_empty(self, runner: CliRunner) -> None:
        """Test list with no sessions."""
        result = runner.invoke(app, ["list", "--agent", "gemini", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == []

    def test_search(self, runner: CliRunner, codex_session: Path, claude_session: Path) -> None:
        """Test search for a query."""
        result = runner.invoke(app, ["search", "looks GOOD", "--agent", "claude", "--json"])

        assert result.exit_code == 0
        assert [entry["session_id"] for entry in json.loads(result.stdout)] == ["c0ffee00"]

    def test_search_limit(self, runner: CliRunner, codex_session: Path) -> None:
        """Test that --limit caps the number of hits."""
        result = runner.invoke(app, ["search", "answer", "--agent", "codex", "--limit", "1", "--json"])

        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 1

    @pytest.mark.parametrize("command", [["list"], ["search", "answer"]])
    @pytest.mark.parametrize("limit", ["0", "-1"])
    def test_limit_must_be_positive(self, runner: CliRunner, codex_session: Path, command: list[str], limit: str) -> None:
        """Test that a zero or negative --limit is rejected as a usage error."""
        result = runner.invoke(app, [*command, "--agent", "gemini", f"--limit={limit}"])

        assert result.exit_code == 2

    def test_search_unsupported_agent(self, runner: CliRunner) -> None:
        """Test search with an unsupported agent."""
        result = runner.invoke(app, ["search", "x", "--agent", "nope"])

        assert result.exit_code == 1
        assert "Unsupported agent: nope" in result.output


class TestSanitize:
    def test_keeps_newlines_and_tabs(self) -> None:
        assert sanitize_for_terminal("a\tb\nc\x07\x1b[0m\x9b") == "a\tb\nc[0m"

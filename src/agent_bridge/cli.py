"""CLI interface for agent-bridge."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from pydantic import BaseModel
from rich.console import Console

from agent_bridge.adapters.registry import AdapterRegistry
from agent_bridge.config import load_config
from agent_bridge.errors import BridgeError, classify_error
from agent_bridge.handoff import load_handoff
from agent_bridge.report import build_report, compare_request, parse_source_arg, report_to_markdown
from agent_bridge.scanning import normalize_path

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="bridge",
    help="Read, compare and report on Codex, Gemini, Claude and Cursor sessions.",
)

console = Console()
_stderr_console = Console(stderr=True)

# C0/C1 control characters other than tab and newline; strips ANSI escape introducers.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")

JsonOption = Annotated[bool, typer.Option("--json", help="Emit structured JSON instead of text.")]
CwdOption = Annotated[
    Optional[str],
    typer.Option("--cwd", help="Working directory to scope the lookup (defaults to the current directory)."),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", help="Path to an agent-bridge TOML config file."),
]


def sanitize_for_terminal(text: str) -> str:
    """Drop terminal control characters, keeping newlines and tabs."""
    return _CONTROL_CHARS.sub("", text)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from agent_bridge import __version__

        console.print(f"agent-bridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Agent Bridge - read and cross-check AI coding agent sessions."""
    pass


def _registry(config_path: Path | None) -> AdapterRegistry:
    return AdapterRegistry(load_config(config_path))


def _effective_cwd(cwd: str | None) -> str:
    return cwd if cwd else os.getcwd()


def _fail(exc: Exception, json_output: bool) -> NoReturn:
    """Report a fatal error in the caller's output mode and exit 1."""
    payload = classify_error(exc)
    logger.debug("Command failed with %s: %s", payload.error_code.value, payload.message)
    if json_output:
        print(payload.model_dump_json(indent=2))
    else:
        _stderr_console.print(
            sanitize_for_terminal(payload.message), markup=False, highlight=False, soft_wrap=True
        )
    raise typer.Exit(1)


def _print_json(model: BaseModel | list[BaseModel]) -> None:
    if isinstance(model, list):
        print(json.dumps([item.model_dump(mode="json") for item in model], indent=2))
    else:
        print(model.model_dump_json(indent=2))


@app.command()
def read(
    agent: Annotated[str, typer.Option("--agent", help="Agent to read from: codex, gemini, claude or cursor.")],
    session_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Session ID or UUID (substring match supported)."),
    ] = None,
    cwd: CwdOption = None,
    chats_dir: Annotated[
        Optional[str],
        typer.Option("--chats-dir", help="Explicit path to the chats directory (Gemini only)."),
    ] = None,
    last: Annotated[int, typer.Option("--last", help="Number of trailing assistant messages to return.")] = 1,
    json_output: JsonOption = False,
    config: ConfigOption = None,
) -> None:
    """Read the latest (or a specific) session from an agent."""
    try:
        adapter = _registry(config).get(agent)
        record = adapter.read_session(session_id, _effective_cwd(cwd), chats_dir, max(1, last))
    except (BridgeError, OSError) as e:
        _fail(e, json_output)

    if json_output:
        _print_json(record)
        return

    for warning in record.warnings:
        _stderr_console.print(sanitize_for_terminal(warning), markup=False, highlight=False, soft_wrap=True)
    print(f"SOURCE: {record.agent.display_name} Session ({sanitize_for_terminal(record.source)})")
    print("---")
    print(sanitize_for_terminal(record.content))


@app.command()
def compare(
    sources: Annotated[
        list[str],
        typer.Option("--source", help="Source as <agent> or <agent>:<session-substring>. Repeatable."),
    ],
    cwd: CwdOption = None,
    normalize: Annotated[
        bool, typer.Option("--normalize", help="Collapse whitespace before comparing outputs.")
    ] = False,
    json_output: JsonOption = False,
    config: ConfigOption = None,
) -> None:
    """Compare the latest outputs of several agents."""
    try:
        request = compare_request([parse_source_arg(raw) for raw in sources], normalize=normalize)
        result = build_report(request, _effective_cwd(cwd), _registry(config))
    except (BridgeError, OSError) as e:
        _fail(e, json_output)

    if json_output:
        _print_json(result)
    else:
        print(sanitize_for_terminal(report_to_markdown(result)))


@app.command()
def report(
    handoff: Annotated[Path, typer.Option("--handoff", help="Path to a handoff JSON file.")],
    cwd: CwdOption = None,
    json_output: JsonOption = False,
    config: ConfigOption = None,
) -> None:
    """Build a coordinator report from a handoff file."""
    try:
        request = load_handoff(handoff)
        result = build_report(request, _effective_cwd(cwd), _registry(config))
    except (BridgeError, OSError) as e:
        _fail(e, json_output)

    if json_output:
        _print_json(result)
    else:
        print(sanitize_for_terminal(report_to_markdown(result)))


@app.command("list")
def list_cmd(
    agent: Annotated[str, typer.Option("--agent", help="Agent to list sessions for.")],
    cwd: Annotated[Optional[str], typer.Option("--cwd", help="Only sessions recorded in this directory.")] = None,
    limit: Annotated[int, typer.Option("--limit", min=1, help="Maximum number of sessions to return.")] = 10,
    json_output: JsonOption = False,
    config: ConfigOption = None,
) -> None:
    """List the newest sessions for an agent."""
    try:
        adapter = _registry(config).get(agent)
        entries = adapter.list_sessions(_scope(cwd), limit)
    except (BridgeError, OSError) as e:
        _fail(e, json_output)
    _print_summaries(entries, json_output)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Keyword to search for (case-insensitive).")],
    agent: Annotated[str, typer.Option("--agent", help="Agent to search.")],
    cwd: Annotated[Optional[str], typer.Option("--cwd", help="Only sessions recorded in this directory.")] = None,
    limit: Annotated[int, typer.Option("--limit", min=1, help="Maximum number of sessions to return.")] = 10,
    json_output: JsonOption = False,
    config: ConfigOption = None,
) -> None:
    """Search an agent's sessions for a keyword."""
    try:
        adapter = _registry(config).get(agent)
        entries = adapter.search_sessions(query, _scope(cwd), limit)
    except (BridgeError, OSError) as e:
        _fail(e, json_output)
    _print_summaries(entries, json_output)


def _scope(cwd: str | None) -> str | None:
    return str(normalize_path(cwd)) if cwd else None


def _print_summaries(entries: list, json_output: bool) -> None:
    if json_output:
        _print_json(entries)
        return
    # One compact JSON object per line
    for entry in entries:
        print(sanitize_for_terminal(entry.model_dump_json()))


if __name__ == "__main__":
    app()

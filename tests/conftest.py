"""Shared fixtures for building fake agent session stores on disk."""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from agent_bridge.adapters.registry import AdapterRegistry
from agent_bridge.config import BridgeConfig

BASE_MTIME = 1_700_000_000


def _write_jsonl(path: Path, entries: list[Any], mtime_offset: int | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for entry in entries:
            f.write((entry if isinstance(entry, str) else json.dumps(entry)) + "\n")
    if mtime_offset is not None:
        _set_mtime(path, mtime_offset)
    return path


def _write_json(path: Path, data: Any, mtime_offset: int | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    if mtime_offset is not None:
        _set_mtime(path, mtime_offset)
    return path


def _set_mtime(path: Path, offset: int) -> None:
    stamp = BASE_MTIME + offset
    os.utime(path, (stamp, stamp))


@pytest.fixture
def write_jsonl() -> Callable[..., Path]:
    """Write a list of entries (dicts or raw strings) as a JSONL file.

    An optional ``mtime_offset`` pins the modification time so tests can
    control which file counts as newest.
    """
    return _write_jsonl


@pytest.fixture
def write_json() -> Callable[..., Path]:
    """Write a single JSON document, optionally pinning its mtime."""
    return _write_json


@pytest.fixture
def set_mtime() -> Callable[[Path, int], None]:
    return _set_mtime


@pytest.fixture
def bridge_config(tmp_path: Path) -> BridgeConfig:
    """Config pointing every agent family at an empty directory under tmp_path."""
    stores = tmp_path / "stores"
    config = BridgeConfig(
        codex_sessions_dir=str(stores / "codex" / "sessions"),
        claude_projects_dir=str(stores / "claude" / "projects"),
        gemini_tmp_dir=str(stores / "gemini" / "tmp"),
        cursor_data_dir=str(stores / "cursor"),
    )
    for base in (config.codex_base, config.claude_base, config.gemini_base, config.cursor_base):
        base.mkdir(parents=True)
    return config


@pytest.fixture
def registry(bridge_config: BridgeConfig) -> AdapterRegistry:
    return AdapterRegistry(bridge_config)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A real directory to use as a session cwd (resolved, so symlinks match)."""
    path = tmp_path / "workspace" / "demo"
    path.mkdir(parents=True)
    return path.resolve()


@pytest.fixture
def other_project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "workspace" / "other"
    path.mkdir(parents=True)
    return path.resolve()


def codex_meta(cwd: str | Path, session_id: str = "sess-0001") -> dict[str, Any]:
    return {"type": "session_meta", "payload": {"cwd": str(cwd), "session_id": session_id}}


def codex_agent_message(text: str) -> dict[str, Any]:
    return {"type": "event_msg", "payload": {"type": "agent_message", "message": text}}


def codex_response(role: str, text: str) -> dict[str, Any]:
    return {
        "type": "response_item",
        "payload": {"type": "message", "role": role, "content": [{"type": "output_text", "text": text}]},
    }


def claude_turn(role: str, text: str, cwd: str | Path | None = None) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "type": role,
        "message": {"role": role, "content": [{"type": "text", "text": text}]},
    }
    if cwd is not None:
        entry["cwd"] = str(cwd)
    return entry


@pytest.fixture
def codex_entries() -> dict[str, Callable[..., dict[str, Any]]]:
    """Builders for Codex rollout lines."""
    return {"meta": codex_meta, "agent": codex_agent_message, "response": codex_response}


@pytest.fixture
def claude_entry() -> Callable[..., dict[str, Any]]:
    """Builder for a Claude transcript line."""
    return claude_turn

"""Codex adapter over ~/.codex/sessions/YYYY/MM/DD/rollout-*.jsonl."""

from pathlib import Path

from agent_bridge.adapters.jsonl import JsonlTranscriptAdapter
from agent_bridge.models import Agent
from agent_bridge.parsers.codex import CodexParser


class CodexAdapter(JsonlTranscriptAdapter):
    """Sessions written by the Codex CLI, nested by date under one base directory."""

    agent = Agent.CODEX

    def __init__(self, sessions_dir: Path, parser: CodexParser | None = None) -> None:
        super().__init__(sessions_dir, parser or CodexParser())

"""Claude adapter over ~/.claude/projects/<project>/<session>.jsonl."""

from pathlib import Path

from agent_bridge.adapters.jsonl import JsonlTranscriptAdapter
from agent_bridge.models import Agent
from agent_bridge.parsers.claude import ClaudeParser


class ClaudeAdapter(JsonlTranscriptAdapter):
    """Claude Code transcripts, one directory per project."""

    agent = Agent.CLAUDE

    def __init__(self, projects_dir: Path, parser: ClaudeParser | None = None) -> None:
        super().__init__(projects_dir, parser or ClaudeParser())

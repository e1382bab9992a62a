"""Cursor adapter over <data>/User/workspaceStorage chat exports."""

import logging
from pathlib import Path

from agent_bridge.adapters.base import (
    DEFAULT_LIST_LIMIT,
    SessionAdapter,
    choose_by_cwd,
    file_contains,
    newest_matching_id,
)
from agent_bridge.models import Agent, ResolvedSession, SessionRecord, SessionSummary
from agent_bridge.parsers.cursor import CursorParser
from agent_bridge.scanning import FileEntry, collect_matching_files, normalize_path

logger = logging.getLogger(__name__)

NAME_MARKERS = ("chat", "composer", "conversation")


def is_cursor_file(_path: Path, name: str) -> bool:
    """JSON or JSONL files whose name mentions a chat, composer or conversation."""
    if not (name.endswith(".json") or name.endswith(".jsonl")):
        return False
    return any(marker in name for marker in NAME_MARKERS)


class CursorAdapter(SessionAdapter):
    """Cursor chat files; the cwd is found by searching file contents."""

    agent = Agent.CURSOR

    def __init__(self, data_dir: Path, parser: CursorParser | None = None) -> None:
        self.data_dir = data_dir
        self.parser = parser or CursorParser()

    @property
    def workspaces_dir(self) -> Path:
        return self.data_dir / "User" / "workspaceStorage"

    def session_files(self) -> list[FileEntry]:
        return collect_matching_files(self.workspaces_dir, is_cursor_file, recursive=True)

    def resolve(
        self,
        session_id: str | None,
        cwd: str | None,
        chats_dir: str | None = None,
    ) -> ResolvedSession | None:
        files = self.session_files()
        if session_id:
            return newest_matching_id(files, session_id)
        return choose_by_cwd(self, files, cwd, lambda entry, expected: file_contains(entry, str(expected)))

    def read(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        return self.parser.parse_session_file(file_path, last_n)

    def list_sessions(self, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[SessionSummary]:
        return self._scan(None, cwd, limit)

    def search_sessions(
        self, query: str, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[SessionSummary]:
        return self._scan(query, cwd, limit)

    def _scan(self, query: str | None, cwd: str | None, limit: int) -> list[SessionSummary]:
        expected = str(normalize_path(cwd)) if cwd else None
        summaries: list[SessionSummary] = []
        for entry in self.session_files():
            if len(summaries) >= limit:
                break
            if expected is not None and not file_contains(entry, expected):
                continue
            if query is not None and not file_contains(entry, query, case_sensitive=False):
                continue
            summaries.append(self.summarize(entry.path))
        return summaries

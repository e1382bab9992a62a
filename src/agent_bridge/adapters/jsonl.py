"""Shared adapter for JSONL transcript families that record their own cwd."""

import logging
from pathlib import Path
from typing import Protocol

from agent_bridge.adapters.base import (
    DEFAULT_LIST_LIMIT,
    SessionAdapter,
    choose_by_cwd,
    file_contains,
    newest_matching_id,
)
from agent_bridge.models import ResolvedSession, SessionRecord, SessionSummary
from agent_bridge.scanning import FileEntry, collect_matching_files, normalize_path

logger = logging.getLogger(__name__)


class TranscriptParser(Protocol):
    def session_cwd(self, file_path: Path) -> Path | None: ...

    def parse_session_file(self, file_path: Path, last_n: int = 1) -> SessionRecord: ...


def _is_session_file(_path: Path, name: str) -> bool:
    return name.endswith(".jsonl")


class JsonlTranscriptAdapter(SessionAdapter):
    """Adapter over a tree of ``*.jsonl`` files whose sessions embed a cwd.

    Subclasses only pick the agent and the parser; resolution, listing and
    search are the same for every family laid out this way.
    """

    def __init__(self, base_dir: Path, parser: TranscriptParser) -> None:
        self.base_dir = base_dir
        self.parser = parser

    def session_files(self) -> list[FileEntry]:
        return collect_matching_files(self.base_dir, _is_session_file, recursive=True)

    def resolve(
        self,
        session_id: str | None,
        cwd: str | None,
        chats_dir: str | None = None,
    ) -> ResolvedSession | None:
        files = self.session_files()
        if session_id:
            return newest_matching_id(files, session_id)
        return choose_by_cwd(self, files, cwd, self._cwd_matches)

    def _cwd_matches(self, entry: FileEntry, expected: Path) -> bool:
        return self.parser.session_cwd(entry.path) == expected

    def read(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        return self.parser.parse_session_file(file_path, last_n)

    def list_sessions(self, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[SessionSummary]:
        return self._scan(None, cwd, limit)

    def search_sessions(
        self, query: str, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[SessionSummary]:
        return self._scan(query, cwd, limit)

    def _scan(self, query: str | None, cwd: str | None, limit: int) -> list[SessionSummary]:
        expected = normalize_path(cwd) if cwd else None
        summaries: list[SessionSummary] = []
        for entry in self.session_files():
            if len(summaries) >= limit:
                break
            file_cwd = self.parser.session_cwd(entry.path)
            if expected is not None and file_cwd != expected:
                continue
            if query is not None and not file_contains(entry, query, case_sensitive=False):
                continue
            summaries.append(self.summarize(entry.path, str(file_cwd) if file_cwd else None))
        logger.debug("%s scan matched %d session(s)", self.agent.value, len(summaries))
        return summaries

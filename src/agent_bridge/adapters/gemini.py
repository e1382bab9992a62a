"""Gemini adapter over ~/.gemini/tmp/<sha256(cwd)>/chats/session-*.json.

Gemini sessions carry no cwd, so scoping relies on the CLI's own layout:
each project gets a temp directory named after the sha256 of its path.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from agent_bridge.adapters.base import DEFAULT_LIST_LIMIT, SessionAdapter, file_contains
from agent_bridge.errors import BridgeIOError
from agent_bridge.models import Agent, ResolvedSession, SessionRecord, SessionSummary
from agent_bridge.parsers.gemini import GeminiParser
from agent_bridge.scanning import (
    FileEntry,
    collect_matching_files,
    hash_path,
    is_system_directory,
    normalize_path,
    sort_newest_first,
)

logger = logging.getLogger(__name__)

CHATS_SUBDIR = "chats"


def _is_session_file(_path: Path, name: str) -> bool:
    return name.startswith("session-") and name.endswith(".json")


class GeminiAdapter(SessionAdapter):
    """Gemini CLI chat sessions grouped by hashed project directory."""

    agent = Agent.GEMINI

    def __init__(self, tmp_dir: Path, parser: GeminiParser | None = None) -> None:
        self.tmp_dir = tmp_dir
        self.parser = parser or GeminiParser()

    def scoped_chats_dir(self, cwd: str) -> Path:
        return self.tmp_dir / hash_path(cwd) / CHATS_SUBDIR

    def chat_dirs(self) -> list[Path]:
        """Every ``<tmp>/*/chats`` directory, in name order."""
        try:
            projects = sorted(self.tmp_dir.iterdir())
        except OSError as e:
            logger.debug("Cannot list Gemini tmp dir %s: %s", self.tmp_dir, e)
            return []
        return [p / CHATS_SUBDIR for p in projects if (p / CHATS_SUBDIR).is_dir()]

    def resolve(
        self,
        session_id: str | None,
        cwd: str | None,
        chats_dir: str | None = None,
    ) -> ResolvedSession | None:
        """Pick a session from the override dir, the hashed cwd dir, or all chat dirs.

        Raises:
            BridgeIOError: If ``chats_dir`` points at a system directory.
        """
        if chats_dir:
            override = normalize_path(chats_dir)
            if is_system_directory(chats_dir) or is_system_directory(override):
                logger.warning("Refusing to scan system directory %s", override)
                raise BridgeIOError(f"Refusing to scan system directory: {override}")
            return self._newest([override], session_id)

        if session_id:
            # An id match is taken from every chats dir at once, newest wins.
            dirs = [self.scoped_chats_dir(cwd)] if cwd else []
            return self._newest(list(dict.fromkeys(dirs + self.chat_dirs())), session_id)

        if cwd:
            found = self._newest([self.scoped_chats_dir(cwd)], None)
            if found is not None:
                return found

        found = self._newest(self.chat_dirs(), None)
        if found is None or not cwd:
            return found
        return found.model_copy(update={"warnings": [self.cwd_fallback_warning(normalize_path(cwd))]})

    def _newest(self, dirs: list[Path], session_id: str | None) -> ResolvedSession | None:
        if session_id:
            candidates = self._collect(dirs, lambda path, name: name.endswith(".json") and session_id in str(path))
        else:
            candidates = self._collect(dirs, _is_session_file)
        if not candidates:
            return None
        return ResolvedSession(path=str(candidates[0].path))

    def _collect(self, dirs: list[Path], predicate: Callable[[Path, str], bool]) -> list[FileEntry]:
        entries: list[FileEntry] = []
        for directory in dirs:
            entries.extend(collect_matching_files(directory, predicate))
        return sort_newest_first(entries)

    def read(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        return self.parser.parse_session_file(file_path, last_n)

    def list_sessions(self, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[SessionSummary]:
        return [self.summarize(entry.path) for entry in self._listing(cwd)[: max(limit, 0)]]

    def search_sessions(
        self, query: str, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[SessionSummary]:
        summaries: list[SessionSummary] = []
        for entry in self._listing(cwd):
            if len(summaries) >= limit:
                break
            if file_contains(entry, query, case_sensitive=False):
                summaries.append(self.summarize(entry.path))
        return summaries

    def _listing(self, cwd: str | None) -> list[FileEntry]:
        dirs = [self.scoped_chats_dir(cwd)] if cwd else self.chat_dirs()
        return self._collect(dirs, _is_session_file)

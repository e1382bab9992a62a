"""Adapter contract shared by the four agent families."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from agent_bridge.errors import ParseFailedError, SessionNotFoundError
from agent_bridge.models import Agent, ResolvedSession, SessionRecord, SessionSummary
from agent_bridge.parsers.common import read_session_text
from agent_bridge.scanning import FileEntry, file_timestamp, normalize_path

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 10


class SessionAdapter(ABC):
    """Per-agent bundle of resolve, read, list and search."""

    agent: Agent

    @abstractmethod
    def resolve(
        self,
        session_id: str | None,
        cwd: str | None,
        chats_dir: str | None = None,
    ) -> ResolvedSession | None:
        """Pick the session file to read, or None when nothing matches."""
        ...

    @abstractmethod
    def read(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        """Parse one session file."""
        ...

    @abstractmethod
    def list_sessions(self, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[SessionSummary]:
        """Newest sessions first, optionally scoped to ``cwd``."""
        ...

    @abstractmethod
    def search_sessions(
        self, query: str, cwd: str | None = None, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[SessionSummary]:
        """Sessions whose raw text contains ``query`` (case-insensitive)."""
        ...

    def read_session(
        self,
        session_id: str | None,
        cwd: str | None,
        chats_dir: str | None = None,
        last_n: int = 1,
    ) -> SessionRecord:
        """Resolve then read, carrying resolver warnings ahead of parser warnings.

        Raises:
            SessionNotFoundError: If no session matched.
        """
        resolved = self.resolve(session_id, cwd, chats_dir)
        if resolved is None:
            raise SessionNotFoundError(f"No {self.agent.display_name} session found.")

        record = self.read(Path(resolved.path), max(1, last_n))
        if resolved.warnings:
            record = record.model_copy(update={"warnings": resolved.warnings + record.warnings})
        return record

    def cwd_fallback_warning(self, cwd: Path) -> str:
        return (
            f"Warning: no {self.agent.display_name} session matched cwd {cwd}; "
            "falling back to latest session."
        )

    def summarize(self, file_path: Path, cwd: str | None = None) -> SessionSummary:
        return SessionSummary(
            session_id=file_path.stem,
            agent=self.agent,
            cwd=cwd,
            modified_at=file_timestamp(file_path),
            file_path=str(file_path),
        )


def choose_by_cwd(
    adapter: SessionAdapter,
    files: list[FileEntry],
    cwd: str | None,
    cwd_matches: Callable[[FileEntry, Path], bool],
) -> ResolvedSession | None:
    """Newest file whose session matches ``cwd``, else the newest file plus a warning.

    Args:
        adapter: Adapter the files belong to (used for the warning text).
        files: Candidates, newest first.
        cwd: Target working directory; None picks the newest file outright.
        cwd_matches: Predicate comparing one candidate to the normalized cwd.
    """
    if not files:
        return None
    if cwd is None:
        return ResolvedSession(path=str(files[0].path))

    expected = normalize_path(cwd)
    for entry in files:
        if cwd_matches(entry, expected):
            return ResolvedSession(path=str(entry.path))

    logger.debug("No %s session matched cwd %s", adapter.agent.value, expected)
    return ResolvedSession(path=str(files[0].path), warnings=[adapter.cwd_fallback_warning(expected)])


def newest_matching_id(files: list[FileEntry], session_id: str) -> ResolvedSession | None:
    """Newest candidate whose full path contains ``session_id``."""
    for entry in files:
        if session_id in str(entry.path):
            return ResolvedSession(path=str(entry.path))
    return None


def file_contains(entry: FileEntry, needle: str, *, case_sensitive: bool = True) -> bool:
    """Raw substring test over a candidate file; unreadable files never match."""
    try:
        text = read_session_text(entry.path)
    except ParseFailedError as e:
        logger.debug("Skipping %s during content scan: %s", entry.path, e)
        return False
    if case_sensitive:
        return needle in text
    return needle.lower() in text.lower()

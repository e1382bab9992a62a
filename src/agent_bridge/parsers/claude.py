"""Claude session parser for ~/.claude/projects session history."""

import logging
from pathlib import Path
from typing import Any

from agent_bridge.errors import ParseFailedError
from agent_bridge.models import Agent, SessionRecord
from agent_bridge.parsers.common import (
    decode_lines,
    extract_claude_text,
    raw_fallback,
    read_jsonl_lines,
    scan_jsonl,
    select_last_n,
    skipped_warnings,
)
from agent_bridge.redaction import redact_sensitive_text
from agent_bridge.scanning import file_timestamp, normalize_path

logger = logging.getLogger(__name__)


class ClaudeParser:
    """Parser for Claude Code session history stored in .claude/projects.

    Handles the JSONL format used by Claude Code to store session transcripts.
    A line is an assistant turn when its ``type`` is ``assistant`` or its
    nested ``message.role`` is ``assistant``; only ``text`` content parts
    contribute to the displayed text.
    """

    def session_cwd(self, file_path: Path) -> Path | None:
        """Return the first top-level ``cwd`` found scanning the whole file.

        Args:
            file_path: Path to the .jsonl session file

        Returns:
            Normalized cwd, or None if no line carries one or the file
            cannot be read
        """
        try:
            lines = read_jsonl_lines(file_path)
        except ParseFailedError:
            return None

        for entry in decode_lines(lines, file_path).entries:
            if isinstance(entry, dict) and isinstance(entry.get("cwd"), str):
                return normalize_path(entry["cwd"])
        return None

    def parse_session_file(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        """Parse a single session JSONL file.

        Args:
            file_path: Path to the .jsonl session file
            last_n: Number of trailing assistant turns to include

        Returns:
            Redacted SessionRecord

        Raises:
            ParseFailedError: If the file is too large or unreadable
        """
        scan = scan_jsonl(file_path)

        texts: list[str] = []
        session_cwd: str | None = None

        for entry in scan.entries:
            if not isinstance(entry, dict):
                continue
            if session_cwd is None and isinstance(entry.get("cwd"), str):
                session_cwd = entry["cwd"]

            text = self._assistant_text(entry)
            if text:
                texts.append(text)

        if texts:
            content, messages_returned = select_last_n(texts, last_n)
        else:
            content, messages_returned = raw_fallback(scan.lines, "assistant messages"), 0

        return SessionRecord(
            agent=Agent.CLAUDE,
            source=str(file_path.absolute()),
            content=redact_sensitive_text(content),
            warnings=skipped_warnings(scan, file_path),
            session_id=file_path.stem,
            cwd=session_cwd,
            timestamp=file_timestamp(file_path),
            message_count=len(texts),
            messages_returned=messages_returned,
        )

    def _assistant_text(self, entry: dict[str, Any]) -> str:
        """Return the display text of an assistant entry, or "" for anything else."""
        message = entry.get("message") or entry
        role = message.get("role") if isinstance(message, dict) else None
        if entry.get("type") != "assistant" and role != "assistant":
            return ""

        if isinstance(message, dict) and "content" in message:
            content = message["content"]
        else:
            content = entry.get("content")
        return extract_claude_text(content)

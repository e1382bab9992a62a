"""Codex CLI session parser for ~/.codex/sessions rollout files."""

import json
import logging
from pathlib import Path
from typing import Any

from agent_bridge.models import Agent, SessionRecord
from agent_bridge.parsers.common import (
    MAX_FILE_SIZE,
    NO_TEXT_CONTENT,
    extract_text,
    raw_fallback,
    scan_jsonl,
    select_last_n,
    skipped_warnings,
)
from agent_bridge.redaction import redact_sensitive_text
from agent_bridge.scanning import file_timestamp, normalize_path

logger = logging.getLogger(__name__)


class CodexParser:
    """Parser for the event-stream JSONL format written by Codex CLI.

    Each line is an independent JSON object with a ``type`` discriminator.
    ``session_meta`` lines carry the working directory and session id;
    messages arrive either as ``response_item`` entries whose payload type is
    ``message`` or as ``event_msg`` entries whose payload type is
    ``agent_message`` (normalized into an assistant message).
    """

    def session_cwd(self, file_path: Path) -> Path | None:
        """Return the normalized cwd from the first non-blank line, if it is ``session_meta``."""
        try:
            if file_path.stat().st_size > MAX_FILE_SIZE:
                return None
            with open(file_path, encoding="utf-8", errors="replace") as f:
                first_line = next((line.strip() for line in f if line.strip()), "")
            if not first_line:
                return None
            entry = json.loads(first_line)
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(entry, dict) or entry.get("type") != "session_meta":
            return None
        payload = entry.get("payload")
        if isinstance(payload, dict) and isinstance(payload.get("cwd"), str):
            return normalize_path(payload["cwd"])
        return None

    def parse_session_file(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        """Parse a rollout file into a redacted SessionRecord.

        Args:
            file_path: Path to the .jsonl session file.
            last_n: Number of trailing assistant messages to include.

        Raises:
            ParseFailedError: If the file is too large or unreadable.
        """
        scan = scan_jsonl(file_path)

        messages: list[dict[str, Any]] = []
        session_cwd: str | None = None
        session_id: str | None = None

        for entry in scan.entries:
            if not isinstance(entry, dict):
                continue
            payload = entry.get("payload")
            if not isinstance(payload, dict):
                continue

            entry_type = entry.get("type")
            if entry_type == "session_meta":
                if session_cwd is None and isinstance(payload.get("cwd"), str):
                    session_cwd = payload["cwd"]
                if session_id is None and isinstance(payload.get("session_id"), str):
                    session_id = payload["session_id"]

            if entry_type == "response_item" and payload.get("type") == "message":
                messages.append(payload)
            elif entry_type == "event_msg" and payload.get("type") == "agent_message":
                messages.append({"role": "assistant", "content": payload.get("message")})

        assistant_msgs = [m for m in messages if str(m.get("role") or "").lower() == "assistant"]

        if messages:
            if last_n > 1 and assistant_msgs:
                content, messages_returned = select_last_n(
                    [self._message_text(m) for m in assistant_msgs], last_n
                )
            else:
                # No assistant turn at all: show whatever spoke last.
                selected = assistant_msgs[-1] if assistant_msgs else messages[-1]
                content, messages_returned = self._message_text(selected), 1
        else:
            content, messages_returned = raw_fallback(scan.lines), 0

        return SessionRecord(
            agent=Agent.CODEX,
            source=str(file_path.absolute()),
            content=redact_sensitive_text(content),
            warnings=skipped_warnings(scan, file_path),
            session_id=session_id or file_path.stem,
            cwd=session_cwd,
            timestamp=file_timestamp(file_path),
            message_count=len(assistant_msgs),
            messages_returned=messages_returned,
        )

    @staticmethod
    def _message_text(message: dict[str, Any]) -> str:
        return extract_text(message.get("content")) or NO_TEXT_CONTENT

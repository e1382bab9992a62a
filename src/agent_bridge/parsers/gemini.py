"""Gemini CLI session parser for ~/.gemini/tmp/<project>/chats files.

Gemini writes one JSON document per session in one of two shapes: the
current ``{"messages": [{"type": ..., "content": ...}]}`` form, or the older
API-style ``{"history": [{"role": ..., "parts": ...}]}`` form. The shape is
sniffed once into a ``GeminiDocument`` and the rest of the parser works on
that.
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from agent_bridge.errors import EmptySessionError, ParseFailedError
from agent_bridge.models import Agent, SessionRecord
from agent_bridge.parsers.common import (
    NO_TEXT_CONTENT,
    extract_text,
    read_session_text,
    select_last_n,
)
from agent_bridge.redaction import redact_sensitive_text
from agent_bridge.scanning import file_timestamp

logger = logging.getLogger(__name__)

ASSISTANT_TYPES = frozenset({"gemini", "assistant", "model"})


class GeminiDocument(BaseModel):
    """A Gemini session document after schema sniffing."""

    schema_kind: Literal["messages", "history"]
    entries: list[Any] = Field(default_factory=list)
    session_id: str | None = None

    def assistant_texts(self) -> list[str]:
        """Display text of every assistant-equivalent turn, in order."""
        if self.schema_kind == "messages":
            return [
                _message_text(m)
                for m in self.entries
                if isinstance(m, dict) and str(m.get("type") or "").lower() in ASSISTANT_TYPES
            ]
        # In history documents every non-user role counts as the model speaking.
        return [
            _history_text(turn)
            for turn in self.entries
            if isinstance(turn, dict) and str(turn.get("role") or "").lower() != "user"
        ]


def sniff_document(data: Any) -> GeminiDocument:
    """Classify a decoded Gemini document.

    Raises:
        ParseFailedError: If neither a ``messages`` nor a ``history`` array is present.
    """
    if isinstance(data, dict):
        session_id = data.get("sessionId") if isinstance(data.get("sessionId"), str) else None
        if isinstance(data.get("messages"), list):
            return GeminiDocument(schema_kind="messages", entries=data["messages"], session_id=session_id)
        if isinstance(data.get("history"), list):
            return GeminiDocument(schema_kind="history", entries=data["history"], session_id=session_id)
    raise ParseFailedError("Unknown Gemini session schema. Supported fields: messages, history.")


def _message_text(message: dict[str, Any]) -> str:
    content = message.get("content")
    if isinstance(content, str):
        return content
    return extract_text(content) or NO_TEXT_CONTENT


def _history_text(turn: dict[str, Any]) -> str:
    parts = turn.get("parts")
    if isinstance(parts, list):
        return "\n".join(
            p["text"] if isinstance(p, dict) and isinstance(p.get("text"), str) else ""
            for p in parts
        )
    if isinstance(parts, str):
        return parts
    return NO_TEXT_CONTENT


class GeminiParser:
    """Parser for Gemini CLI chat session JSON files."""

    def load_document(self, file_path: Path) -> GeminiDocument:
        """Read, decode and sniff a session file.

        Raises:
            ParseFailedError: On oversize files, invalid JSON or unknown schema.
        """
        raw = read_session_text(file_path)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseFailedError(f"Failed to parse Gemini JSON: {e}") from e
        return sniff_document(data)

    def parse_session_file(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        """Parse a Gemini session into a redacted SessionRecord.

        Raises:
            ParseFailedError: If the document cannot be decoded or classified.
            EmptySessionError: If it holds no assistant-equivalent turns.
        """
        document = self.load_document(file_path)
        texts = document.assistant_texts()

        if not texts:
            if not document.entries:
                label = "session has no messages" if document.schema_kind == "messages" else "history is empty"
            else:
                label = "session has no assistant messages"
            raise EmptySessionError(f"Gemini {label}: {file_path}")

        content, messages_returned = select_last_n(texts, last_n)

        return SessionRecord(
            agent=Agent.GEMINI,
            source=str(file_path.absolute()),
            content=redact_sensitive_text(content),
            warnings=[],
            session_id=document.session_id or file_path.stem,
            cwd=None,
            timestamp=file_timestamp(file_path),
            message_count=len(texts),
            messages_returned=messages_returned,
        )

"""Cursor chat parser for workspaceStorage chat/composer exports.

Cursor data comes in several loosely defined shapes, so the parser tries
them in order: a whole JSON document (with a ``messages`` array or a single
``content`` string), then JSONL lines with ``role``/``content`` objects, and
finally a raw-text view of the file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from agent_bridge.models import Agent, LineScan, SessionRecord
from agent_bridge.parsers.common import (
    NO_TEXT_CONTENT,
    decode_lines,
    extract_text,
    raw_fallback,
    read_session_text,
    select_last_n,
    skipped_warnings,
    split_lines,
)
from agent_bridge.redaction import redact_sensitive_text
from agent_bridge.scanning import file_timestamp

logger = logging.getLogger(__name__)


class CursorDocument(BaseModel):
    """A Cursor file after shape detection."""

    shape: Literal["messages", "content", "jsonl", "raw"]
    texts: list[str] = Field(default_factory=list)
    lines: list[str] = Field(default_factory=list)
    scan: LineScan | None = None


def sniff_document(raw: str, file_path: Path) -> CursorDocument:
    """Classify raw Cursor file text and pull out assistant texts."""
    lines = split_lines(raw)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return _sniff_jsonl(lines, file_path)

    if isinstance(data, dict) and isinstance(data.get("messages"), list):
        texts = [
            _message_text(m.get("content"))
            for m in data["messages"]
            if isinstance(m, dict) and m.get("role") == "assistant"
        ]
        return CursorDocument(shape="messages", texts=texts, lines=lines)
    if isinstance(data, dict) and isinstance(data.get("content"), str):
        return CursorDocument(shape="content", texts=[data["content"]], lines=lines)
    return CursorDocument(shape="raw", lines=lines)


def _sniff_jsonl(lines: list[str], file_path: Path) -> CursorDocument:
    scan = decode_lines(lines, file_path)
    texts = [
        entry["content"]
        for entry in scan.entries
        if isinstance(entry, dict)
        and entry.get("role") == "assistant"
        and isinstance(entry.get("content"), str)
    ]
    if not scan.entries:
        return CursorDocument(shape="raw", lines=lines)
    return CursorDocument(shape="jsonl", texts=texts, lines=lines, scan=scan)


def _message_text(content: Any) -> str:
    if isinstance(content, str) and content:
        return content
    return extract_text(content) or NO_TEXT_CONTENT


class CursorParser:
    """Parser for Cursor chat history files."""

    def parse_session_file(self, file_path: Path, last_n: int = 1) -> SessionRecord:
        """Parse a Cursor chat file into a redacted SessionRecord.

        Raises:
            ParseFailedError: If the file is too large or unreadable.
        """
        raw = read_session_text(file_path)
        document = sniff_document(raw, file_path)

        warnings = skipped_warnings(document.scan, file_path) if document.scan else []

        if document.texts:
            content, messages_returned = select_last_n(document.texts, last_n)
        else:
            content, messages_returned = raw_fallback(document.lines), 0

        return SessionRecord(
            agent=Agent.CURSOR,
            source=str(file_path.absolute()),
            content=redact_sensitive_text(content),
            warnings=warnings,
            session_id=file_path.stem,
            cwd=None,
            timestamp=file_timestamp(file_path),
            message_count=len(document.texts),
            messages_returned=messages_returned,
        )

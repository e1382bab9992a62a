"""Helpers shared by the per-agent session parsers."""

import json
import logging
from pathlib import Path
from typing import Any

from agent_bridge.errors import ParseFailedError
from agent_bridge.models import LineScan

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MB
MESSAGE_SEPARATOR = "\n---\n"
RAW_FALLBACK_LINES = 20
NO_TEXT_CONTENT = "[No text content]"


def read_session_text(file_path: Path) -> str:
    """Read a whole session file, refusing anything above ``MAX_FILE_SIZE``.

    Raises:
        ParseFailedError: If the file is too large or cannot be read.
    """
    try:
        size = file_path.stat().st_size
    except OSError as e:
        raise ParseFailedError(f"Failed to read {file_path}: {e}") from e

    if size > MAX_FILE_SIZE:
        logger.warning("Refusing to load %s (%d bytes)", file_path, size)
        raise ParseFailedError(
            f"Skipped {file_path} (exceeds {MAX_FILE_SIZE // (1024 * 1024)}MB size limit)"
        )

    try:
        return file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ParseFailedError(f"Failed to read {file_path}: {e}") from e


def split_lines(text: str) -> list[str]:
    """Split file text into non-blank lines."""
    return [line for line in text.split("\n") if line.strip()]


def read_jsonl_lines(file_path: Path) -> list[str]:
    return split_lines(read_session_text(file_path))


def decode_lines(lines: list[str], file_path: Path) -> LineScan:
    """Decode each line as JSON, counting the ones that fail."""
    scan = LineScan(lines=lines)
    for line_num, line in enumerate(lines, 1):
        try:
            scan.entries.append(json.loads(line))
        except json.JSONDecodeError as e:
            logger.debug("JSON decode error in %s:%d: %s", file_path, line_num, e)
            scan.skipped += 1
    return scan


def scan_jsonl(file_path: Path) -> LineScan:
    """Read and decode a JSONL file; undecodable lines are skipped and counted."""
    return decode_lines(read_jsonl_lines(file_path), file_path)


def skipped_warnings(scan: LineScan, file_path: Path) -> list[str]:
    if scan.skipped > 0:
        return [f"Warning: skipped {scan.skipped} unparseable line(s) in {file_path}"]
    return []


def extract_text(value: Any) -> str:
    """Flatten a string or a list of string / ``{"text": ...}`` parts."""
    if isinstance(value, str):
        return value
    if not isinstance(value, list):
        return ""

    parts: list[str] = []
    for part in value:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and isinstance(part.get("text"), str):
            parts.append(part["text"])
    return "".join(parts)


def extract_claude_text(value: Any) -> str:
    """Like ``extract_text`` but keeps only parts whose own type is ``text``.

    Tool calls, tool results and thinking blocks are dropped.
    """
    if isinstance(value, str):
        return value
    if not isinstance(value, list):
        return ""

    parts: list[str] = []
    for part in value:
        if isinstance(part, dict) and part.get("type") == "text":
            text = part.get("text")
            parts.append(text if isinstance(text, str) else "")
    return "".join(parts)


def select_last_n(texts: list[str], last_n: int) -> tuple[str, int]:
    """Pick trailing turns for display.

    Returns the joined content and the number of turns actually used. With
    ``last_n`` of 1 (or less) only the most recent turn is returned.
    """
    if last_n > 1:
        selected = texts[-last_n:]
        return MESSAGE_SEPARATOR.join(selected), len(selected)
    return texts[-1], 1


def raw_fallback(lines: list[str], what: str = "structured messages") -> str:
    """Debug view used when no turns could be extracted at all."""
    tail = "\n".join(lines[-RAW_FALLBACK_LINES:])
    return f"Could not extract {what}. Showing last {RAW_FALLBACK_LINES} raw lines:\n{tail}"

"""Parsers for AI coding assistant session files."""

from .claude import ClaudeParser
from .codex import CodexParser
from .common import MAX_FILE_SIZE, MESSAGE_SEPARATOR
from .cursor import CursorDocument, CursorParser
from .gemini import GeminiDocument, GeminiParser

__all__ = [
    "MAX_FILE_SIZE",
    "MESSAGE_SEPARATOR",
    "ClaudeParser",
    "CodexParser",
    "CursorDocument",
    "CursorParser",
    "GeminiDocument",
    "GeminiParser",
]

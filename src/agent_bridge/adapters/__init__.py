"""Per-agent adapters that resolve, read, list and search session files."""

from .base import DEFAULT_LIST_LIMIT, SessionAdapter
from .claude import ClaudeAdapter
from .codex import CodexAdapter
from .cursor import CursorAdapter
from .gemini import GeminiAdapter
from .registry import AdapterRegistry, parse_agent

__all__ = [
    "DEFAULT_LIST_LIMIT",
    "AdapterRegistry",
    "ClaudeAdapter",
    "CodexAdapter",
    "CursorAdapter",
    "GeminiAdapter",
    "SessionAdapter",
    "parse_agent",
]

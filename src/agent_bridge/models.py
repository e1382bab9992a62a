"""Canonical session models shared by parsers, adapters and the report engine.

Every parser produces a ``SessionRecord`` regardless of the on-disk schema it
read, and every lister produces ``SessionSummary`` entries. All models are
built fresh per invocation and never persisted.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class Agent(str, Enum):
    """Supported agent families."""

    CODEX = "codex"
    GEMINI = "gemini"
    CLAUDE = "claude"
    CURSOR = "cursor"

    @property
    def display_name(self) -> str:
        """Capitalized name used in human-readable messages."""
        return self.value.capitalize()


class SessionRecord(BaseModel):
    """A single session read from disk, normalized and redacted.

    ``message_count`` counts assistant-role turns in the file; it is 0 when
    the parser fell back to raw-line mode, in which case ``messages_returned``
    is also 0.
    """

    agent: Agent
    source: str
    content: str
    warnings: list[str] = Field(default_factory=list)
    session_id: str
    cwd: str | None = None
    timestamp: str | None = None
    message_count: int = Field(default=0, ge=0)
    messages_returned: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_counts(self) -> "SessionRecord":
        """Reject records that claim to return more turns than they found."""
        if self.message_count > 0 and self.messages_returned > self.message_count:
            raise ValueError(
                f"messages_returned ({self.messages_returned}) exceeds "
                f"message_count ({self.message_count})"
            )
        return self


class SessionSummary(BaseModel):
    """Lightweight listing entry returned by list and search."""

    session_id: str
    agent: Agent
    cwd: str | None = None
    modified_at: str | None = None
    file_path: str


class ResolvedSession(BaseModel):
    """File chosen by a resolver plus any advisories raised while choosing it."""

    path: str
    warnings: list[str] = Field(default_factory=list)


class LineScan(BaseModel):
    """Result of best-effort JSONL decoding.

    Undecodable lines are counted in ``skipped`` instead of raising, so the
    count always travels with the entries that were recovered.
    """

    lines: list[str] = Field(default_factory=list)
    entries: list[Any] = Field(default_factory=list)
    skipped: int = 0

"""Validation of externally supplied report requests (handoff files).

A handoff is a JSON object naming the mode, task, success criteria and
sources of a coordinator report. Anything outside the recognized shape is
rejected outright so a malformed request never reaches the report engine.
"""

import json
import logging
from pathlib import Path
from typing import Any

from agent_bridge.adapters.registry import parse_agent
from agent_bridge.errors import BridgeIOError, InvalidHandoffError, UnsupportedModeError
from agent_bridge.report import Mode, ReportRequest, SourceSpec

logger = logging.getLogger(__name__)

MAX_HANDOFF_SIZE = 1024 * 1024  # 1 MB

ALLOWED_FIELDS = ("mode", "task", "success_criteria", "sources", "constraints")
ALLOWED_SOURCE_FIELDS = ("agent", "session_id", "current_session", "cwd", "chats_dir")


def load_handoff(path: str | Path) -> ReportRequest:
    """Read and validate a handoff file.

    Raises:
        InvalidHandoffError: If the file is too large, not JSON or fails validation.
        UnsupportedModeError: If the mode is not recognized.
        UnsupportedAgentError: If a source names an unknown agent.
        BridgeIOError: If the file cannot be read.
    """
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as e:
        raise BridgeIOError(f"Failed to read handoff file: {path} ({e})") from e
    if size > MAX_HANDOFF_SIZE:
        raise InvalidHandoffError("Invalid handoff: file exceeds 1MB size limit")

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise BridgeIOError(f"Failed to read handoff file: {path} ({e})") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidHandoffError(f"Failed to parse handoff JSON: {path} ({e})") from e

    logger.debug("Loaded handoff from %s", path)
    return validate_handoff(data)


def validate_handoff(data: Any) -> ReportRequest:
    """Validate a decoded handoff object and build the report request.

    Raises:
        InvalidHandoffError: On any shape violation.
        UnsupportedModeError: If ``mode`` is not one of the four modes.
        UnsupportedAgentError: If a source's agent is not supported.
    """
    if not isinstance(data, dict):
        raise InvalidHandoffError("Invalid handoff: must be a JSON object")

    extra = [key for key in data if key not in ALLOWED_FIELDS]
    if extra:
        raise InvalidHandoffError(f"Invalid handoff: unexpected fields: {', '.join(extra)}")

    mode = data.get("mode")
    if not isinstance(mode, str):
        raise InvalidHandoffError("Handoff is missing required string field: mode")
    try:
        parsed_mode = Mode(mode.lower())
    except ValueError:
        raise UnsupportedModeError(f"Unsupported mode: {mode}") from None

    task = data.get("task")
    if not isinstance(task, str) or not task.strip():
        raise InvalidHandoffError("Handoff is missing required string field: task")

    success_criteria = _string_list(data.get("success_criteria"), "success_criteria")
    if not success_criteria:
        raise InvalidHandoffError("Handoff success_criteria must contain at least one string")

    raw_sources = data.get("sources")
    if not isinstance(raw_sources, list):
        raise InvalidHandoffError("Handoff is missing required array field: sources")
    if not raw_sources:
        raise InvalidHandoffError("Handoff sources must contain at least one source")
    sources = [_validate_source(source) for source in raw_sources]

    constraints: list[str] = []
    if data.get("constraints") is not None:
        constraints = _string_list(data["constraints"], "constraints")

    return ReportRequest(
        mode=parsed_mode,
        task=task,
        success_criteria=success_criteria,
        sources=sources,
        constraints=constraints,
    )


def _string_list(value: Any, field: str) -> list[str]:
    if not isinstance(value, list):
        raise InvalidHandoffError(f"Handoff is missing required array field: {field}")
    if not all(isinstance(item, str) for item in value):
        raise InvalidHandoffError(f"Handoff {field} must contain only strings")
    return list(value)


def _validate_source(source: Any) -> SourceSpec:
    if not isinstance(source, dict):
        raise InvalidHandoffError("Each source must be a JSON object")

    extra = [key for key in source if key not in ALLOWED_SOURCE_FIELDS]
    if extra:
        raise InvalidHandoffError(f"Invalid handoff source: unexpected fields: {', '.join(extra)}")

    agent = source.get("agent")
    if not isinstance(agent, str):
        raise InvalidHandoffError("Each source must include string field: agent")
    parsed_agent = parse_agent(agent)

    session_id = source.get("session_id")
    if session_id is not None and not isinstance(session_id, str):
        raise InvalidHandoffError("Source session_id must be a string")
    current_session = source.get("current_session", False)
    if not isinstance(current_session, bool):
        raise InvalidHandoffError("Source current_session must be a boolean")
    if not (session_id and session_id.strip()) and not current_session:
        raise InvalidHandoffError("Each source must provide session_id or set current_session=true")

    for field in ("cwd", "chats_dir"):
        if source.get(field) is not None and not isinstance(source[field], str):
            raise InvalidHandoffError(f"Source {field} must be a string")

    return SourceSpec(
        agent=parsed_agent,
        session_id=(session_id or "").strip() or None,
        current_session=current_session,
        cwd=source.get("cwd"),
        chats_dir=source.get("chats_dir"),
    )

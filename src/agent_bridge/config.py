"""Session storage locations loaded from .agent-bridge.toml and env vars.

Loading order: defaults, then the TOML file, then env vars.
"""

from __future__ import annotations

import logging
import os
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel

from agent_bridge.scanning import expand_home

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".agent-bridge.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "agent-bridge" / "config.toml"

DEFAULT_CODEX_SESSIONS_DIR = "~/.codex/sessions"
DEFAULT_CLAUDE_PROJECTS_DIR = "~/.claude/projects"
DEFAULT_GEMINI_TMP_DIR = "~/.gemini/tmp"


def default_cursor_data_dir() -> str:
    if sys.platform == "darwin":
        return "~/Library/Application Support/Cursor"
    return "~/.cursor"


class BridgeConfig(BaseModel):
    """Optional base-directory overrides, one per agent family."""

    codex_sessions_dir: str | None = None
    claude_projects_dir: str | None = None
    gemini_tmp_dir: str | None = None
    cursor_data_dir: str | None = None

    @property
    def codex_base(self) -> Path:
        return _absolute(self.codex_sessions_dir or DEFAULT_CODEX_SESSIONS_DIR)

    @property
    def claude_base(self) -> Path:
        return _absolute(self.claude_projects_dir or DEFAULT_CLAUDE_PROJECTS_DIR)

    @property
    def gemini_base(self) -> Path:
        return _absolute(self.gemini_tmp_dir or DEFAULT_GEMINI_TMP_DIR)

    @property
    def cursor_base(self) -> Path:
        return _absolute(self.cursor_data_dir or default_cursor_data_dir())


def load_config(path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> BridgeConfig:
    """Load configuration from a TOML file, then overlay environment variables.

    Search order:
    1. Explicit path (if provided)
    2. .agent-bridge.toml in CWD
    3. ~/.config/agent-bridge/config.toml

    Args:
        path: Explicit path to a TOML file.
        env: Environment mapping to read overrides from (defaults to
            ``os.environ``).

    Returns:
        Merged BridgeConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    paths = data.get("paths", {})
    config = BridgeConfig.model_validate(paths) if isinstance(paths, dict) else BridgeConfig()

    return _apply_env_vars(config, os.environ if env is None else env)


def _absolute(raw: str) -> Path:
    expanded = expand_home(raw)
    return expanded if expanded.is_absolute() else Path.cwd() / expanded


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BridgeConfig, env: Mapping[str, str]) -> BridgeConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, str] = {
        "BRIDGE_CODEX_SESSIONS_DIR": "codex_sessions_dir",
        "BRIDGE_CLAUDE_PROJECTS_DIR": "claude_projects_dir",
        "BRIDGE_GEMINI_TMP_DIR": "gemini_tmp_dir",
        "BRIDGE_CURSOR_DATA_DIR": "cursor_data_dir",
    }

    for env_var, field in env_mapping.items():
        value = env.get(env_var)
        if value:
            data[field] = value

    return BridgeConfig.model_validate(data)

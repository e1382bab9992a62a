"""Filesystem helpers shared by the session resolvers.

All directory walks are bounded: at most ``MAX_SCAN_FILES`` matching files are
collected per walk, and results are ordered newest first by nanosecond
modification time with the lexicographically smallest path winning ties, so
"latest session" selection is deterministic.
"""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)

MAX_SCAN_FILES = 1000

SYSTEM_DIRECTORIES = (
    "/etc",
    "/usr",
    "/var",
    "/bin",
    "/sbin",
    "/System",
    "/Library",
    "/Windows",
    "/Windows/System32",
    "/Program Files",
    "/Program Files (x86)",
)


class FileEntry(NamedTuple):
    """A candidate session file and its modification time in nanoseconds."""

    path: Path
    mtime_ns: int


def expand_home(raw: str) -> Path:
    """Expand a leading ``~`` or ``~/`` to the user's home directory."""
    if raw == "~":
        return Path.home()
    if raw.startswith("~/"):
        return Path.home() / raw[2:]
    return Path(raw)


def normalize_path(raw: str | Path) -> Path:
    """Return the absolute, symlink-resolved form of ``raw``."""
    expanded = expand_home(str(raw))
    return expanded.resolve()


def hash_path(raw: str | Path) -> str:
    """SHA-256 hex digest of the normalized path (Gemini's per-project key)."""
    return hashlib.sha256(str(normalize_path(raw)).encode("utf-8")).hexdigest()


def sort_newest_first(entries: Iterable[FileEntry]) -> list[FileEntry]:
    return sorted(entries, key=lambda e: (-e.mtime_ns, str(e.path)))


def collect_matching_files(
    directory: Path,
    predicate: Callable[[Path, str], bool],
    *,
    recursive: bool = False,
) -> list[FileEntry]:
    """Collect files under ``directory`` accepted by ``predicate``.

    Args:
        directory: Root of the walk. A missing directory yields no entries.
        predicate: Called with the full path and the bare file name.
        recursive: Descend into subdirectories (symlinked ones are skipped).

    Returns:
        Matching entries, newest first.
    """
    if not directory.is_dir():
        return []

    matches: list[FileEntry] = []

    def _walk(current: Path) -> None:
        if len(matches) >= MAX_SCAN_FILES:
            return
        try:
            with os.scandir(current) as it:
                children = list(it)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", current, exc)
            return

        for child in children:
            if len(matches) >= MAX_SCAN_FILES:
                return
            full_path = Path(child.path)
            try:
                if child.is_dir(follow_symlinks=False):
                    if recursive:
                        _walk(full_path)
                    continue
                if child.is_symlink() and child.is_dir():
                    continue
            except OSError:
                continue

            if not predicate(full_path, child.name):
                continue

            try:
                mtime_ns = child.stat().st_mtime_ns
            except OSError:
                logger.debug("File vanished during scan: %s", full_path)
                continue
            matches.append(FileEntry(full_path, mtime_ns))

    _walk(directory)
    return sort_newest_first(matches)


def file_timestamp(path: Path) -> str | None:
    """File modification time as UTC ISO-8601 with milliseconds, e.g. ``2024-01-15T10:30:00.000Z``."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    stamp = datetime.fromtimestamp(mtime, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_system_directory(directory: str | Path) -> bool:
    """True for well-known OS directories that must never be scanned."""
    resolved = str(Path(directory).absolute())
    for system_dir in SYSTEM_DIRECTORIES:
        if resolved == system_dir or resolved.startswith(system_dir + os.sep):
            return True
    return False

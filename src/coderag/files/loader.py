"""Deterministic directory loading into file-hierarchy records."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from coderag.files.models import FILE_TYPE, FOLDER_TYPE, FileNode

_BINARY_SNIFF_BYTES = 4096
DEFAULT_EXCLUDE_GLOBS = (
    "**/.git/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/node_modules/**",
)


def load_directory(
    root: Path,
    exclude_globs: tuple[str, ...] = DEFAULT_EXCLUDE_GLOBS,
    include_hidden: bool = False,
) -> list[FileNode]:
    """Walk ``root`` and return folder and file records in sorted path order.

    Record ids are relative POSIX paths, so they stay stable across loads of
    an unchanged tree. Binary files are skipped; text is decoded as UTF-8 with
    replacement characters.
    """
    resolved_root = root.resolve()
    nodes: list[FileNode] = []
    stack: list[tuple[Path, str | None]] = [(resolved_root, None)]
    while stack:
        current, parent_id = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError:
            continue
        child_dirs: list[tuple[Path, str | None]] = []
        for entry in ordered_entries:
            full_path = Path(entry.path)
            relative = full_path.relative_to(resolved_root).as_posix()
            if not include_hidden and entry.name.startswith("."):
                continue
            if entry.is_dir(follow_symlinks=False):
                if should_exclude(f"{relative}/", exclude_globs):
                    continue
                nodes.append(
                    FileNode(id=relative, parent_id=parent_id, type=FOLDER_TYPE, name=entry.name)
                )
                child_dirs.append((full_path, relative))
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if should_exclude(relative, exclude_globs):
                continue
            try:
                if is_binary_file(full_path):
                    continue
                content = full_path.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            nodes.append(
                FileNode(
                    id=relative,
                    parent_id=parent_id,
                    type=FILE_TYPE,
                    name=entry.name,
                    content=content,
                )
            )
        stack.extend(reversed(child_dirs))
    nodes.sort(key=lambda node: node.id)
    return nodes


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def is_binary_file(path: Path) -> bool:
    """Treat files with a NUL byte near the start as binary."""
    with path.open("rb") as handle:
        sample = handle.read(_BINARY_SNIFF_BYTES)
    return b"\x00" in sample


"""Structured JSONL audit log for server requests."""

from __future__ import annotations

import json
import threading
from collections import deque
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

# Argument names whose values are safe to record verbatim, keyed by the type they must have.
_VERBATIM_FIELDS: dict[str, type] = {
    "active_path": str,
    "rebuild_policy": str,
    "tool": str,
    "since": str,
    "limit": int,
    "top_k": int,
    "wait": bool,
}


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized representation of a single tool request."""

    timestamp: str
    request_id: str
    tool: str
    ok: bool
    blocked: bool
    error_code: str | None
    duration_ms: int
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Reduce tool arguments to shapes and lengths; query text is never stored."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        sanitized.update(_describe_argument(key, arguments[key]))
    return sanitized


def _describe_argument(key: str, value: object) -> dict[str, object]:
    expected = _VERBATIM_FIELDS.get(key)
    if expected is not None and _is_exact_type(value, expected):
        return {key: value}
    if isinstance(value, str):
        return {f"{key}_present": True, f"{key}_length": len(value)}
    if value is None or isinstance(value, (bool, int, float)):
        return {key: value}
    if isinstance(value, list):
        return {f"{key}_type": "list", f"{key}_length": len(value)}
    if isinstance(value, dict):
        return {f"{key}_type": "dict", f"{key}_keys": sorted(str(item) for item in value)}
    return {f"{key}_type": type(value).__name__}


def _is_exact_type(value: object, expected: type) -> bool:
    # bool is an int subclass; keep the two apart.
    if expected is int and isinstance(value, bool):
        return False
    return isinstance(value, expected)


class JsonlAuditLogger:
    """Append-only JSONL audit log with a bounded, filtered reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Write one event as a single JSON line."""
        line = json.dumps(asdict(event), sort_keys=True)
        with self._write_lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")

    def read(
        self,
        since: str | None = None,
        limit: int = 50,
        tool: str | None = None,
    ) -> list[dict[str, object]]:
        """Return the newest ``limit`` events at or after ``since`` for ``tool``."""
        if limit < 1 or not self._path.exists():
            return []
        recent: deque[dict[str, object]] = deque(maxlen=limit)
        for record in self._records():
            if since is not None:
                timestamp = record.get("timestamp")
                if not isinstance(timestamp, str) or timestamp < since:
                    continue
            if tool is not None and record.get("tool") != tool:
                continue
            recent.append(record)
        return list(recent)

    def _records(self) -> Iterator[dict[str, object]]:
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(record, dict):
                    yield record

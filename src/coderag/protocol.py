"""JSON-lines request parsing and response envelopes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

TOOLS_CALL_METHOD = "tools/call"


@dataclass(slots=True, frozen=True)
class Request:
    """A validated request, with ``tools/call`` already unwrapped."""

    request_id: str
    tool: str
    arguments: dict[str, object] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class RequestError(Exception):
    """A request rejected before any tool runs."""

    request_id: str
    code: str
    message: str


class RequestIds:
    """Source of sequential ids for requests that carry no usable id."""

    def __init__(self) -> None:
        self._counter = 0

    def next(self) -> str:
        self._counter += 1
        return f"req-{self._counter:06d}"

    def coerce(self, value: object) -> str:
        """Accept non-empty string or integer ids; synthesize the rest."""
        if isinstance(value, bool):
            return self.next()
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and value:
            return value
        return self.next()


def decode_line(raw_line: str, ids: RequestIds) -> object:
    """Decode one JSON line or raise ``RequestError`` with code INVALID_JSON."""
    try:
        return json.loads(raw_line)
    except json.JSONDecodeError as error:
        raise RequestError(ids.next(), "INVALID_JSON", "Request must be valid JSON.") from error


def parse_request(payload: object, ids: RequestIds) -> Request:
    """Validate a decoded payload and resolve the tool it addresses."""
    if not isinstance(payload, dict):
        raise RequestError(ids.next(), "INVALID_REQUEST", "Request must be an object.")
    request_id = ids.coerce(payload.get("id"))
    method = payload.get("method")
    params = payload.get("params", {})
    if not isinstance(method, str) or not method:
        raise RequestError(
            request_id, "INVALID_REQUEST", "Request method must be a non-empty string."
        )
    if not isinstance(params, dict):
        raise RequestError(request_id, "INVALID_PARAMS", "Request params must be an object.")
    if method != TOOLS_CALL_METHOD:
        return Request(request_id=request_id, tool=method, arguments=params)

    name = params.get("name")
    arguments = params.get("arguments", {})
    if not isinstance(name, str) or not name:
        raise RequestError(
            request_id, "INVALID_PARAMS", "tools/call params.name must be a non-empty string."
        )
    if not isinstance(arguments, dict):
        raise RequestError(
            request_id, "INVALID_PARAMS", "tools/call params.arguments must be an object."
        )
    return Request(request_id=request_id, tool=name, arguments=arguments)


def _envelope(
    request_id: str,
    ok: bool,
    result: dict[str, object],
    blocked: bool = False,
    error: dict[str, str] | None = None,
) -> dict[str, object]:
    envelope: dict[str, object] = {
        "request_id": request_id,
        "ok": ok,
        "result": result,
        "warnings": [],
        "blocked": blocked,
    }
    if error is not None:
        envelope["error"] = error
    return envelope


def success_envelope(request_id: str, result: dict[str, object]) -> dict[str, object]:
    return _envelope(request_id, ok=True, result=result)


def error_envelope(request_id: str, code: str, message: str) -> dict[str, object]:
    return _envelope(request_id, ok=False, result={}, error={"code": code, "message": message})


def blocked_envelope(request_id: str, reason: str, hint: str) -> dict[str, object]:
    """Envelope for requests refused by a configured limit."""
    return _envelope(
        request_id,
        ok=False,
        result={"reason": reason, "hint": hint},
        blocked=True,
        error={"code": "LIMIT_EXCEEDED", "message": reason},
    )


def encode(envelope: dict[str, object]) -> str:
    """Serialize an envelope as one deterministic JSON line (no newline)."""
    return json.dumps(envelope, sort_keys=True)


def error_code_of(envelope: dict[str, object]) -> str | None:
    error = envelope.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        if isinstance(code, str):
            return code
    return None

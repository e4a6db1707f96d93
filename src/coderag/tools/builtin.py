"""Built-in retrieval tools exposed over STDIO."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict

from coderag.config import ServerConfig
from coderag.index import IndexStatus, SearchResult, result_to_dict
from coderag.tools.registry import ToolBlockedError, ToolDispatchError, ToolHandler, ToolRegistry


def register_builtin_tools(
    registry: ToolRegistry,
    config: ServerConfig,
    read_status: Callable[[], IndexStatus],
    update_index: Callable[[bool], IndexStatus],
    search: Callable[[str, int], list[SearchResult]],
    get_context: Callable[[str, str | None, int], str],
    read_audit_entries: Callable[[str | None, int, str | None], list[dict[str, object]]],
) -> None:
    """Register the retrieval tool set."""
    registry.register("rag.status", _status_handler(config, read_status))
    registry.register("rag.update_index", _update_index_handler(update_index))
    registry.register("rag.search", _search_handler(config, search))
    registry.register("rag.get_context", _get_context_handler(config, get_context))
    registry.register("rag.audit_log", _audit_log_handler(config, read_audit_entries))


def _status_handler(
    config: ServerConfig,
    read_status: Callable[[], IndexStatus],
) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        status = read_status()
        return {
            "project_root": str(config.project_root),
            **asdict(status),
            "chunking_summary": {
                "chunk_lines": config.engine.chunk_lines,
                "overlap_lines": config.engine.overlap_lines,
                "max_file_chars": config.engine.max_file_chars,
            },
            "effective_config": config.to_public_dict(),
        }

    return handler


def _update_index_handler(update_index: Callable[[bool], IndexStatus]) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        wait_value = arguments.get("wait", True)
        if not isinstance(wait_value, bool):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="rag.update_index wait must be a boolean.",
            )
        return asdict(update_index(wait_value))

    return handler


def _search_handler(
    config: ServerConfig,
    search: Callable[[str, int], list[SearchResult]],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        query = _require_query(arguments, "rag.search")
        limit = _bounded_count(
            arguments,
            key="limit",
            tool="rag.search",
            default=config.engine.search_limit,
            maximum=config.limits.max_search_hits,
        )
        return {"results": [result_to_dict(hit) for hit in search(query, limit)]}

    return handler


def _get_context_handler(
    config: ServerConfig,
    get_context: Callable[[str, str | None, int], str],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        query = _require_query(arguments, "rag.get_context")
        active_path = _optional_string(arguments, "active_path", "rag.get_context")
        top_k = _bounded_count(
            arguments,
            key="top_k",
            tool="rag.get_context",
            default=config.engine.context_top_k,
            maximum=config.limits.max_search_hits,
        )
        return {"context": get_context(query, active_path, top_k)}

    return handler


def _audit_log_handler(
    config: ServerConfig,
    read_audit_entries: Callable[[str | None, int, str | None], list[dict[str, object]]],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since = _optional_string(arguments, "since", "rag.audit_log")
        tool = _optional_string(arguments, "tool", "rag.audit_log")
        limit = _bounded_count(
            arguments,
            key="limit",
            tool="rag.audit_log",
            default=config.limits.max_search_hits,
            maximum=config.limits.max_search_hits,
        )
        return {"entries": read_audit_entries(since, limit, tool)}

    return handler


def _require_query(arguments: dict[str, object], tool: str) -> str:
    query_value = arguments.get("query")
    if not isinstance(query_value, str):
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{tool} query must be a string.",
        )
    return query_value


def _optional_string(arguments: dict[str, object], key: str, tool: str) -> str | None:
    value = arguments.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ToolDispatchError(
        code="INVALID_PARAMS",
        message=f"{tool} {key} must be a string.",
    )


def _bounded_count(
    arguments: dict[str, object],
    key: str,
    tool: str,
    default: int,
    maximum: int,
) -> int:
    value = arguments.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{tool} {key} must be an integer.",
        )
    if value < 1:
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{tool} {key} must be >= 1.",
        )
    if value > maximum:
        raise ToolBlockedError(
            reason=f"Requested {key} exceeds max_search_hits limit.",
            hint=f"Reduce {key} or adjust the configured search limit.",
        )
    return value

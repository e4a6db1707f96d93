"""STDIO JSON-lines server bound to one project's retrieval engine."""

from __future__ import annotations

import argparse
import dataclasses
import sys
import time
from pathlib import Path
from typing import TextIO

from coderag.config import REBUILD_POLICIES, CliOverrides, ServerConfig, load_effective_config
from coderag.engine import EngineClosedError, RetrievalEngine
from coderag.files import FileTree, load_directory
from coderag.index import IndexStatus, SearchResult
from coderag.logging import (
    AuditEvent,
    JsonlAuditLogger,
    get_logger,
    sanitize_arguments,
    setup_logging,
    utc_timestamp,
)
from coderag.protocol import (
    Request,
    RequestError,
    RequestIds,
    blocked_envelope,
    decode_line,
    encode,
    error_code_of,
    error_envelope,
    parse_request,
    success_envelope,
)
from coderag.tools import (
    ToolBlockedError,
    ToolDispatchError,
    ToolRegistry,
    register_builtin_tools,
)

logger = get_logger(__name__)

AUDIT_FILE_NAME = "audit.jsonl"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coderag",
        description="Serve TF-IDF code retrieval for one project over STDIO.",
    )
    parser.add_argument("--project-root", default=".", help="Project directory to index.")
    parser.add_argument("--data-dir", default=None, help="Directory for the audit log.")
    parser.add_argument("--chunk-lines", type=int, default=None)
    parser.add_argument("--overlap-lines", type=int, default=None)
    parser.add_argument("--max-file-chars", type=int, default=None)
    parser.add_argument("--max-search-hits", type=int, default=None)
    parser.add_argument("--rebuild-policy", choices=REBUILD_POLICIES, default=None)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    parser.add_argument(
        "--no-initial-index",
        action="store_true",
        help="Skip the background build normally started when the server opens the project.",
    )
    return parser


class StdioServer:
    """Routes JSON-line requests to retrieval tools and audits each one."""

    def __init__(self, config: ServerConfig) -> None:
        self._config = config
        self._engine = RetrievalEngine(config=config.engine)
        self._tree = FileTree([])
        self._ids = RequestIds()
        self._audit = JsonlAuditLogger(path=config.data_dir / AUDIT_FILE_NAME)
        self._registry = ToolRegistry()
        register_builtin_tools(
            self._registry,
            config=config,
            read_status=self._engine.status,
            update_index=self._update_index,
            search=self._search,
            get_context=self._get_context,
            read_audit_entries=self._audit.read,
        )

    @property
    def engine(self) -> RetrievalEngine:
        return self._engine

    def close(self) -> None:
        """Stop the engine worker and drop the published index."""
        self._engine.close()

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        """Answer each non-blank input line with exactly one output line."""
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            out_stream.write(encode(self.handle_json_line(line)) + "\n")
            out_stream.flush()

    def handle_json_line(self, raw_line: str) -> dict[str, object]:
        started = time.perf_counter()
        try:
            payload = decode_line(raw_line, self._ids)
        except RequestError as error:
            envelope = error_envelope(error.request_id, error.code, error.message)
            self._record(
                error.request_id,
                "invalid_json",
                {"raw_line_length": len(raw_line)},
                envelope,
                started,
            )
            return envelope
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Validate, dispatch, and audit one decoded request."""
        started = time.perf_counter()
        try:
            request = parse_request(payload, self._ids)
        except RequestError as error:
            envelope = error_envelope(error.request_id, error.code, error.message)
            self._record(error.request_id, "invalid_request", {}, envelope, started)
            return envelope
        envelope = self._dispatch(request)
        self._record(request.request_id, request.tool, request.arguments, envelope, started)
        return envelope

    def _dispatch(self, request: Request) -> dict[str, object]:
        request_id = request.request_id
        try:
            result = self._registry.dispatch(name=request.tool, arguments=request.arguments)
        except ToolBlockedError as blocked:
            return blocked_envelope(request_id, blocked.reason, blocked.hint)
        except ToolDispatchError as error:
            return error_envelope(request_id, error.code, error.message)
        except EngineClosedError:
            return error_envelope(
                request_id, "ENGINE_CLOSED", "The project engine has been closed."
            )
        except Exception:
            logger.exception("Tool %s failed", request.tool)
            return error_envelope(
                request_id, "INTERNAL_ERROR", "Unhandled server error while executing tool."
            )
        envelope = success_envelope(request_id, result)
        size = len(encode(envelope).encode("utf-8"))
        if size > self._config.limits.max_total_bytes_per_response:
            logger.warning(
                "Response for %s is %d bytes, over the configured limit", request.tool, size
            )
            return blocked_envelope(
                request_id,
                reason="Response exceeds max_total_bytes_per_response limit.",
                hint="Request fewer results or a smaller top_k.",
            )
        return envelope

    def _record(
        self,
        request_id: str,
        tool: str,
        arguments: dict[str, object],
        envelope: dict[str, object],
        started: float,
    ) -> None:
        self._audit.append(
            AuditEvent(
                timestamp=utc_timestamp(),
                request_id=request_id,
                tool=tool,
                ok=envelope["ok"] is True,
                blocked=envelope["blocked"] is True,
                error_code=error_code_of(envelope),
                duration_ms=int((time.perf_counter() - started) * 1000),
                metadata=sanitize_arguments(arguments),
            )
        )

    def _load_project(self) -> FileTree:
        root = self._config.project_root
        nodes = load_directory(
            root,
            exclude_globs=self._config.index.exclude_globs,
            include_hidden=self._config.index.include_hidden,
        )
        # Keep server state (audit log) out of the index when it lives inside the project.
        data_dir = self._config.data_dir
        if data_dir.is_relative_to(root):
            prefix = data_dir.relative_to(root).as_posix()
            nodes = [
                node for node in nodes if node.id != prefix and not node.id.startswith(f"{prefix}/")
            ]
        return FileTree(nodes)

    def _update_index(self, wait: bool) -> IndexStatus:
        self._tree = self._load_project()
        pending = self._engine.update_index(self._tree.nodes)
        if wait:
            pending.result()
        return self._engine.status()

    def _search(self, query: str, limit: int) -> list[SearchResult]:
        return self._engine.search(query, limit=limit)

    def _get_context(self, query: str, active_path: str | None, top_k: int) -> str:
        tree = self._tree
        active_file = None
        if active_path:
            active_file = tree.find_by_path(active_path)
            if active_file is None:
                raise ToolDispatchError(
                    code="NOT_FOUND",
                    message=f"Active file is not part of the loaded project: {active_path}",
                )
        return self._engine.get_context(query, active_file=active_file, files=tree, top_k=top_k)


def create_server(
    project_root: str,
    data_dir: str | None = None,
    cli_overrides: CliOverrides | None = None,
) -> StdioServer:
    """Load the effective config for ``project_root`` and build a server on it."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None and overrides.data_dir is None:
        overrides = dataclasses.replace(overrides, data_dir=Path(data_dir).resolve())
    config = load_effective_config(project_root=Path(project_root), overrides=overrides)
    return StdioServer(config=config)


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)
    overrides = CliOverrides(
        data_dir=None if args.data_dir is None else Path(args.data_dir).resolve(),
        chunk_lines=args.chunk_lines,
        overlap_lines=args.overlap_lines,
        max_file_chars=args.max_file_chars,
        max_search_hits=args.max_search_hits,
        rebuild_policy=args.rebuild_policy,
    )
    try:
        server = create_server(project_root=args.project_root, cli_overrides=overrides)
    except ValueError as error:
        parser.error(str(error))
    logger.info("Serving project %s", args.project_root)
    try:
        if not args.no_initial_index:
            server.handle_payload({"method": "rag.update_index", "params": {"wait": False}})
        server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

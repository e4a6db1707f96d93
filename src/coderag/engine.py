"""Per-project retrieval engine owning the published index snapshot."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

from coderag.config import EngineConfig
from coderag.context import assemble_context
from coderag.files import FileNode
from coderag.index import IndexSnapshot, IndexStatus, SearchResult, build_index, search_index
from coderag.logging import get_logger

logger = get_logger(__name__)

BuildFn = Callable[..., IndexSnapshot | None]


class RebuildPolicy(str, Enum):
    """What to do with an update request that arrives mid-build."""

    DROP = "drop"
    COALESCE = "coalesce"


class EngineClosedError(RuntimeError):
    """Raised when an engine is used after close()."""


@dataclass(slots=True)
class _PendingBuild:
    files: tuple[FileNode, ...]
    waiters: list[Future[None]] = field(default_factory=list)


class RetrievalEngine:
    """Owns one project's index; construct on project open, close on switch.

    Queries read whichever snapshot is published and never wait on a build.
    At most one build runs at a time on a dedicated worker thread; a finished
    build replaces the snapshot reference in a single assignment.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        builder: BuildFn = build_index,
    ) -> None:
        self._config = config or EngineConfig()
        self._policy = RebuildPolicy(self._config.rebuild_policy)
        self._builder = builder
        self._snapshot: IndexSnapshot | None = None
        self._lock = threading.Lock()
        self._building = False
        self._pending: _PendingBuild | None = None
        self._closed = False
        self._progress: tuple[int, int] | None = None
        self._last_error: str | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="coderag-index")

    def __enter__(self) -> RetrievalEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def config(self) -> EngineConfig:
        """Return the effective engine settings."""
        return self._config

    @property
    def snapshot(self) -> IndexSnapshot | None:
        """Return the currently published snapshot, if any."""
        return self._snapshot

    @property
    def is_indexing(self) -> bool:
        """Return True while a build is in flight."""
        return self._building

    def update_index(self, files: Iterable[FileNode]) -> Future[None]:
        """Schedule a full rebuild from ``files``.

        The returned future resolves once a build that reflects this request
        (or, under the drop policy, no build at all) has finished. It never
        carries a build exception.
        """
        request = tuple(files)
        future: Future[None] = Future()
        with self._lock:
            if self._closed:
                raise EngineClosedError("Engine is closed.")
            if self._building:
                if self._policy is RebuildPolicy.DROP:
                    logger.debug("Index build already in flight; dropping update request")
                    future.set_result(None)
                    return future
                if self._pending is None:
                    self._pending = _PendingBuild(files=request)
                else:
                    self._pending.files = request
                self._pending.waiters.append(future)
                logger.debug("Index build already in flight; coalescing update request")
                return future
            self._building = True
            # close() cannot shut the executor down between the flag and the submit.
            self._executor.submit(self._run_builds, _PendingBuild(files=request, waiters=[future]))
        return future

    def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """Rank chunks of the published snapshot; empty when nothing is indexed."""
        return search_index(
            self._snapshot,
            query,
            limit=self._config.search_limit if limit is None else limit,
            min_score=self._config.min_score,
        )

    def get_context(
        self,
        query: str,
        active_file: FileNode | None,
        files: Iterable[FileNode],
        top_k: int | None = None,
    ) -> str:
        """Assemble prompt context from the published snapshot."""
        return assemble_context(
            query=query,
            active_file=active_file,
            files=files,
            snapshot=self._snapshot,
            top_k=self._config.context_top_k if top_k is None else top_k,
            min_score=self._config.min_score,
        )

    def status(self) -> IndexStatus:
        """Return a point-in-time status of the engine."""
        snapshot = self._snapshot
        progress = self._progress
        if self._building:
            state = "indexing"
        elif snapshot is None:
            state = "not_indexed"
        else:
            state = "ready"
        return IndexStatus(
            index_status=state,
            last_build_timestamp=snapshot.built_at if snapshot is not None else None,
            indexed_file_count=snapshot.file_count if snapshot is not None else 0,
            indexed_chunk_count=len(snapshot.chunks) if snapshot is not None else 0,
            vocabulary_size=len(snapshot.vocabulary) if snapshot is not None else 0,
            progress_loaded=progress[0] if progress is not None else None,
            progress_total=progress[1] if progress is not None else None,
            last_error=self._last_error,
        )

    def close(self) -> None:
        """Wait for in-flight work, then discard the snapshot."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True)
        self._snapshot = None

    def _run_builds(self, request: _PendingBuild) -> None:
        current: _PendingBuild | None = request
        try:
            while current is not None:
                self._rebuild(current.files)
                finished = current
                with self._lock:
                    current = self._pending
                    self._pending = None
                    if current is None:
                        self._building = False
                for waiter in finished.waiters:
                    waiter.set_result(None)
        except BaseException as error:
            with self._lock:
                self._building = False
                stranded = [item for item in (current, self._pending) if item is not None]
                self._pending = None
            for item in stranded:
                for waiter in item.waiters:
                    if not waiter.done():
                        waiter.set_exception(error)
            raise

    def _rebuild(self, files: tuple[FileNode, ...]) -> None:
        logger.info("Index build started for %d records", len(files))
        try:
            snapshot = self._builder(
                files,
                chunk_lines=self._config.chunk_lines,
                overlap_lines=self._config.overlap_lines,
                max_file_chars=self._config.max_file_chars,
                progress=self._record_progress,
            )
        except Exception as error:
            logger.exception("Index build failed; clearing index")
            self._snapshot = None
            self._last_error = f"{type(error).__name__}: {error}"
        else:
            self._snapshot = snapshot
            self._last_error = None
        finally:
            self._progress = None

    def _record_progress(self, loaded: int, total: int) -> None:
        self._progress = (loaded, total)


def open_project(files: Iterable[FileNode], config: EngineConfig | None = None) -> RetrievalEngine:
    """Create an engine for a newly opened project and start its first build."""
    engine = RetrievalEngine(config=config)
    engine.update_index(files)
    return engine

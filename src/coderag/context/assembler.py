"""Context assembly for assistant prompts."""

from __future__ import annotations

from collections.abc import Iterable

from coderag.context.models import ActiveFileBlock, ContextBundle
from coderag.files import FileNode, FileTree
from coderag.index import MIN_RELEVANCE_SCORE, IndexSnapshot, search_index

DEFAULT_CONTEXT_TOP_K = 5


def build_context_bundle(
    query: str,
    active_file: FileNode | None,
    files: Iterable[FileNode],
    snapshot: IndexSnapshot | None,
    top_k: int = DEFAULT_CONTEXT_TOP_K,
    min_score: float = MIN_RELEVANCE_SCORE,
) -> ContextBundle:
    """Combine structure, retrieved snippets, and the active-file fallback.

    The structure summary never depends on index state. With no snapshot the
    bundle carries the structure alone. The active file is appended unless
    one of the snippets already comes from it.
    """
    tree = files if isinstance(files, FileTree) else FileTree(files)
    structure = tree.structure_summary()
    if snapshot is None:
        return ContextBundle(structure=structure, indexed=False, snippets=(), active_file=None)

    snippets = tuple(search_index(snapshot, query, limit=top_k, min_score=min_score))
    active_block: ActiveFileBlock | None = None
    if active_file is not None and all(hit.file_id != active_file.id for hit in snippets):
        active_block = ActiveFileBlock(
            file_id=active_file.id,
            file_path=tree.resolve_path(active_file),
            content=active_file.content,
        )
    return ContextBundle(
        structure=structure,
        indexed=True,
        snippets=snippets,
        active_file=active_block,
    )


def assemble_context(
    query: str,
    active_file: FileNode | None,
    files: Iterable[FileNode],
    snapshot: IndexSnapshot | None,
    top_k: int = DEFAULT_CONTEXT_TOP_K,
    min_score: float = MIN_RELEVANCE_SCORE,
) -> str:
    """Return the rendered context text for one assistant turn."""
    bundle = build_context_bundle(
        query=query,
        active_file=active_file,
        files=files,
        snapshot=snapshot,
        top_k=top_k,
        min_score=min_score,
    )
    return bundle.render()

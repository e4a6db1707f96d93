"""Typed models for assembled assistant context."""

from __future__ import annotations

from dataclasses import dataclass

from coderag.index import SearchResult

SNIPPETS_HEADER = "Potentially relevant code snippets:"
BLOCK_SEPARATOR = "---"


@dataclass(slots=True, frozen=True)
class ActiveFileBlock:
    """Full content of the file the caller is editing."""

    file_id: str
    file_path: str
    content: str


@dataclass(slots=True, frozen=True)
class ContextBundle:
    """Structure summary, ranked snippets, and optional active-file fallback."""

    structure: str
    indexed: bool
    snippets: tuple[SearchResult, ...]
    active_file: ActiveFileBlock | None

    def render(self) -> str:
        """Render the bundle as one prompt-ready text blob."""
        if not self.indexed:
            return self.structure
        parts = [f"{self.structure}\n\n"]
        if self.snippets:
            parts.append(f"{SNIPPETS_HEADER}\n")
            for hit in self.snippets:
                parts.append(
                    f"{BLOCK_SEPARATOR}\n"
                    f"File: {hit.file_path} (lines {hit.start_line}-{hit.end_line})\n"
                    f"{hit.snippet}\n"
                )
            parts.append(f"{BLOCK_SEPARATOR}\n\n")
        if self.active_file is not None:
            parts.append(
                f"Currently active file ({self.active_file.file_path}):\n"
                f"{self.active_file.content}\n\n"
            )
        return "".join(parts)

"""Typed file-hierarchy records consumed by the index."""

from __future__ import annotations

from dataclasses import dataclass

FILE_TYPE = "file"
FOLDER_TYPE = "folder"


@dataclass(slots=True, frozen=True)
class FileNode:
    """One entry of the project file hierarchy."""

    id: str
    parent_id: str | None
    type: str
    name: str
    content: str = ""

    @property
    def is_file(self) -> bool:
        """Return True for file entries."""
        return self.type == FILE_TYPE

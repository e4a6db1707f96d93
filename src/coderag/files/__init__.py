"""Project file hierarchy: records, path resolution, and directory loading."""

from .loader import DEFAULT_EXCLUDE_GLOBS, load_directory
from .models import FILE_TYPE, FOLDER_TYPE, FileNode
from .tree import MAX_PARENT_DEPTH, STRUCTURE_HEADER, FileTree

__all__ = [
    "DEFAULT_EXCLUDE_GLOBS",
    "FILE_TYPE",
    "FOLDER_TYPE",
    "FileNode",
    "FileTree",
    "MAX_PARENT_DEPTH",
    "STRUCTURE_HEADER",
    "load_directory",
]

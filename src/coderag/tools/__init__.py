"""Tool interfaces and registrations for the STDIO server."""

from .builtin import register_builtin_tools
from .registry import ToolBlockedError, ToolDispatchError, ToolHandler, ToolRegistry

__all__ = [
    "ToolBlockedError",
    "ToolDispatchError",
    "ToolHandler",
    "ToolRegistry",
    "register_builtin_tools",
]

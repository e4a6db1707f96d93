"""Assistant context assembly interfaces."""

from .assembler import DEFAULT_CONTEXT_TOP_K, assemble_context, build_context_bundle
from .models import ActiveFileBlock, ContextBundle

__all__ = [
    "ActiveFileBlock",
    "ContextBundle",
    "DEFAULT_CONTEXT_TOP_K",
    "assemble_context",
    "build_context_bundle",
]

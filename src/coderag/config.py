"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from coderag.context import DEFAULT_CONTEXT_TOP_K
from coderag.files import DEFAULT_EXCLUDE_GLOBS
from coderag.index import (
    DEFAULT_CHUNK_LINES,
    DEFAULT_CHUNK_OVERLAP_LINES,
    DEFAULT_MAX_FILE_CHARS,
    DEFAULT_SEARCH_LIMIT,
    MIN_RELEVANCE_SCORE,
)

CONFIG_FILE_NAME = "coderag.toml"
CHUNK_LINES_CAP = 1_000
MAX_FILE_CHARS_CAP = 4_000_000
MAX_SEARCH_HITS_CAP = 200
MAX_TOTAL_BYTES_PER_RESPONSE_CAP = 4 * 1024 * 1024

REBUILD_POLICIES = ("drop", "coalesce")


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """Chunking, ranking, and rebuild settings for one engine."""

    chunk_lines: int = DEFAULT_CHUNK_LINES
    overlap_lines: int = DEFAULT_CHUNK_OVERLAP_LINES
    max_file_chars: int = DEFAULT_MAX_FILE_CHARS
    min_score: float = MIN_RELEVANCE_SCORE
    search_limit: int = DEFAULT_SEARCH_LIMIT
    context_top_k: int = DEFAULT_CONTEXT_TOP_K
    rebuild_policy: str = "coalesce"


@dataclass(slots=True, frozen=True)
class ServerLimits:
    """Response limits for the STDIO surface."""

    max_search_hits: int = 50
    max_total_bytes_per_response: int = 1024 * 1024


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Directory loading settings."""

    exclude_globs: tuple[str, ...] = DEFAULT_EXCLUDE_GLOBS
    include_hidden: bool = False


@dataclass(slots=True, frozen=True)
class ServerConfig:
    """Fully merged server configuration."""

    project_root: Path
    data_dir: Path
    engine: EngineConfig
    limits: ServerLimits
    index: IndexConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for tool responses."""
        return {
            "project_root": str(self.project_root),
            "data_dir": str(self.data_dir),
            "engine": {
                "chunk_lines": self.engine.chunk_lines,
                "overlap_lines": self.engine.overlap_lines,
                "max_file_chars": self.engine.max_file_chars,
                "min_score": self.engine.min_score,
                "search_limit": self.engine.search_limit,
                "context_top_k": self.engine.context_top_k,
                "rebuild_policy": self.engine.rebuild_policy,
            },
            "limits": {
                "max_search_hits": self.limits.max_search_hits,
                "max_total_bytes_per_response": self.limits.max_total_bytes_per_response,
            },
            "index": {
                "exclude_globs": list(self.index.exclude_globs),
                "include_hidden": self.index.include_hidden,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    chunk_lines: int | None = None
    overlap_lines: int | None = None
    max_file_chars: int | None = None
    max_search_hits: int | None = None
    rebuild_policy: str | None = None


def default_config(project_root: Path) -> ServerConfig:
    """Build default config for a given project root."""
    resolved_root = project_root.resolve()
    return ServerConfig(
        project_root=resolved_root,
        data_dir=resolved_root / ".coderag",
        engine=EngineConfig(),
        limits=ServerLimits(),
        index=IndexConfig(),
    )


def load_project_config_file(project_root: Path) -> dict[str, object]:
    """Load optional coderag.toml from the project root."""
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def merge_config(
    base: ServerConfig, project_payload: dict[str, object], overrides: CliOverrides
) -> ServerConfig:
    """Merge defaults, project config, then CLI/startup overrides."""
    engine_payload = _get_table(project_payload, "engine")
    limits_payload = _get_table(project_payload, "limits")
    index_payload = _get_table(project_payload, "index")

    engine = _merge_engine(
        base.engine,
        chunk_lines=engine_payload.get("chunk_lines"),
        overlap_lines=engine_payload.get("overlap_lines"),
        max_file_chars=engine_payload.get("max_file_chars"),
        min_score=engine_payload.get("min_score"),
        search_limit=engine_payload.get("search_limit"),
        context_top_k=engine_payload.get("context_top_k"),
        rebuild_policy=engine_payload.get("rebuild_policy"),
        section="engine",
    )
    limits = ServerLimits(
        max_search_hits=_optional_positive_int_with_cap(
            limits_payload.get("max_search_hits"),
            "limits.max_search_hits",
            base.limits.max_search_hits,
            MAX_SEARCH_HITS_CAP,
        ),
        max_total_bytes_per_response=_optional_positive_int_with_cap(
            limits_payload.get("max_total_bytes_per_response"),
            "limits.max_total_bytes_per_response",
            base.limits.max_total_bytes_per_response,
            MAX_TOTAL_BYTES_PER_RESPONSE_CAP,
        ),
    )

    exclude_globs = base.index.exclude_globs
    if "exclude_globs" in index_payload:
        exclude_globs = _tuple_of_strings(index_payload["exclude_globs"], "index", "exclude_globs")
    include_hidden = base.index.include_hidden
    if "include_hidden" in index_payload:
        raw_include_hidden = index_payload["include_hidden"]
        if not isinstance(raw_include_hidden, bool):
            raise ValueError("Config field 'index.include_hidden' must be a boolean.")
        include_hidden = raw_include_hidden

    merged = ServerConfig(
        project_root=base.project_root,
        data_dir=base.data_dir,
        engine=engine,
        limits=limits,
        index=IndexConfig(exclude_globs=exclude_globs, include_hidden=include_hidden),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ServerConfig, overrides: CliOverrides) -> ServerConfig:
    """Apply startup overrides at highest precedence."""
    engine = _merge_engine(
        config.engine,
        chunk_lines=overrides.chunk_lines,
        overlap_lines=overrides.overlap_lines,
        max_file_chars=overrides.max_file_chars,
        min_score=None,
        search_limit=None,
        context_top_k=None,
        rebuild_policy=overrides.rebuild_policy,
        section="overrides",
    )
    limits = ServerLimits(
        max_search_hits=_optional_positive_int_with_cap(
            overrides.max_search_hits,
            "overrides.max_search_hits",
            config.limits.max_search_hits,
            MAX_SEARCH_HITS_CAP,
        ),
        max_total_bytes_per_response=config.limits.max_total_bytes_per_response,
    )
    data_dir = overrides.data_dir or config.data_dir
    return ServerConfig(
        project_root=config.project_root,
        data_dir=data_dir.resolve(),
        engine=engine,
        limits=limits,
        index=config.index,
    )


def load_effective_config(
    project_root: Path, overrides: CliOverrides | None = None
) -> ServerConfig:
    """Load effective config using merge order defaults -> project config -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_project_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _merge_engine(
    base: EngineConfig,
    *,
    chunk_lines: object,
    overlap_lines: object,
    max_file_chars: object,
    min_score: object,
    search_limit: object,
    context_top_k: object,
    rebuild_policy: object,
    section: str,
) -> EngineConfig:
    merged_chunk_lines = _optional_positive_int_with_cap(
        chunk_lines, f"{section}.chunk_lines", base.chunk_lines, CHUNK_LINES_CAP
    )
    merged_overlap_lines = base.overlap_lines
    if overlap_lines is not None:
        if not isinstance(overlap_lines, int) or isinstance(overlap_lines, bool) or overlap_lines < 0:
            raise ValueError(
                f"Config field '{section}.overlap_lines' must be a non-negative integer."
            )
        merged_overlap_lines = overlap_lines
    if merged_overlap_lines >= merged_chunk_lines:
        raise ValueError(
            f"Config field '{section}.overlap_lines' must be less than chunk_lines."
        )

    merged_min_score = base.min_score
    if min_score is not None:
        if not isinstance(min_score, (int, float)) or isinstance(min_score, bool):
            raise ValueError(f"Config field '{section}.min_score' must be a number.")
        if not 0.0 <= float(min_score) < 1.0:
            raise ValueError(f"Config field '{section}.min_score' must be in [0, 1).")
        merged_min_score = float(min_score)

    merged_policy = base.rebuild_policy
    if rebuild_policy is not None:
        if rebuild_policy not in REBUILD_POLICIES:
            raise ValueError(
                f"Config field '{section}.rebuild_policy' must be one of: "
                f"{', '.join(REBUILD_POLICIES)}."
            )
        merged_policy = str(rebuild_policy)

    return EngineConfig(
        chunk_lines=merged_chunk_lines,
        overlap_lines=merged_overlap_lines,
        max_file_chars=_optional_positive_int_with_cap(
            max_file_chars, f"{section}.max_file_chars", base.max_file_chars, MAX_FILE_CHARS_CAP
        ),
        min_score=merged_min_score,
        search_limit=_optional_positive_int_with_cap(
            search_limit, f"{section}.search_limit", base.search_limit, MAX_SEARCH_HITS_CAP
        ),
        context_top_k=_optional_positive_int_with_cap(
            context_top_k, f"{section}.context_top_k", base.context_top_k, MAX_SEARCH_HITS_CAP
        ),
        rebuild_policy=merged_policy,
    )


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value

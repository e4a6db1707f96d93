from __future__ import annotations

from pathlib import Path

import pytest

from coderag.config import CliOverrides, load_effective_config
from coderag.server import create_server


def _write_config(root: Path, *lines: str) -> None:
    (root / "coderag.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_chunk_lines_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[engine]", 'chunk_lines = "twenty"')

    with pytest.raises(ValueError, match="engine.chunk_lines"):
        create_server(project_root=str(tmp_path))


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, 'engine = "not-a-table"')

    with pytest.raises(ValueError, match="section 'engine'"):
        load_effective_config(project_root=tmp_path)


def test_overlap_must_be_smaller_than_window(tmp_path: Path) -> None:
    _write_config(tmp_path, "[engine]", "chunk_lines = 10", "overlap_lines = 10")

    with pytest.raises(ValueError, match="less than chunk_lines"):
        load_effective_config(project_root=tmp_path)


def test_cli_overlap_is_checked_against_project_window(tmp_path: Path) -> None:
    _write_config(tmp_path, "[engine]", "chunk_lines = 8")

    with pytest.raises(ValueError, match="overrides.overlap_lines"):
        load_effective_config(project_root=tmp_path, overrides=CliOverrides(overlap_lines=8))


def test_unknown_rebuild_policy_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[engine]", 'rebuild_policy = "queue"')

    with pytest.raises(ValueError, match="drop, coalesce"):
        load_effective_config(project_root=tmp_path)


def test_min_score_outside_unit_interval_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[engine]", "min_score = 1.5")

    with pytest.raises(ValueError, match=r"engine.min_score"):
        load_effective_config(project_root=tmp_path)


def test_limits_above_cap_are_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[limits]", "max_search_hits = 500")

    with pytest.raises(ValueError, match="limits.max_search_hits"):
        load_effective_config(project_root=tmp_path)


def test_cli_chunk_lines_above_cap_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.chunk_lines"):
        load_effective_config(project_root=tmp_path, overrides=CliOverrides(chunk_lines=5_000))


def test_exclude_globs_must_be_strings(tmp_path: Path) -> None:
    _write_config(tmp_path, "[index]", "exclude_globs = [1, 2]")

    with pytest.raises(ValueError, match="index.exclude_globs"):
        load_effective_config(project_root=tmp_path)

from __future__ import annotations

from pathlib import Path

from coderag.files import FileTree, load_directory


def test_load_directory_builds_sorted_hierarchy(tmp_path: Path) -> None:
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    (tmp_path / "src" / "pkg" / "core.py").write_text("def core():\n    pass\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# project\n", encoding="utf-8")

    nodes = load_directory(tmp_path)

    assert [node.id for node in nodes] == ["README.md", "src", "src/pkg", "src/pkg/core.py"]
    tree = FileTree(nodes)
    core = tree.get("src/pkg/core.py")
    assert core is not None
    assert core.is_file
    assert core.parent_id == "src/pkg"
    assert tree.resolve_path(core) == "src/pkg/core.py"
    assert core.content == "def core():\n    pass\n"


def test_load_directory_skips_hidden_excluded_and_binary(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_text("[core]\n", encoding="utf-8")
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "node_modules" / "lib" / "index.js").write_text("x", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG\x00\x00data")
    (tmp_path / ".env").write_text("TOKEN=1\n", encoding="utf-8")
    (tmp_path / "app.py").write_text("print('ok')\n", encoding="utf-8")

    ids = [node.id for node in load_directory(tmp_path)]

    assert ids == ["app.py"]


def test_load_directory_can_include_hidden_files(tmp_path: Path) -> None:
    (tmp_path / ".config.toml").write_text("a = 1\n", encoding="utf-8")

    ids = [node.id for node in load_directory(tmp_path, include_hidden=True)]

    assert ids == [".config.toml"]


def test_load_directory_is_stable_across_calls(tmp_path: Path) -> None:
    for name in ("b.py", "a.py", "c.py"):
        (tmp_path / name).write_text(f"# {name}\n", encoding="utf-8")

    assert load_directory(tmp_path) == load_directory(tmp_path)

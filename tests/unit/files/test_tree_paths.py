from __future__ import annotations

from coderag.files import FileNode, FileTree


def _project() -> list[FileNode]:
    return [
        FileNode(id="d-src", parent_id=None, type="folder", name="src"),
        FileNode(id="d-util", parent_id="d-src", type="folder", name="util"),
        FileNode(id="f-main", parent_id="d-src", type="file", name="main.py", content="run()"),
        FileNode(id="f-str", parent_id="d-util", type="file", name="strings.py", content="s"),
        FileNode(id="f-readme", parent_id=None, type="file", name="README.md", content="# hi"),
    ]


def test_resolve_path_walks_parent_chain() -> None:
    tree = FileTree(_project())

    assert tree.resolve_path(tree.get("f-str")) == "src/util/strings.py"  # type: ignore[arg-type]
    assert tree.resolve_path(tree.get("f-readme")) == "README.md"  # type: ignore[arg-type]


def test_resolve_path_stops_at_missing_parent() -> None:
    orphan = FileNode(id="o", parent_id="gone", type="file", name="orphan.py", content="x")

    assert FileTree([orphan]).resolve_path(orphan) == "orphan.py"


def test_resolve_path_bounds_parent_cycles() -> None:
    first = FileNode(id="a", parent_id="b", type="folder", name="a")
    second = FileNode(id="b", parent_id="a", type="folder", name="b")

    path = FileTree([first, second]).resolve_path(first)

    assert path.count("/") == 10
    assert path.endswith("/a")


def test_structure_summary_lists_sorted_entries() -> None:
    tree = FileTree(_project())

    assert tree.structure_summary() == "\n".join(
        [
            "PROJECT STRUCTURE:",
            "[DIR] src",
            "[DIR] src/util",
            "[FILE] README.md",
            "[FILE] src/main.py",
            "[FILE] src/util/strings.py",
        ]
    )


def test_structure_summary_for_empty_project() -> None:
    assert FileTree([]).structure_summary() == "PROJECT STRUCTURE:\n"


def test_find_by_path_and_files() -> None:
    tree = FileTree(_project())

    found = tree.find_by_path("src/main.py")
    assert found is not None
    assert found.id == "f-main"
    assert tree.find_by_path("/src/util/strings.py") is not None
    assert tree.find_by_path("missing.py") is None
    assert [node.id for node in tree.files()] == ["f-main", "f-str", "f-readme"]

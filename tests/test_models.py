from __future__ import annotations

from pathkv.models import Node, ancestors, child_name, join_path, parent_of, split_path


def test_split_path_drops_empty_segments() -> None:
    assert split_path("/a/b/c") == ["a", "b", "c"]
    assert split_path("//a///b/") == ["a", "b"]
    assert split_path("/") == []
    assert split_path("") == []


def test_ancestors_exclude_leaf() -> None:
    assert ancestors("/a/b/c") == [("/a", "/"), ("/a/b", "/a")]
    assert ancestors("/a") == []
    assert ancestors("a//b/") == [("/a", "/")]


def test_parent_of() -> None:
    assert parent_of("/a/b/c") == "/a/b"
    assert parent_of("/a") == "/"
    assert parent_of("/") == "/"


def test_child_name_is_last_segment() -> None:
    assert child_name("/a/b/c") == "c"
    assert child_name("/a") == "a"
    assert child_name("plain") == "plain"


def test_join_path() -> None:
    assert join_path("/", "a") == "/a"
    assert join_path("/a", "b") == "/a/b"


def test_node_create_assigns_uuid() -> None:
    first = Node.create("/a/b", "v", "/a")
    second = Node.create("/a/b", "v", "/a")
    assert len(first.id) == 36
    assert first.id != second.id
    assert first.name == "b"
    assert first.as_row() == (first.id, "/a/b", "v", "/a")

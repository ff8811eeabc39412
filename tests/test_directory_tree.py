"""Tests for nesting flat directory summaries into a tree."""

from datetime import datetime, timezone

from common.types import DirectorySummary
from vault.services.directory_tree import build_directory_tree

NOW = datetime(2024, 3, 7, 10, 0, tzinfo=timezone.utc)


def summary(directory_id, parent_id, path, file_count=0):
    return DirectorySummary(
        id=directory_id,
        name=path.rsplit("/", 1)[-1] or "Root",
        parent_id=parent_id,
        path=path,
        file_count=file_count,
        created_at=NOW,
        updated_at=NOW,
    )


def test_empty_input():
    assert build_directory_tree([]) == []


def test_nests_children_under_parents():
    summaries = [
        summary("root", None, "/"),
        summary("art", "root", "/art"),
        summary("docs", "root", "/docs", file_count=2),
        summary("reports", "docs", "/docs/reports"),
    ]

    roots = build_directory_tree(summaries)

    assert [node.summary.id for node in roots] == ["root"]
    root = roots[0]
    assert [child.summary.id for child in root.children] == ["art", "docs"]
    docs = root.children[1]
    assert docs.summary.file_count == 2
    assert [child.summary.id for child in docs.children] == ["reports"]
    assert docs.children[0].children == []


def test_missing_parent_becomes_root():
    summaries = [
        summary("docs", "gone", "/docs"),
        summary("reports", "docs", "/docs/reports"),
    ]

    roots = build_directory_tree(summaries)

    assert [node.summary.id for node in roots] == ["docs"]
    assert [child.summary.id for child in roots[0].children] == ["reports"]


def test_child_listed_before_parent():
    summaries = [
        summary("reports", "docs", "/docs/reports"),
        summary("docs", None, "/docs"),
    ]

    roots = build_directory_tree(summaries)

    assert [node.summary.id for node in roots] == ["docs"]
    assert [child.summary.id for child in roots[0].children] == ["reports"]


def test_every_summary_appears_once():
    summaries = [summary("root", None, "/")]
    for i in range(20):
        summaries.append(summary(f"d{i}", "root" if i < 5 else f"d{i % 5}", f"/d{i}"))

    def walk(nodes):
        for node in nodes:
            yield node.summary.id
            yield from walk(node.children)

    ids = list(walk(build_directory_tree(summaries)))
    assert sorted(ids) == sorted(s.id for s in summaries)

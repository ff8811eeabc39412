"""Nest a flat directory listing into a tree by id lookup."""

from typing import Dict, List, Optional, Sequence

from common.types import DirectoryNode, DirectorySummary


def build_directory_tree(summaries: Sequence[DirectorySummary]) -> List[DirectoryNode]:
    """
    Assemble nested nodes from flat summaries.

    Nodes live in an arena keyed by id; parent -> children edges are kept in
    a separate adjacency map; one top-down pass from the roots attaches
    children. Entries whose parent is missing from the input are treated as
    roots. Sibling order follows input order.

    Args:
        summaries: Flat directory summaries, typically ordered by path

    Returns:
        Root nodes with their descendants attached
    """
    arena: Dict[str, DirectoryNode] = {}
    adjacency: Dict[Optional[str], List[str]] = {}

    for summary in summaries:
        arena[summary.id] = DirectoryNode(summary=summary)

    root_ids: List[str] = []
    for summary in summaries:
        if summary.parent_id is None or summary.parent_id not in arena:
            root_ids.append(summary.id)
        else:
            adjacency.setdefault(summary.parent_id, []).append(summary.id)

    pending = list(root_ids)
    while pending:
        node_id = pending.pop()
        node = arena[node_id]
        child_ids = adjacency.get(node_id, [])
        node.children = [arena[child_id] for child_id in child_ids]
        pending.extend(child_ids)

    return [arena[root_id] for root_id in root_ids]

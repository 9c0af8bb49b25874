"""
Materialized path helpers.

A path is the chain of location ids from the root down to the node itself,
joined with SEPARATOR: "A.B.C" is node C, child of B, grandchild of A.
A root's path is just its own id.
"""
from __future__ import annotations
from typing import Optional, List

SEPARATOR = "."


def build_path(parent_path: Optional[str], node_id: str) -> str:
    if SEPARATOR in node_id:
        raise ValueError(f"location id may not contain {SEPARATOR!r}: {node_id!r}")
    if not parent_path:
        return node_id
    return f"{parent_path}{SEPARATOR}{node_id}"


def split_path(path: str) -> List[str]:
    return path.split(SEPARATOR) if path else []


def ancestor_ids(path: str) -> List[str]:
    """Ids above the node, root first. Empty for a root."""
    return split_path(path)[:-1]


def depth(path: str) -> int:
    return len(split_path(path))


def descendant_prefix(path: str) -> str:
    """Every strict descendant's path starts with this string, and nothing else's does."""
    return f"{path}{SEPARATOR}"


def is_same_or_descendant(candidate_path: str, path: str) -> bool:
    """True if candidate_path is `path` itself or lies inside its subtree.

    Compares whole segments, so "ab" is not treated as inside "a".
    """
    return candidate_path == path or candidate_path.startswith(descendant_prefix(path))


def rebase(path: str, old_base: str, new_base: str) -> str:
    """Swap the old_base prefix of path for new_base, keeping the tail verbatim."""
    if not is_same_or_descendant(path, old_base):
        raise ValueError(f"{path!r} is not within {old_base!r}")
    return new_base + path[len(old_base):]

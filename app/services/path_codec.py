"""
Path codec — pure functions over materialized department paths.

A path is the chain of ids from the root down to a node, each prefixed
with ``/``::

    /1          root department 1
    /1/4/9      department 9, child of 4, grandchild of 1

Nothing here touches the database; every function is a plain string
transform so it can be unit-tested in isolation.
"""

SEPARATOR = "/"


def encode(parent_path: str, department_id: int) -> str:
    """
    Build the path of a department from its parent's path.

    Args:
        parent_path:   Path of the parent, or ``""`` for a root.
        department_id: The department's own id.

    Returns:
        ``parent_path + "/" + department_id``.
    """
    if department_id is None:
        raise ValueError("Cannot encode a path without a department id.")
    return f"{parent_path}{SEPARATOR}{int(department_id)}"


def decode_ancestor_ids(path: str, include_self: bool = True) -> list[int]:
    """
    Return the ids encoded in a path, root first.

    Args:
        path:         A materialized path such as ``/1/4/9``.
        include_self: If False, drop the trailing (own) id.

    Raises:
        ValueError: If the path is empty or a segment is not an integer.
    """
    if not path or not path.startswith(SEPARATOR):
        raise ValueError(f"Malformed department path: {path!r}")

    segments = path[1:].split(SEPARATOR)
    if not all(s.isascii() and s.isdigit() for s in segments):
        raise ValueError(f"Malformed department path: {path!r}")

    ids = [int(segment) for segment in segments]
    return ids if include_self else ids[:-1]


def depth_of(path: str) -> int:
    """Return the level implied by a path (root = 0)."""
    return len(decode_ancestor_ids(path)) - 1


def is_prefix_of(candidate_ancestor_path: str, path: str) -> bool:
    """
    True if ``path`` is ``candidate_ancestor_path`` or lies beneath it.

    The comparison is segment-aware: ``/1`` is a prefix of ``/1/5`` but
    not of ``/12``.
    """
    if not candidate_ancestor_path or not path:
        return False
    return path == candidate_ancestor_path or path.startswith(
        candidate_ancestor_path + SEPARATOR
    )


def descendant_prefix(path: str) -> str:
    """Return the string every strict descendant path starts with."""
    return path + SEPARATOR


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """
    Replace ``old_prefix`` at the head of ``path`` with ``new_prefix``.

    Used when a subtree moves: every path under the moved node keeps its
    tail and swaps its head.

    Raises:
        ValueError: If ``path`` is not under ``old_prefix``.
    """
    if not is_prefix_of(old_prefix, path):
        raise ValueError(f"Path {path!r} is not under {old_prefix!r}")
    return new_prefix + path[len(old_prefix):]

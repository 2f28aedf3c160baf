"""Collect the leaves of a source tree that still need translation."""

from __future__ import annotations

from langtranslator.core.tree import Branch, Leaf, empty_tree, join_path


def needs_translation(existing: object, overwrite: bool) -> bool:
    """A leaf is sent unless a non-empty existing translation is kept."""
    if overwrite:
        return True
    return not isinstance(existing, Leaf) or existing.is_empty


def collect(
    source: Branch,
    existing: Branch,
    overwrite: bool = False,
    prefix: str = "",
) -> dict[str, str]:
    """Walk ``source`` and ``existing`` in lock-step.

    Args:
        source: Tree of the source locale file.
        existing: Tree of the current target file (empty if none).
        overwrite: Request every leaf regardless of existing values.
        prefix: Dotted path of ``source`` within the whole file.

    Returns:
        Mapping of dotted path → source text, in source traversal order.
        Empty when nothing qualifies.
    """
    batch: dict[str, str] = {}
    for key, node in source.items():
        path = join_path(prefix, key)
        current = existing.get(key)
        if isinstance(node, Branch):
            sub_existing = current if isinstance(current, Branch) else empty_tree()
            batch.update(collect(node, sub_existing, overwrite, path))
        elif needs_translation(current, overwrite):
            batch[path] = node.value
    return batch

"""Reassemble a target tree from source, existing values and translations."""

from __future__ import annotations

import copy
from collections.abc import Mapping

from langtranslator.core.tree import Branch, Leaf, empty_tree, join_path
from langtranslator.translation.collector import needs_translation


def rebuild(
    source: Branch,
    existing: Branch,
    results: Mapping[str, str],
    overwrite: bool = False,
    prefix: str = "",
) -> tuple[Branch, int]:
    """Build the merged target tree.

    Keys come out in source order, followed by keys only present in
    ``existing`` (orphans) in their existing relative order. This holds at
    every level of nesting. Source shape wins when source and existing
    disagree on leaf vs. branch.

    Each source leaf takes, in order of preference:

    1. a non-empty translation from ``results`` (counted), if the leaf was
       eligible for translation,
    2. the non-empty existing value, unless overwriting,
    3. the source value itself.

    Returns:
        Tuple of (new tree, number of leaves filled from ``results``).
    """
    output = Branch()
    translated_count = 0

    for key, node in source.items():
        path = join_path(prefix, key)
        current = existing.get(key)

        if isinstance(node, Branch):
            sub_existing = current if isinstance(current, Branch) else empty_tree()
            subtree, sub_count = rebuild(node, sub_existing, results, overwrite, path)
            output[key] = subtree
            translated_count += sub_count
            continue

        # Only leaves the collector asked for may take a result; a literal
        # "a.b" key and a nested a -> b share the same path.
        translated = results.get(path) if needs_translation(current, overwrite) else None
        if translated:
            output[key] = Leaf(translated)
            translated_count += 1
        elif not overwrite and isinstance(current, Leaf) and not current.is_empty:
            output[key] = Leaf(current.value)
        else:
            output[key] = Leaf(node.value)

    for key, node in existing.items():
        if key not in source:
            output[key] = copy.deepcopy(node)

    return output, translated_count

"""Data classes representing a language file as an ordered key/value tree."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

from langtranslator.errors import FileShapeError

PATH_SEPARATOR = "."


@dataclass
class Leaf:
    """A terminal string value."""

    value: str = ""

    @property
    def is_empty(self) -> bool:
        return self.value == ""


@dataclass
class Branch:
    """An ordered mapping of keys to child nodes.

    Key order is the insertion order of ``children`` and is significant:
    every transformation in the engine preserves it.
    """

    children: dict[str, Node] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.children)

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def __iter__(self):
        return iter(self.children)

    def keys(self) -> list[str]:
        return list(self.children)

    def items(self):
        return self.children.items()

    def get(self, key: str) -> Node | None:
        return self.children.get(key)

    def __getitem__(self, key: str) -> Node:
        return self.children[key]

    def __setitem__(self, key: str, node: Node) -> None:
        self.children[key] = node


Node = Union[Leaf, Branch]


def empty_tree() -> Branch:
    return Branch()


def join_path(prefix: str, key: str) -> str:
    """Build the dotted path of ``key`` below ``prefix``."""
    return f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key


def _scalar_to_str(value: object) -> str:
    # Mirrors how PHP casts scalars when a lang array is echoed.
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def _node_from_data(value: object) -> Node:
    if isinstance(value, Mapping):
        return Branch({str(k): _node_from_data(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return Branch({str(i): _node_from_data(v) for i, v in enumerate(value)})
    return Leaf(_scalar_to_str(value))


def tree_from_data(data: object) -> Branch:
    """Build a tree from loosely-typed nested mappings.

    The shape is decided here, once: mappings and lists become branches,
    everything else becomes a string leaf.

    Raises:
        FileShapeError: If the top-level value is not a mapping or list.
    """
    if not isinstance(data, (Mapping, list, tuple)):
        raise FileShapeError(
            f"Expected a key/value structure at the top level, got {type(data).__name__}"
        )
    node = _node_from_data(data)
    assert isinstance(node, Branch)
    return node


def tree_to_data(tree: Branch) -> dict:
    """Convert a tree back to nested plain dicts of strings."""
    result: dict = {}
    for key, node in tree.items():
        if isinstance(node, Branch):
            result[key] = tree_to_data(node)
        else:
            result[key] = node.value
    return result


def flatten(tree: Branch, prefix: str = "") -> dict[str, str]:
    """Return a dotted path → leaf value mapping in traversal order."""
    result: dict[str, str] = {}
    for key, node in tree.items():
        path = join_path(prefix, key)
        if isinstance(node, Branch):
            result.update(flatten(node, path))
        else:
            result[path] = node.value
    return result


def leaf_count(tree: Branch) -> int:
    count = 0
    for node in tree.children.values():
        if isinstance(node, Branch):
            count += leaf_count(node)
        else:
            count += 1
    return count


def same_structure(a: Branch, b: Branch) -> bool:
    """Compare two trees key-by-key, including key order at every level."""
    if a.keys() != b.keys():
        return False
    for key, node in a.items():
        other = b[key]
        if isinstance(node, Branch):
            if not isinstance(other, Branch) or not same_structure(node, other):
                return False
        elif not isinstance(other, Leaf) or node.value != other.value:
            return False
    return True

"""Reader and writer for JSON language files (``lang/<locale>/<name>.json``)."""

from __future__ import annotations

import json

from langtranslator.core.tree import Branch, tree_from_data, tree_to_data
from langtranslator.errors import FileShapeError


def parse_json(text: str) -> Branch:
    """Parse a JSON lang file into a tree. Key order follows the document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FileShapeError(f"Invalid JSON: {e}") from e
    return tree_from_data(data)


def dump_json(tree: Branch, indent: int = 4) -> str:
    return json.dumps(tree_to_data(tree), ensure_ascii=False, indent=indent) + "\n"

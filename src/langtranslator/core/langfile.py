"""Facade for loading and saving language files of any supported format."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from langtranslator.core.jsonfile import dump_json, parse_json
from langtranslator.core.phpfile import dump_php, parse_php
from langtranslator.core.tree import Branch
from langtranslator.errors import FileIOError, FileShapeError

_PARSERS = {
    ".php": parse_php,
    ".json": parse_json,
}

_DUMPERS = {
    ".php": dump_php,
    ".json": dump_json,
}

SUPPORTED_SUFFIXES = tuple(_PARSERS)


def _format_for(suffix: str) -> str:
    fmt = suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}"
    if fmt not in _PARSERS:
        raise FileShapeError(f"Unsupported language file type: {suffix}")
    return fmt


def parse_lang_text(text: str, fmt: str) -> Branch:
    """Parse lang file contents. ``fmt`` is a suffix such as ``".php"``."""
    return _PARSERS[_format_for(fmt)](text)


def dump_lang_text(tree: Branch, fmt: str) -> str:
    return _DUMPERS[_format_for(fmt)](tree)


def load_lang_file(path: str | Path) -> Branch:
    """Load and parse a language file from disk.

    Raises:
        FileShapeError: If the contents are not a key/value tree.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return parse_lang_text(text, path.suffix)


def save_lang_file(tree: Branch, path: str | Path) -> None:
    """Serialize a tree and write it to disk.

    The content goes to a temporary file next to the target which then
    replaces it, so an interrupted write leaves the previous file intact.

    Raises:
        FileIOError: If the file cannot be written.
    """
    path = Path(path)
    content = dump_lang_text(tree, path.suffix)
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise FileIOError(f"Cannot write {path}: {e}") from e

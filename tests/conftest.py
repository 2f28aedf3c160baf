"""Shared test fixtures for langtranslator tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from langtranslator.backends.base import TranslationBackend
from langtranslator.config import Settings
from langtranslator.core.phpfile import dump_php
from langtranslator.core.tree import Branch, tree_from_data
from langtranslator.errors import ProviderError


def make_tree(data: dict) -> Branch:
    """Build a tree from nested dicts of strings."""
    return tree_from_data(data)


def write_php(path: Path, data: dict) -> Path:
    """Write ``data`` as a PHP lang file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_php(make_tree(data)), encoding="utf-8")
    return path


def make_settings(lang_path: Path, **kwargs) -> Settings:
    """Settings for the dummy backend rooted at ``lang_path``."""
    kwargs.setdefault("backend", "dummy")
    return Settings(lang_path=lang_path, **kwargs)


class RecordingBackend(TranslationBackend):
    """Backend that records every call and prefixes texts with the target."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str, str | None]] = []

    def translate_batch(self, texts, target_lang, source_lang=None):
        self.calls.append((list(texts), target_lang, source_lang))
        return [f"{target_lang}:{t}" for t in texts]


class FailingBackend(TranslationBackend):
    """Backend whose every call fails like a rejected HTTP request."""

    def __init__(self, message: str = "Daily Limit Exceeded", status_code: int | None = 403) -> None:
        self.message = message
        self.status_code = status_code
        self.calls = 0

    def translate_batch(self, texts, target_lang, source_lang=None):
        self.calls += 1
        raise ProviderError(self.message, status_code=self.status_code)


class MapBackend(TranslationBackend):
    """Backend translating through a fixed text → text mapping."""

    def __init__(self, mapping: dict[str, str]) -> None:
        self.mapping = mapping

    def translate_batch(self, texts, target_lang, source_lang=None):
        return [self.mapping.get(t, t) for t in texts]


@pytest.fixture
def lang_dir(tmp_path: Path) -> Path:
    """A lang directory with an ``en`` locale holding two PHP files."""
    root = tmp_path / "lang"
    write_php(root / "en" / "messages.php", {
        "welcome": "Welcome",
        "goodbye": "Goodbye",
    })
    write_php(root / "en" / "auth.php", {
        "failed": "These credentials do not match our records.",
        "throttle": {
            "title": "Too many attempts",
            "body": "Please try again later.",
        },
    })
    return root

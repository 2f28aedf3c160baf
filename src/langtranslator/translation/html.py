"""Translate the text nodes of an HTML document, leaving markup untouched."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, NavigableString

from langtranslator.backends.base import TranslationBackend
from langtranslator.translation.adapter import ProviderFailure, translate_requests

logger = logging.getLogger(__name__)

# Text inside these elements is code, not prose.
_SKIP_PARENTS = frozenset({"script", "style", "template"})


class HtmlDocument:
    """A parsed HTML fragment exposing its translatable text by position."""

    def __init__(self, html: str) -> None:
        self._soup = BeautifulSoup(html, "html.parser")
        self._nodes: list[NavigableString] = [
            node
            for node in self._soup.find_all(string=True)
            # Comments, doctypes and CDATA are NavigableString subclasses
            if type(node) is NavigableString
            and node.strip()
            and not any(p.name in _SKIP_PARENTS for p in node.parents)
        ]

    def fragments(self) -> list[tuple[int, str]]:
        """Return ``(position, text)`` for every non-blank text node, stripped."""
        return [(i, str(node).strip()) for i, node in enumerate(self._nodes)]

    def reinject(self, fragments: list[tuple[int, str]]) -> None:
        """Put translated text back at the given positions.

        Whitespace around the original text is kept. Empty translations and
        unknown positions are ignored.
        """
        for position, text in fragments:
            if not text or not 0 <= position < len(self._nodes):
                continue
            node = self._nodes[position]
            original = str(node)
            stripped = original.strip()
            start = original.find(stripped)
            replacement = NavigableString(
                original[:start] + text + original[start + len(stripped):]
            )
            node.replace_with(replacement)
            self._nodes[position] = replacement

    def render(self) -> str:
        return str(self._soup)


class HtmlTranslator:
    """Translate HTML documents through a TranslationBackend."""

    def __init__(self, backend: TranslationBackend) -> None:
        self._backend = backend

    def translate(self, html: str, target_lang: str, source_lang: str | None = None) -> str:
        """Return ``html`` with its text nodes translated.

        The input comes back unchanged when it is blank, has no text, or the
        provider fails.
        """
        if not html.strip():
            return html

        doc = HtmlDocument(html)
        fragments = doc.fragments()
        if not fragments:
            return html

        batch = {str(position): text for position, text in fragments}
        result = translate_requests(batch, self._backend, target_lang, source_lang)
        if isinstance(result, ProviderFailure):
            logger.warning("HTML translation to %s failed: %s", target_lang, result)
            return html

        doc.reinject([(int(key), text) for key, text in result.items()])
        return doc.render()

"""Provider contract shared by every translation backend."""

from __future__ import annotations

from abc import ABC, abstractmethod

from langtranslator.errors import ProviderError


class TranslationBackend(ABC):
    """A machine-translation provider.

    ``translate_batch`` is all-or-nothing: implementations raise
    :class:`ProviderError` for any remote failure and never return a
    partial list.
    """

    @abstractmethod
    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
    ) -> list[str]:
        """Return one translation per input text, in input order.

        ``target_lang``/``source_lang`` are lang directory names such as
        ``zh_TW``; ``source_lang=None`` lets the provider detect it.
        """

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> str:
        """Translate one text through :meth:`translate_batch`."""
        results = self.translate_batch([text], target_lang, source_lang)
        if len(results) != 1:
            raise ProviderError(f"Expected 1 translation, got {len(results)}")
        return results[0]

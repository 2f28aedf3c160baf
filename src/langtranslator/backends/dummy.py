"""Offline backend that tags strings with the target locale instead of translating."""

from __future__ import annotations

from langtranslator.backends.base import TranslationBackend


class DummyBackend(TranslationBackend):
    """Return ``"[ZH_TW] Welcome"`` for ``"Welcome"`` and target ``zh_TW``.

    Used by ``--backend dummy``, ``scan`` and the tests. Empty strings come
    back empty so untranslated leaves stay recognisable.
    """

    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
    ) -> list[str]:
        tag = target_lang.upper()
        return [f"[{tag}] {text}" if text else "" for text in texts]

"""Bridge between path-keyed translation requests and a TranslationBackend."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import ContextManager, Union

from langtranslator.backends.base import TranslationBackend
from langtranslator.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderFailure:
    """The whole batch failed; nothing in it was translated."""

    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


TranslationResult = Union[dict[str, str], ProviderFailure]


def _dedup(texts: list[str]) -> tuple[list[str], list[int]]:
    """Return unique texts and, for each input, the index of its unique text."""
    text_to_index: dict[str, int] = {}
    unique: list[str] = []
    indices: list[int] = []
    for text in texts:
        if text not in text_to_index:
            text_to_index[text] = len(unique)
            unique.append(text)
        indices.append(text_to_index[text])
    return unique, indices


def translate_requests(
    batch: Mapping[str, str],
    backend: TranslationBackend,
    target_lang: str,
    source_lang: str | None = None,
    *,
    limiter: ContextManager | None = None,
) -> TranslationResult:
    """Translate a dotted path → text batch for one target locale.

    Identical texts are sent once. The backend call is made while holding
    ``limiter`` (e.g. a semaphore capping concurrent remote calls).

    Returns:
        A mapping with exactly the keys of ``batch``, or a
        :class:`ProviderFailure` if anything went wrong. Never a partial map.
    """
    if not batch:
        return {}

    paths = list(batch)
    unique, indices = _dedup([batch[p] for p in paths])

    try:
        with limiter if limiter is not None else contextlib.nullcontext():
            translated = backend.translate_batch(unique, target_lang, source_lang)
    except ProviderError as e:
        logger.warning("Translation to %s failed: %s", target_lang, e)
        return ProviderFailure(e.message, e.status_code)
    except Exception as e:
        logger.warning("Translation to %s failed: %s", target_lang, e, exc_info=True)
        return ProviderFailure(f"{type(e).__name__}: {e}")

    if not isinstance(translated, list) or len(translated) != len(unique):
        got = len(translated) if isinstance(translated, list) else type(translated).__name__
        logger.warning("Backend returned %s results for %d texts", got, len(unique))
        return ProviderFailure(f"Expected {len(unique)} translations, got {got}")

    return {path: translated[i] for path, i in zip(paths, indices, strict=True)}

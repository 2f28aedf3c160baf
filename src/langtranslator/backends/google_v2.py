"""Google Cloud Translation v2 (API key) backend."""

from __future__ import annotations

import logging

import requests

from langtranslator.backends.base import TranslationBackend
from langtranslator.errors import ProviderError

logger = logging.getLogger(__name__)

API_URL = "https://translation.googleapis.com/language/translate/v2"

# v2 accepts at most 128 ``q`` segments per request
MAX_BATCH_SIZE = 128
DEFAULT_TIMEOUT = 30.0


def google_language_code(locale: str) -> str:
    """Map a lang directory name (``zh_TW``) to a Google language code (``zh-TW``)."""
    return locale.replace("_", "-")


def error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text[:200]


class GoogleV2Backend(TranslationBackend):
    """Translation backend using the key-authenticated v2 REST endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        api_url: str = API_URL,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._api_url = api_url

    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
    ) -> list[str]:
        """Translate texts, splitting into requests of at most MAX_BATCH_SIZE."""
        if not texts:
            return []

        results: list[str] = []
        for i in range(0, len(texts), MAX_BATCH_SIZE):
            batch = texts[i : i + MAX_BATCH_SIZE]
            results.extend(self._translate_request(batch, target_lang, source_lang))
        return results

    def _translate_request(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
    ) -> list[str]:
        data: dict[str, object] = {
            "q": texts,
            "target": google_language_code(target_lang),
            "format": "text",
        }
        if source_lang:
            data["source"] = google_language_code(source_lang)

        try:
            response = requests.post(
                self._api_url,
                params={"key": self._api_key},
                data=data,
                timeout=self._timeout,
                verify=self._verify_ssl,
            )
        except requests.RequestException as e:
            raise ProviderError(f"Request failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(error_detail(response), status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(f"Malformed response: {e}", status_code=200) from e

        if not isinstance(payload, dict):
            raise ProviderError("Malformed response: expected a JSON object", status_code=200)
        if "error" in payload:
            error = payload["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            raise ProviderError(message, status_code=code if isinstance(code, int) else None)

        translations = (payload.get("data") or {}).get("translations")
        if not isinstance(translations, list):
            raise ProviderError("Malformed response: missing data.translations", status_code=200)
        if len(translations) != len(texts):
            raise ProviderError(
                f"Expected {len(texts)} translations, got {len(translations)}",
                status_code=200,
            )

        logger.debug("Translated %d texts to %s", len(texts), target_lang)
        return [str(t.get("translatedText", "")) for t in translations]

"""Google Cloud Translation v3 (service account, project-scoped) backend."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import requests

from langtranslator.backends.base import TranslationBackend
from langtranslator.backends.google_v2 import DEFAULT_TIMEOUT, error_detail, google_language_code
from langtranslator.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

API_URL_TEMPLATE = "https://translation.googleapis.com/v3/projects/{project_id}:translateText"
SCOPES = ["https://www.googleapis.com/auth/cloud-translation"]

# Documented per-request limits of translateText
MAX_BATCH_SIZE = 1024
MAX_BATCH_CODEPOINTS = 30_000


def _chunks(texts: list[str]) -> list[list[str]]:
    """Split texts into request-sized chunks by count and total length."""
    chunks: list[list[str]] = []
    current: list[str] = []
    size = 0
    for text in texts:
        if current and (len(current) >= MAX_BATCH_SIZE or size + len(text) > MAX_BATCH_CODEPOINTS):
            chunks.append(current)
            current, size = [], 0
        current.append(text)
        size += len(text)
    if current:
        chunks.append(current)
    return chunks


class GoogleV3Backend(TranslationBackend):
    """Translation backend using the token-authenticated v3 endpoint.

    Access tokens come from a service account key file through google-auth
    and are refreshed when they expire. A fixed ``access_token`` can be
    given instead, which skips google-auth entirely.
    """

    def __init__(
        self,
        project_id: str,
        credentials_path: str | Path | None = None,
        *,
        access_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
    ) -> None:
        if not project_id:
            raise ConfigurationError("Google Translate v3 requires a project id.")
        self._project_id = project_id
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._access_token = access_token
        self._credentials = None
        self._lock = threading.Lock()

        if access_token is None:
            if not credentials_path:
                raise ConfigurationError(
                    "Google Translate v3 requires a service account credentials file."
                )
            path = Path(credentials_path)
            if not path.is_file():
                raise ConfigurationError(f"Service account key file not found: {path}")
            self._credentials = self._load_credentials(path)

    @staticmethod
    def _load_credentials(path: Path):
        try:
            from google.oauth2 import service_account
        except ImportError:
            raise ImportError(
                "Google Translate v3 backend requires the 'google-auth' package. "
                "Install it with: pip install langtranslator[google-v3]"
            ) from None
        try:
            return service_account.Credentials.from_service_account_file(str(path), scopes=SCOPES)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Invalid service account key file {path}: {e}") from e

    @property
    def api_url(self) -> str:
        return API_URL_TEMPLATE.format(project_id=self._project_id)

    def _get_access_token(self) -> str:
        if self._access_token is not None:
            return self._access_token

        from google.auth.exceptions import GoogleAuthError
        from google.auth.transport.requests import Request

        with self._lock:
            if not self._credentials.valid:
                try:
                    self._credentials.refresh(Request())
                except GoogleAuthError as e:
                    raise ProviderError(f"Cannot obtain access token: {e}") from e
            token = self._credentials.token
        if not token:
            raise ProviderError("Credentials did not yield an access token")
        return token

    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
    ) -> list[str]:
        if not texts:
            return []

        results: list[str] = []
        for chunk in _chunks(texts):
            results.extend(self._translate_request(chunk, target_lang, source_lang))
        return results

    def _translate_request(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
    ) -> list[str]:
        body: dict[str, object] = {
            "contents": texts,
            "targetLanguageCode": google_language_code(target_lang),
            "mimeType": "text/plain",
        }
        if source_lang:
            body["sourceLanguageCode"] = google_language_code(source_lang)

        headers = {
            "Authorization": f"Bearer {self._get_access_token()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            response = requests.post(
                self.api_url,
                json=body,
                headers=headers,
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
            raise ProviderError(message)

        translations = payload.get("translations")
        if not isinstance(translations, list):
            raise ProviderError("Malformed response: missing translations", status_code=200)
        if len(translations) != len(texts):
            raise ProviderError(
                f"Expected {len(texts)} translations, got {len(translations)}",
                status_code=200,
            )

        logger.debug("Translated %d texts to %s (project %s)", len(texts), target_lang, self._project_id)
        return [str(t.get("translatedText", "")) for t in translations]

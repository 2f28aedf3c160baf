"""Locale orchestration: translate every file of a source locale into N targets.

Used by the CLI (cli.py). Each (target locale, file) pair is an independent
unit running Load → Collect → Translate → Rebuild → Write, with callback-based
progress reporting and cancellation support. Units run sequentially by
default or on a bounded thread pool; remote calls are additionally capped by
a semaphore so parallel units do not exceed provider rate limits.
"""

from __future__ import annotations

import logging
import threading
import time as _time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from threading import Event

from langtranslator.backends.base import TranslationBackend
from langtranslator.config import Settings
from langtranslator.core.langfile import SUPPORTED_SUFFIXES, load_lang_file, save_lang_file
from langtranslator.core.tree import Branch, empty_tree
from langtranslator.errors import ConfigurationError, FileIOError, FileShapeError
from langtranslator.translation.adapter import ProviderFailure, translate_requests
from langtranslator.translation.collector import collect
from langtranslator.translation.rebuilder import rebuild

logger = logging.getLogger(__name__)

# Type alias for progress callback: (phase, current, total, message)
ProgressCallback = Callable[[str, int, int, str], None]


class OutcomeStatus(str, Enum):
    success = "success"
    skipped = "skipped"
    error = "error"


@dataclass
class FileOutcome:
    """Result of translating one file into one target locale."""

    status: OutcomeStatus
    translated_count: int = 0
    reason: str = ""
    message: str = ""
    provider_error: str | None = None

    @classmethod
    def success(cls, translated_count: int, provider_error: str | None = None) -> FileOutcome:
        return cls(OutcomeStatus.success, translated_count, provider_error=provider_error)

    @classmethod
    def skipped(cls, reason: str) -> FileOutcome:
        return cls(OutcomeStatus.skipped, reason=reason)

    @classmethod
    def error(cls, message: str) -> FileOutcome:
        return cls(OutcomeStatus.error, message=message)

    def to_dict(self) -> dict:
        data: dict = {"status": self.status.value}
        if self.status == OutcomeStatus.success:
            data["translated_keys"] = self.translated_count
            if self.provider_error:
                data["provider_error"] = self.provider_error
        elif self.status == OutcomeStatus.skipped:
            data["reason"] = self.reason
        else:
            data["message"] = self.message
        return data


# locale → file name → outcome
RunResults = dict[str, dict[str, FileOutcome]]


class CancelledError(Exception):
    """Raised when the user cancels the operation."""


def _check_cancel(cancel_event: Event | None) -> None:
    """Raise CancelledError if the cancel event is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise CancelledError("Operation cancelled by user")


# ── Backend creation ──


def create_backend(settings: Settings) -> tuple[TranslationBackend, str]:
    """Create a translation backend instance from settings.

    Returns:
        Tuple of (backend_instance, backend_label_for_report).

    Raises:
        ConfigurationError: If the selected backend lacks credentials.
    """
    from langtranslator.backends.dummy import DummyBackend

    settings.validate()

    if settings.backend == "dummy":
        return DummyBackend(), "dummy"
    elif settings.backend == "google-v3":
        from langtranslator.backends.google_v3 import GoogleV3Backend
        backend = GoogleV3Backend(
            settings.project_id,  # type: ignore[arg-type]
            settings.credentials_path,
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
        )
        return backend, f"google-v3:{settings.project_id}"
    else:
        from langtranslator.backends.google_v2 import GoogleV2Backend
        backend = GoogleV2Backend(
            settings.api_key,  # type: ignore[arg-type]
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
        )
        return backend, "google-v2"


# ── Directory scanning ──


def scan_lang_files(locale_dir: Path) -> dict[str, Path]:
    """Map file name → path for every language file in a locale directory.

    Only direct children with a supported suffix are considered, sorted by
    file name so runs are deterministic.
    """
    files = [
        p for p in locale_dir.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES
    ]
    return {p.name: p for p in sorted(files, key=lambda p: p.name)}


def _unique_locales(locales: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for locale in locales:
        if locale not in seen:
            seen.add(locale)
            ordered.append(locale)
    return ordered


def _check_locale_name(locale: str) -> None:
    if not locale or locale in (".", "..") or "/" in locale or "\\" in locale:
        raise ConfigurationError(f"Invalid locale name: {locale!r}")


# ── Internal per-file context ──


@dataclass
class _FileContext:
    """Per-(locale, file) state carried through the stages."""

    file_name: str
    source_path: Path
    target_path: Path
    target_locale: str
    stage: str = "pending"  # pending|loading|collecting|translating|rebuilding|writing|done
    source_tree: Branch = field(default_factory=empty_tree)
    existing_tree: Branch = field(default_factory=empty_tree)
    batch: dict[str, str] = field(default_factory=dict)
    results: dict[str, str] = field(default_factory=dict)
    provider_error: str | None = None


class LocaleTranslator:
    """Translate a source locale directory into target locale directories.

    Args:
        settings: Resolved run settings (lang path, concurrency, dry run).
        backend: Translation provider; created from ``settings`` if omitted.
    """

    def __init__(
        self,
        settings: Settings,
        backend: TranslationBackend | None = None,
        backend_label: str | None = None,
    ) -> None:
        if backend is None:
            backend, label = create_backend(settings)
            backend_label = backend_label or label
        self.settings = settings
        self.backend = backend
        self.backend_label = backend_label or type(backend).__name__
        self._limiter = threading.BoundedSemaphore(settings.max_concurrent_requests)

    @property
    def lang_path(self) -> Path:
        return Path(self.settings.lang_path)

    def locale_path(self, locale: str) -> Path:
        return self.lang_path / locale

    def source_files(self, source_locale: str) -> dict[str, Path]:
        """Validate the lang and source directories and list source files.

        Raises:
            ConfigurationError: If either directory is missing.
        """
        _check_locale_name(source_locale)
        if not self.lang_path.is_dir():
            raise ConfigurationError(f"Lang directory does not exist: {self.lang_path}")
        source_dir = self.locale_path(source_locale)
        if not source_dir.is_dir():
            raise ConfigurationError(f"Source locale directory does not exist: {source_dir}")
        return scan_lang_files(source_dir)

    def _resolve_targets(self, source_locale: str, target_locales: Iterable[str]) -> list[str]:
        targets = _unique_locales(target_locales)
        if not targets:
            raise ConfigurationError("At least one target locale must be specified.")
        for locale in targets:
            _check_locale_name(locale)
            if locale == source_locale:
                raise ConfigurationError(
                    f"Target locale '{locale}' is the same as the source locale."
                )
        return targets

    # ── Public API ──

    def run(
        self,
        source_locale: str,
        target_locales: Iterable[str],
        overwrite: bool = False,
        *,
        on_progress: ProgressCallback | None = None,
        cancel_event: Event | None = None,
    ) -> RunResults:
        """Translate every source file into every target locale.

        Only configuration problems raise; per-file failures are recorded
        as ``skipped``/``error`` outcomes.

        Returns:
            Mapping locale → file name → FileOutcome, targets in the given
            order and files sorted by name.

        Raises:
            ConfigurationError: Missing lang/source directory or bad targets.
            CancelledError: If ``cancel_event`` was set. Files not fully
                written by then keep their previous content.
        """
        source_files = self.source_files(source_locale)
        targets = self._resolve_targets(source_locale, target_locales)
        t0 = _time.monotonic()

        outcomes: dict[tuple[str, str], FileOutcome] = {}
        units: list[_FileContext] = []

        for target_locale in targets:
            _check_cancel(cancel_event)
            target_dir = self.locale_path(target_locale)
            try:
                self._ensure_directory(target_dir)
            except FileIOError as e:
                logger.error("%s", e)
                for name in source_files:
                    outcomes[(target_locale, name)] = FileOutcome.error(str(e))
                continue
            for name, path in source_files.items():
                units.append(_FileContext(
                    file_name=name,
                    source_path=path,
                    target_path=target_dir / name,
                    target_locale=target_locale,
                ))

        logger.info(
            "Translating %d file(s) from %s into %s with %s",
            len(source_files), source_locale, ", ".join(targets), self.backend_label,
        )

        total = len(units)
        cancelled = False
        if self.settings.max_workers <= 1 or total <= 1:
            for i, ctx in enumerate(units):
                try:
                    outcomes[(ctx.target_locale, ctx.file_name)] = self._run_unit(
                        ctx, source_locale, overwrite, cancel_event,
                    )
                except CancelledError:
                    cancelled = True
                    break
                if on_progress:
                    on_progress("translate", i + 1, total, f"{ctx.target_locale}/{ctx.file_name}")
        else:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
                futures = {
                    pool.submit(self._run_unit, ctx, source_locale, overwrite, cancel_event): ctx
                    for ctx in units
                }
                done = 0
                for future in as_completed(futures):
                    ctx = futures[future]
                    try:
                        outcomes[(ctx.target_locale, ctx.file_name)] = future.result()
                    except CancelledError:
                        cancelled = True
                        continue
                    done += 1
                    if on_progress:
                        on_progress("translate", done, total, f"{ctx.target_locale}/{ctx.file_name}")

        if cancelled:
            raise CancelledError("Operation cancelled by user")

        logger.info("Finished in %.1fs", _time.monotonic() - t0)

        results: RunResults = {}
        for target_locale in targets:
            results[target_locale] = {
                name: outcomes[(target_locale, name)]
                for name in source_files
                if (target_locale, name) in outcomes
            }
        return results

    def translate_file(
        self,
        source_path: str | Path,
        target_path: str | Path,
        source_locale: str,
        target_locale: str,
        overwrite: bool = False,
    ) -> FileOutcome:
        """Translate a single file. The target's directory must already exist."""
        source_path = Path(source_path)
        ctx = _FileContext(
            file_name=source_path.name,
            source_path=source_path,
            target_path=Path(target_path),
            target_locale=target_locale,
        )
        return self._run_unit(ctx, source_locale, overwrite, None)

    def count_pending(
        self,
        source_locale: str,
        target_locales: Iterable[str],
        overwrite: bool = False,
    ) -> dict[str, dict[str, int | None]]:
        """Count leaves that a run would send for translation, without sending.

        Files whose source does not parse map to None.
        """
        source_files = self.source_files(source_locale)
        targets = self._resolve_targets(source_locale, target_locales)
        counts: dict[str, dict[str, int | None]] = {}
        for target_locale in targets:
            counts[target_locale] = {}
            for name, path in source_files.items():
                try:
                    source_tree = load_lang_file(path)
                except (FileShapeError, OSError, UnicodeDecodeError):
                    counts[target_locale][name] = None
                    continue
                existing = self._load_existing(self.locale_path(target_locale) / name, overwrite)
                counts[target_locale][name] = len(collect(source_tree, existing, overwrite))
        return counts

    # ── Stages ──

    @staticmethod
    def _ensure_directory(path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileIOError(f"Cannot create directory {path}: {e}") from e

    @staticmethod
    def _load_existing(target_path: Path, overwrite: bool) -> Branch:
        """Load the current target tree; anything unreadable counts as empty."""
        if overwrite or not target_path.is_file():
            return empty_tree()
        try:
            return load_lang_file(target_path)
        except (FileShapeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable existing file %s: %s", target_path, e)
            return empty_tree()

    def _run_unit(
        self,
        ctx: _FileContext,
        source_locale: str,
        overwrite: bool,
        cancel_event: Event | None,
    ) -> FileOutcome:
        _check_cancel(cancel_event)
        label = f"{ctx.target_locale}/{ctx.file_name}"
        try:
            ctx.stage = "loading"
            try:
                ctx.source_tree = load_lang_file(ctx.source_path)
            except FileShapeError as e:
                logger.warning("Skipping %s: %s", ctx.source_path, e)
                return FileOutcome.skipped(f"Invalid language file structure: {e}")
            ctx.existing_tree = self._load_existing(ctx.target_path, overwrite)

            ctx.stage = "collecting"
            ctx.batch = collect(ctx.source_tree, ctx.existing_tree, overwrite)
            logger.debug("%s: %d key(s) to translate", label, len(ctx.batch))

            ctx.stage = "translating"
            result = translate_requests(
                ctx.batch, self.backend, ctx.target_locale, source_locale,
                limiter=self._limiter,
            )
            if isinstance(result, ProviderFailure):
                ctx.provider_error = str(result)
                ctx.results = {}
            else:
                ctx.results = result

            ctx.stage = "rebuilding"
            tree, translated_count = rebuild(
                ctx.source_tree, ctx.existing_tree, ctx.results, overwrite,
            )

            ctx.stage = "writing"
            _check_cancel(cancel_event)
            if not self.settings.dry_run:
                save_lang_file(tree, ctx.target_path)

            ctx.stage = "done"
            logger.info("%s: %d key(s) translated", label, translated_count)
            return FileOutcome.success(translated_count, ctx.provider_error)

        except CancelledError:
            raise
        except Exception as e:
            logger.error("%s failed while %s: %s", label, ctx.stage, e)
            return FileOutcome.error(str(e))

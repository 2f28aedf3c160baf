"""Translation run report data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from langtranslator.pipeline import FileOutcome, OutcomeStatus, RunResults


@dataclass
class RunReport:
    """Collects the outcomes and statistics of one locale translation run."""

    source_locale: str = ""
    target_locales: list[str] = field(default_factory=list)
    lang_path: str = ""
    backend: str = ""
    overwrite: bool = False
    dry_run: bool = False

    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    results: RunResults = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def finish(self, results: RunResults | None = None) -> None:
        if results is not None:
            self.results = results
        self.finished_at = datetime.now()

    def outcomes(self) -> list[tuple[str, str, FileOutcome]]:
        """Flatten results to ``(locale, file, outcome)`` in run order."""
        return [
            (locale, name, outcome)
            for locale, files in self.results.items()
            for name, outcome in files.items()
        ]

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for _, _, o in self.outcomes() if o.status == status)

    @property
    def success_count(self) -> int:
        return self._count(OutcomeStatus.success)

    @property
    def skipped_count(self) -> int:
        return self._count(OutcomeStatus.skipped)

    @property
    def error_count(self) -> int:
        return self._count(OutcomeStatus.error)

    @property
    def translated_keys(self) -> int:
        return sum(o.translated_count for _, _, o in self.outcomes())

    @property
    def provider_errors(self) -> list[str]:
        return [
            f"{locale}/{name}: {o.provider_error}"
            for locale, name, o in self.outcomes()
            if o.provider_error
        ]

    def to_dict(self) -> dict:
        return {
            "source_locale": self.source_locale,
            "target_locales": self.target_locales,
            "lang_path": self.lang_path,
            "backend": self.backend,
            "overwrite": self.overwrite,
            "dry_run": self.dry_run,
            "success_count": self.success_count,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
            "translated_keys": self.translated_keys,
            "duration_seconds": self.duration_seconds,
            "results": {
                locale: {name: outcome.to_dict() for name, outcome in files.items()}
                for locale, files in self.results.items()
            },
        }

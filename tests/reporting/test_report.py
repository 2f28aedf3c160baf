"""Tests for run reports and their formatters."""

import csv
import io
import json

from langtranslator.pipeline import FileOutcome
from langtranslator.reporting.formatters import save_report, to_csv, to_json, to_markdown
from langtranslator.reporting.report import RunReport


def _make_report() -> RunReport:
    rpt = RunReport(
        source_locale="en",
        target_locales=["ja", "fr"],
        lang_path="lang",
        backend="dummy",
    )
    rpt.finish({
        "ja": {
            "auth.php": FileOutcome.success(3),
            "broken.php": FileOutcome.skipped("Invalid language file structure"),
        },
        "fr": {
            "auth.php": FileOutcome.success(0, provider_error="HTTP 403: Daily Limit Exceeded"),
            "broken.php": FileOutcome.error("Cannot write lang/fr/broken.php"),
        },
    })
    return rpt


class TestRunReport:
    def test_totals(self):
        rpt = _make_report()
        assert rpt.success_count == 2
        assert rpt.skipped_count == 1
        assert rpt.error_count == 1
        assert rpt.translated_keys == 3
        assert rpt.provider_errors == ["fr/auth.php: HTTP 403: Daily Limit Exceeded"]

    def test_duration(self):
        rpt = RunReport()
        assert rpt.duration_seconds == 0.0
        rpt.finish()
        assert rpt.duration_seconds >= 0.0

    def test_to_dict(self):
        data = _make_report().to_dict()
        assert data["results"]["ja"]["auth.php"] == {"status": "success", "translated_keys": 3}
        assert data["results"]["ja"]["broken.php"]["reason"] == "Invalid language file structure"
        assert data["results"]["fr"]["auth.php"]["provider_error"].startswith("HTTP 403")
        assert data["results"]["fr"]["broken.php"]["status"] == "error"


class TestFormatters:
    def test_json(self):
        data = json.loads(to_json(_make_report()))
        assert data["source_locale"] == "en"
        assert data["error_count"] == 1

    def test_markdown(self):
        md = to_markdown(_make_report())
        assert md.startswith("# Translation Report")
        assert "## ja" in md
        assert "| `auth.php` | success | 3 keys translated |" in md
        assert "Daily Limit Exceeded" in md

    def test_csv_one_row_per_file(self):
        rows = list(csv.DictReader(io.StringIO(to_csv(_make_report()))))
        assert [(r["locale"], r["file"], r["status"]) for r in rows] == [
            ("ja", "auth.php", "success"),
            ("ja", "broken.php", "skipped"),
            ("fr", "auth.php", "success"),
            ("fr", "broken.php", "error"),
        ]

    def test_save_by_suffix(self, tmp_path):
        rpt = _make_report()
        save_report(rpt, tmp_path / "r.md")
        save_report(rpt, tmp_path / "r.csv")
        save_report(rpt, tmp_path / "r.json")
        save_report(rpt, tmp_path / "r.txt")
        assert (tmp_path / "r.md").read_text().startswith("# Translation Report")
        assert (tmp_path / "r.csv").read_text().startswith("locale,file")
        assert json.loads((tmp_path / "r.json").read_text())["backend"] == "dummy"
        assert json.loads((tmp_path / "r.txt").read_text())["backend"] == "dummy"

"""Integration tests for the CLI using Typer's CliRunner."""

import json

from typer.testing import CliRunner

from langtranslator import __version__
from langtranslator.cli import app
from langtranslator.core.langfile import load_lang_file
from langtranslator.core.tree import tree_to_data
from tests.conftest import write_php

runner = CliRunner()

# Keep the developer's environment out of settings resolution.
CLEAN_ENV = {
    "GOOGLE_TRANSLATE_API_KEY": "",
    "GOOGLE_TRANSLATE_PROJECT_ID": "",
    "GOOGLE_APPLICATION_CREDENTIALS": "",
    "LANGTRANSLATOR_BACKEND": "",
    "LANGTRANSLATOR_VERIFY_SSL": "",
    "LANGTRANSLATOR_LANG_PATH": "",
}


class TestCLIGlobal:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestCLITranslate:
    def test_translate_with_dummy_backend(self, lang_dir):
        result = runner.invoke(app, [
            "translate", "en", "ja", "fr",
            "--path", str(lang_dir),
            "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 0, result.output
        assert "✓" in result.output
        assert "Summary: 2 successful, 0 errors, 0 skipped" in result.output
        assert tree_to_data(load_lang_file(lang_dir / "fr" / "messages.php"))["welcome"] == (
            "[FR] Welcome"
        )

    def test_translate_reports_skipped_and_errors(self, lang_dir):
        (lang_dir / "en" / "broken.php").write_text("<?php return 'x';", encoding="utf-8")
        (lang_dir / "de").write_text("not a directory")
        result = runner.invoke(app, [
            "translate", "en", "ja", "de",
            "--path", str(lang_dir),
            "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 0, result.output
        assert "⚠" in result.output
        assert "Skipped:" in result.output
        assert "✗" in result.output
        assert "Summary: 2 successful, 0 errors, 1 skipped" in result.output
        assert "Summary: 0 successful, 3 errors, 0 skipped" in result.output

    def test_translate_dry_run(self, lang_dir):
        result = runner.invoke(app, [
            "translate", "en", "ja",
            "--path", str(lang_dir),
            "--backend", "dummy",
            "--dry-run",
        ], env=CLEAN_ENV)
        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert not (lang_dir / "ja" / "messages.php").exists()

    def test_translate_with_report(self, lang_dir, tmp_path):
        report = tmp_path / "report.json"
        result = runner.invoke(app, [
            "translate", "en", "ja",
            "--path", str(lang_dir),
            "--backend", "dummy",
            "--report", str(report),
        ], env=CLEAN_ENV)
        assert result.exit_code == 0
        data = json.loads(report.read_text())
        assert data["translated_keys"] == 5
        assert data["results"]["ja"]["messages.php"]["status"] == "success"

    def test_translate_keeps_existing(self, lang_dir):
        write_php(lang_dir / "ja" / "messages.php", {"welcome": "ようこそ"})
        result = runner.invoke(app, [
            "translate", "en", "ja",
            "--path", str(lang_dir),
            "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 0
        data = tree_to_data(load_lang_file(lang_dir / "ja" / "messages.php"))
        assert data == {"welcome": "ようこそ", "goodbye": "[JA] Goodbye"}

    def test_missing_source_locale(self, lang_dir):
        result = runner.invoke(app, [
            "translate", "xx", "ja",
            "--path", str(lang_dir),
            "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 1
        assert "Source locale directory does not exist" in result.output

    def test_requires_api_key_for_google_v2(self, lang_dir):
        result = runner.invoke(app, [
            "translate", "en", "ja",
            "--path", str(lang_dir),
            "--backend", "google-v2",
        ], env=CLEAN_ENV)
        assert result.exit_code == 1
        assert "API key" in result.output

    def test_config_file(self, lang_dir, tmp_path):
        config = tmp_path / "lt.toml"
        config.write_text(f'[langtranslator]\nlang_path = "{lang_dir.as_posix()}"\nbackend = "dummy"\n')
        result = runner.invoke(app, ["translate", "en", "ja", "--config", str(config)], env=CLEAN_ENV)
        assert result.exit_code == 0, result.output
        assert (lang_dir / "ja" / "auth.php").exists()


class TestCLIScan:
    def test_scan_lists_pending(self, lang_dir):
        write_php(lang_dir / "ja" / "messages.php", {"welcome": "ようこそ"})
        result = runner.invoke(app, ["scan", "en", "ja", "--path", str(lang_dir)], env=CLEAN_ENV)
        assert result.exit_code == 0, result.output
        assert "auth.php" in result.output
        assert "messages.php" in result.output
        assert "Pending ja" in result.output

    def test_scan_without_targets(self, lang_dir):
        result = runner.invoke(app, ["scan", "en", "--path", str(lang_dir)], env=CLEAN_ENV)
        assert result.exit_code == 0
        assert "Found 2 files" in result.output

    def test_scan_missing_locale(self, lang_dir):
        result = runner.invoke(app, ["scan", "xx", "--path", str(lang_dir)], env=CLEAN_ENV)
        assert result.exit_code == 1


class TestCLIHtml:
    def test_html_to_stdout(self, tmp_path):
        page = tmp_path / "page.html"
        page.write_text("<h1>Hello</h1><script>x()</script>", encoding="utf-8")
        result = runner.invoke(app, [
            "html", str(page), "--target", "es", "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 0, result.output
        assert "<h1>[ES] Hello</h1><script>x()</script>" in result.output

    def test_html_to_file(self, tmp_path):
        page = tmp_path / "page.html"
        out = tmp_path / "page.es.html"
        page.write_text("<p>Hi</p>", encoding="utf-8")
        result = runner.invoke(app, [
            "html", str(page), "-t", "es", "--backend", "dummy", "--output", str(out),
        ], env=CLEAN_ENV)
        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == "<p>[ES] Hi</p>"

    def test_html_missing_file(self, tmp_path):
        result = runner.invoke(app, [
            "html", str(tmp_path / "nope.html"), "-t", "es", "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 1

    def test_html_not_utf8(self, tmp_path):
        page = tmp_path / "latin1.html"
        page.write_bytes("<p>Café</p>".encode("latin-1"))
        result = runner.invoke(app, [
            "html", str(page), "-t", "es", "--backend", "dummy",
        ], env=CLEAN_ENV)
        assert result.exit_code == 1
        assert "not UTF-8 encoded" in result.output

"""Output formatters for run reports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from langtranslator.reporting.report import RunReport

CSV_FIELDS = ["locale", "file", "status", "translated_keys", "reason", "message", "provider_error"]


def to_json(report: RunReport, indent: int = 2) -> str:
    """Format report as JSON string."""
    return json.dumps(report.to_dict(), indent=indent, default=str, ensure_ascii=False)


def to_markdown(report: RunReport) -> str:
    """Format report as Markdown."""
    lines = [
        "# Translation Report",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| Lang path | `{report.lang_path}` |",
        f"| Source locale | {report.source_locale} |",
        f"| Target locales | {', '.join(report.target_locales)} |",
        f"| Backend | {report.backend} |",
        f"| Overwrite | {report.overwrite} |",
        f"| Dry run | {report.dry_run} |",
        "",
        "## Statistics",
        "",
        "| Metric | Count |",
        "|--------|-------|",
        f"| Files translated | {report.success_count} |",
        f"| Files skipped | {report.skipped_count} |",
        f"| Files failed | {report.error_count} |",
        f"| Keys translated | {report.translated_keys} |",
        f"| Duration | {report.duration_seconds:.1f}s |",
    ]

    for locale, files in report.results.items():
        lines.extend([
            "",
            f"## {locale}",
            "",
            "| File | Status | Detail |",
            "|------|--------|--------|",
        ])
        for name, outcome in files.items():
            if outcome.status.value == "success":
                detail = f"{outcome.translated_count} keys translated"
                if outcome.provider_error:
                    detail += f" (provider: {outcome.provider_error})"
            else:
                detail = outcome.reason or outcome.message
            lines.append(f"| `{name}` | {outcome.status.value} | {detail} |")

    return "\n".join(lines) + "\n"


def to_csv(report: RunReport) -> str:
    """Format report as CSV, one row per (locale, file) outcome."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for locale, name, outcome in report.outcomes():
        writer.writerow({
            "locale": locale,
            "file": name,
            "status": outcome.status.value,
            "translated_keys": outcome.translated_count,
            "reason": outcome.reason,
            "message": outcome.message,
            "provider_error": outcome.provider_error or "",
        })
    return output.getvalue()


def save_report(report: RunReport, path: str | Path) -> None:
    """Save report to file, auto-detecting format from extension."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".md", ".markdown"):
        content = to_markdown(report)
    elif suffix == ".csv":
        content = to_csv(report)
    else:
        content = to_json(report)

    path.write_text(content, encoding="utf-8")

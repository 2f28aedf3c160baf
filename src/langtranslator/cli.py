"""CLI interface for langtranslator using Typer."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from langtranslator import __version__
from langtranslator.config import Settings, load_settings
from langtranslator.errors import ConfigurationError, LangTranslatorError
from langtranslator.pipeline import (
    CancelledError,
    FileOutcome,
    LocaleTranslator,
    OutcomeStatus,
    RunResults,
    create_backend,
)

app = typer.Typer(
    name="langtranslator",
    help="Incrementally translate Laravel-style locale language files.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

_verbose = False
_quiet = False


def _print(msg: str, *, verbose_only: bool = False) -> None:
    """Print respecting --verbose/--quiet flags. Errors bypass --quiet."""
    if _quiet:
        return
    if verbose_only and not _verbose:
        return
    console.print(msg)


def _fail(msg: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(msg)}")
    return typer.Exit(1)


def _setup_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _resolve_settings(config: Path | None, **overrides: object) -> Settings:
    """Load settings or exit with a readable message."""
    try:
        return load_settings(config, **overrides).validate()
    except ConfigurationError as e:
        raise _fail(str(e)) from e


def _make_translator(settings: Settings) -> LocaleTranslator:
    try:
        backend, label = create_backend(settings)
    except (ConfigurationError, ImportError) as e:
        raise _fail(str(e)) from e
    _print(f"Backend: [cyan]{label}[/cyan]", verbose_only=True)
    return LocaleTranslator(settings, backend, label)


def _outcome_line(name: str, outcome: FileOutcome) -> str:
    if outcome.status == OutcomeStatus.success:
        line = f"  [green]✓[/green] {escape(name)}: {outcome.translated_count} keys translated"
        if outcome.provider_error:
            line += f" [yellow](provider error: {escape(outcome.provider_error)})[/yellow]"
        return line
    if outcome.status == OutcomeStatus.skipped:
        return f"  [yellow]⚠[/yellow] {escape(name)}: Skipped: {escape(outcome.reason)}"
    return f"  [red]✗[/red] {escape(name)}: Error: {escape(outcome.message)}"


def _print_summary(results: RunResults) -> None:
    for locale, files in results.items():
        _print(f"\n[bold]{escape(locale)}[/bold]")
        counts = {status: 0 for status in OutcomeStatus}
        for name, outcome in files.items():
            counts[outcome.status] += 1
            if outcome.status == OutcomeStatus.error:
                console.print(_outcome_line(name, outcome))
            else:
                _print(_outcome_line(name, outcome))
        _print(
            f"  Summary: {counts[OutcomeStatus.success]} successful,"
            f" {counts[OutcomeStatus.error]} errors,"
            f" {counts[OutcomeStatus.skipped]} skipped"
        )


def version_callback(value: bool) -> None:
    if value:
        console.print(f"langtranslator {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show extra info (backend, per-file progress).",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show errors.",
    ),
) -> None:
    """langtranslator: Translate locale language files, keeping what is already translated."""
    global _verbose, _quiet
    _verbose = verbose
    _quiet = quiet
    _setup_logging(verbose, quiet)


@app.command()
def translate(
    source: str = typer.Argument(..., help="Source locale (e.g. en)."),
    targets: list[str] = typer.Argument(..., help="Target locales (e.g. zh_TW ja)."),
    overwrite: bool = typer.Option(
        False, "--overwrite",
        help="Retranslate every key, ignoring existing translations.",
    ),
    path: Path | None = typer.Option(
        None, "--path", "-p",
        help="Lang directory holding one folder per locale. Defaults to ./lang.",
    ),
    backend_name: str | None = typer.Option(
        None, "--backend", "-b",
        help="Backend: google-v2, google-v3, dummy.",
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", "-k", help="Google Translate v2 API key.",
    ),
    project_id: str | None = typer.Option(
        None, "--project-id", help="Google Cloud project id (v3).",
    ),
    credentials: Path | None = typer.Option(
        None, "--credentials", help="Service account JSON key file (v3).",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a langtranslator.toml config file.",
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Files translated in parallel.",
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Per-request timeout in seconds.",
    ),
    verify_ssl: bool | None = typer.Option(
        None, "--verify-ssl/--no-verify-ssl", help="Verify the provider's SSL certificate.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run",
        help="Translate but don't write any file.",
    ),
    report: Path | None = typer.Option(
        None, "--report", "-r",
        help="Save report to file (json/md/csv).",
    ),
) -> None:
    """Translate every file of SOURCE into each of TARGETS."""
    from langtranslator.reporting.formatters import save_report
    from langtranslator.reporting.report import RunReport

    settings = _resolve_settings(
        config,
        lang_path=path,
        backend=backend_name,
        api_key=api_key,
        project_id=project_id,
        credentials_path=credentials,
        max_workers=workers,
        timeout=timeout,
        verify_ssl=verify_ssl,
        dry_run=dry_run or None,
    )
    translator = _make_translator(settings)

    rpt = RunReport(
        source_locale=source,
        target_locales=list(targets),
        lang_path=str(settings.lang_path),
        backend=translator.backend_label,
        overwrite=overwrite,
        dry_run=settings.dry_run,
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("•"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
            disable=_quiet,
        ) as progress:
            task = progress.add_task("Translating", total=None)

            def on_progress(phase: str, current: int, total: int, message: str) -> None:
                progress.update(
                    task, completed=current, total=total,
                    description=f"Translating {escape(message)}",
                )

            results = translator.run(source, targets, overwrite, on_progress=on_progress)
    except ConfigurationError as e:
        raise _fail(str(e)) from e
    except (CancelledError, KeyboardInterrupt) as e:
        console.print("[yellow]Cancelled.[/yellow] Files not yet written were left untouched.")
        raise typer.Exit(130) from e

    rpt.finish(results)
    _print_summary(results)

    if settings.dry_run:
        _print("\n[yellow]Dry run: no file written.[/yellow]")
    _print(
        f"\nTranslated [green]{rpt.translated_keys}[/green] keys in"
        f" {rpt.duration_seconds:.1f}s",
        verbose_only=True,
    )

    if report:
        save_report(rpt, report)
        _print(f"Report saved: [cyan]{report}[/cyan]")


@app.command()
def scan(
    source: str = typer.Argument(..., help="Source locale (e.g. en)."),
    targets: list[str] | None = typer.Argument(
        None, help="Target locales to compare against.",
    ),
    path: Path | None = typer.Option(
        None, "--path", "-p",
        help="Lang directory holding one folder per locale. Defaults to ./lang.",
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Count every key as pending.",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a langtranslator.toml config file.",
    ),
) -> None:
    """List SOURCE files and how many keys each target still needs."""
    from langtranslator.backends.dummy import DummyBackend
    from langtranslator.core.langfile import load_lang_file
    from langtranslator.core.tree import leaf_count

    try:
        settings = load_settings(config, lang_path=path)
        # Counting never calls the provider.
        translator = LocaleTranslator(settings, DummyBackend(), "scan")
        files = translator.source_files(source)
        pending = translator.count_pending(source, targets, overwrite) if targets else {}
    except ConfigurationError as e:
        raise _fail(str(e)) from e

    if not files:
        console.print(f"[yellow]No language files in {translator.locale_path(source)}[/yellow]")
        raise typer.Exit()

    console.print(f"Found [green]{len(files)}[/green] files in locale '{escape(source)}'\n")

    table = Table(title=f"Language files in {escape(str(translator.locale_path(source)))}")
    table.add_column("File")
    table.add_column("Keys", justify="right")
    for locale in pending:
        table.add_column(f"Pending {escape(locale)}", justify="right")

    for name, file_path in files.items():
        try:
            keys = str(leaf_count(load_lang_file(file_path)))
        except LangTranslatorError:
            keys = "[red]invalid[/red]"
        row = [escape(name), keys]
        for locale in pending:
            count = pending[locale][name]
            row.append("-" if count is None else str(count))
        table.add_row(*row)

    console.print(table)


@app.command()
def html(
    file: Path = typer.Argument(..., help="HTML file to translate."),
    target: str = typer.Option(..., "--target", "-t", help="Target locale."),
    source: str | None = typer.Option(
        None, "--source", "-s", help="Source locale. Auto-detected if omitted.",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Output file path. Prints to stdout if omitted.",
    ),
    backend_name: str | None = typer.Option(
        None, "--backend", "-b",
        help="Backend: google-v2, google-v3, dummy.",
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", "-k", help="Google Translate v2 API key.",
    ),
    project_id: str | None = typer.Option(
        None, "--project-id", help="Google Cloud project id (v3).",
    ),
    credentials: Path | None = typer.Option(
        None, "--credentials", help="Service account JSON key file (v3).",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a langtranslator.toml config file.",
    ),
) -> None:
    """Translate the text of an HTML document, keeping its markup."""
    from langtranslator.translation.html import HtmlTranslator

    if not file.exists():
        raise _fail(f"File not found: {file}")

    settings = _resolve_settings(
        config,
        backend=backend_name,
        api_key=api_key,
        project_id=project_id,
        credentials_path=credentials,
    )
    try:
        backend, _label = create_backend(settings)
    except (ConfigurationError, ImportError) as e:
        raise _fail(str(e)) from e

    try:
        document = file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise _fail(f"{file} is not UTF-8 encoded: {e.reason}") from e
    except OSError as e:
        raise _fail(f"Cannot read {file}: {e}") from e
    with console.status("Translating..."):
        translated = HtmlTranslator(backend).translate(document, target, source)

    if output is None:
        typer.echo(translated, nl=False)
        return

    output.write_text(translated, encoding="utf-8")
    _print(f"Saved: [cyan]{output}[/cyan]")

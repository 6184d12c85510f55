"""
Command-line interface for the Invoice Extraction Verifier.

Provides the following commands:
- status: Show how many images and expected records are available
- run: Submit invoices to the extraction API and save a report
- reports: List saved reports
- analyze: Summarize a report and export a subset of it
- menu: Interactive menu over the commands above
"""

from pathlib import Path
from typing import Optional

import typer

from .config import VerifierConfig, logger
from .engine import VerificationEngine, format_report_text
from .exceptions import BatchAbortedError, PreconditionError, ReportParseError
from .reports import ReportStore, format_summary_text, partition_results
from .schemas import ExportKind, ReportPartition
from .source import InvoiceSource


# Create Typer app
app = typer.Typer(
    name="invoice-verify",
    help="Verify a document-extraction API against expected invoice values",
    add_completion=False,
)


@app.callback()
def configure(
    ctx: typer.Context,
    token_file: Optional[Path] = typer.Option(
        None, "--token-file", help="JSON file holding the bearer token",
    ),
    expected_file: Optional[Path] = typer.Option(
        None, "--expected-file", help="JSON array of expected records",
    ),
    invoice_dir: Optional[Path] = typer.Option(
        None, "--invoice-dir", help="Directory containing invoice-<n>.jpg images",
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for report files",
    ),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", help="Extraction API endpoint",
    ),
) -> None:
    """Verify a document-extraction API against expected invoice values."""
    ctx.obj = VerifierConfig.from_env(
        token_file=token_file,
        expected_file=expected_file,
        invoice_dir=invoice_dir,
        output_dir=output_dir,
        api_url=api_url,
    )


def _build_engine(config: VerifierConfig) -> VerificationEngine:
    try:
        return VerificationEngine.from_config(config)
    except PreconditionError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)


def _run_batch(engine: VerificationEngine, start: Optional[int], end: Optional[int]) -> None:
    try:
        if start is None and end is None:
            report = engine.run_all()
        else:
            total = engine.source.check_inventory()
            report = engine.run(
                0 if start is None else start,
                total - 1 if end is None else end,
            )
    except PreconditionError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    except BatchAbortedError as e:
        typer.echo(format_report_text(e.results), err=True)
        typer.echo(f"Fatal: {e.message}", err=True)
        typer.echo("No report was saved for this run.", err=True)
        raise typer.Exit(code=2)

    typer.echo(format_report_text(report.results, path=str(report.path)))


def _analyze(store: ReportStore, name: str) -> ReportPartition:
    try:
        report = store.load(name)
    except ReportParseError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_summary_text(report.summary))
    return partition_results(report.results)


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the number of expected records and invoice images."""
    config: VerifierConfig = ctx.obj
    try:
        source = InvoiceSource.from_config(config)
    except PreconditionError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Expected records: {source.expected_count}")
    typer.echo(f"Invoice images:   {source.image_count()}")


@app.command()
def run(
    ctx: typer.Context,
    start: Optional[int] = typer.Option(None, "--start", "-s", help="First index (default 0)"),
    end: Optional[int] = typer.Option(None, "--end", "-e", help="Last index, inclusive (default last)"),
) -> None:
    """
    Submit invoices to the extraction API and compare the responses.

    Runs every invoice unless a range is given. The report is saved to the
    output directory.
    """
    engine = _build_engine(ctx.obj)
    _run_batch(engine, start, end)


@app.command()
def reports(ctx: typer.Context) -> None:
    """List saved reports."""
    names = ReportStore(ctx.obj.output_dir).list_reports()
    if not names:
        typer.echo("No report files found.")
        return
    for number, name in enumerate(names, start=1):
        typer.echo(f"{number} - {name}")


@app.command()
def analyze(
    ctx: typer.Context,
    report: str = typer.Argument(..., help="Report file name in the output directory"),
    export: Optional[ExportKind] = typer.Option(
        None, "--export", "-x", help="Export this subset of the report",
    ),
) -> None:
    """Summarize a report and optionally export a subset of it."""
    store = ReportStore(ctx.obj.output_dir)
    partition = _analyze(store, report)

    if export is not None:
        path = store.export(partition.select(export), report, export)
        typer.echo(f"\n[OK] Results exported to: {path}")


MAIN_MENU = """
===== MAIN MENU =====
1 - Test all invoices
2 - Test a range of invoices
3 - Analyze results
0 - Exit"""

ANALYSIS_MENU = """
===== OPTIONS =====
1 - Analyze another file
2 - Export successes
3 - Export failures
4 - Export errors
5 - Export failures and errors together
6 - Back to main menu
0 - Exit"""

EXPORT_CHOICES = {
    "2": ExportKind.SUCCESS,
    "3": ExportKind.FAILURES,
    "4": ExportKind.ERRORS,
    "5": ExportKind.FAILURES_ERRORS,
}


def _choose_report(store: ReportStore) -> Optional[str]:
    names = store.list_reports()
    if not names:
        typer.echo("No report files found.")
        return None

    typer.echo("\n===== Available Files =====")
    for number, name in enumerate(names, start=1):
        typer.echo(f"{number} - {name}")

    choice = typer.prompt("Choose the file number", type=int)
    if not 1 <= choice <= len(names):
        typer.echo("Invalid option.")
        return None
    return names[choice - 1]


def _analysis_menu(store: ReportStore) -> bool:
    """Returns False when the user asked to exit."""
    while True:
        name = _choose_report(store)
        if name is None:
            return True
        try:
            partition = _analyze(store, name)
        except typer.Exit:
            continue

        while True:
            typer.echo(ANALYSIS_MENU)
            option = typer.prompt("Choose an option").strip()
            if option == "1":
                break
            if option in EXPORT_CHOICES:
                kind = EXPORT_CHOICES[option]
                path = store.export(partition.select(kind), name, kind)
                typer.echo(f"\nResults exported to: {path}")
            elif option == "6":
                return True
            elif option == "0":
                return False
            else:
                typer.echo("Invalid option.")


@app.command()
def menu(ctx: typer.Context) -> None:
    """Interactive menu for running batches and analyzing reports."""
    config: VerifierConfig = ctx.obj
    store = ReportStore(config.output_dir)

    while True:
        try:
            source = InvoiceSource.from_config(config)
            typer.echo(MAIN_MENU)
            typer.echo(f"Expected records: {source.expected_count} | "
                       f"Invoice images: {source.image_count()}")
        except PreconditionError as e:
            typer.echo(f"Warning: {e.message}", err=True)
            typer.echo(MAIN_MENU)

        option = typer.prompt("Enter an option").strip()
        try:
            if option == "1":
                _run_batch(_build_engine(config), None, None)
            elif option == "2":
                start = typer.prompt("Start index", type=int)
                end = typer.prompt("End index", type=int)
                _run_batch(_build_engine(config), start, end)
            elif option == "3":
                if not _analysis_menu(store):
                    break
            elif option == "0":
                break
            else:
                typer.echo("Invalid option.")
        except typer.Exit:
            # Errors were already reported; stay in the menu
            logger.debug("Menu action ended with an error")

    typer.echo("Exiting...")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    typer.echo(f"Invoice Extraction Verifier v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

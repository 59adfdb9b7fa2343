"""CLI for Veg-X integration.

Commands:
    aggregate <records.csv>   - Integrate aggregate organism observations
    individual <records.csv>  - Integrate individual organism observations
    stats <document.json>     - Show entity counts of a document
    methods                   - List predefined measurement methods
"""

from __future__ import annotations

import json
import logging
import warnings
from pathlib import Path
from typing import Annotated, Any

import pandas as pd
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vegx.config import settings
from vegx.document import VegXDocument
from vegx.errors import DuplicateRecordsWarning
from vegx.integration import AggregateStrategy, IndividualStrategy, RecordIntegrator
from vegx.integration.pipeline import IntegrationReport, ObservationStrategy
from vegx.models import EntityKind
from vegx.predefined import available_methods, predefined_measurement_method

app = typer.Typer(
    name="vegx",
    help="Veg-X: integrate vegetation plot records into a Veg-X document",
    no_args_is_help=True,
)
console = Console()

DEFAULT_OUTPUT = Path("vegx.json")

RecordsArg = Annotated[Path, typer.Argument(help="CSV file with one record per row")]
MappingOpt = Annotated[
    Path, typer.Option("--mapping", "-m", help="JSON object mapping roles to CSV columns")
]
MethodsOpt = Annotated[
    Path | None,
    typer.Option(help="JSON object mapping measurement roles to methods or predefined names"),
]
StrataOpt = Annotated[Path | None, typer.Option(help="JSON stratum definition")]
DocumentOpt = Annotated[
    Path | None, typer.Option("--document", "-d", help="Existing document snapshot to extend")
]
OutputOpt = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Where to write the result (default: --document or vegx.json)"),
]
DateFormatOpt = Annotated[str | None, typer.Option(help="strptime format of the date column")]
MissingOpt = Annotated[
    list[str] | None,
    typer.Option("--missing", help="Cell value treated as missing (repeatable)"),
]
QuietOpt = Annotated[bool, typer.Option("--quiet", "-q", help="Only report errors")]


@app.callback()
def configure() -> None:
    """Apply the configured log level."""
    logging.basicConfig(level=settings.log_level.upper())


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _print_report(report: IntegrationReport, output: Path) -> None:
    table = Table(title="Integration Summary")
    table.add_column("Entities")
    table.add_column("Parsed", justify="right")
    table.add_column("New", justify="right")
    for kind, parsed in report.parsed.items():
        if parsed:
            table.add_row(kind.label, str(parsed), str(report.added.get(kind, 0)))
    console.print(table)

    lines = [f"[bold]Records:[/bold] {report.records_parsed}"]
    if report.missing_measurements:
        lines.append(f"[bold]Missing measurements:[/bold] {report.missing_measurements}")
    if report.duplicate_records:
        lines.append(f"[bold]Duplicate records:[/bold] {report.duplicate_records}")
    lines.append(f"[bold]Written to:[/bold] {output}")
    console.print(Panel("\n".join(lines), title="Veg-X Document"))


def _integrate(
    strategy: ObservationStrategy,
    records: Path,
    mapping: Path,
    methods: Path | None,
    strata: Path | None,
    document_path: Path | None,
    output: Path | None,
    date_format: str | None,
    missing: list[str] | None,
    quiet: bool,
) -> None:
    output = output or document_path or DEFAULT_OUTPUT
    try:
        document = (
            VegXDocument.from_json(document_path.read_text(encoding="utf-8"))
            if document_path is not None and document_path.exists()
            else VegXDocument()
        )
        frame = pd.read_csv(records, dtype=str, keep_default_na=False)
        integrator = RecordIntegrator(
            document,
            strategy,
            _read_json(mapping),
            _read_json(methods) if methods else None,
            _read_json(strata) if strata else None,
            date_format=date_format,
            missing_values=missing or None,
            verbose=not quiet,
        )
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", DuplicateRecordsWarning)
            result = integrator.run(frame)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    for warning in caught:
        console.print(f"[yellow]Warning:[/yellow] {warning.message}")

    output.write_text(result.document.to_json(), encoding="utf-8")
    if not quiet:
        _print_report(result.report, output)


@app.command()
def aggregate(
    records: RecordsArg,
    mapping: MappingOpt,
    methods: MethodsOpt = None,
    strata: StrataOpt = None,
    document: DocumentOpt = None,
    output: OutputOpt = None,
    date_format: DateFormatOpt = None,
    missing: MissingOpt = None,
    quiet: QuietOpt = False,
):
    """Integrate aggregate organism observations (cover, frequency...)."""
    _integrate(
        AggregateStrategy(),
        records,
        mapping,
        methods,
        strata,
        document,
        output,
        date_format,
        missing,
        quiet,
    )


@app.command()
def individual(
    records: RecordsArg,
    mapping: MappingOpt,
    methods: MethodsOpt = None,
    strata: StrataOpt = None,
    document: DocumentOpt = None,
    output: OutputOpt = None,
    date_format: DateFormatOpt = None,
    missing: MissingOpt = None,
    quiet: QuietOpt = False,
):
    """Integrate individual organism observations (diameters, heights...)."""
    _integrate(
        IndividualStrategy(),
        records,
        mapping,
        methods,
        strata,
        document,
        output,
        date_format,
        missing,
        quiet,
    )


@app.command()
def stats(
    document_path: Annotated[Path, typer.Argument(help="Document snapshot (JSON)")],
):
    """Show entity counts of a document."""
    try:
        document = VegXDocument.from_json(document_path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] Cannot load {document_path}: {e}")
        raise typer.Exit(1) from None

    table = Table(title=f"Veg-X Document: {document_path.name}")
    table.add_column("Entities")
    table.add_column("Count", justify="right")
    for kind in EntityKind:
        table.add_row(kind.label, str(document.size(kind)))
    console.print(table)

    dangling = document.reference_check()
    if dangling:
        console.print(f"[yellow]{len(dangling)} dangling reference(s):[/yellow]")
        for reference in dangling:
            console.print(f"  • {reference}")


@app.command()
def methods():
    """List predefined measurement methods."""
    table = Table(title="Predefined Methods")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Unit")
    table.add_column("Range")
    for name in available_methods():
        definition = predefined_measurement_method(name)
        attribute = definition.attributes[0] if definition.attributes else None
        unit = attribute.unit if attribute and attribute.unit else ""
        if attribute is None:
            value_range = ""
        else:
            lower = "" if attribute.lower_limit is None else f"{attribute.lower_limit:g}"
            upper = "" if attribute.upper_limit is None else f"{attribute.upper_limit:g}"
            value_range = f"[{lower}, {upper}]"
        table.add_row(name, definition.attribute_type.value, unit, value_range)
    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

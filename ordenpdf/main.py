from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .pipeline.ingest import load_record, load_records
from .pipeline.render_pdf import RenderError
from .pipeline.run import process_record, run_batch

app = typer.Typer(help="Purchase authorization order PDF renderer")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress")) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def render(
    record: Path = typer.Argument(..., help="JSON file with one order record"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    logo: Optional[Path] = typer.Option(None, "--logo", help="Logo image, overrides the default lookup"),
    preview: bool = typer.Option(False, "--preview", help="Also write a PNG preview"),
) -> None:
    if out:
        config.set_out_dir(out)
    try:
        order = load_record(record)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)
    logo_paths = [logo] if logo else None
    try:
        output, warnings = process_record(order, logo_paths=logo_paths, preview=preview)
    except RenderError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(output))
    for warning in warnings:
        typer.echo(f"WARNING: {warning}", err=True)


@app.command()
def build(
    csv: Path = typer.Option(..., "--csv", help="CSV path with one order per row"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    logo: Optional[Path] = typer.Option(None, "--logo", help="Logo image, overrides the default lookup"),
    preview: bool = typer.Option(False, "--preview", help="Also write PNG previews"),
) -> None:
    if out:
        config.set_out_dir(out)
    try:
        records = load_records(csv)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Ingested {len(records)} orders")
    results = run_batch(records, logo_paths=[logo] if logo else None, preview=preview)
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for folio in results["FAILED"]:
        typer.echo(f"FAILED: {folio}")
    if results["FAILED"]:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

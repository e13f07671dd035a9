"""``pact-store`` command line: inspect pact files and dry-run merges."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pact_store import __version__
from pact_store.codec import PactCodec
from pact_store.config import load_settings
from pact_store.exceptions import DecodeError
from pact_store.merge import document_kinds, merge, spec_version_of
from pact_store.models import MessagePact, Pact, RequestResponsePact
from pact_store.store import pact_file_name

console = Console()

app = typer.Typer(
    name="pact-store",
    help="Inspect pact files and check whether two pacts can be merged",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"pact-store {__version__ or 'unknown'}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the pact-store version and exit",
    ),
) -> None:
    """Inspect pact files and check whether two pacts can be merged."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load_document(codec: PactCodec, path: Path) -> dict:
    try:
        return codec.decode(path.read_bytes(), path)
    except OSError as exc:
        console.print(f"[red]Error:[/red] cannot read {path}: {exc}")
        raise typer.Exit(1)
    except DecodeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)


def _interaction_table(pact: Pact) -> Table:
    if isinstance(pact, MessagePact):
        table = Table(title="Messages", show_lines=False)
        table.add_column("Description", style="bold")
        table.add_column("Provider states", style="magenta")
        for message in pact.messages:
            table.add_row(message.description, ", ".join(s.name for s in message.provider_states))
        return table

    table = Table(title="Interactions", show_lines=False)
    table.add_column("Description", style="bold")
    table.add_column("Request", style="cyan")
    table.add_column("Status", justify="right")
    table.add_column("Provider states", style="magenta")
    interactions = pact.interactions if isinstance(pact, RequestResponsePact) else []
    for interaction in interactions:
        table.add_row(
            interaction.description,
            f"{interaction.request.method} {interaction.request.path}",
            str(interaction.response.status),
            ", ".join(s.name for s in interaction.provider_states),
        )
    return table


@app.command()
def show(pact_file: Path = typer.Argument(..., help="Pact JSON file to display")) -> None:
    """Display the consumer, provider and interactions of a pact file."""
    codec = PactCodec()
    document = _load_document(codec, pact_file)
    try:
        pact = codec.load_pact(document, pact_file)
    except DecodeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    summary = (
        f"[bold]Consumer:[/bold] {pact.consumer.name}\n"
        f"[bold]Provider:[/bold] {pact.provider.name}\n"
        f"[bold]Specification:[/bold] {spec_version_of(document) or '[dim]not set[/dim]'}"
    )
    console.print(Panel(summary, title=str(pact_file), border_style="cyan"))
    console.print(_interaction_table(pact))


@app.command()
def check(
    existing: Path = typer.Argument(..., help="Pact file already on disk"),
    incoming: Path = typer.Argument(..., help="Pact file that would be merged into it"),
) -> None:
    """Dry-run a merge of INCOMING into EXISTING without writing anything."""
    codec = PactCodec()
    existing_doc = _load_document(codec, existing)
    incoming_doc = _load_document(codec, incoming)

    result = merge(existing_doc, incoming_doc, existing)
    if not result.ok:
        console.print(f"[red]Conflict:[/red] {result.message}")
        raise typer.Exit(1)

    merged = result.document or {}
    for kind in document_kinds(merged):
        console.print(
            f"[green]Merge OK:[/green] {len(existing_doc.get(kind.value) or [])} existing + "
            f"{len(incoming_doc.get(kind.value) or [])} incoming -> "
            f"{len(merged.get(kind.value) or [])} {kind.value}"
        )


@app.command()
def path(
    consumer: str = typer.Argument(..., help="Consumer name"),
    provider: str = typer.Argument(..., help="Provider name"),
    pact_dir: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Pact directory (defaults to the configured pact_dir)"
    ),
) -> None:
    """Print the file a consumer/provider pact is written to."""
    directory = pact_dir if pact_dir is not None else load_settings().pact_dir
    console.print(str(directory / pact_file_name(consumer, provider)), soft_wrap=True, highlight=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

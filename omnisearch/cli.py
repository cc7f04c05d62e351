"""Command-line interface for OmniSearch."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from omnisearch.config import Config
from omnisearch.dispatch import BrowserDelegate, build_request
from omnisearch.engine import OpenSearchEngine
from omnisearch.models import Descriptor
from omnisearch.reader import OpenSearchReader


console = Console()


def load_descriptor(path: Path) -> Descriptor:
    """Read a description file, exiting with an error if it's unusable."""
    reader = OpenSearchReader()
    descriptor = reader.read(path)

    if reader.has_error():
        console.print(f"[red]Error: {reader.error_string}[/red]")
        sys.exit(1)

    if not descriptor.is_valid():
        console.print("[red]The OpenSearch description is invalid.[/red]")
        sys.exit(1)

    return descriptor


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """OmniSearch - OpenSearch descriptions on the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = Config.load()
    config.apply()
    ctx.obj = config


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(path: Path) -> None:
    """Show the contents of a description file."""
    descriptor = load_descriptor(path)

    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Name", descriptor.name)
    table.add_row("Description", descriptor.description or "[dim]-[/dim]")
    table.add_row("Tags", ", ".join(descriptor.tags) or "[dim]-[/dim]")
    table.add_row("Image", descriptor.image_url[:80] or "[dim]-[/dim]")

    for label, url_template in (
        ("Search", descriptor.search),
        ("Suggestions", descriptor.suggestions),
    ):
        if url_template.is_empty():
            table.add_row(label, "[dim]-[/dim]")
            continue
        table.add_row(label, f"{url_template.http_method} {url_template.template}")
        for key, value in url_template.parameters:
            table.add_row("", f"[dim]{key}={value}[/dim]")

    console.print(table)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("term")
@click.option("--suggestions", is_flag=True, help="Print the suggestions URL instead")
def url(path: Path, term: str, suggestions: bool) -> None:
    """Print the URL for a search term."""
    descriptor = load_descriptor(path)

    if suggestions:
        if not descriptor.provides_suggestions:
            console.print("[yellow]This engine does not provide suggestions.[/yellow]")
            sys.exit(1)
        click.echo(descriptor.suggestions_url(term))
    else:
        click.echo(descriptor.search_url(term))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("term")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for suggestions")
@click.pass_obj
def suggest(config: Config, path: Path, term: str, timeout: float | None) -> None:
    """Fetch contextual suggestions for a search term."""
    descriptor = load_descriptor(path)

    if not descriptor.provides_suggestions:
        console.print("[yellow]This engine does not provide suggestions.[/yellow]")
        sys.exit(1)

    received = asyncio.run(_suggest(config, descriptor, term, timeout or config.timeout))

    if not received:
        click.echo("No suggestions.")
    else:
        click.echo("\n".join(received))


async def _suggest(
    config: Config, descriptor: Descriptor, term: str, timeout: float
) -> list[str] | None:
    received: list[list[str]] = []

    async with config.create_client() as client:
        async with OpenSearchEngine(descriptor, client=client) as engine:
            engine.on_suggestions(received.append)
            task = engine.request_suggestions(term)
            if task is None:
                return None
            try:
                await asyncio.wait_for(task, timeout)
            except asyncio.TimeoutError:
                console.print(f"[yellow]No response within {timeout:g}s[/yellow]")

    return received[0] if received else None


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("term")
@click.option("--open", "open_browser", is_flag=True, help="Open the results in a browser")
def search(path: Path, term: str, open_browser: bool) -> None:
    """Build the search request for a term."""
    descriptor = load_descriptor(path)

    if open_browser:
        engine = OpenSearchEngine(descriptor, delegate=BrowserDelegate())
        try:
            engine.request_search_results(term)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        return

    request = build_request(descriptor.search, term)
    console.print(f"[bold]{request.method}[/bold] {request.url}")
    if request.body:
        console.print(f"[dim]Body:[/dim] {request.body.decode('utf-8')}")


if __name__ == "__main__":
    main()

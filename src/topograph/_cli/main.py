import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from topograph._config import get_config
from topograph._document import export_sort_result, load_graph_document, sort_result_to_dict
from topograph._errors import ConfigError, DocumentError
from topograph._graph import TopologicalCollection

from .render import render_failure, render_node_detail, render_node_table, render_order, render_summary

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

GraphFile = Annotated[
    Path,
    typer.Argument(help="Path to a TOML graph document", exists=True, dir_okay=False),
]
IgnoreCase = Annotated[
    bool | None,
    typer.Option(
        "--ignore-case/--match-case",
        help="Compare values case-insensitively (default from [tool.topograph])",
    ),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Topograph CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_collection(path: Path, ignore_case: bool | None) -> TopologicalCollection[str]:
    """Load a graph document into a collection, exiting with code 2 on errors."""
    try:
        if ignore_case is None:
            ignore_case = get_config().ignore_case
        document = load_graph_document(path)
    except (ConfigError, DocumentError) as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=2) from e

    logger.debug(f"Building collection from {path} (ignore_case={ignore_case})")
    return document.to_collection(ignore_case=ignore_case)


@app.command()
def sort(
    path: GraphFile,
    *,
    ignore_case: IgnoreCase = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON on stdout"),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Also write the result to a TOML file"),
    ] = None,
) -> None:
    """Print the values of a graph in dependency order."""
    collection = _load_collection(path, ignore_case)
    result = collection.sort()

    if as_json:
        out_console.print_json(json.dumps(sort_result_to_dict(result)))
    elif result.success:
        render_order(result, out_console)
    else:
        render_failure(result, err_console)

    if output is not None:
        export_sort_result(result, output)
        err_console.print(f"[cyan]Exported result to:[/cyan] {output}")

    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def roots(
    path: GraphFile,
    *,
    ignore_case: IgnoreCase = None,
) -> None:
    """List the values that depend on nothing."""
    collection = _load_collection(path, ignore_case)
    render_node_table(collection.roots(), out_console, title="Root")


@app.command()
def show(
    path: GraphFile,
    value: Annotated[str, typer.Argument(help="The value to describe")],
    *,
    ignore_case: IgnoreCase = None,
) -> None:
    """Show the direct ancestors and dependents of one value."""
    collection = _load_collection(path, ignore_case)
    node = collection.find(value)
    if node is None:
        err_console.print(f"[red]✗ '{escape(value)}' is not in the graph[/red]")
        raise typer.Exit(code=1)

    render_node_detail(node, out_console)


@app.command()
def check(
    path: GraphFile,
    *,
    ignore_case: IgnoreCase = None,
) -> None:
    """Check that a graph can be sorted."""
    collection = _load_collection(path, ignore_case)
    render_summary(collection, err_console)

    result = collection.sort()
    if not result.success:
        render_failure(result, err_console)
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Graph can be sorted[/green]")


def main() -> None:
    app()

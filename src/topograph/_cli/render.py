"""Rich rendering utilities for the command line."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from rich.console import Console

    from topograph._graph import Node, SortResult, TopologicalCollection


def _label(value: object) -> str:
    return escape(str(value))


def render_order(result: SortResult[Any], console: Console) -> None:
    """Render a successful sort as a numbered table.

    Args:
        result: A successful SortResult.
        console: Rich Console to output to.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Value", style="bold")

    for index, value in enumerate(result.order or (), start=1):
        table.add_row(str(index), _label(value))

    console.print(table)


def render_failure(result: SortResult[Any], console: Console) -> None:
    """Render why a sort failed, including unresolved dependencies.

    Args:
        result: A failed SortResult.
        console: Rich Console to output to.

    """
    console.print(f"[red]✗ Sort failed:[/red] {result.failure}")
    if not result.remaining_edges:
        return

    table = Table(show_header=True, header_style="bold red", box=None)
    table.add_column("Ancestor")
    table.add_column("")
    table.add_column("Dependent")
    for edge in result.remaining_edges:
        table.add_row(_label(edge.ancestor.value), "→", _label(edge.dependent.value))

    console.print(Panel(table, title="[bold]Unresolved dependencies[/bold]", border_style="red"))


def render_node_table(nodes: list[Node[Any]], console: Console, *, title: str) -> None:
    """Render a list of nodes with their neighbour counts.

    Args:
        nodes: Nodes to render.
        console: Rich Console to output to.
        title: Column title for the node values.

    """
    if not nodes:
        console.print("[dim]No nodes[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column(title, style="bold")
    table.add_column("Ancestors", justify="right")
    table.add_column("Dependents", justify="right")

    for node in nodes:
        table.add_row(_label(node.value), str(len(node.ancestors)), str(len(node.dependents)))

    console.print(table)
    console.print(f"\n[dim]Total: {len(nodes)} nodes[/dim]")


def render_node_detail(node: Node[Any], console: Console) -> None:
    """Render one node with its direct ancestors and dependents.

    Args:
        node: The node to describe.
        console: Rich Console to output to.

    """
    tree = Tree(f"[bold]{_label(node.value)}[/bold]")

    ancestors = node.ancestors
    branch = tree.add(f"[cyan]Ancestors ({len(ancestors)})[/cyan]")
    for ancestor in ancestors:
        branch.add(_label(ancestor.value))

    dependents = node.dependents
    branch = tree.add(f"[cyan]Dependents ({len(dependents)})[/cyan]")
    for dependent in dependents:
        branch.add(_label(dependent.value))

    console.print(tree)


def render_summary(collection: TopologicalCollection[Any], console: Console) -> None:
    """Render a summary panel for a collection.

    Args:
        collection: The collection to summarize.
        console: Rich Console to output to.

    """
    result = collection.sort()

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Nodes", str(len(collection)))
    table.add_row("Dependencies", str(len(collection.edges)))
    table.add_row("Roots", str(len(collection.roots())))
    table.add_row("Leaves", str(len(collection.leaves())))
    status = "[green]acyclic[/green]" if result.success else f"[red]{result.failure}[/red]"
    table.add_row("Status", status)

    console.print(Panel(table, title="[bold]Graph[/bold]", border_style="cyan"))

"""Rich console utilities for the lazi CLI."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from lazi.domain.models import (
    AssembledScript,
    BatchEndPayload,
    BatchStartPayload,
    BatchStepPayload,
    CustomNode,
    EventEndPayload,
    EventFamily,
    EventStartPayload,
    EventStepPayload,
    LogRecord,
    SinglePayload,
    WorkflowGraph,
)

# Shared console instances
console = Console()
error_console = Console(stderr=True)

_LEXERS = {"powershell": "powershell", "bash": "bash"}


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print a styled header panel."""
    content = Text(title, style="bold blue")
    if subtitle:
        content.append(f"\n{subtitle}", style="dim")
    console.print(Panel(content, expand=False))


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_warning(message: str) -> None:
    error_console.print(Text(message, style="yellow"))


def print_success(message: str) -> None:
    """Print success message."""
    console.print(Panel(Text(message), title="Success", border_style="green"))


def print_failure(message: str, details: str | None = None) -> None:
    """Print failure message."""
    content = Text(message, style="bold red")
    if details:
        content.append(f"\n{details}", style="dim")
    console.print(Panel(content, title="Failed", border_style="red"))


def print_script(script: AssembledScript | str, script_type: str | None = None) -> None:
    """Print script text with highlighting, framed by rules."""
    if isinstance(script, AssembledScript):
        text, script_type = script.text, script.script_type
    else:
        text = script
    console.print(Rule(style="dim"))
    console.print(Syntax(text, _LEXERS.get(script_type or "", "text"), word_wrap=True))
    console.print(Rule(style="dim"))


def _status(record: LogRecord) -> str:
    p = record.payload
    if isinstance(p, (SinglePayload, EventEndPayload)):
        return str(p.exit_code)
    if isinstance(p, BatchStepPayload):
        return "ok" if p.success else "failed"
    if isinstance(p, BatchEndPayload):
        return f"{p.successful}/{p.total_commands}"
    return ""


def print_records(records: Sequence[LogRecord], title: str | None = None) -> None:
    """Print records as a table: id, time, kind, name, status."""
    table = Table(title=title, show_header=True, box=None)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Time", style="dim")
    table.add_column("Kind", style="magenta")
    table.add_column("Name")
    table.add_column("Exit", justify="right")
    for record in records:
        table.add_row(
            f"Log-{record.log_id}",
            record.timestamp,
            record.kind.value,
            Text(record.name),
            _status(record),
        )
    console.print(table)


def print_record_text(records: Sequence[LogRecord]) -> None:
    """Print records in their stored text form."""
    for record in records:
        console.print(record.raw.rstrip(), markup=False, highlight=False)
        console.print("---", style="dim")


def print_events(events: Sequence[LogRecord], total: int) -> None:
    console.print(
        f"\n[bold]Showing last {len(events)} of {total} events:[/bold]\n"
    )
    for event in events:
        p = event.payload
        console.print(f"[cyan]{escape(f'[Event-{event.log_id}]')}[/cyan] [bold]{escape(event.name)}[/bold]")
        if isinstance(p, EventStartPayload):
            console.print(f"  [dim]Type: {escape(p.script_type or 'unknown')} | Steps: {p.total_steps}[/dim]")
        elif isinstance(p, BatchStartPayload):
            console.print(f"  [dim]Type: batch | Commands: {p.total_commands}[/dim]")


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


def print_family(family: EventFamily, with_code: bool = False) -> None:
    """Print an event: start details, each step (optionally with code), end."""
    start = family.start
    print_header(f"Event-{start.log_id}: {start.name}", start.timestamp)
    if isinstance(start.payload, EventStartPayload):
        console.print(
            f"[green]▶ EVENT START[/green] type={start.payload.script_type} "
            f"steps={start.payload.total_steps}"
        )
    else:
        console.print("[green]▶ BATCH START[/green]")
    if start.session is not None:
        console.print(f"  [dim]Session {start.session.session_id} in {escape(start.session.working_dir)}[/dim]")

    for step in family.steps:
        p = step.payload
        console.print(f"[yellow]  Step {step.step_number}: {escape(step.name)}[/yellow] [dim](Log-{step.log_id})[/dim]")
        if isinstance(p, BatchStepPayload):
            state = "[green]Success[/green]" if p.success else "[red]Failed[/red]"
            console.print(f"    {escape(p.command)}  exit={p.exit_code} {state}")
            if p.error:
                console.print(Text(f"    {p.error}", style="red"))
        elif isinstance(p, EventStepPayload) and with_code and p.step_code:
            console.print(Text(_indent(p.step_code, "    "), style="white"))

    end = family.end
    if end is None:
        console.print("[yellow]■ EVENT OPEN[/yellow] [dim](no end record)[/dim]")
        return
    p = end.payload
    if isinstance(p, EventEndPayload):
        style = "green" if p.exit_code == 0 else "red"
        console.print(
            f"[blue]■ EVENT END[/blue] exit=[{style}]{p.exit_code}[/{style}] "
            f"duration={p.duration:.2f}s"
        )
        if p.stdout:
            console.print(Panel(Text(p.stdout), title="Output", border_style="dim"))
        if p.stderr:
            console.print(Panel(Text(p.stderr), title="Errors", border_style="red"))
    elif isinstance(p, BatchEndPayload):
        console.print(
            f"[blue]■ BATCH END[/blue] {p.successful} succeeded, {p.failed} failed "
            f"in {p.duration:.2f}s"
        )


def print_step(step: LogRecord) -> None:
    p = step.payload
    if not isinstance(p, EventStepPayload):
        return
    print_header(f"Step Details for Log-{step.log_id}")
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Step Number", str(p.step_number))
    table.add_row("Step Name", Text(p.step_name))
    table.add_row("Parent Event", str(step.parent_id) if step.parent_id is not None else "?")
    console.print(table)
    if p.step_code:
        console.print("\n[bold green]Generated Code:[/bold green]")
        console.print(Text(p.step_code))
    else:
        console.print("[yellow]No code stored for this step[/yellow]")
    if step.parent_id is not None:
        console.print(f"\n[dim]View parent event: lazi event {step.parent_id}[/dim]")


def print_workflow(graph: WorkflowGraph, order: Sequence[str]) -> None:
    """Print a workflow's nodes in execution order."""
    print_header(f"Workflow: {graph.name}", graph.description or None)
    table = Table(show_header=True, box=None)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Node")
    table.add_column("Operation", style="magenta")
    table.add_column("Kind", style="dim")
    for position, node_id in enumerate(order, start=1):
        node = graph.node(node_id)
        if node is None:
            continue
        table.add_row(str(position), Text(node.display_name), node.operation, node.operation_kind.value)
    console.print(table)
    branch_edges = [e for e in graph.edges if e.source_handle]
    if branch_edges:
        console.print("\n[bold]Branches:[/bold]")
        for edge in branch_edges:
            console.print(Text(f"  {edge.source} [{edge.source_handle}] -> {edge.target}"))


def print_custom_nodes(nodes: Sequence[CustomNode]) -> None:
    table = Table(show_header=True, box=None)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Generators", style="dim")
    for node in nodes:
        table.add_row(node.node_id, Text(node.name), node.category, ", ".join(node.generators))
    console.print(table)


def print_custom_node(node: CustomNode) -> None:
    print_header(node.name, node.description or None)
    console.print(f"[cyan]ID:[/cyan] {escape(node.node_id)}")
    if node.category:
        console.print(f"[cyan]Category:[/cyan] {escape(node.category)}")
    if node.tags:
        console.print(f"[cyan]Tags:[/cyan] {escape(', '.join(node.tags))}")
    if node.fields:
        console.print("\n[bold]Fields:[/bold]")
        for field in node.fields:
            default = "" if field.default is None else f" (default: {field.default})"
            console.print(Text(f"  {field.key}: {field.field_type}{default}"))
    if node.output_handles:
        console.print("\n[bold]Output handles:[/bold]")
        for handle in node.output_handles:
            console.print(Text(f"  {handle.handle_id}  {handle.label}"))
    for script_type, source in node.generators.items():
        console.print(f"\n[bold]Generator ({escape(script_type)}):[/bold]")
        console.print(Text(source))

"""Click command group for the lazi CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from rich.text import Text

from lazi.application import build_script_from_steps
from lazi.application.event_logger import local_timestamp
from lazi.cli.app import LaziApp, build_app
from lazi.cli.console import (
    console,
    print_custom_node,
    print_custom_nodes,
    print_error,
    print_events,
    print_failure,
    print_family,
    print_record_text,
    print_records,
    print_script,
    print_step,
    print_success,
    print_warning,
    print_workflow,
)
from lazi.config import load_settings
from lazi.domain.exceptions import CustomNodeNotFoundError, LaziError, MissingParametersError
from lazi.domain.workflow import linearize
from lazi.logging_setup import setup_logging

logger = logging.getLogger(__name__)

PASSTHROUGH_KEY = "lazi.passthrough"
SCRIPT_TYPES = click.Choice(["powershell", "bash"], case_sensitive=False)


class LaziGroup(click.Group):
    """Root group: every LaziError becomes an error panel and exit status 1."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except MissingParametersError as e:
            usage = " ".join(f"<{p}>" for p in e.required)
            print_error(str(e), hint=f"Usage: lazi run {e.command} {usage}")
            ctx.exit(1)
        except LaziError as e:
            print_error(str(e))
            ctx.exit(1)


class PassthroughCommand(click.Command):
    """Keeps everything after ``--`` verbatim in ``ctx.meta``."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if "--" in args:
            split = args.index("--")
            ctx.meta[PASSTHROUGH_KEY] = args[split + 1 :]
            args = args[:split]
        return super().parse_args(ctx, args)


pass_app = click.make_pass_decorator(LaziApp)


def _report_logged(log_id: int | None, log: bool) -> None:
    if not log:
        return
    if log_id is None:
        print_warning("Execution could not be written to the log")
    else:
        console.print(f"[dim]Logged as Log-{log_id}[/dim]")


def _write_output(path: str, text: str) -> None:
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError as e:
        print_error(f"Error writing file: {e}")
        raise click.exceptions.Exit(1) from e
    print_success(f"Script written to {path}")


@click.group(cls=LaziGroup)
@click.version_option(package_name="lazi")
@click.option(
    "--storage-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory holding the log, counter, workflows and catalogs",
)
@click.option(
    "--allow-code",
    is_flag=True,
    help="Enable executable (function-form) node generators",
)
@click.option("--log-file", default=None, type=click.Path(), help="Path to diagnostic log file")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (DEBUG) logging to console")
@click.pass_context
def cli(
    ctx: click.Context,
    storage_dir: str | None,
    allow_code: bool | None,
    log_file: str | None,
    verbose: bool,
) -> None:
    """lazi: run commands, keep an execution log, build scripts from workflows."""
    setup_logging(verbose=verbose, log_file=log_file)
    if isinstance(ctx.obj, LaziApp):
        return
    settings = load_settings(storage_dir=storage_dir, allow_code=allow_code or None)
    logger.debug("Storage directory: %s", settings.storage_dir)
    ctx.obj = build_app(settings)


# =============================================================================
# COMMAND EXECUTION
# =============================================================================


@cli.command(cls=PassthroughCommand, context_settings={"ignore_unknown_options": True})
@click.argument("name")
@click.argument("params", nargs=-1, type=click.UNPROCESSED)
@click.option("-s", "--show", is_flag=True, help="Show the command before executing")
@click.option("--no-log", is_flag=True, help="Skip logging this execution")
@click.pass_context
@pass_app
def run(app: LaziApp, ctx: click.Context, name: str, params: tuple[str, ...], show: bool, no_log: bool) -> None:
    """Execute a registered command.

    PARAMS are key=value or positional values; arguments after -- are
    passed to the command as-is.
    """
    passthrough = ctx.meta.get(PASSTHROUGH_KEY)
    if show:
        command = app.commands.prepare_run(name, params, passthrough)
        console.print(Text(f"Running: {command}", style="dim"))
    outcome = app.commands.run(name, params, passthrough, log=not no_log)
    _report_logged(outcome.log_id, not no_log)
    ctx.exit(outcome.exit_code)


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option("--no-log", is_flag=True, help="Skip logging this execution")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
@pass_app
def quick(app: LaziApp, ctx: click.Context, no_log: bool, command: tuple[str, ...]) -> None:
    """Run an ad-hoc command without registering it."""
    outcome = app.commands.quick(command, log=not no_log)
    _report_logged(outcome.log_id, not no_log)
    ctx.exit(outcome.exit_code)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("log_id", type=int)
@click.argument("params", nargs=-1, type=click.UNPROCESSED)
@click.option("--no-log", is_flag=True, help="Skip logging this execution")
@click.pass_context
@pass_app
def rerun(app: LaziApp, ctx: click.Context, log_id: int, params: tuple[str, ...], no_log: bool) -> None:
    """Re-execute a logged command or a logged workflow script."""
    outcome = app.commands.rerun(log_id, params, log=not no_log)
    if outcome.note:
        print_warning(outcome.note)
    _report_logged(outcome.log_id, not no_log)
    ctx.exit(outcome.exit_code)


# =============================================================================
# LOG INSPECTION
# =============================================================================


@cli.command()
@click.option("-n", "--count", default=20, type=int, show_default=True, help="Number of recent entries")
@click.option("-s", "--search", default=None, help="Case-insensitive text search")
@click.option("--session", default=None, help="Only entries from this session id")
@click.option("-c", "--clear", is_flag=True, help="Delete the log and reset the id counter")
@click.option("--table", is_flag=True, help="Summary table instead of full entries")
@pass_app
def logs(
    app: LaziApp,
    count: int,
    search: str | None,
    session: str | None,
    clear: bool,
    table: bool,
) -> None:
    """View command execution logs."""
    if clear:
        app.store.clear()
        print_success("Logs cleared")
        return

    if session:
        records = app.queries.search_session(session)
        heading = f"Log entries for session {session}"
        empty = f"No logs found for session '{session}'"
    elif search:
        records = app.queries.search_text(search)
        heading = "Matching log entries"
        empty = f"No logs found matching '{search}'"
    else:
        records = app.queries.recent(count)
        total = app.queries.count()
        heading = f"Showing last {len(records)} of {total} log entries"
        empty = "No logs found. Run some commands to see logs here."

    if not records:
        console.print(Text(empty, style="yellow"))
        return
    if table:
        print_records(records, title=heading)
    else:
        console.print(Text(f"\n{heading}:\n", style="bold"))
        print_record_text(records)


@cli.command()
@click.option("-n", "--count", default=20, type=int, show_default=True, help="Number of recent events")
@pass_app
def events(app: LaziApp, count: int) -> None:
    """List script and batch events, newest first."""
    starts = app.queries.list_events()
    if not starts:
        console.print("[yellow]No events found. Run a workflow or a batch to see events here.[/yellow]")
        return
    print_events(starts[:count] if count > 0 else starts, total=len(starts))


@cli.command()
@click.argument("event_id", type=int)
@click.option("--with-code", is_flag=True, help="Display the code stored for each step")
@pass_app
def event(app: LaziApp, event_id: int, with_code: bool) -> None:
    """Show one event with all of its steps."""
    print_family(app.queries.get_family(event_id), with_code=with_code)


@cli.command()
@click.argument("log_id", type=int)
@pass_app
def step(app: LaziApp, log_id: int) -> None:
    """Show one workflow step and its stored code."""
    print_step(app.queries.get_step(log_id))


def _parse_ids(ctx: click.Context, param: click.Parameter, value: str) -> list[int]:
    try:
        ids = [int(part.strip()) for part in value.split(",") if part.strip()]
    except ValueError as e:
        raise click.BadParameter("all step ids must be numbers, e.g. 191,192,195") from e
    if not ids:
        raise click.BadParameter("at least one step id is required")
    return ids


@cli.command()
@click.option(
    "--from-steps",
    "step_ids",
    required=True,
    callback=_parse_ids,
    help="Comma-separated step log ids, e.g. 191,192,195",
)
@click.option("--type", "script_type", type=SCRIPT_TYPES, default=None, help="Script type (default: first step's event)")
@click.option("--name", default=None, help="Script name for the header comment")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
@pass_app
def build(
    app: LaziApp,
    ctx: click.Context,
    step_ids: list[int],
    script_type: str | None,
    name: str | None,
    output: str | None,
) -> None:
    """Combine the code of recorded workflow steps into one script."""
    result = build_script_from_steps(
        app.queries,
        step_ids,
        script_type=script_type,
        name=name,
        default_type=app.settings.default_script_type,
        generated_at=local_timestamp(),
    )
    for skipped in result.skipped:
        print_warning(f"Log-{skipped}: no code stored (skipping)")
    if result.mixed_types:
        print_warning(
            f"Steps have different script types: {', '.join(result.mixed_types)}; "
            f"using {result.script.script_type} (override with --type)"
        )
    if not result.script.sections:
        print_failure("No valid steps found with code. Nothing to build.")
        ctx.exit(1)

    if output:
        _write_output(output, result.script.text)
    else:
        print_script(result.script)


# =============================================================================
# WORKFLOWS
# =============================================================================


@cli.group()
def workflow() -> None:
    """Build and run saved workflows."""


@workflow.command("list")
@pass_app
def workflow_list(app: LaziApp) -> None:
    """List saved workflows."""
    names = app.workflows.list_names()
    if not names:
        console.print(Text(f"No workflows in {app.settings.workflows_dir}", style="yellow"))
        return
    for name in names:
        console.print(f"  {name}")


@workflow.command("show")
@click.argument("name")
@pass_app
def workflow_show(app: LaziApp, name: str) -> None:
    """Show a workflow's nodes in execution order."""
    graph = app.workflows.load(name)
    print_workflow(graph, linearize(graph))


@workflow.command("build")
@click.argument("name")
@click.option("--type", "script_type", type=SCRIPT_TYPES, default=None, help="Script type")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@pass_app
def workflow_build(app: LaziApp, name: str, script_type: str | None, output: str | None) -> None:
    """Assemble a workflow into a script without running it."""
    script = app.workflow_executor.build(name, script_type)
    if output:
        _write_output(output, script.text)
    else:
        print_script(script)


@workflow.command("run")
@click.argument("name")
@click.option("--type", "script_type", type=SCRIPT_TYPES, default=None, help="Script type")
@click.option("--show", is_flag=True, help="Print the assembled script before running")
@click.option("--no-log", is_flag=True, help="Skip recording the run as an event")
@click.pass_context
@pass_app
def workflow_run(
    app: LaziApp,
    ctx: click.Context,
    name: str,
    script_type: str | None,
    show: bool,
    no_log: bool,
) -> None:
    """Assemble a workflow and execute it as one script."""
    script = app.workflow_executor.build(name, script_type)
    if show:
        print_script(script)
    execution = app.workflow_executor.run(name, log=not no_log, script=script)
    if not no_log and execution.event_id is None:
        print_warning("Workflow run could not be written to the log")

    summary = f"{name}: exit {execution.result.exit_code} in {execution.duration:.2f}s"
    if execution.event_id is not None:
        summary += f" (Event-{execution.event_id})"
    if execution.result.exit_code == 0:
        print_success(summary)
    else:
        print_failure(summary, execution.result.error)
    ctx.exit(execution.result.exit_code)


# =============================================================================
# CUSTOM NODES
# =============================================================================


@cli.group()
def node() -> None:
    """Inspect the custom-node catalog."""


@node.command("list")
@click.option("--category", default=None, help="Only nodes in this category")
@pass_app
def node_list(app: LaziApp, category: str | None) -> None:
    """List custom nodes."""
    nodes = [
        n for n in app.catalog.list_nodes() if category is None or n.category == category
    ]
    if not nodes:
        console.print("[yellow]No custom nodes found[/yellow]")
        return
    print_custom_nodes(nodes)


@node.command("show")
@click.argument("node_id")
@pass_app
def node_show(app: LaziApp, node_id: str) -> None:
    """Show a custom node's fields, handles and generators."""
    custom = app.catalog.get(node_id)
    if custom is None:
        raise CustomNodeNotFoundError(node_id)
    print_custom_node(custom)

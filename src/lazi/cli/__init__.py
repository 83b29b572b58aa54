"""
Command-line interface for lazi.

``main`` is the console entry point. Arguments containing the batch
separator (``THEN`` unless configured) are split into sub-invocations,
each run as its own ``lazi`` process and recorded as one batch event;
anything else goes straight to the click group. Group options given
before the first sub-command apply to the whole batch.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

import click
from rich.text import Text

from lazi.application.batch import DEFAULT_SEPARATOR, split_batch_commands
from lazi.cli.app import build_app
from lazi.cli.commands import cli
from lazi.cli.console import console, print_error, print_failure, print_success
from lazi.config import load_settings
from lazi.domain.exceptions import ConfigurationError
from lazi.logging_setup import setup_logging


def split_global_options(
    args: Sequence[str],
) -> tuple[list[str], dict[str, Any], list[str]]:
    """
    Peel the group's own options off the front of args.

    Option names come from the click group, so ``--storage-dir X``,
    ``--storage-dir=X``, ``--allow-code``, ``--log-file`` and ``-v`` are
    recognised; scanning stops at the first other token.

    Returns:
        (option tokens as given, values by parameter name, remaining args)
    """
    flags: dict[str, str] = {}
    valued: dict[str, str] = {}
    for param in cli.params:
        if not isinstance(param, click.Option) or not param.expose_value:
            continue
        target = flags if param.is_flag else valued
        for opt in (*param.opts, *param.secondary_opts):
            target[opt] = param.name or opt

    tokens: list[str] = []
    values: dict[str, Any] = {}
    i = 0
    while i < len(args):
        token = args[i]
        name, has_value, inline = token.partition("=")
        if token in flags:
            values[flags[token]] = True
            tokens.append(token)
            i += 1
        elif has_value and name in valued:
            values[valued[name]] = inline
            tokens.append(token)
            i += 1
        elif token in valued and i + 1 < len(args):
            values[valued[token]] = args[i + 1]
            tokens.extend(args[i : i + 2])
            i += 2
        else:
            break
    return tokens, values, list(args[i:])


def run_batches(
    batches: Sequence[Sequence[str]],
    global_options: Sequence[str] = (),
) -> int:
    """Run each sub-invocation in turn; returns 0 only if all succeeded."""
    _, values, _ = split_global_options(global_options)
    setup_logging(verbose=bool(values.get("verbose")), log_file=values.get("log_file"))
    try:
        settings = load_settings(
            storage_dir=values.get("storage_dir"),
            allow_code=values.get("allow_code"),
        )
    except ConfigurationError as e:
        print_error(str(e))
        return 1

    orchestrator = build_app(settings).batch_orchestrator(global_options)
    console.print(f"[bold cyan]Executing {len(batches)} commands in sequence...[/bold cyan]")

    def announce(number: int, total: int, tokens: Sequence[str]) -> None:
        console.print(Text(f"\n[{number}/{total}] lazi {' '.join(tokens)}", style="cyan"))

    result = orchestrator.run_batch(batches, on_step=announce)
    summary = (
        f"{result.successful}/{result.total} commands succeeded "
        f"in {result.duration:.2f}s"
    )
    if result.event_id is not None:
        summary += f" (Event-{result.event_id})"
    if result.failed:
        print_failure(summary, f"{result.failed} failed")
    else:
        print_success(summary)
    return result.exit_code


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the ``lazi`` console script."""
    args = list(sys.argv[1:] if argv is None else argv)
    global_options, _, command_args = split_global_options(args)
    batches = split_batch_commands(command_args, _batch_separator())
    if len(batches) > 1:
        sys.exit(run_batches(batches, global_options))
    cli.main(args=args, prog_name="lazi")


def _batch_separator() -> str:
    try:
        return load_settings().batch_separator
    except ConfigurationError:
        # reported by the command itself
        return DEFAULT_SEPARATOR


__all__ = ["cli", "main", "run_batches", "split_global_options"]

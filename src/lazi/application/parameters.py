"""Parameter binding for registered commands (``{name}`` placeholders)."""

import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence

from lazi.domain.exceptions import MissingParametersError
from lazi.domain.models import RegisteredCommand

ARGS_PLACEHOLDER = "{args}"


def parse_parameters(values: Sequence[str], parameters: Sequence[str]) -> dict[str, str]:
    """
    Bind ``key=value`` and positional values to parameter names.

    A positional value binds to the parameter at its own position in
    ``values``; positions beyond the declared parameters are ignored.
    """
    bound: dict[str, str] = {}
    for index, value in enumerate(values):
        key, sep, rest = value.partition("=")
        if sep:
            bound[key] = rest
        elif index < len(parameters):
            bound[parameters[index]] = value
    return bound


def substitute_parameters(command: str, values: Mapping[str, str]) -> str:
    for key, value in values.items():
        command = command.replace(f"{{{key}}}", value)
    return command


def quote_args(args: Sequence[str]) -> str:
    """Join pass-through arguments for the platform shell."""
    if os.name == "nt":
        return subprocess.list2cmdline(list(args))
    return shlex.join(args)


def resolve_command(
    registered: RegisteredCommand,
    values: Sequence[str] = (),
    passthrough: Sequence[str] | None = None,
) -> str:
    """
    Final command text for a registered command.

    With ``passthrough`` the arguments replace ``{args}`` or are appended;
    otherwise declared parameters are bound from ``values``.

    Raises:
        MissingParametersError: If a declared parameter has no non-empty value
    """
    if passthrough is not None:
        quoted = quote_args(passthrough)
        if ARGS_PLACEHOLDER in registered.command:
            return registered.command.replace(ARGS_PLACEHOLDER, quoted, 1)
        return f"{registered.command} {quoted}" if passthrough else registered.command

    if not registered.parameters:
        return registered.command

    bound = parse_parameters(values, registered.parameters)
    missing = tuple(p for p in registered.parameters if not bound.get(p))
    if missing:
        raise MissingParametersError(registered.name, missing, registered.parameters)
    return substitute_parameters(registered.command, bound)

"""
Command registry reader.

The registry file (``.lazi.json``) is owned by the registry management
commands; here it is only read to resolve ``lazi run <name>`` and
``lazi-<command>`` workflow nodes.

    {"commands": {"build": {"name": "build", "command": "make {target}",
                            "parameters": ["target"], "description": "..."}}}
"""

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from lazi.domain.interfaces import CommandRegistryInterface
from lazi.domain.models import RegisteredCommand

logger = logging.getLogger(__name__)

PARAMETER_RE = re.compile(r"\{([^}]+)\}")


def extract_parameters(command: str) -> tuple[str, ...]:
    """Placeholder names in order of first appearance."""
    seen: dict[str, None] = {}
    for match in PARAMETER_RE.finditer(command):
        seen.setdefault(match.group(1), None)
    return tuple(seen)


def command_from_dict(name: str, data: Mapping[str, Any]) -> RegisteredCommand:
    command = str(data.get("command", ""))
    parameters = data.get("parameters")
    return RegisteredCommand(
        name=str(data.get("name", name)),
        command=command,
        parameters=tuple(parameters) if parameters else extract_parameters(command),
        description=str(data.get("description") or ""),
    )


class JsonCommandRegistry(CommandRegistryInterface):
    """Registry read once from disk; a missing or unreadable file is empty."""

    def __init__(self, registry_path: Path):
        self._path = Path(registry_path)
        self._commands: dict[str, RegisteredCommand] | None = None

    def _load(self) -> dict[str, RegisteredCommand]:
        if self._commands is not None:
            return self._commands
        self._commands = {}
        if not self._path.exists():
            return self._commands
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Error loading registry %s: %s", self._path, e)
            return self._commands
        for name, raw in (data.get("commands") or {}).items():
            self._commands[name] = command_from_dict(name, raw)
        return self._commands

    def get_command(self, name: str) -> RegisteredCommand | None:
        return self._load().get(name)

    def list_commands(self) -> list[RegisteredCommand]:
        return sorted(self._load().values(), key=lambda c: c.name)


class InMemoryCommandRegistry(CommandRegistryInterface):
    """Registry held in a dict, for tests."""

    def __init__(self, commands: Mapping[str, str] | None = None) -> None:
        self._commands = {
            name: RegisteredCommand(name, command, extract_parameters(command))
            for name, command in (commands or {}).items()
        }

    def get_command(self, name: str) -> RegisteredCommand | None:
        return self._commands.get(name)

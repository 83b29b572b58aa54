"""Target script languages and the fixed text framing around generated code."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class ScriptType(str, Enum):
    """Script languages a workflow can be rendered into."""

    POWERSHELL = "powershell"
    BASH = "bash"

    @property
    def extension(self) -> str:
        return ".ps1" if self is ScriptType.POWERSHELL else ".sh"

    @classmethod
    def parse(cls, value: str) -> ScriptType:
        """
        Resolve a user-supplied name.

        Raises:
            ValueError: If the name is not a known script type
        """
        normalized = value.strip().lower()
        aliases = {"ps": "powershell", "ps1": "powershell", "pwsh": "powershell", "sh": "bash"}
        normalized = aliases.get(normalized, normalized)
        for member in cls:
            if member.value == normalized:
                return member
        known = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown script type '{value}' (expected one of: {known})")


COMMENT_PREFIX = "#"  # shared by bash and PowerShell


def comment(text: str) -> str:
    """Prefix every line of text as a script comment."""
    return "\n".join(f"{COMMENT_PREFIX} {line}" for line in text.splitlines() or [""])


def script_header(script_type: ScriptType, extra_lines: Iterable[str] = ()) -> str:
    """
    Banner placed before the first node.

    Bash scripts get a shebang and ``set -e``; PowerShell scripts a title comment.
    The returned text ends with a blank line.
    """
    if script_type is ScriptType.POWERSHELL:
        lines = ["# PowerShell Script", "# Generated by lazi"]
    else:
        lines = ["#!/bin/bash", "# Generated by lazi", "set -e"]
    lines.extend(f"{COMMENT_PREFIX} {line}" for line in extra_lines)
    return "\n".join(lines) + "\n\n"


def render_section(label: str, code: str, node_id: str | None = None) -> str:
    """Label comment(s) followed by the code, terminated by a blank line."""
    head = f"{COMMENT_PREFIX} {label}\n"
    if node_id is not None:
        head += f"{COMMENT_PREFIX} Step: {node_id}\n"
    return f"{head}{code}\n\n"

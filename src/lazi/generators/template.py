"""
Plain ``{{placeholder}}`` templates.

    Write-Host "{{message}}"            config key
    {{branches.true-path}}              rendered branch text

Substitution is a single pass, so text coming from a value or a branch is
never scanned for placeholders again.
"""

import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")
BRANCH_PREFIX = "branches."


def stringify(value: Any) -> str:
    """Script text for a config value: None is empty, booleans are lowercase."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def placeholder_keys(source: str) -> set[str]:
    return {match.group(1) for match in PLACEHOLDER_RE.finditer(source)}


def indent_continuation(text: str, indent: str) -> str:
    """Prefix every line but the first with indent."""
    lines = text.split("\n")
    return "\n".join([lines[0], *(indent + line for line in lines[1:])])


def render_template(
    source: str,
    config: Mapping[str, Any],
    branches: Mapping[str, str],
) -> str:
    """
    Substitute config values and branch bodies into source.

    Absent keys and absent branches become empty strings. A branch body is
    re-indented so its continuation lines carry the leading whitespace of
    the line holding the placeholder.
    """
    rendered: list[str] = []
    for line in source.split("\n"):
        indent = line[: len(line) - len(line.lstrip())]

        def substitute(match: re.Match[str], indent: str = indent) -> str:
            key = match.group(1)
            if key.startswith(BRANCH_PREFIX):
                body = branches.get(key[len(BRANCH_PREFIX) :], "")
                return indent_continuation(body, indent)
            return stringify(config.get(key))

        rendered.append(PLACEHOLDER_RE.sub(substitute, line))
    return "\n".join(rendered)

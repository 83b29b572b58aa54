"""lazi JSON Schema definitions and validation utilities.

Schemas:
    - workflow.schema.json: Workflow documents (nodes, edges, branch handles)
    - custom-nodes.schema.json: Custom-node catalog (fields, handles, generators)
    - settings.schema.json: User configuration file

Usage:
    from lazi.schemas import validate_workflow

    with open("workflows/deploy.json") as f:
        data = json.load(f)
    validate_workflow(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'workflow.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("lazi.schemas").joinpath(name).read_text(encoding="utf-8")
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_workflow_schema() -> dict[str, Any]:
    return _load_schema("workflow.schema.json")


def get_custom_nodes_schema() -> dict[str, Any]:
    return _load_schema("custom-nodes.schema.json")


def get_settings_schema() -> dict[str, Any]:
    return _load_schema("settings.schema.json")


def validate_workflow(data: dict[str, Any]) -> None:
    """Validate a workflow document against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_workflow_schema())


def validate_custom_nodes(data: dict[str, Any]) -> None:
    """Validate a custom-node catalog against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_custom_nodes_schema())


def validate_settings(data: dict[str, Any]) -> None:
    """Validate a user configuration file against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_settings_schema())


__all__ = [
    "get_workflow_schema",
    "get_custom_nodes_schema",
    "get_settings_schema",
    "validate_workflow",
    "validate_custom_nodes",
    "validate_settings",
]

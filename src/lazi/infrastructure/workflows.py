"""
Readers for workflow documents and the custom-node catalog.

Both are JSON files shared with the visual editor; this package only reads
them. Documents are checked against the schemas in lazi.schemas before
being turned into domain objects.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any

import jsonschema

from lazi.domain.exceptions import ConfigurationError, WorkflowNotFoundError
from lazi.domain.interfaces import (
    CustomNodeCatalogInterface,
    WorkflowRepositoryInterface,
)
from lazi.domain.models import (
    CustomField,
    CustomNode,
    Edge,
    Node,
    OutputHandle,
    WorkflowGraph,
)
from lazi.schemas import validate_custom_nodes, validate_workflow

logger = logging.getLogger(__name__)

EDITOR_NODE_TYPE = "scriptNode"
LEGACY_CUSTOM_PREFIX = "custom-test-"


def _parse_node(data: dict[str, Any]) -> Node | None:
    """Accept both the flat shape and the editor shape; None if no operation."""
    if data.get("type") == EDITOR_NODE_TYPE:
        payload = data.get("data") or {}
        script = payload.get("script") or {}
        if not script.get("id"):
            return None
        return Node(
            node_id=data["id"],
            operation=script["id"],
            label=script.get("name", ""),
            config=MappingProxyType(dict(payload.get("config") or {})),
        )
    return Node(
        node_id=data["id"],
        operation=data["type"],
        label=data.get("name", ""),
        config=MappingProxyType(dict(data.get("config") or {})),
    )


def workflow_from_dict(name: str, data: dict[str, Any]) -> WorkflowGraph:
    """
    Build a WorkflowGraph from a validated document.

    Editor nodes without a script reference are dropped.
    """
    nodes: list[Node] = []
    for raw in data.get("nodes", []):
        node = _parse_node(raw)
        if node is None:
            logger.debug("Workflow %s: node %s has no script; skipped", name, raw.get("id"))
            continue
        nodes.append(node)

    edges = tuple(
        Edge(
            source=raw["source"],
            target=raw["target"],
            source_handle=raw.get("sourceHandle") or None,
        )
        for raw in data.get("edges", [])
    )
    return WorkflowGraph(
        name=data.get("name") or name,
        nodes=tuple(nodes),
        edges=edges,
        script_type=data.get("scriptType"),
        description=data.get("description", ""),
        created_at=data.get("createdAt", ""),
    )


class FilesystemWorkflowRepository(WorkflowRepositoryInterface):
    """One ``<name>.json`` document per workflow in a directory."""

    def __init__(self, workflows_dir: Path):
        self._dir = Path(workflows_dir)

    def _path(self, name: str) -> Path:
        return self._dir / f"{name}.json"

    def list_names(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        return sorted(p.stem for p in self._dir.glob("*.json"))

    def load_document(self, name: str) -> dict[str, Any]:
        """
        Read and validate the raw document.

        Raises:
            WorkflowNotFoundError: If the file does not exist
            ConfigurationError: If it is not valid JSON or violates the schema
        """
        path = self._path(name)
        if not path.is_file():
            raise WorkflowNotFoundError(name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Error loading workflow '{name}': {e}") from e
        try:
            validate_workflow(data)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Invalid workflow '{name}': {e.message}") from e
        result: dict[str, Any] = data
        return result

    def load(self, name: str) -> WorkflowGraph:
        return workflow_from_dict(name, self.load_document(name))


class InMemoryWorkflowRepository(WorkflowRepositoryInterface):
    """Workflows held in a dict, for tests."""

    def __init__(self, workflows: Mapping[str, WorkflowGraph] | None = None) -> None:
        self._workflows = dict(workflows or {})

    def add(self, graph: WorkflowGraph) -> None:
        self._workflows[graph.name] = graph

    def list_names(self) -> list[str]:
        return sorted(self._workflows)

    def load(self, name: str) -> WorkflowGraph:
        if name not in self._workflows:
            raise WorkflowNotFoundError(name)
        return self._workflows[name]


def custom_node_from_dict(node_id: str, data: dict[str, Any]) -> CustomNode:
    fields = tuple(
        CustomField(
            key=f["key"],
            label=f.get("label", f["key"]),
            field_type=f.get("type", "text"),
            default=f.get("defaultValue"),
        )
        for f in data.get("fields") or []
    )
    handles = tuple(
        OutputHandle(handle_id=h["id"], label=h.get("label", h["id"]))
        for h in data.get("outputHandles") or []
    )
    metadata = data.get("metadata") or {}
    return CustomNode(
        node_id=data.get("id", node_id),
        name=data.get("name", node_id),
        category=data.get("category", ""),
        description=data.get("description", ""),
        fields=fields,
        output_handles=handles,
        generators=MappingProxyType(dict(data.get("generators") or {})),
        tags=tuple(metadata.get("tags") or ()),
    )


class JsonCustomNodeCatalog(CustomNodeCatalogInterface):
    """
    Catalog read once from ``{"customNodes": {<id>: {...}}}``.

    A missing, unreadable or invalid file yields an empty catalog and a
    warning, so workflows still build with placeholder comments.
    """

    def __init__(self, catalog_path: Path):
        self._path = Path(catalog_path)
        self._nodes: dict[str, CustomNode] | None = None

    def _load(self) -> dict[str, CustomNode]:
        if self._nodes is not None:
            return self._nodes
        self._nodes = {}
        if not self._path.exists():
            return self._nodes
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            validate_custom_nodes(data)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not load custom nodes file %s: %s", self._path, e)
            return self._nodes
        except jsonschema.ValidationError as e:
            logger.warning("Invalid custom nodes file %s: %s", self._path, e.message)
            return self._nodes
        for node_id, raw in (data.get("customNodes") or {}).items():
            self._nodes[node_id] = custom_node_from_dict(node_id, raw)
        logger.debug("Loaded %d custom nodes from %s", len(self._nodes), self._path)
        return self._nodes

    def get(self, node_id: str) -> CustomNode | None:
        nodes = self._load()
        node = nodes.get(node_id)
        if node is None and not node_id.startswith("custom-"):
            node = nodes.get(f"{LEGACY_CUSTOM_PREFIX}{node_id}")
        return node

    def list_nodes(self) -> Sequence[CustomNode]:
        return list(self._load().values())


class InMemoryCustomNodeCatalog(CustomNodeCatalogInterface):
    """Catalog held in a dict, for tests. Applies the same id fallback."""

    def __init__(self, nodes: Sequence[CustomNode] = ()) -> None:
        self._nodes = {node.node_id: node for node in nodes}

    def get(self, node_id: str) -> CustomNode | None:
        node = self._nodes.get(node_id)
        if node is None and not node_id.startswith("custom-"):
            node = self._nodes.get(f"{LEGACY_CUSTOM_PREFIX}{node_id}")
        return node

    def list_nodes(self) -> Sequence[CustomNode]:
        return list(self._nodes.values())

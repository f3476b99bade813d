"""
Node Type Registry - the arena of node types, keyed by their stable name.

Node types reference their supertypes by name in their definitions; the registry
resolves those names while loading and merges inherited configuration, so that a
NodeType handed to the indexer is complete.

Definition format (JSON):
    {
        "Acme:Document": {
            "abstract": true,
            "properties": {"title": {"type": "string"}}
        },
        "Acme:Page": {
            "superTypes": ["Acme:Document"],
            "search": {"fulltext": {"enable": true}},
            "properties": {"text": {"type": "string", "search": {"fulltextExtractor": "..."}}}
        }
    }

superTypes may also be a map of name -> bool; names mapped to false are skipped.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from .base import FileAsset, Node, NodeType
from ..utils import ConfigurationError, NodeTypeCycleError, merge_dicts

logger = logging.getLogger(__name__)

# Property values of this shape are turned into FileAssets when loading nodes
ASSET_MARKER = "__asset"


class NodeTypeRegistry:
    """
    Registry for node types.

    Handles:
    - Registration and lookup of node types by name
    - Loading node type definitions, resolving supertypes and inheritance
    - Building nodes that reference registered node types

    Usage:
        registry = NodeTypeRegistry()
        registry.load_node_types(read_json("nodetypes.json"))
        nodes = registry.load_nodes(read_json("nodes.json"))
    """

    def __init__(self):
        self._node_types: dict[str, NodeType] = {}

    def register(self, node_type: NodeType) -> None:
        """Register a node type, replacing any previous type of the same name."""
        if node_type.name in self._node_types:
            logger.debug(f"Replacing node type: {node_type.name}")
        self._node_types[node_type.name] = node_type

    def has(self, name: str) -> bool:
        return name in self._node_types

    def get(self, name: str) -> NodeType:
        """
        Get a node type by name.

        Raises:
            ConfigurationError: If no such node type is registered
        """
        try:
            return self._node_types[name]
        except KeyError:
            raise ConfigurationError(f'Node type "{name}" is not registered') from None

    def list_node_types(self) -> list[NodeType]:
        """All registered node types, in registration order."""
        return list(self._node_types.values())

    def __len__(self) -> int:
        return len(self._node_types)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def load_node_types(self, definitions: dict[str, Optional[dict[str, Any]]]) -> list[NodeType]:
        """
        Load node type definitions.

        Supertypes may be defined in the same batch (in any order) or already be
        registered.

        Returns:
            The node types created from this batch, in definition order

        Raises:
            ConfigurationError: If a supertype is unknown
            NodeTypeCycleError: If the supertype declarations form a cycle
        """
        pending = {name: dict(definition or {}) for name, definition in definitions.items()}
        in_progress: list[str] = []
        created: dict[str, NodeType] = {}

        def build(name: str) -> NodeType:
            if name in created:
                return created[name]
            if name not in pending:
                return self.get(name)
            if name in in_progress:
                raise NodeTypeCycleError(in_progress[in_progress.index(name):] + [name])

            in_progress.append(name)
            definition = pending[name]
            super_types = [build(super_name) for super_name in _super_type_names(definition)]

            configuration: dict[str, Any] = {}
            for super_type in super_types:
                configuration = merge_dicts(configuration, super_type.configuration)
            own = {key: value for key, value in definition.items() if key != "superTypes"}
            configuration = merge_dicts(configuration, own)
            # abstract is never inherited
            configuration["abstract"] = bool(own.get("abstract", False))

            node_type = NodeType(name, super_types, configuration)
            in_progress.pop()
            created[name] = node_type
            return node_type

        for name in pending:
            build(name)

        for node_type in created.values():
            self.register(node_type)

        logger.info(f"Loaded {len(created)} node types")
        return list(created.values())

    def load_nodes(
        self,
        definitions: Iterable[dict[str, Any]],
        base_dir: Optional[Path] = None,
    ) -> list[Node]:
        """
        Build nodes from plain dicts.

        Each dict needs identifier, path and nodeType; properties is optional.
        A property value {"__asset": "relative/file.pdf"} becomes a FileAsset,
        resolved against base_dir.
        """
        nodes = []
        for definition in definitions:
            try:
                identifier = definition["identifier"]
                path = definition["path"]
                node_type_name = definition["nodeType"]
            except KeyError as e:
                raise ConfigurationError(f"Node definition is missing {e}: {definition!r}") from None

            properties = {
                name: _load_property_value(value, base_dir)
                for name, value in (definition.get("properties") or {}).items()
            }
            nodes.append(Node(identifier, path, self.get(node_type_name), properties))

        logger.debug(f"Loaded {len(nodes)} nodes")
        return nodes


def _super_type_names(definition: dict[str, Any]) -> list[str]:
    super_types = definition.get("superTypes") or []
    if isinstance(super_types, dict):
        return [name for name, enabled in super_types.items() if enabled]
    if isinstance(super_types, str):
        return [super_types]
    return list(super_types)


def _load_property_value(value: Any, base_dir: Optional[Path]) -> Any:
    if isinstance(value, dict) and set(value) == {ASSET_MARKER}:
        path = Path(value[ASSET_MARKER])
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return FileAsset(path)
    if isinstance(value, list):
        return [_load_property_value(element, base_dir) for element in value]
    return value

"""
Base classes for the content repository model.

This is the interface boundary to the content tree: nodes, their node types and
the asset values nodes may carry. The indexer only ever reads these objects.
Node types are plain declarative configuration (the same shape as the JSON
definitions the registry loads), wrapped with accessors for the parts the
indexer cares about.
"""
from __future__ import annotations

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Optional

from ..utils import get_path


@dataclass(frozen=True)
class PropertyConfiguration:
    """
    Search related configuration of a single node type property.

    indexing and fulltext_extractor keep the difference between "not configured"
    (None) and "configured as empty string" (""), the latter meaning
    "explicitly do not index".
    """
    name: str
    type: Optional[str] = None
    indexing: Optional[str] = None
    fulltext_extractor: Optional[str] = None

    @classmethod
    def from_dict(cls, name: str, data: Optional[dict[str, Any]]) -> "PropertyConfiguration":
        """Create a PropertyConfiguration from a property definition dict."""
        data = data or {}
        search = data.get("search") or {}
        return cls(
            name=name,
            type=data.get("type"),
            indexing=search.get("indexing"),
            fulltext_extractor=search.get("fulltextExtractor"),
        )


@dataclass(eq=False)
class NodeType:
    """
    A named node schema.

    configuration is the fully merged type configuration (inherited settings
    included); declared_super_types are the direct supertypes only.

    Example configuration:
        {
            "search": {"fulltext": {"enable": True}},
            "properties": {
                "title": {
                    "type": "string",
                    "search": {"fulltextExtractor": "${Indexing.extract_into('h1', value)}"}
                }
            }
        }
    """
    name: str
    declared_super_types: list["NodeType"] = field(default_factory=list)
    configuration: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._properties = {
            property_name: PropertyConfiguration.from_dict(property_name, definition)
            for property_name, definition in (self.configuration.get("properties") or {}).items()
        }

    @property
    def properties(self) -> dict[str, PropertyConfiguration]:
        """Property configurations in declaration order."""
        return self._properties

    def get_declared_super_types(self) -> list["NodeType"]:
        return list(self.declared_super_types)

    def has_configuration(self, path: str) -> bool:
        """Whether a dotted configuration path (e.g. "search.fulltext") is set."""
        return get_path(self.configuration, path) is not None

    def get_configuration(self, path: str, default: Any = None) -> Any:
        return get_path(self.configuration, path, default)

    def __repr__(self) -> str:
        return f"NodeType({self.name!r})"


@dataclass(eq=False)
class Node:
    """
    A single content item: identifier, absolute path, node type and properties.

    Unset properties are simply missing from the properties dict.
    """
    identifier: str
    path: str
    node_type: NodeType
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def parent_path(self) -> Optional[str]:
        """Path of the parent node; None for the root node."""
        if self.path in ("", "/"):
            return None
        parent = self.path.rstrip("/").rsplit("/", 1)[0]
        return parent or "/"

    def has_property(self, property_name: str) -> bool:
        return property_name in self.properties

    def get_property(self, property_name: str) -> Any:
        return self.properties.get(property_name)

    def get_node_type(self) -> NodeType:
        return self.node_type

    def get_path(self) -> str:
        return self.path

    def get_identifier(self) -> str:
        return self.identifier

    def __repr__(self) -> str:
        return f"Node({self.path!r}, type={self.node_type.name!r})"


class Asset(ABC):
    """
    A binary resource (image, document, ...) referenced from a node property.

    Subclasses only need to provide a readable binary stream.
    """

    identifier: str = ""
    filename: str = ""

    @abstractmethod
    def get_stream(self) -> BinaryIO:
        """Open the asset's binary content. The caller closes the stream."""
        pass


class FileAsset(Asset):
    """Asset backed by a file on disk."""

    def __init__(self, path: str | Path, identifier: Optional[str] = None):
        self.path = Path(path)
        self.filename = self.path.name
        self.identifier = identifier or str(self.path)

    def get_stream(self) -> BinaryIO:
        return self.path.open("rb")

    def __repr__(self) -> str:
        return f"FileAsset({str(self.path)!r})"


class BytesAsset(Asset):
    """Asset held in memory."""

    def __init__(self, data: bytes, filename: str = "", identifier: str = ""):
        self.data = data
        self.filename = filename
        self.identifier = identifier or filename

    def get_stream(self) -> BinaryIO:
        return io.BytesIO(self.data)

    def __repr__(self) -> str:
        return f"BytesAsset({self.filename!r}, {len(self.data)} bytes)"

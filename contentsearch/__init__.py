"""
Content Search Indexing.

This package provides:
- NodeTypeRegistry: declarative node types with multiple inheritance
- InMemoryNodeIndexer / AbstractNodeIndexer: node -> index document + fulltext buckets
- IndexingHelper: helpers available to indexing expressions
- CLI: Command-line interface for indexing content exports

Quick Start:
    from contentsearch import InMemoryNodeIndexer, NodeTypeRegistry

    registry = NodeTypeRegistry()
    registry.load_node_types(definitions["nodeTypes"])
    indexer = InMemoryNodeIndexer()
    for node in registry.load_nodes(definitions["nodes"]):
        indexer.index_node(node)
    indexer.flush()
"""

from .eel import (
    DefaultContextVariables,
    ExpressionEvaluator,
    IndexingHelper,
    PythonExpressionEvaluator,
    build_all_path_prefixes,
    extract_html_tags,
    extract_node_type_names_and_supertypes,
    index_asset,
)
from .indexer import AbstractNodeIndexer, IndexDocument, InMemoryNodeIndexer, NodeIndexer
from .repository import Asset, BytesAsset, FileAsset, Node, NodeType, NodeTypeRegistry
from .settings import SearchSettings, load_settings
from .utils import (
    ConfigurationError,
    ContentSearchError,
    ExpressionError,
    IndexingError,
    InvalidFulltextExpression,
    NodeTypeCycleError,
    UnsupportedAssetType,
)

__all__ = [
    # Repository
    "Node",
    "NodeType",
    "NodeTypeRegistry",
    "Asset",
    "FileAsset",
    "BytesAsset",
    # Indexing
    "NodeIndexer",
    "AbstractNodeIndexer",
    "InMemoryNodeIndexer",
    "IndexDocument",
    # Expressions
    "ExpressionEvaluator",
    "PythonExpressionEvaluator",
    "DefaultContextVariables",
    "IndexingHelper",
    "build_all_path_prefixes",
    "extract_node_type_names_and_supertypes",
    "extract_html_tags",
    "index_asset",
    # Settings
    "SearchSettings",
    "load_settings",
    # Errors
    "ContentSearchError",
    "ConfigurationError",
    "ExpressionError",
    "IndexingError",
    "InvalidFulltextExpression",
    "NodeTypeCycleError",
    "UnsupportedAssetType",
]

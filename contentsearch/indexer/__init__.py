"""
Node indexers - turn nodes into index documents and fulltext buckets.

Architecture:
    Node → AbstractNodeIndexer (expressions per property) → properties + fulltext → backend
                                                                                  (pluggable)
"""
from .base import AbstractNodeIndexer, NodeIndexer, UnindexedPropertyHandler, log_unindexed_property
from .memory import DEFAULT_WORKSPACE, IndexDocument, InMemoryNodeIndexer

__all__ = [
    # Base classes
    "NodeIndexer",
    "AbstractNodeIndexer",
    "UnindexedPropertyHandler",
    "log_unindexed_property",
    # Implementations
    "InMemoryNodeIndexer",
    "IndexDocument",
    "DEFAULT_WORKSPACE",
]

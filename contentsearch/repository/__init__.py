"""
Content repository model - the read-only view of the content tree.

Nodes carry typed properties; node types are declarative configuration with
multiple inheritance, resolved by name through the registry.
"""
from .base import Asset, BytesAsset, FileAsset, Node, NodeType, PropertyConfiguration
from .registry import NodeTypeRegistry

__all__ = [
    # Model
    "Node",
    "NodeType",
    "PropertyConfiguration",
    # Assets
    "Asset",
    "FileAsset",
    "BytesAsset",
    # Registry
    "NodeTypeRegistry",
]

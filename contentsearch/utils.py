"""
Utility functions for the content search indexer.
Provides JSON file helpers and the error hierarchy shared by all modules.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

# Type definitions
PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


# ============================================================================
# File I/O Utilities
# ============================================================================

def read_json(path: PathLike) -> Any:
    """
    Read and parse a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file isn't valid JSON
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(
    data: Any,
    path: PathLike,
    indent: int = 2,
    ensure_ascii: bool = False,
) -> Path:
    """
    Write data to a JSON file.

    Args:
        data: Data to serialize
        path: Output path
        indent: Indentation level (None for compact)
        ensure_ascii: Whether to escape non-ASCII characters

    Returns:
        Path to written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, default=str)

    return path


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """
    Look up a dotted path (e.g. "search.fulltext.enable") in nested dicts.

    Returns default as soon as a segment is missing or a non-dict is hit.
    """
    current = data
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def merge_dicts(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base; override wins."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


# ============================================================================
# Error Handling
# ============================================================================

class ContentSearchError(Exception):
    """Base exception for content search errors."""
    pass


class ConfigurationError(ContentSearchError):
    """Invalid settings or node type definitions."""
    pass


class ExpressionError(ContentSearchError):
    """An expression could not be compiled or failed while evaluating."""

    def __init__(self, message: str, expression: Optional[str] = None):
        super().__init__(message)
        self.expression = expression


class NodeTypeCycleError(ContentSearchError):
    """A node type is (indirectly) its own supertype."""

    def __init__(self, cycle: list[str]):
        super().__init__(
            f"Node type supertype cycle detected: {' -> '.join(cycle)}"
        )
        self.cycle = cycle


class IndexingError(ContentSearchError):
    """Error while extracting index data from a node."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class InvalidFulltextExpression(IndexingError):
    """A fulltext extraction expression did not evaluate to a mapping."""

    def __init__(self, property_name: str, node_path: str, expression: str):
        super().__init__(
            f'The fulltext index for property "{property_name}" of node '
            f'"{node_path}" could not be retrieved; the expression '
            f'"{expression}" is no valid fulltext extraction expression.'
        )
        self.property_name = property_name
        self.node_path = node_path
        self.expression = expression


class UnsupportedAssetType(IndexingError):
    """A value handed to the asset encoder is neither an asset nor a list."""

    def __init__(self, value: Any):
        type_name = type(value).__name__
        super().__init__(
            f"Value of type {type_name} could not be converted to asset binary.",
            code=1437555909,
        )
        self.type_name = type_name

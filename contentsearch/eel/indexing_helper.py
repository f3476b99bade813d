"""
Indexing helpers available to indexing and fulltext expressions as `Indexing`.

Every helper is a plain function in this module; IndexingHelper bundles them
for use inside expressions:

    ${Indexing.build_all_path_prefixes(node.parent_path)}
    ${Indexing.extract_html_tags(value)}
    ${Indexing.extract_into('h2', value)}
    ${Indexing.index_asset(value)}
"""
from __future__ import annotations

import base64
import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Optional

from ..repository.base import Asset
from ..utils import NodeTypeCycleError, UnsupportedAssetType

if TYPE_CHECKING:
    from ..repository.base import Node, NodeType

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# Attribute text of a tag; a ">" inside quotes does not end the tag.
_ATTRIBUTES = r"""(?:"[^"]*(?:"|$)|'[^']*(?:'|$)|[^'">])*"""

# Comments, processing instructions, doctypes and regular (closing) tags.
# A "<" followed by whitespace is not a tag. A tag that is never closed runs
# to the end of the string.
_TAG = re.compile(
    r"<!--.*?(?:-->|$)|<[!?][^>]*(?:>|$)|</?([a-zA-Z][^\s/>]*)" + _ATTRIBUTES + r"(?:>|$)",
    re.DOTALL,
)
# No DOTALL: a heading element must not span lines
_HEADING_ELEMENT = re.compile(r"<(h[1-6])" + _ATTRIBUTES + r">.*?</\1>", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


# ============================================================================
# Paths and node types
# ============================================================================

def build_all_path_prefixes(path: str) -> list[str]:
    """
    Build all path prefixes, shallowest first.

    From an input such as "/foo/bar/baz" it emits:

        /
        /foo
        /foo/bar
        /foo/bar/baz

    Works both with absolute and relative paths. If a relative path is given,
    the result lacks the "/" element and the leading slashes.
    """
    if not path:
        return []
    if path == "/":
        return ["/"]

    current_path = ""
    path_prefixes = []
    if path.startswith("/"):
        current_path = "/"
        path_prefixes.append(current_path)

    for path_part in path.lstrip("/").split("/"):
        current_path += path_part + "/"
        path_prefixes.append(current_path.rstrip("/"))

    return path_prefixes


def extract_node_type_names_and_supertypes(node_type: "NodeType") -> list[str]:
    """
    Names of node_type and all its supertypes, recursively.

    The node type comes first, followed by its supertypes in preorder (a
    supertype's own supertypes come before its next sibling). Every name is
    listed once, at its first position.

    Raises:
        NodeTypeCycleError: If a node type is its own (indirect) supertype
    """
    names = [node_type.name]
    collected = {node_type.name}
    ancestry = [node_type.name]
    pending = [iter(node_type.get_declared_super_types())]

    while pending:
        super_type = next(pending[-1], None)
        if super_type is None:
            pending.pop()
            ancestry.pop()
            continue

        if super_type.name in ancestry:
            raise NodeTypeCycleError(ancestry[ancestry.index(super_type.name):] + [super_type.name])
        if super_type.name in collected:
            continue

        names.append(super_type.name)
        collected.add(super_type.name)
        ancestry.append(super_type.name)
        pending.append(iter(super_type.get_declared_super_types()))

    return names


def _is_node_list(nodes: Any) -> bool:
    return isinstance(nodes, Iterable) and not isinstance(nodes, (str, bytes, dict))


def convert_nodes_to_identifiers(nodes: Any) -> list[str]:
    """Identifiers of the given nodes; anything that is not a list of nodes gives []."""
    if not _is_node_list(nodes):
        return []
    return [node.identifier for node in nodes]


def convert_nodes_to_property(nodes: Any, property_name: str) -> list[Any]:
    """Value of property_name for each of the given nodes (None where unset)."""
    if not _is_node_list(nodes):
        return []
    return [node.get_property(property_name) for node in nodes]


# ============================================================================
# Fulltext
# ============================================================================

def strip_tags(value: str, allowed_tags: Iterable[str] = ()) -> str:
    """Remove markup from value, keeping tags whose name is in allowed_tags."""
    allowed = {tag.lower() for tag in allowed_tags}

    def replace(match: re.Match) -> str:
        tag_name = match.group(1)
        if tag_name is not None and tag_name.lower() in allowed:
            return match.group(0)
        return ""

    return _TAG.sub(replace, value)


def extract_html_tags(value: Any) -> dict[str, str]:
    """
    Split an HTML string into fulltext buckets.

    Heading elements (h1-h6) end up in a bucket named after their tag, each
    heading prefixed by a space; everything else goes to "text". All buckets
    are stripped of markup and whitespace runs are collapsed to a single space.

    Example:
        >>> extract_html_tags("<h1>Title</h1>Body <b>text</b>")
        {'text': ' Body text ', 'h1': ' Title '}
    """
    string = "" if value is None else str(value)
    # prevents concatenated words when stripping tags afterwards
    string = string.replace("<", " <").replace(">", "> ")
    string = strip_tags(string, HEADING_TAGS)

    parts = {"text": ""}
    while string:
        match = _HEADING_ELEMENT.search(string)
        if match is None:
            # no heading left in the remaining string
            parts["text"] += string
            break

        parts["text"] += string[:match.start()]
        # bucket names are lower-cased; the PHP version keeps the case as matched
        tag_name = match.group(1).lower()
        parts[tag_name] = parts.get(tag_name, "") + " " + match.group(0)
        string = string[match.end():]

    return {
        bucket: _WHITESPACE.sub(" ", strip_tags(part))
        for bucket, part in parts.items()
    }


def extract_into(bucket_name: str, value: Any) -> dict[str, Any]:
    """Put value into a single fulltext bucket."""
    return {bucket_name: value}


# ============================================================================
# Assets
# ============================================================================

def index_asset(value: Any) -> Optional[str | list]:
    """
    Encode an asset, or a list of assets, for attachment style indexing.

    Assets are read completely and returned base64 encoded; lists are encoded
    element by element, keeping their order. None stays None.

    Raises:
        UnsupportedAssetType: For any other value
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [index_asset(element) for element in value]
    if isinstance(value, Asset):
        with value.get_stream() as stream:
            return base64.b64encode(stream.read()).decode("ascii")
    raise UnsupportedAssetType(value)


class IndexingHelper:
    """
    Expression context object exposing the indexing helpers.

    Registered in the default context as `Indexing`.
    """

    def build_all_path_prefixes(self, path: str) -> list[str]:
        return build_all_path_prefixes(path)

    def extract_node_type_names_and_supertypes(self, node_type: "NodeType") -> list[str]:
        return extract_node_type_names_and_supertypes(node_type)

    def convert_nodes_to_identifiers(self, nodes: Iterable["Node"]) -> list[str]:
        return convert_nodes_to_identifiers(nodes)

    def convert_nodes_to_property(self, nodes: Iterable["Node"], property_name: str) -> list[Any]:
        return convert_nodes_to_property(nodes, property_name)

    def extract_html_tags(self, value: Any) -> dict[str, str]:
        return extract_html_tags(value)

    def extract_into(self, bucket_name: str, value: Any) -> dict[str, Any]:
        return extract_into(bucket_name, value)

    def index_asset(self, value: Any) -> Optional[str | list]:
        return index_asset(value)

    def allows_call_of_method(self, method_name: str) -> bool:
        """All methods are considered safe."""
        return True

"""
In-memory node indexer.

Collects index documents instead of sending them to a search backend. Used by
the command line interface and as the reference for backend connectors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .base import AbstractNodeIndexer, UnindexedPropertyHandler
from ..eel.evaluator import ExpressionEvaluator
from ..eel.indexing_helper import build_all_path_prefixes, extract_node_type_names_and_supertypes
from ..repository.base import Node
from ..settings import SearchSettings

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE = "live"


@dataclass
class IndexDocument:
    """Everything the backend receives for one node."""

    identifier: str
    workspace: str
    properties: dict[str, Any] = field(default_factory=dict)
    fulltext: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "workspace": self.workspace,
            "properties": self.properties,
            "fulltext": self.fulltext,
        }


class InMemoryNodeIndexer(AbstractNodeIndexer):
    """
    Indexer keeping documents in a dict keyed by (workspace, identifier).

    index_node() and remove_node() only stage changes, flush() applies them.
    A node whose extraction fails is not staged at all; its error propagates.

    Example:
        indexer = InMemoryNodeIndexer()
        for node in nodes:
            indexer.index_node(node)
        indexer.flush()
        document = indexer.get_document(node.identifier)
    """

    def __init__(
        self,
        evaluator: Optional[ExpressionEvaluator] = None,
        settings: Optional[SearchSettings] = None,
        unindexed_property_handler: Optional[UnindexedPropertyHandler] = None,
    ):
        super().__init__(evaluator=evaluator, settings=settings)
        self.unindexed_property_handler = unindexed_property_handler
        self.documents: dict[tuple[str, str], IndexDocument] = {}
        self._pending: list[tuple[str, tuple[str, str], Optional[IndexDocument]]] = []

    def build_document(self, node: Node, target_workspace: Optional[str] = None) -> IndexDocument:
        """Extract the index document of a node without staging it."""
        fulltext: dict[str, str] = {}
        properties = self.extract_properties_and_fulltext(
            node, fulltext, self.unindexed_property_handler
        )

        properties["__identifier"] = node.identifier
        properties["__path"] = node.path
        properties["__parentPath"] = build_all_path_prefixes(node.parent_path or "")
        properties["__typeAndSupertypes"] = extract_node_type_names_and_supertypes(node.node_type)

        return IndexDocument(
            identifier=node.identifier,
            workspace=target_workspace or DEFAULT_WORKSPACE,
            properties=properties,
            fulltext=fulltext,
        )

    def index_node(self, node: Node, target_workspace: Optional[str] = None) -> None:
        document = self.build_document(node, target_workspace)
        self._pending.append(("index", (document.workspace, document.identifier), document))
        logger.debug(f"Staged {node.path} for indexing ({len(self._pending)} pending)")

    def remove_node(self, node: Node, target_workspace: Optional[str] = None) -> None:
        key = (target_workspace or DEFAULT_WORKSPACE, node.identifier)
        self._pending.append(("remove", key, None))
        logger.debug(f"Staged {node.path} for removal")

    def flush(self) -> int:
        written = 0
        for action, key, document in self._pending:
            if action == "index":
                self.documents[key] = document
                written += 1
            else:
                self.documents.pop(key, None)
        self._pending.clear()

        logger.info(f"Flushed {written} documents ({len(self.documents)} in index)")
        return written

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_document(self, identifier: str, workspace: str = DEFAULT_WORKSPACE) -> Optional[IndexDocument]:
        return self.documents.get((workspace, identifier))

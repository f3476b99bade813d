"""
Base classes for node indexers.

AbstractNodeIndexer turns a node into the two things a search backend needs:

- the index document: one value per property, computed by the property's
  indexing expression (or its type's default expression)
- the fulltext buckets: named strings ("h1", "text", ...) accumulated from the
  properties' fulltext extraction expressions

Backend specific subclasses decide what to do with both.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..eel.evaluator import DefaultContextVariables, ExpressionEvaluator, PythonExpressionEvaluator
from ..repository.base import Node
from ..settings import SearchSettings
from ..utils import InvalidFulltextExpression

logger = logging.getLogger(__name__)

# Called with the name of every property that has no indexing rule at all
UnindexedPropertyHandler = Callable[[str], None]


def log_unindexed_property(property_name: str) -> None:
    """Unindexed property handler that only logs a warning."""
    logger.warning(f'Property "{property_name}" has no indexing configuration and is not indexed')


class NodeIndexer(ABC):
    """
    Interface of all node indexers.

    target_workspace allows indexing the same node into several workspaces
    (live, user workspaces, ...); None means the node's default workspace.
    """

    @abstractmethod
    def index_node(self, node: Node, target_workspace: Optional[str] = None) -> None:
        """Schedule a node for indexing."""
        pass

    @abstractmethod
    def remove_node(self, node: Node, target_workspace: Optional[str] = None) -> None:
        """Schedule a node for removal from the index."""
        pass

    @abstractmethod
    def flush(self) -> int:
        """
        Perform all scheduled changes.

        Returns:
            The number of documents written
        """
        pass


class AbstractNodeIndexer(NodeIndexer):
    """
    Common extraction logic of node indexers.

    One indexer may serve several threads as long as each node is extracted
    with its own fulltext dict and the evaluator is thread safe.

    Example:
        fulltext = {}
        properties = indexer.extract_properties_and_fulltext(node, fulltext)
    """

    def __init__(
        self,
        evaluator: Optional[ExpressionEvaluator] = None,
        settings: Optional[SearchSettings] = None,
    ):
        self.settings = settings or SearchSettings()
        self.evaluator = evaluator or PythonExpressionEvaluator()
        self.default_context_variables = DefaultContextVariables(self.settings.default_context)

    def evaluate_expression(
        self,
        expression: str,
        node: Node,
        property_name: str,
        value: Any,
    ) -> Any:
        """
        Evaluate an expression with node, propertyName and value in its context.

        Raises:
            ExpressionError: Propagated from the evaluator
        """
        context_variables = dict(self.default_context_variables.get())
        context_variables.update({
            "node": node,
            "propertyName": property_name,
            "value": value,
        })
        return self.evaluator.evaluate(expression, context_variables)

    def extract_fulltext(
        self,
        node: Node,
        property_name: str,
        fulltext_extraction_expression: str,
        fulltext_index_of_node: dict[str, str],
    ) -> None:
        """
        Add a property's fulltext to the node's fulltext buckets.

        The expression must evaluate to a dict of bucket name -> text. Every
        contribution is appended to its bucket prefixed by one space, the first
        one included.

        Raises:
            InvalidFulltextExpression: If the expression does not return a dict
        """
        if fulltext_extraction_expression == "":
            return

        extracted_fulltext = self.evaluate_expression(
            fulltext_extraction_expression,
            node,
            property_name,
            node.get_property(property_name) if node.has_property(property_name) else None,
        )

        if not isinstance(extracted_fulltext, dict):
            raise InvalidFulltextExpression(property_name, node.path, fulltext_extraction_expression)

        for bucket, value in extracted_fulltext.items():
            if bucket not in fulltext_index_of_node:
                fulltext_index_of_node[bucket] = ""
            fulltext_index_of_node[bucket] += " " + _to_text(value)

    def extract_properties_and_fulltext(
        self,
        node: Node,
        fulltext_data: dict[str, str],
        non_indexed_property_error_handler: Optional[UnindexedPropertyHandler] = None,
    ) -> dict[str, Any]:
        """
        Extract all property values according to configuration.

        For each property of the node type, the first configured rule wins:
        the property's own indexing expression, then the default expression of
        its type. An empty expression at either level means "do not index".
        Properties without any rule are reported to
        non_indexed_property_error_handler, if given.

        If the node type has fulltext enabled, fulltext_data is updated in place
        from each property's fulltext extractor, whether or not the property
        itself is stored.

        Returns:
            Property name -> value to store in the index
        """
        node_properties_to_be_stored_in_index = {}
        node_type = node.get_node_type()
        fulltext_indexing_enabled_for_node = self.is_fulltext_enabled(node)

        for property_name, property_configuration in node_type.properties.items():
            indexing_expression = property_configuration.indexing
            if indexing_expression is None:
                indexing_expression = self.settings.default_indexing_expression(property_configuration.type)

            if indexing_expression is None:
                logger.debug(f"{node.path}: no indexing rule for {property_name}")
                if non_indexed_property_error_handler is not None:
                    non_indexed_property_error_handler(property_name)
            elif indexing_expression != "":
                value = node.get_property(property_name) if node.has_property(property_name) else None
                node_properties_to_be_stored_in_index[property_name] = self.evaluate_expression(
                    indexing_expression, node, property_name, value
                )

            if fulltext_indexing_enabled_for_node and property_configuration.fulltext_extractor is not None:
                self.extract_fulltext(
                    node, property_name, property_configuration.fulltext_extractor, fulltext_data
                )

        return node_properties_to_be_stored_in_index

    def is_fulltext_enabled(self, node: Node) -> bool:
        """Whether the node's type has search.fulltext.enable set to true."""
        return node.get_node_type().get_configuration("search.fulltext.enable") is True


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)

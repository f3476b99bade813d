"""
Pytest configuration and fixtures for content search tests
"""
from pathlib import Path
from typing import Any, Mapping

import pytest

from contentsearch.eel.evaluator import ExpressionEvaluator
from contentsearch.repository import Node, NodeType, NodeTypeRegistry


EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


# ============================================
# Evaluator Fixtures
# ============================================

class RecordingEvaluator(ExpressionEvaluator):
    """Returns canned results per expression and records every call."""

    def __init__(self, results: Mapping[str, Any] | None = None):
        self.results = dict(results or {})
        self.calls: list[tuple[str, dict]] = []

    def evaluate(self, expression, context):
        self.calls.append((expression, dict(context)))
        return self.results.get(expression, expression)


@pytest.fixture
def recording_evaluator():
    return RecordingEvaluator()


# ============================================
# Repository Fixtures
# ============================================

@pytest.fixture
def node_type_definitions():
    """A small hierarchy with a diamond: Page -> (Document, Content) -> Node"""
    return {
        "Acme:Node": {
            "properties": {
                "_hidden": {"type": "boolean"},
            },
        },
        "Acme:Document": {
            "superTypes": ["Acme:Node"],
            "search": {"fulltext": {"enable": True}},
            "properties": {
                "title": {
                    "type": "string",
                    "search": {"fulltextExtractor": "${Indexing.extract_into('h1', value)}"},
                },
            },
        },
        "Acme:Content": {
            "superTypes": ["Acme:Node"],
        },
        "Acme:Page": {
            "superTypes": ["Acme:Document", "Acme:Content"],
            "properties": {
                "text": {
                    "type": "string",
                    "search": {
                        "indexing": "",
                        "fulltextExtractor": "${Indexing.extract_html_tags(value)}",
                    },
                },
                "layout": {"type": "Acme:Layout"},
            },
        },
    }


@pytest.fixture
def registry(node_type_definitions):
    registry = NodeTypeRegistry()
    registry.load_node_types(node_type_definitions)
    return registry


def make_node_type(name, properties=None, fulltext=False, super_types=None):
    """Build a NodeType directly, bypassing the registry."""
    configuration = {"properties": properties or {}}
    if fulltext:
        configuration["search"] = {"fulltext": {"enable": True}}
    return NodeType(name, list(super_types or []), configuration)


def make_node(node_type, properties=None, path="/sites/acme/page", identifier="node-1"):
    return Node(identifier, path, node_type, dict(properties or {}))

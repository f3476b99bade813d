"""
Expression support: the evaluator interface, default context variables and the
Indexing helper exposed to expressions.
"""
from .evaluator import (
    DefaultContextVariables,
    ExpressionEvaluator,
    PythonExpressionEvaluator,
    resolve_import_path,
    unwrap_expression,
)
from .indexing_helper import (
    IndexingHelper,
    build_all_path_prefixes,
    convert_nodes_to_identifiers,
    convert_nodes_to_property,
    extract_html_tags,
    extract_into,
    extract_node_type_names_and_supertypes,
    index_asset,
    strip_tags,
)

__all__ = [
    # Evaluation
    "ExpressionEvaluator",
    "PythonExpressionEvaluator",
    "DefaultContextVariables",
    "resolve_import_path",
    "unwrap_expression",
    # Helpers
    "IndexingHelper",
    "build_all_path_prefixes",
    "extract_node_type_names_and_supertypes",
    "convert_nodes_to_identifiers",
    "convert_nodes_to_property",
    "extract_html_tags",
    "extract_into",
    "index_asset",
    "strip_tags",
]

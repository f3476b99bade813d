"""
Expression evaluation for indexing configuration.

Indexing and fulltext rules are small expressions stored in node type
configuration. The indexer never interprets them itself; it builds a context
and hands both to an ExpressionEvaluator.

The shipped PythonExpressionEvaluator evaluates Python expressions with a
reduced set of builtins. Expressions may be wrapped in "${...}":

    ${Indexing.extract_into('h1', value)}
    ${value.isoformat() if value is not None else None}
"""
from __future__ import annotations

import ast
import builtins
import importlib
import inspect
import logging
import re
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from types import CodeType, MappingProxyType
from typing import Any, Mapping, Optional

from ..utils import ConfigurationError, ContentSearchError, ExpressionError

logger = logging.getLogger(__name__)

_WRAPPED_EXPRESSION = re.compile(r"^\s*\$\{(.*)\}\s*$", re.DOTALL)

SAFE_BUILTINS: dict[str, Any] = {
    name: getattr(builtins, name)
    for name in (
        "abs", "all", "any", "bool", "dict", "enumerate", "filter", "float",
        "int", "isinstance", "len", "list", "map", "max", "min", "range",
        "reversed", "round", "set", "sorted", "str", "sum", "tuple", "zip",
    )
}

# str.format can walk attributes by name from inside a format string
_BLOCKED_ATTRIBUTES = frozenset({"format", "format_map"})


class ExpressionEvaluator(ABC):
    """
    Evaluates an expression string against a variable context.

    Implementations must be safe to call from several threads at once if
    nodes are indexed concurrently.
    """

    @abstractmethod
    def evaluate(self, expression: str, context: Mapping[str, Any]) -> Any:
        """
        Evaluate expression with the given variables.

        Raises:
            ExpressionError: On malformed expressions or evaluation failures
        """
        pass


def unwrap_expression(expression: str) -> str:
    """Strip an optional ${...} wrapper."""
    match = _WRAPPED_EXPRESSION.match(expression)
    if match:
        return match.group(1).strip()
    return expression.strip()


@lru_cache(maxsize=512)
def _compile(expression: str) -> CodeType:
    tree = ast.parse(unwrap_expression(expression), "<expression>", "eval")
    _check_attributes(tree, expression)
    return compile(tree, "<expression>", "eval")


def _check_attributes(tree: ast.AST, expression: str) -> None:
    """
    Reject access to private and dunder names.

    Raises:
        ExpressionError: If the expression touches a name starting with "_"
            or calls one of the blocked string methods
    """
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute):
            name = node.attr
            if name.startswith("_") or name in _BLOCKED_ATTRIBUTES:
                raise ExpressionError(
                    f'Access to attribute "{name}" is not allowed in "{expression}"', expression
                )
        elif isinstance(node, ast.Name) and node.id.startswith("__"):
            raise ExpressionError(
                f'Access to name "{node.id}" is not allowed in "{expression}"', expression
            )


class PythonExpressionEvaluator(ExpressionEvaluator):
    """
    Evaluates Python expressions with a restricted builtin namespace.

    Attributes starting with an underscore are rejected before compiling, so
    expressions cannot climb from a value to its class or globals.

    Compiled expressions are cached, so evaluating the same configuration
    expression for many nodes only parses it once.
    """

    def __init__(self, allowed_builtins: Optional[Mapping[str, Any]] = None):
        self.builtins = dict(SAFE_BUILTINS if allowed_builtins is None else allowed_builtins)

    def evaluate(self, expression: str, context: Mapping[str, Any]) -> Any:
        try:
            code = _compile(expression)
        except SyntaxError as e:
            raise ExpressionError(
                f'Invalid expression "{expression}": {e.msg}', expression
            ) from e

        namespace = {"__builtins__": self.builtins}
        namespace.update(context)
        try:
            return eval(code, namespace)
        except ContentSearchError:
            # errors raised by context helpers keep their own kind
            raise
        except Exception as e:
            raise ExpressionError(
                f'Expression "{expression}" failed: {type(e).__name__}: {e}', expression
            ) from e


def resolve_import_path(import_path: str) -> Any:
    """
    Import an object given as "package.module:attribute" or "package.module.attribute".

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    if ":" in import_path:
        module_name, _, attribute = import_path.partition(":")
    else:
        module_name, _, attribute = import_path.rpartition(".")

    if not module_name or not attribute:
        raise ConfigurationError(f'Invalid import path "{import_path}"')

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f'Cannot import "{import_path}": {e}') from e

    try:
        return getattr(module, attribute)
    except AttributeError:
        raise ConfigurationError(
            f'Module "{module_name}" has no attribute "{attribute}"'
        ) from None


class DefaultContextVariables:
    """
    The variables available in every expression, built once on first use.

    Construction is guarded by a lock, and the built mapping is read-only, so
    one instance can be shared by indexers running in several threads.
    """

    def __init__(self, default_context: Mapping[str, str]):
        self._default_context = dict(default_context)
        self._variables: Optional[Mapping[str, Any]] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._variables is not None

    def get(self) -> Mapping[str, Any]:
        variables = self._variables
        if variables is None:
            with self._lock:
                if self._variables is None:
                    self._variables = MappingProxyType(self._build())
                variables = self._variables
        return variables

    def _build(self) -> dict[str, Any]:
        variables = {}
        for name, import_path in self._default_context.items():
            value = resolve_import_path(import_path)
            if inspect.isclass(value):
                value = value()
            variables[name] = value
        logger.debug(f"Initialized default context variables: {sorted(variables)}")
        return variables

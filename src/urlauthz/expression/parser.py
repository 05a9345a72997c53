"""Restricted parser and evaluator for raw access expressions.

Raw expressions are parsed with :func:`ast.parse` in ``eval`` mode and
then checked against a small whitelist before anything is evaluated.
The accepted grammar is::

    expr     := expr 'and' expr | expr 'or' expr | 'not' expr
              | '(' expr ')' | call | name | literal
              | operand ('==' | '!=') operand
    call     := NAME '(' [literal (',' literal)*] ')'
    literal  := 'string' | number | True | False | None

Function calls may only name a bare identifier and take literal
positional arguments; attribute access, subscripts, keyword arguments,
lambdas and everything else are rejected.  Evaluation walks the tree
directly and never calls :func:`eval`.

Compiled trees are cached per expression text.
"""
from __future__ import annotations

import ast
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any

from urlauthz.core.errors import (
    EvaluationError,
    InvalidExpression,
    MissingCapability,
    UnknownFunction,
)

_ALLOWED_NODES: tuple[type[ast.AST], ...] = (
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.UnaryOp,
    ast.Not,
    ast.Compare,
    ast.Eq,
    ast.NotEq,
    ast.Call,
    ast.Name,
    ast.Load,
    ast.Constant,
)


@lru_cache(maxsize=512)
def compile_expression(text: str) -> ast.Expression:
    """Parse and whitelist-check *text*.

    Raises
    ------
    InvalidExpression
        If *text* is empty, not valid syntax, or uses a construct outside
        the accepted grammar.
    """
    if not text or not text.strip():
        raise InvalidExpression("Access expression cannot be empty")
    try:
        tree = ast.parse(text.strip(), mode="eval")
    except SyntaxError as exc:
        raise InvalidExpression(
            f"Cannot parse access expression {text!r}: {exc.msg}",
            details={"expression": text},
        ) from exc
    _validate(tree, text)
    return tree


def _validate(tree: ast.Expression, text: str) -> None:
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise InvalidExpression(
                f"Unsupported construct {type(node).__name__} in {text!r}",
                details={"expression": text, "node": type(node).__name__},
            )
        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.keywords:
                raise InvalidExpression(
                    f"Only plain function calls are allowed in {text!r}",
                    details={"expression": text},
                )
            for arg in node.args:
                if not isinstance(arg, ast.Constant):
                    raise InvalidExpression(
                        f"Function arguments must be literals in {text!r}",
                        details={"expression": text},
                    )


def referenced_names(tree: ast.Expression) -> tuple[set[str], set[str]]:
    """Return ``(function_names, variable_names)`` referenced by *tree*."""
    functions: set[str] = set()
    variables: set[str] = set()
    called = {
        id(node.func) for node in ast.walk(tree) if isinstance(node, ast.Call)
    }
    for node in ast.walk(tree):
        if isinstance(node, ast.Name):
            (functions if id(node) in called else variables).add(node.id)
    return functions, variables


def call_arguments(tree: ast.Expression, function: str) -> list[tuple[Any, ...]]:
    """Return the literal argument tuples of every call to *function*."""
    return [
        tuple(arg.value for arg in node.args)  # type: ignore[attr-defined]
        for node in ast.walk(tree)
        if isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id == function
    ]


class ExpressionEvaluator:
    """Walks a compiled expression against functions and variables.

    Parameters
    ----------
    functions:
        Callables available to ``name(...)`` calls.
    variables:
        Values available to bare names.
    """

    def __init__(
        self,
        functions: Mapping[str, Callable[..., Any]],
        variables: Mapping[str, Any],
    ) -> None:
        self._functions = functions
        self._variables = variables

    def evaluate(self, tree: ast.Expression, text: str) -> bool:
        """Evaluate *tree* to a ``bool``.

        Any failure inside a called function surfaces as
        :class:`~urlauthz.core.errors.EvaluationError`.
        """
        result = self._eval(tree.body)
        if not isinstance(result, bool):
            raise EvaluationError(
                f"Access expression {text!r} did not evaluate to a boolean",
                details={"expression": text, "result_type": type(result).__name__},
            )
        return result

    def _eval(self, node: ast.AST) -> Any:
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, ast.Name):
            if node.id not in self._variables:
                raise MissingCapability(
                    f"Name {node.id!r} is not available in the security context",
                    details={"name": node.id},
                )
            return self._variables[node.id]
        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                return all(self._truth(v) for v in node.values)
            return any(self._truth(v) for v in node.values)
        if isinstance(node, ast.UnaryOp):
            return not self._truth(node.operand)
        if isinstance(node, ast.Compare):
            left = self._eval(node.left)
            for op, comparator in zip(node.ops, node.comparators):
                right = self._eval(comparator)
                ok = left == right if isinstance(op, ast.Eq) else left != right
                if not ok:
                    return False
                left = right
            return True
        if isinstance(node, ast.Call):
            name = node.func.id  # type: ignore[attr-defined]
            fn = self._functions.get(name)
            if fn is None:
                raise UnknownFunction(
                    f"Unknown function {name!r} in access expression",
                    details={"function": name},
                )
            args = [self._eval(arg) for arg in node.args]
            try:
                return fn(*args)
            except EvaluationError:
                raise
            except TypeError as exc:
                raise EvaluationError(
                    f"Bad arguments for {name}(): {exc}",
                    details={"function": name},
                ) from exc
            except Exception as exc:
                raise EvaluationError(
                    f"{name}() failed: {exc}",
                    details={"function": name, "error": type(exc).__name__},
                ) from exc
        # Unreachable for trees produced by compile_expression().
        raise InvalidExpression(f"Unsupported node {type(node).__name__}")

    def _truth(self, node: ast.AST) -> bool:
        value = self._eval(node)
        if not isinstance(value, bool):
            raise EvaluationError(
                "Boolean operator applied to a non-boolean operand",
                details={"operand_type": type(value).__name__},
            )
        return value

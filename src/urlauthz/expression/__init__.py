"""Expression handling -- evaluates access requirements.

* **DefaultExpressionHandler** -- the shipped
  :class:`~urlauthz.core.interfaces.ExpressionHandler`; evaluates tagged
  requirements directly and raw expressions through the restricted parser.
* **compile_expression** / **ExpressionEvaluator** -- the whitelist-checked
  parser and tree walker behind raw expressions.
"""
from __future__ import annotations

from urlauthz.expression.handler import (
    BUILTIN_FUNCTIONS,
    VARIABLE_NAMES,
    DefaultExpressionHandler,
)
from urlauthz.expression.parser import ExpressionEvaluator, compile_expression

__all__ = [
    "BUILTIN_FUNCTIONS",
    "VARIABLE_NAMES",
    "DefaultExpressionHandler",
    "ExpressionEvaluator",
    "compile_expression",
]

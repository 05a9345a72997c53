"""urlauthz structural interfaces.

This module defines the ``typing.Protocol`` capabilities the rule engine
consumes and exposes:

* :class:`RequestMatcher` -- selects which requests a rule applies to.
* :class:`ExpressionHandler` -- evaluates access requirements against a
  security context.
* :class:`AccessDecisionVoter` -- issues a grant/deny/abstain verdict.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.

Implementations of every protocol here MUST be safe for concurrent use:
the engine calls them from many request-handling threads without any
locking of its own.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from urlauthz.core.types import (
    EvaluationContext,
    HttpRequest,
    SecurityContext,
    Vote,
)

if TYPE_CHECKING:
    from urlauthz.access.attributes import AccessRequirement, ConfigAttribute


@runtime_checkable
class RequestMatcher(Protocol):
    """Selects the requests a rule applies to.

    Matchers are used as keys of the compiled lookup table, so they
    SHOULD be hashable and compare equal when they match the same
    requests.
    """

    def matches(self, request: HttpRequest) -> bool:
        """Return ``True`` if *request* is selected by this matcher."""
        ...


@runtime_checkable
class ExpressionHandler(Protocol):
    """Evaluates access requirements against a security context."""

    def create_evaluation_context(
        self, security: SecurityContext, request: HttpRequest
    ) -> EvaluationContext:
        """Build the per-request context handed to :meth:`evaluate`."""
        ...

    def evaluate(
        self, requirement: AccessRequirement, context: EvaluationContext
    ) -> bool:
        """Return whether *requirement* holds in *context*.

        Raises :class:`~urlauthz.core.errors.EvaluationError` if the
        requirement cannot be resolved against the context.
        """
        ...

    def validate(self, requirement: AccessRequirement) -> None:
        """Check *requirement* at configuration time.

        Raises :class:`~urlauthz.core.errors.InvalidExpression` if the
        requirement can never be evaluated.
        """
        ...


@runtime_checkable
class AccessDecisionVoter(Protocol):
    """Casts one vote on one authorization question."""

    def supports(self, attribute: ConfigAttribute) -> bool:
        """Return ``True`` if this voter understands *attribute*."""
        ...

    def vote(
        self,
        security: SecurityContext,
        request: HttpRequest,
        attributes: Sequence[ConfigAttribute],
    ) -> Vote:
        """Vote on *attributes* for *request* made by *security*."""
        ...

"""Expression-based decision voter.

One vote per authorization question, no state kept between votes:

* **ABSTAIN** -- none of the attributes is an
  :class:`~urlauthz.access.attributes.AccessRequirement`, so this voter
  has no opinion and other voter kinds may decide.
* **GRANTED** -- every recognized requirement evaluated to ``True``.
* **DENIED** -- at least one recognized requirement evaluated to
  ``False``.

Requirements on one rule combine with logical AND.  A raw expression that
carries its own ``and``/``or`` is a single opaque boolean to this voter.

A false requirement is a normal DENIED vote.  An
:class:`~urlauthz.core.errors.EvaluationError` raised by the handler is
not retried and propagates to the caller, whose aggregation policy turns
it into a deny.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from urlauthz.access.attributes import AccessRequirement, ConfigAttribute
from urlauthz.core.interfaces import ExpressionHandler
from urlauthz.core.types import HttpRequest, SecurityContext, Vote

logger = logging.getLogger(__name__)


class WebExpressionVoter:
    """Votes by evaluating access requirements through an expression handler.

    Parameters
    ----------
    handler:
        The expression handler; shared by every concurrent vote.
    """

    def __init__(self, handler: ExpressionHandler) -> None:
        self._handler = handler

    @property
    def expression_handler(self) -> ExpressionHandler:
        return self._handler

    def supports(self, attribute: ConfigAttribute) -> bool:
        return isinstance(attribute, AccessRequirement)

    def vote(
        self,
        security: SecurityContext,
        request: HttpRequest,
        attributes: Sequence[ConfigAttribute],
    ) -> Vote:
        requirements = [a for a in attributes if isinstance(a, AccessRequirement)]
        if not requirements:
            return Vote.ABSTAIN

        context = self._handler.create_evaluation_context(security, request)
        for requirement in requirements:
            if not self._handler.evaluate(requirement, context):
                logger.debug(
                    "Denied %s %s for %s: %s not satisfied",
                    request.method,
                    request.path,
                    security.principal,
                    requirement.expression,
                )
                return Vote.DENIED
        return Vote.GRANTED

"""Metadata source -- maps an inbound request to the attributes governing it.

The source wraps a compiled :class:`~urlauthz.access.registry.LookupTable`
and the expression handler that will later evaluate its attributes.

Two kinds of "nothing" are kept apart:

* :meth:`MetadataSource.build` returns ``None`` when no rule was ever
  registered -- no authorization stage should be installed at all.
* :meth:`MetadataSource.lookup` returns ``None`` for a request no rule
  matches -- this layer imposes no requirement on that request; what
  happens next is the caller's policy.
"""
from __future__ import annotations

import logging

from urlauthz.access.attributes import ConfigAttribute, RawExpression
from urlauthz.access.registry import Attributes, LookupTable
from urlauthz.core.interfaces import ExpressionHandler
from urlauthz.core.types import HttpRequest

logger = logging.getLogger(__name__)


class MetadataSource:
    """First-match-wins lookup over an ordered rule table.

    Instances are immutable after construction and :meth:`lookup` takes no
    locks, so one source can serve any number of concurrent requests.

    Parameters
    ----------
    table:
        The compiled, non-empty lookup table.
    handler:
        The expression handler that evaluates this table's attributes.
    """

    __slots__ = ("_entries", "_handler")

    def __init__(self, table: LookupTable, handler: ExpressionHandler) -> None:
        self._entries = table.entries()
        self._handler = handler

    @classmethod
    def build(
        cls, table: LookupTable, handler: ExpressionHandler
    ) -> MetadataSource | None:
        """Wrap *table*, or return ``None`` if it has no entries.

        Every raw expression in the table is validated through *handler*
        so that malformed expressions abort startup.

        Raises
        ------
        InvalidExpression
            If the handler rejects one of the raw expressions.
        """
        if not table:
            logger.info("No access rules registered; authorization stage not installed")
            return None
        for attributes in table.values():
            for attribute in attributes:
                if isinstance(attribute, RawExpression):
                    handler.validate(attribute)
        logger.info("Metadata source built with %d request pattern(s)", len(table))
        return cls(table, handler)

    @property
    def expression_handler(self) -> ExpressionHandler:
        return self._handler

    @property
    def all_attributes(self) -> tuple[ConfigAttribute, ...]:
        """Every distinct attribute in the table, in first-seen order."""
        seen: dict[ConfigAttribute, None] = {}
        for _, attributes in self._entries:
            for attribute in attributes:
                seen.setdefault(attribute, None)
        return tuple(seen)

    def lookup(self, request: HttpRequest) -> Attributes | None:
        """Return the attributes of the first pattern matching *request*.

        Returns ``None`` when no pattern matches.
        """
        for matcher, attributes in self._entries:
            if matcher.matches(request):
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "%s %s matched %s -> %s",
                        request.method,
                        request.path,
                        matcher,
                        [str(a) for a in attributes],
                    )
                return attributes
        logger.debug("%s %s matched no access rule", request.method, request.path)
        return None

    def __len__(self) -> int:
        return len(self._entries)

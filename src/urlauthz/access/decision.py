"""Affirmative decision manager -- aggregates voters into one decision.

Polls every voter in order and grants access as soon as one votes
GRANTED.  Otherwise access is denied if any voter denied, or if all
abstained and abstention is not configured to grant.

Evaluation errors are fail-closed: a voter that raises
:class:`~urlauthz.core.errors.EvaluationError` counts as a DENIED vote.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from urlauthz.access.attributes import ConfigAttribute
from urlauthz.core.errors import AccessDenied, EvaluationError, InvalidArgument
from urlauthz.core.interfaces import AccessDecisionVoter
from urlauthz.core.types import HttpRequest, SecurityContext, Vote

logger = logging.getLogger(__name__)


class AffirmativeDecisionManager:
    """Grants if any voter grants.

    Parameters
    ----------
    voters:
        The voters to poll, in order (non-empty).
    allow_if_all_abstain:
        Grant access when every voter abstains.  Defaults to ``False``.
    """

    def __init__(
        self,
        voters: Sequence[AccessDecisionVoter],
        *,
        allow_if_all_abstain: bool = False,
    ) -> None:
        if not voters:
            raise InvalidArgument("At least one access decision voter is required")
        self._voters = tuple(voters)
        self._allow_if_all_abstain = allow_if_all_abstain

    @property
    def voters(self) -> tuple[AccessDecisionVoter, ...]:
        return self._voters

    def poll(
        self,
        security: SecurityContext,
        request: HttpRequest,
        attributes: Sequence[ConfigAttribute] | None,
    ) -> Vote:
        """Return the aggregated vote without raising on denial.

        ``attributes is None`` (no rule matched) is treated as every voter
        abstaining.
        """
        if attributes is None:
            return Vote.ABSTAIN

        denied = False
        for voter in self._voters:
            try:
                result = voter.vote(security, request, attributes)
            except EvaluationError as exc:
                logger.warning(
                    "Evaluation failed for %s %s (%s); treating as deny",
                    request.method,
                    request.path,
                    exc.message,
                )
                result = Vote.DENIED
            if result is Vote.GRANTED:
                return Vote.GRANTED
            if result is Vote.DENIED:
                denied = True
        return Vote.DENIED if denied else Vote.ABSTAIN

    def decide(
        self,
        security: SecurityContext,
        request: HttpRequest,
        attributes: Sequence[ConfigAttribute] | None,
    ) -> None:
        """Return normally when access is granted.

        Raises
        ------
        AccessDenied
            If any voter denied, or all abstained and abstention does not
            grant.
        """
        result = self.poll(security, request, attributes)
        if result is Vote.GRANTED:
            return
        if result is Vote.ABSTAIN and self._allow_if_all_abstain:
            return
        raise AccessDenied(
            details={
                "method": request.method,
                "path": request.path,
                "principal": security.principal,
                "vote": result.name,
            },
        )

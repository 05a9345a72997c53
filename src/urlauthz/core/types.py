"""urlauthz shared domain types.

This module defines the value types consumed at request time: the inbound
request as seen by matchers, the security context supplied by the
authentication layer, and the vote enum returned by decision voters.

Key design decisions:
* ``HttpRequest`` and ``SecurityContext`` are *frozen* Pydantic v2 models
  so a single instance can be shared between concurrent lookups and
  evaluations without copying.
* ``Vote`` is an ``IntEnum`` so aggregators can sum or compare votes.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

ANONYMOUS_PRINCIPAL = "anonymousUser"
"""Principal name carried by the anonymous security context."""

ANONYMOUS_AUTHORITY = "ROLE_ANONYMOUS"
"""Authority granted to the anonymous security context."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Vote(enum.IntEnum):
    """Outcome of a single voter for a single authorization question."""

    GRANTED = 1
    ABSTAIN = 0
    DENIED = -1


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class HttpRequest(BaseModel):
    """The parts of an inbound HTTP request that rules can match against.

    ``path`` is the application-relative request path without the query
    string.  ``remote_address`` is the client IP address as seen by the
    server, or ``None`` when the transport does not expose it.
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    path: str = "/"
    remote_address: str | None = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("path")
    @classmethod
    def _strip_query(cls, value: str) -> str:
        path = value.split("?", 1)[0]
        return path or "/"


class SecurityContext(BaseModel):
    """The current principal as supplied by the authentication layer.

    The rule engine never authenticates anybody; it only reads this
    snapshot.
    """

    model_config = ConfigDict(frozen=True)

    principal: str | None = None
    authorities: frozenset[str] = Field(default_factory=frozenset)
    anonymous: bool = False
    remember_me: bool = False

    @classmethod
    def anonymous_user(
        cls, principal: str = ANONYMOUS_PRINCIPAL
    ) -> SecurityContext:
        """Return the context used for requests without authentication."""
        return cls(
            principal=principal,
            authorities=frozenset({ANONYMOUS_AUTHORITY}),
            anonymous=True,
        )

    @property
    def is_authenticated(self) -> bool:
        """``True`` for a non-anonymous context carrying a principal."""
        return not self.anonymous and self.principal is not None

    @property
    def is_fully_authenticated(self) -> bool:
        """``True`` when authenticated in this session (not remembered)."""
        return self.is_authenticated and not self.remember_me

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


@dataclass(frozen=True, slots=True)
class EvaluationContext:
    """Everything an expression handler may consult for one decision.

    Created per request by
    :meth:`~urlauthz.core.interfaces.ExpressionHandler.create_evaluation_context`.
    """

    security: SecurityContext
    request: HttpRequest

"""urlauthz core -- shared types, errors, configuration and interfaces."""
from __future__ import annotations

from urlauthz.core.config import DEFAULT_ROLE_PREFIX, AuthorizationConfig
from urlauthz.core.errors import (
    AccessDenied,
    AccessDeniedError,
    ConfigurationError,
    EvaluationError,
    IllegalState,
    InvalidArgument,
    InvalidExpression,
    MissingCapability,
    UnknownFunction,
    UrlAuthzError,
)
from urlauthz.core.interfaces import (
    AccessDecisionVoter,
    ExpressionHandler,
    RequestMatcher,
)
from urlauthz.core.types import (
    ANONYMOUS_AUTHORITY,
    ANONYMOUS_PRINCIPAL,
    EvaluationContext,
    HttpRequest,
    SecurityContext,
    Vote,
)

__all__ = [
    "ANONYMOUS_AUTHORITY",
    "ANONYMOUS_PRINCIPAL",
    "DEFAULT_ROLE_PREFIX",
    "AccessDecisionVoter",
    "AccessDenied",
    "AccessDeniedError",
    "AuthorizationConfig",
    "ConfigurationError",
    "EvaluationContext",
    "EvaluationError",
    "ExpressionHandler",
    "HttpRequest",
    "IllegalState",
    "InvalidArgument",
    "InvalidExpression",
    "MissingCapability",
    "RequestMatcher",
    "SecurityContext",
    "UnknownFunction",
    "UrlAuthzError",
    "Vote",
]

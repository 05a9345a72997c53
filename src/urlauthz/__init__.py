"""urlauthz -- ordered URL authorization rules.

Register (request pattern -> access requirement) rules in order; at
request time the first matching pattern's requirements are evaluated
against the current security context.

Packages
--------
* :mod:`urlauthz.core` -- types, errors, configuration, interfaces.
* :mod:`urlauthz.matching` -- request matchers (ant path, regex, IP).
* :mod:`urlauthz.access` -- requirements, registry, metadata source,
  voter, decision manager.
* :mod:`urlauthz.expression` -- the default expression handler.
* :mod:`urlauthz.configurer` -- the rule builder.
"""
from __future__ import annotations

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Access rules
# ---------------------------------------------------------------------------
from urlauthz.access import (
    AccessRequirement,
    AccessRule,
    AffirmativeDecisionManager,
    ConfigAttribute,
    LookupTable,
    MetadataSource,
    RuleRegistry,
    SecurityConfig,
    WebExpressionVoter,
)
from urlauthz.access.shorthand import (
    access,
    anonymous,
    authenticated,
    deny_all,
    fully_authenticated,
    has_any_authority,
    has_authority,
    has_ip_address,
    has_role,
    permit_all,
    remember_me,
)

# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------
from urlauthz.configurer import AuthorizedUrl, UrlAuthorizations

# ---------------------------------------------------------------------------
# Core types, errors, config, interfaces
# ---------------------------------------------------------------------------
from urlauthz.core.config import AuthorizationConfig
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
    EvaluationContext,
    HttpRequest,
    SecurityContext,
    Vote,
)

# ---------------------------------------------------------------------------
# Expression handling and matchers
# ---------------------------------------------------------------------------
from urlauthz.expression import DefaultExpressionHandler
from urlauthz.matching import (
    AntPathRequestMatcher,
    AnyRequestMatcher,
    IpAddressMatcher,
    RegexRequestMatcher,
)

__all__ = [
    "__version__",
    # Core
    "AuthorizationConfig",
    "EvaluationContext",
    "HttpRequest",
    "SecurityContext",
    "Vote",
    "AccessDecisionVoter",
    "ExpressionHandler",
    "RequestMatcher",
    # Error hierarchy
    "UrlAuthzError",
    "ConfigurationError",
    "EvaluationError",
    "AccessDeniedError",
    "InvalidArgument",
    "IllegalState",
    "InvalidExpression",
    "MissingCapability",
    "UnknownFunction",
    "AccessDenied",
    # Matchers
    "AntPathRequestMatcher",
    "AnyRequestMatcher",
    "IpAddressMatcher",
    "RegexRequestMatcher",
    # Access
    "AccessRequirement",
    "AccessRule",
    "AffirmativeDecisionManager",
    "ConfigAttribute",
    "LookupTable",
    "MetadataSource",
    "RuleRegistry",
    "SecurityConfig",
    "WebExpressionVoter",
    # Shorthand
    "access",
    "anonymous",
    "authenticated",
    "deny_all",
    "fully_authenticated",
    "has_any_authority",
    "has_authority",
    "has_ip_address",
    "has_role",
    "permit_all",
    "remember_me",
    # Expression handling
    "DefaultExpressionHandler",
    # Builder
    "AuthorizedUrl",
    "UrlAuthorizations",
]

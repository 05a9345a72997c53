"""URL access rules -- from shorthand calls to access decisions.

This subpackage provides:

* **Access attributes** -- :class:`SecurityConfig` tokens and the tagged
  :class:`AccessRequirement` variants.
* **Shorthand compiler** -- ``has_role``, ``has_authority``, ``permit_all``
  and friends (:mod:`urlauthz.access.shorthand`).
* **RuleRegistry** -- ordered rules compiled into a :class:`LookupTable`.
* **MetadataSource** -- first-match-wins lookup of a request's attributes.
* **WebExpressionVoter** -- grant/deny/abstain on those attributes.
* **AffirmativeDecisionManager** -- aggregates voters, fail-closed on
  evaluation errors.
"""
from __future__ import annotations

from urlauthz.access import shorthand
from urlauthz.access.attributes import (
    AccessRequirement,
    Anonymous,
    AnyAuthority,
    Authenticated,
    Authority,
    ConfigAttribute,
    DenyAll,
    FullyAuthenticated,
    IpAddress,
    PermitAll,
    RawExpression,
    RememberMe,
    Role,
    SecurityConfig,
)
from urlauthz.access.decision import AffirmativeDecisionManager
from urlauthz.access.metadata import MetadataSource
from urlauthz.access.registry import AccessRule, LookupTable, RuleRegistry
from urlauthz.access.voter import WebExpressionVoter

__all__ = [
    "AccessRequirement",
    "AccessRule",
    "AffirmativeDecisionManager",
    "Anonymous",
    "AnyAuthority",
    "Authenticated",
    "Authority",
    "ConfigAttribute",
    "DenyAll",
    "FullyAuthenticated",
    "IpAddress",
    "LookupTable",
    "MetadataSource",
    "PermitAll",
    "RawExpression",
    "RememberMe",
    "Role",
    "RuleRegistry",
    "SecurityConfig",
    "WebExpressionVoter",
    "shorthand",
]

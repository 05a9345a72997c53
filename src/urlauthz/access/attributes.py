"""Access attributes -- the requirements attached to a rule.

Every rule carries one or more :class:`ConfigAttribute` tokens.  Two kinds
exist:

* :class:`SecurityConfig` -- a plain, uninterpreted string token.  The
  expression voter does not understand these and abstains on them, so
  other voter kinds can be composed alongside it.
* :class:`AccessRequirement` -- a tagged variant produced by the shorthand
  functions in :mod:`urlauthz.access.shorthand`.  Each variant knows its
  canonical expression text, but only :class:`RawExpression` ever needs
  that text to be interpreted; every other variant is evaluated directly
  against the security context.

All attributes are immutable and hashable.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from urlauthz.core.config import DEFAULT_ROLE_PREFIX
from urlauthz.matching.ip import IpAddressMatcher

# ---------------------------------------------------------------------------
# Base types
# ---------------------------------------------------------------------------

class ConfigAttribute:
    """Base class for every attribute attached to an access rule."""

    __slots__ = ()

    @property
    def attribute(self) -> str:
        """The textual form of this attribute."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.attribute


class AccessRequirement(ConfigAttribute):
    """Base class for the requirements the expression voter understands."""

    __slots__ = ()

    @property
    def expression(self) -> str:
        """Canonical expression text for this requirement."""
        raise NotImplementedError

    @property
    def attribute(self) -> str:
        return self.expression


@dataclass(frozen=True, slots=True)
class SecurityConfig(ConfigAttribute):
    """A plain attribute token with no built-in meaning."""

    value: str

    @property
    def attribute(self) -> str:
        return self.value


def _quote(value: str) -> str:
    return "'" + value.replace("'", "\\'") + "'"


# ---------------------------------------------------------------------------
# Requirements with arguments
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Role(AccessRequirement):
    """Requires the role authority ``prefix + role``."""

    role: str
    prefix: str = DEFAULT_ROLE_PREFIX

    @property
    def authority(self) -> str:
        return self.prefix + self.role

    @property
    def expression(self) -> str:
        return f"hasRole({_quote(self.authority)})"


@dataclass(frozen=True, slots=True)
class Authority(AccessRequirement):
    """Requires one authority, compared verbatim."""

    authority: str

    @property
    def expression(self) -> str:
        return f"hasAuthority({_quote(self.authority)})"


@dataclass(frozen=True, slots=True)
class AnyAuthority(AccessRequirement):
    """Requires at least one of several authorities.

    With no authorities the requirement can never be satisfied.
    """

    authorities: tuple[str, ...]

    @property
    def expression(self) -> str:
        joined = "','".join(a.replace("'", "\\'") for a in self.authorities)
        return f"hasAnyAuthority('{joined}')"


@dataclass(frozen=True, slots=True)
class IpAddress(AccessRequirement):
    """Requires the client address to be inside an address or subnet."""

    address: str
    matcher: IpAddressMatcher = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "matcher", IpAddressMatcher(self.address))

    @property
    def expression(self) -> str:
        return f"hasIpAddress({_quote(self.address)})"


@dataclass(frozen=True, slots=True)
class RawExpression(AccessRequirement):
    """An arbitrary expression handed to the expression handler as-is."""

    text: str

    @property
    def expression(self) -> str:
        return self.text


# ---------------------------------------------------------------------------
# Sentinel requirements
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PermitAll(AccessRequirement):
    """Always satisfied."""

    token: ClassVar[str] = "permitAll"

    @property
    def expression(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class DenyAll(AccessRequirement):
    """Never satisfied."""

    token: ClassVar[str] = "denyAll"

    @property
    def expression(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class Anonymous(AccessRequirement):
    """Satisfied only by the anonymous security context."""

    token: ClassVar[str] = "anonymous"

    @property
    def expression(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class Authenticated(AccessRequirement):
    """Satisfied by any authenticated (non-anonymous) principal."""

    token: ClassVar[str] = "authenticated"

    @property
    def expression(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class FullyAuthenticated(AccessRequirement):
    """Satisfied by principals who authenticated and were not remembered."""

    token: ClassVar[str] = "fullyAuthenticated"

    @property
    def expression(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class RememberMe(AccessRequirement):
    """Satisfied by principals authenticated through remember-me."""

    token: ClassVar[str] = "rememberMe"

    @property
    def expression(self) -> str:
        return self.token

"""Shorthand compiler -- convenience calls to access requirements.

Pure, stateless functions.  Each validates its input and returns the
matching :class:`~urlauthz.access.attributes.AccessRequirement` variant;
nothing is registered and nothing is evaluated here.  Validation failures
raise :class:`~urlauthz.core.errors.InvalidArgument` so a bad rule aborts
configuration at startup.
"""
from __future__ import annotations

from urlauthz.access.attributes import (
    AnyAuthority,
    Anonymous,
    Authenticated,
    Authority,
    DenyAll,
    FullyAuthenticated,
    IpAddress,
    PermitAll,
    RawExpression,
    RememberMe,
    Role,
)
from urlauthz.core.config import DEFAULT_ROLE_PREFIX
from urlauthz.core.errors import InvalidArgument


def has_role(role: str | None, *, role_prefix: str = DEFAULT_ROLE_PREFIX) -> Role:
    """Require the role *role*; the role prefix is inserted automatically.

    Raises
    ------
    InvalidArgument
        If *role* is empty, or already starts with *role_prefix* (which
        would otherwise produce ``ROLE_ROLE_...``).
    """
    if not role:
        raise InvalidArgument("role cannot be empty", details={"role": role})
    if role.startswith(role_prefix):
        raise InvalidArgument(
            f"role should not start with '{role_prefix}' since it is "
            f"automatically inserted. Got '{role}'",
            details={"role": role, "role_prefix": role_prefix},
            resolution=f"Pass '{role[len(role_prefix):]}' or use has_authority().",
        )
    return Role(role, prefix=role_prefix)


def has_authority(authority: str | None) -> Authority:
    """Require *authority*, compared verbatim (no prefix handling)."""
    if not authority:
        raise InvalidArgument(
            "authority cannot be empty", details={"authority": authority}
        )
    return Authority(authority)


def has_any_authority(*authorities: str, reject_empty: bool = False) -> AnyAuthority:
    """Require at least one of *authorities*.

    Called with no authorities the result is never satisfied, i.e. it
    always denies.  Pass ``reject_empty=True`` to treat that case as a
    configuration error instead.
    """
    if not authorities and reject_empty:
        raise InvalidArgument(
            "has_any_authority() requires at least one authority"
        )
    for authority in authorities:
        if not authority:
            raise InvalidArgument(
                "authorities cannot contain empty values",
                details={"authorities": list(authorities)},
            )
    return AnyAuthority(tuple(authorities))


def has_ip_address(expression: str) -> IpAddress:
    """Require the client to originate from an address or CIDR subnet.

    Examples: ``"192.168.1.79"``, ``"192.168.0.0/24"``, ``"::1"``.
    """
    return IpAddress(expression)


def permit_all() -> PermitAll:
    return PermitAll()


def deny_all() -> DenyAll:
    return DenyAll()


def anonymous() -> Anonymous:
    return Anonymous()


def authenticated() -> Authenticated:
    return Authenticated()


def fully_authenticated() -> FullyAuthenticated:
    return FullyAuthenticated()


def remember_me() -> RememberMe:
    return RememberMe()


def access(expression: str) -> RawExpression:
    """Secure with an arbitrary expression, passed through unchanged.

    Example: ``"hasRole('ROLE_USER') and hasRole('ROLE_SUPER')"``.
    """
    return RawExpression(expression)

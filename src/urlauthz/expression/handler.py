"""Default expression handler.

Evaluates every :class:`~urlauthz.access.attributes.AccessRequirement`
against an :class:`~urlauthz.core.types.EvaluationContext`:

* tagged variants (roles, authorities, IP address, sentinels) are checked
  directly against the security context, no text is interpreted;
* :class:`~urlauthz.access.attributes.RawExpression` is compiled by
  :mod:`urlauthz.expression.parser` and evaluated against the functions
  and names listed below.

Functions: ``hasRole``, ``hasAnyRole``, ``hasAuthority``,
``hasAnyAuthority``, ``hasIpAddress``, ``isAnonymous``,
``isAuthenticated``, ``isFullyAuthenticated``, ``isRememberMe`` plus any
extra functions supplied at construction.

Names: ``permitAll``, ``denyAll``, ``anonymous``, ``authenticated``,
``fullyAuthenticated``, ``rememberMe``, ``principal``, ``true``,
``false``.

The handler keeps no per-request state and is safe for concurrent use.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any

from urlauthz.access.attributes import (
    AccessRequirement,
    Anonymous,
    AnyAuthority,
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
from urlauthz.core.config import AuthorizationConfig
from urlauthz.core.errors import (
    EvaluationError,
    InvalidExpression,
    MissingCapability,
    UnknownFunction,
)
from urlauthz.core.types import EvaluationContext, HttpRequest, SecurityContext
from urlauthz.expression.parser import (
    ExpressionEvaluator,
    call_arguments,
    compile_expression,
    referenced_names,
)
from urlauthz.matching.ip import IpAddressMatcher, parse_network

ExtraFunction = Callable[..., bool]
"""Signature of a user-supplied function: ``fn(context, *args) -> bool``."""

BUILTIN_FUNCTIONS = frozenset({
    "hasRole",
    "hasAnyRole",
    "hasAuthority",
    "hasAnyAuthority",
    "hasIpAddress",
    "isAnonymous",
    "isAuthenticated",
    "isFullyAuthenticated",
    "isRememberMe",
})

VARIABLE_NAMES = frozenset({
    "permitAll",
    "denyAll",
    "anonymous",
    "authenticated",
    "fullyAuthenticated",
    "rememberMe",
    "principal",
    "true",
    "false",
})

STRING_ARGUMENT_FUNCTIONS = frozenset({
    "hasRole",
    "hasAnyRole",
    "hasAuthority",
    "hasAnyAuthority",
    "hasIpAddress",
})
"""Built-in functions whose arguments must all be string literals."""


def _client_address(context: EvaluationContext) -> str:
    address = context.request.remote_address
    if address is None:
        raise MissingCapability(
            "hasIpAddress requires the client address, but the request has none",
            details={"path": context.request.path},
        )
    return address


@lru_cache(maxsize=256)
def _ip_matcher(expression: str) -> IpAddressMatcher:
    return IpAddressMatcher(expression)


def _check_ip(matcher: IpAddressMatcher, context: EvaluationContext) -> bool:
    return matcher.matches_address(_client_address(context))


# ---------------------------------------------------------------------------
# Direct evaluation of tagged variants
# ---------------------------------------------------------------------------

_DIRECT: dict[type[AccessRequirement], Callable[[Any, EvaluationContext], bool]] = {
    Role: lambda req, ctx: ctx.security.has_authority(req.authority),
    Authority: lambda req, ctx: ctx.security.has_authority(req.authority),
    AnyAuthority: lambda req, ctx: any(
        ctx.security.has_authority(a) for a in req.authorities
    ),
    IpAddress: lambda req, ctx: _check_ip(req.matcher, ctx),
    PermitAll: lambda req, ctx: True,
    DenyAll: lambda req, ctx: False,
    Anonymous: lambda req, ctx: ctx.security.anonymous,
    Authenticated: lambda req, ctx: ctx.security.is_authenticated,
    FullyAuthenticated: lambda req, ctx: ctx.security.is_fully_authenticated,
    RememberMe: lambda req, ctx: ctx.security.remember_me,
}


class DefaultExpressionHandler:
    """The shipped :class:`~urlauthz.core.interfaces.ExpressionHandler`.

    Parameters
    ----------
    config:
        Supplies the role prefix used by ``hasRole`` inside raw
        expressions.  Defaults to ``AuthorizationConfig()``.
    functions:
        Extra functions for raw expressions.  Each is called as
        ``fn(context, *args)`` and must return a ``bool``.
    """

    def __init__(
        self,
        config: AuthorizationConfig | None = None,
        *,
        functions: Mapping[str, ExtraFunction] | None = None,
    ) -> None:
        self._config = config or AuthorizationConfig()
        self._extra = dict(functions or {})

    @property
    def function_names(self) -> frozenset[str]:
        """Every function name a raw expression may call."""
        return BUILTIN_FUNCTIONS | frozenset(self._extra)

    # -- ExpressionHandler protocol ----------------------------------------

    def create_evaluation_context(
        self, security: SecurityContext, request: HttpRequest
    ) -> EvaluationContext:
        return EvaluationContext(security=security, request=request)

    def evaluate(
        self, requirement: AccessRequirement, context: EvaluationContext
    ) -> bool:
        if isinstance(requirement, RawExpression):
            return self._evaluate_raw(requirement.text, context)
        direct = _DIRECT.get(type(requirement))
        if direct is None:
            raise UnknownFunction(
                f"No evaluation rule for requirement {requirement!r}",
                details={"requirement": type(requirement).__name__},
            )
        return direct(requirement, context)

    def validate(self, requirement: AccessRequirement) -> None:
        """Compile raw expressions and check every referenced name exists."""
        if not isinstance(requirement, RawExpression):
            return
        tree = compile_expression(requirement.text)
        functions, variables = referenced_names(tree)
        unknown = sorted(functions - self.function_names)
        if unknown:
            raise InvalidExpression(
                f"Unknown function(s) {', '.join(unknown)} in {requirement.text!r}",
                details={"expression": requirement.text, "unknown": unknown},
            )
        unknown = sorted(variables - VARIABLE_NAMES)
        if unknown:
            raise InvalidExpression(
                f"Unknown name(s) {', '.join(unknown)} in {requirement.text!r}",
                details={"expression": requirement.text, "unknown": unknown},
            )
        for function in sorted((STRING_ARGUMENT_FUNCTIONS - set(self._extra)) & functions):
            for args in call_arguments(tree, function):
                bad = [a for a in args if not isinstance(a, str)]
                if bad:
                    raise InvalidExpression(
                        f"{function}() takes string arguments, got {bad[0]!r} "
                        f"in {requirement.text!r}",
                        details={"expression": requirement.text, "function": function},
                    )
        if "hasIpAddress" not in self._extra:
            for args in call_arguments(tree, "hasIpAddress"):
                for arg in args:
                    parse_network(arg)

    # -- raw expressions ---------------------------------------------------

    def _evaluate_raw(self, text: str, context: EvaluationContext) -> bool:
        tree = compile_expression(text)
        evaluator = ExpressionEvaluator(
            self._functions_for(context), self._variables_for(context)
        )
        return evaluator.evaluate(tree, text)

    def _role(self, role: str) -> str:
        if not isinstance(role, str):
            raise EvaluationError(
                f"Role must be a string, got {role!r}",
                details={"role_type": type(role).__name__},
            )
        prefix = self._config.role_prefix
        return role if role.startswith(prefix) else prefix + role

    def _functions_for(self, context: EvaluationContext) -> dict[str, Callable[..., Any]]:
        security = context.security
        functions: dict[str, Callable[..., Any]] = {
            "hasRole": lambda role: security.has_authority(self._role(role)),
            "hasAnyRole": lambda *roles: any(
                security.has_authority(self._role(r)) for r in roles
            ),
            "hasAuthority": security.has_authority,
            "hasAnyAuthority": lambda *authorities: any(
                security.has_authority(a) for a in authorities
            ),
            "hasIpAddress": lambda expression: _check_ip(
                _ip_matcher(expression), context
            ),
            "isAnonymous": lambda: security.anonymous,
            "isAuthenticated": lambda: security.is_authenticated,
            "isFullyAuthenticated": lambda: security.is_fully_authenticated,
            "isRememberMe": lambda: security.remember_me,
        }
        for name, fn in self._extra.items():
            functions[name] = lambda *args, _fn=fn: _fn(context, *args)
        return functions

    def _variables_for(self, context: EvaluationContext) -> dict[str, Any]:
        security = context.security
        return {
            "permitAll": True,
            "denyAll": False,
            "anonymous": security.anonymous,
            "authenticated": security.is_authenticated,
            "fullyAuthenticated": security.is_fully_authenticated,
            "rememberMe": security.remember_me,
            "principal": security.principal,
            "true": True,
            "false": False,
        }

"""URL authorization configurer -- builder for ordered access rules.

Two cooperating objects:

* :class:`UrlAuthorizations` owns the rule registry, the expression
  handler and the configuration.  It opens one :class:`AuthorizedUrl`
  per group of request patterns.
* :class:`AuthorizedUrl` holds that pattern group plus an explicit link
  back to its parent.  Each access call registers exactly one rule on
  the parent and returns the parent for the next group.

Usage::

    urls = UrlAuthorizations()
    urls.ant_matchers("/admin/**").has_role("ADMIN")
    urls.ant_matchers("/api/**", method="POST").authenticated()
    urls.any_request().permit_all()

    source = urls.create_metadata_source()
    voters = urls.decision_voters()

Rules are consulted in the order they are registered, so specific
patterns must come before broad ones.
"""
from __future__ import annotations

from urlauthz.access import shorthand
from urlauthz.access.attributes import AccessRequirement
from urlauthz.access.decision import AffirmativeDecisionManager
from urlauthz.access.metadata import MetadataSource
from urlauthz.access.registry import RuleRegistry
from urlauthz.access.voter import WebExpressionVoter
from urlauthz.core.config import AuthorizationConfig
from urlauthz.core.errors import InvalidArgument
from urlauthz.core.interfaces import ExpressionHandler, RequestMatcher
from urlauthz.expression.handler import DefaultExpressionHandler
from urlauthz.matching.path import (
    AntPathRequestMatcher,
    AnyRequestMatcher,
    RegexRequestMatcher,
)


class AuthorizedUrl:
    """One pattern group awaiting its access requirement."""

    def __init__(
        self, parent: UrlAuthorizations, patterns: tuple[RequestMatcher, ...]
    ) -> None:
        self._parent = parent
        self._patterns = patterns

    @property
    def patterns(self) -> tuple[RequestMatcher, ...]:
        return self._patterns

    def has_role(self, role: str) -> UrlAuthorizations:
        """Require *role*; do not include the role prefix, it is inserted."""
        return self._register(
            shorthand.has_role(role, role_prefix=self._parent.config.role_prefix)
        )

    def has_authority(self, authority: str) -> UrlAuthorizations:
        """Require *authority* exactly as given (e.g. ``"ROLE_ADMIN"``)."""
        return self._register(shorthand.has_authority(authority))

    def has_any_authority(self, *authorities: str) -> UrlAuthorizations:
        """Require at least one of *authorities*."""
        return self._register(
            shorthand.has_any_authority(
                *authorities,
                reject_empty=self._parent.config.reject_empty_any_authority,
            )
        )

    def has_ip_address(self, expression: str) -> UrlAuthorizations:
        """Require an address (``"192.168.1.79"``) or subnet (``"10.0.0.0/8"``)."""
        return self._register(shorthand.has_ip_address(expression))

    def permit_all(self) -> UrlAuthorizations:
        return self._register(shorthand.permit_all())

    def deny_all(self) -> UrlAuthorizations:
        return self._register(shorthand.deny_all())

    def anonymous(self) -> UrlAuthorizations:
        return self._register(shorthand.anonymous())

    def authenticated(self) -> UrlAuthorizations:
        return self._register(shorthand.authenticated())

    def fully_authenticated(self) -> UrlAuthorizations:
        """Require authentication in this session, not via remember-me."""
        return self._register(shorthand.fully_authenticated())

    def remember_me(self) -> UrlAuthorizations:
        return self._register(shorthand.remember_me())

    def access(self, expression: str) -> UrlAuthorizations:
        """Secure with an arbitrary expression.

        Example: ``"hasRole('USER') and hasIpAddress('10.0.0.0/8')"``.
        """
        return self._register(shorthand.access(expression))

    def _register(self, requirement: AccessRequirement) -> UrlAuthorizations:
        self._parent.registry.register(self._patterns, [requirement])
        return self._parent


class UrlAuthorizations:
    """Accumulates URL access rules and builds the runtime components.

    Parameters
    ----------
    config:
        Role prefix, empty-authority policy, path case sensitivity and
        abstain policy.  Defaults to ``AuthorizationConfig()``.
    """

    def __init__(self, config: AuthorizationConfig | None = None) -> None:
        self._config = config or AuthorizationConfig()
        self._registry = RuleRegistry()
        self._handler: ExpressionHandler = DefaultExpressionHandler(self._config)

    @property
    def config(self) -> AuthorizationConfig:
        return self._config

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def handler(self) -> ExpressionHandler:
        return self._handler

    def expression_handler(self, handler: ExpressionHandler) -> UrlAuthorizations:
        """Replace the default :class:`DefaultExpressionHandler`."""
        self._handler = handler
        return self

    # -- pattern groups ----------------------------------------------------

    def ant_matchers(self, *patterns: str, method: str | None = None) -> AuthorizedUrl:
        """Start a rule for ant-style path patterns (e.g. ``"/admin/**"``)."""
        if not patterns:
            raise InvalidArgument("ant_matchers() requires at least one pattern")
        return AuthorizedUrl(
            self,
            tuple(
                AntPathRequestMatcher(
                    p, method, case_sensitive=self._config.case_sensitive_paths
                )
                for p in patterns
            ),
        )

    def regex_matchers(self, *patterns: str, method: str | None = None) -> AuthorizedUrl:
        """Start a rule for regular expressions over the request path."""
        if not patterns:
            raise InvalidArgument("regex_matchers() requires at least one pattern")
        return AuthorizedUrl(
            self, tuple(RegexRequestMatcher(p, method) for p in patterns)
        )

    def request_matchers(self, *matchers: RequestMatcher) -> AuthorizedUrl:
        """Start a rule for arbitrary :class:`RequestMatcher` instances."""
        if not matchers:
            raise InvalidArgument("request_matchers() requires at least one matcher")
        return AuthorizedUrl(self, tuple(matchers))

    def any_request(self) -> AuthorizedUrl:
        """Start a catch-all rule.  Register it last."""
        return AuthorizedUrl(self, (AnyRequestMatcher(),))

    # -- runtime components ------------------------------------------------

    def decision_voters(self) -> list[WebExpressionVoter]:
        return [WebExpressionVoter(self._handler)]

    def decision_manager(self) -> AffirmativeDecisionManager:
        """Affirmative manager over :meth:`decision_voters`."""
        return AffirmativeDecisionManager(
            self.decision_voters(),
            allow_if_all_abstain=self._config.allow_if_all_abstain,
        )

    def create_metadata_source(self) -> MetadataSource | None:
        """Compile the registry and wrap it.

        Returns ``None`` when no rule was registered, meaning no
        authorization stage should be installed.  Freezes the registry.
        """
        return MetadataSource.build(self._registry.compile(), self._handler)

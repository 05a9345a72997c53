"""Shared fixtures for urlauthz conformance tests.

Provides builders, security contexts and a request factory reused by
every conformance level.
"""
from __future__ import annotations

from collections.abc import Callable

import pytest

from urlauthz import (
    DefaultExpressionHandler,
    HttpRequest,
    RuleRegistry,
    SecurityContext,
    UrlAuthorizations,
    WebExpressionVoter,
)

# ---------------------------------------------------------------------------
# Builders and components
# ---------------------------------------------------------------------------
@pytest.fixture()
def urls() -> UrlAuthorizations:
    return UrlAuthorizations()


@pytest.fixture()
def registry() -> RuleRegistry:
    return RuleRegistry()


@pytest.fixture()
def handler() -> DefaultExpressionHandler:
    return DefaultExpressionHandler()


@pytest.fixture()
def voter(handler: DefaultExpressionHandler) -> WebExpressionVoter:
    return WebExpressionVoter(handler)


# ---------------------------------------------------------------------------
# Security contexts
# ---------------------------------------------------------------------------
@pytest.fixture()
def admin_user() -> SecurityContext:
    return SecurityContext(
        principal="admin", authorities=frozenset({"ROLE_ADMIN", "ROLE_USER"})
    )


@pytest.fixture()
def plain_user() -> SecurityContext:
    return SecurityContext(principal="user", authorities=frozenset({"ROLE_USER"}))


@pytest.fixture()
def holder_of_x() -> SecurityContext:
    return SecurityContext(principal="x-holder", authorities=frozenset({"X"}))


@pytest.fixture()
def anonymous_user() -> SecurityContext:
    return SecurityContext.anonymous_user()


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_request() -> Callable[..., HttpRequest]:
    """Factory: ``make_request("/path", method="GET", remote=None)``."""

    def _make(path: str, method: str = "GET", remote: str | None = None) -> HttpRequest:
        return HttpRequest(method=method, path=path, remote_address=remote)

    return _make

"""Level 2 -- Request lookup conformance tests.

Verifies the metadata source: absence when no rules exist, first match
wins, no-match result and idempotent lookup.
"""
from __future__ import annotations

from collections.abc import Callable

import pytest

from urlauthz import (
    DefaultExpressionHandler,
    HttpRequest,
    InvalidExpression,
    MetadataSource,
    RuleRegistry,
    UrlAuthorizations,
)
from urlauthz.access.attributes import Authenticated, DenyAll, PermitAll, Role

# ===================================================================
# Build
# ===================================================================

class TestBuild:
    def test_MUST_return_none_for_empty_table(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        assert MetadataSource.build(registry.compile(), handler) is None

    def test_MUST_return_none_for_builder_without_rules(
        self, urls: UrlAuthorizations
    ) -> None:
        assert urls.create_metadata_source() is None

    def test_MUST_reject_malformed_raw_expression(self, urls: UrlAuthorizations) -> None:
        urls.ant_matchers("/x").access("hasRole('A') and and")
        with pytest.raises(InvalidExpression):
            urls.create_metadata_source()


# ===================================================================
# Lookup
# ===================================================================

class TestFirstMatchWins:
    def test_MUST_return_first_matching_rule(
        self, urls: UrlAuthorizations, make_request: Callable[..., HttpRequest]
    ) -> None:
        urls.ant_matchers("/admin/**").has_role("ADMIN")
        urls.ant_matchers("/**").permit_all()
        source = urls.create_metadata_source()
        assert source is not None
        assert source.lookup(make_request("/admin/x")) == (Role("ADMIN"),)
        assert source.lookup(make_request("/home")) == (PermitAll(),)

    def test_MUST_let_earlier_broad_rule_shadow_later_specific_rule(
        self, urls: UrlAuthorizations, make_request: Callable[..., HttpRequest]
    ) -> None:
        urls.ant_matchers("/**").authenticated()
        urls.ant_matchers("/admin/**").deny_all()
        source = urls.create_metadata_source()
        assert source is not None
        assert source.lookup(make_request("/admin/x")) == (Authenticated(),)

    def test_MUST_return_none_when_nothing_matches(
        self, urls: UrlAuthorizations, make_request: Callable[..., HttpRequest]
    ) -> None:
        urls.ant_matchers("/admin/**").deny_all()
        source = urls.create_metadata_source()
        assert source is not None
        assert source.lookup(make_request("/public")) is None

    def test_MUST_be_idempotent(
        self, urls: UrlAuthorizations, make_request: Callable[..., HttpRequest]
    ) -> None:
        urls.ant_matchers("/admin/**").deny_all()
        urls.any_request().permit_all()
        source = urls.create_metadata_source()
        assert source is not None
        request = make_request("/admin/x")
        results = {source.lookup(request) for _ in range(5)}
        assert results == {(DenyAll(),)}

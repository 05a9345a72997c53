"""Tests for the access subpackage.

This module covers:

1. **Shorthand compiler** -- role prefixing, authority pass-through,
   any-authority joining, IP validation, sentinels, raw expressions.
2. **Access attributes** -- expression text, equality, hashing.
3. **Rule registry** -- validation, ordering, duplicate patterns, freezing.
4. **Metadata source** -- first match wins, absence vs. no-match,
   raw-expression validation at build time, idempotent lookup.
"""
from __future__ import annotations

import pytest

from urlauthz.access import shorthand
from urlauthz.access.attributes import (
    AnyAuthority,
    Authority,
    DenyAll,
    IpAddress,
    PermitAll,
    RawExpression,
    Role,
    SecurityConfig,
)
from urlauthz.access.metadata import MetadataSource
from urlauthz.access.registry import AccessRule, LookupTable, RuleRegistry
from urlauthz.core.errors import IllegalState, InvalidArgument, InvalidExpression
from urlauthz.core.types import HttpRequest
from urlauthz.expression import DefaultExpressionHandler
from urlauthz.matching import AntPathRequestMatcher, AnyRequestMatcher

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def registry() -> RuleRegistry:
    """An empty, unfrozen rule registry."""
    return RuleRegistry()


@pytest.fixture
def handler() -> DefaultExpressionHandler:
    """The default expression handler."""
    return DefaultExpressionHandler()


ADMIN = AntPathRequestMatcher("/admin/**")
API = AntPathRequestMatcher("/api/**")
EVERYTHING = AntPathRequestMatcher("/**")


def _request(path: str, method: str = "GET") -> HttpRequest:
    return HttpRequest(method=method, path=path)


# ===================================================================
# Shorthand compiler
# ===================================================================

class TestHasRole:
    """has_role() inserts the role prefix exactly once."""

    @pytest.mark.parametrize("role", ["ADMIN", "USER", "ops-team", "R"])
    def test_prefix_inserted_once(self, role: str) -> None:
        req = shorthand.has_role(role)
        assert isinstance(req, Role)
        assert req.authority == f"ROLE_{role}"
        assert req.expression == f"hasRole('ROLE_{role}')"
        assert req.expression.count("ROLE_") == 1

    @pytest.mark.parametrize("role", ["ROLE_ADMIN", "ROLE_", "ROLE_ROLE_X"])
    def test_prefixed_role_rejected(self, role: str) -> None:
        with pytest.raises(InvalidArgument, match="should not start with 'ROLE_'"):
            shorthand.has_role(role)

    @pytest.mark.parametrize("role", ["", None])
    def test_empty_role_rejected(self, role: str | None) -> None:
        with pytest.raises(InvalidArgument):
            shorthand.has_role(role)

    def test_custom_prefix(self) -> None:
        req = shorthand.has_role("ADMIN", role_prefix="GROUP_")
        assert req.authority == "GROUP_ADMIN"
        with pytest.raises(InvalidArgument):
            shorthand.has_role("GROUP_ADMIN", role_prefix="GROUP_")

    def test_lowercase_prefix_is_not_the_prefix(self) -> None:
        """Prefix detection is case-sensitive, like authority comparison."""
        assert shorthand.has_role("role_x").authority == "ROLE_role_x"


class TestHasAuthority:
    def test_verbatim(self) -> None:
        req = shorthand.has_authority("ROLE_ADMIN")
        assert req == Authority("ROLE_ADMIN")
        assert req.expression == "hasAuthority('ROLE_ADMIN')"

    def test_empty_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            shorthand.has_authority("")


class TestHasAnyAuthority:
    def test_joined_with_delimiter(self) -> None:
        req = shorthand.has_any_authority("ROLE_USER", "ROLE_ADMIN")
        assert req == AnyAuthority(("ROLE_USER", "ROLE_ADMIN"))
        assert req.expression == "hasAnyAuthority('ROLE_USER','ROLE_ADMIN')"

    def test_empty_allowed_by_default(self) -> None:
        req = shorthand.has_any_authority()
        assert req.authorities == ()
        assert req.expression == "hasAnyAuthority('')"

    def test_empty_rejected_when_configured(self) -> None:
        with pytest.raises(InvalidArgument, match="at least one authority"):
            shorthand.has_any_authority(reject_empty=True)

    def test_empty_member_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            shorthand.has_any_authority("ROLE_USER", "")


class TestHasIpAddress:
    @pytest.mark.parametrize(
        "expression", ["192.168.1.79", "192.168.0.0/24", "::1", "fe80::/10"]
    )
    def test_valid(self, expression: str) -> None:
        req = shorthand.has_ip_address(expression)
        assert isinstance(req, IpAddress)
        assert req.expression == f"hasIpAddress('{expression}')"

    @pytest.mark.parametrize("expression", ["", "not-an-ip", "10.0.0.0/99", "300.1.1.1"])
    def test_invalid(self, expression: str) -> None:
        with pytest.raises(InvalidArgument):
            shorthand.has_ip_address(expression)


class TestSentinelsAndRaw:
    @pytest.mark.parametrize(
        ("factory", "token"),
        [
            (shorthand.permit_all, "permitAll"),
            (shorthand.deny_all, "denyAll"),
            (shorthand.anonymous, "anonymous"),
            (shorthand.authenticated, "authenticated"),
            (shorthand.fully_authenticated, "fullyAuthenticated"),
            (shorthand.remember_me, "rememberMe"),
        ],
    )
    def test_sentinel_tokens(self, factory, token: str) -> None:
        req = factory()
        assert req.expression == token
        assert str(req) == token
        assert req == type(req)()

    def test_sentinels_are_distinct(self) -> None:
        assert PermitAll() != DenyAll()
        assert len({PermitAll(), PermitAll(), DenyAll()}) == 2

    def test_access_passes_text_through(self) -> None:
        text = "hasRole('ROLE_USER') and hasRole('ROLE_SUPER')"
        assert shorthand.access(text) == RawExpression(text)
        assert shorthand.access(text).expression == text

    def test_access_does_not_validate(self) -> None:
        """Raw text is only checked when the metadata source is built."""
        assert shorthand.access("((( nonsense").text == "((( nonsense"


# ===================================================================
# Rule registry
# ===================================================================

class TestAccessRule:
    def test_empty_patterns_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="request pattern"):
            AccessRule(patterns=(), attributes=(PermitAll(),))

    def test_empty_attributes_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="access attribute"):
            AccessRule(patterns=(ADMIN,), attributes=())

    def test_non_matcher_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="Not a request matcher"):
            AccessRule(patterns=("/admin/**",), attributes=(PermitAll(),))  # type: ignore[arg-type]


class TestRuleRegistry:
    def test_register_then_compile(self, registry: RuleRegistry) -> None:
        rule = registry.register([ADMIN], [shorthand.has_role("ADMIN")])
        assert rule.patterns == (ADMIN,)
        table = registry.compile()
        assert table[ADMIN] == (Role("ADMIN"),)

    def test_empty_patterns_rejected(self, registry: RuleRegistry) -> None:
        with pytest.raises(InvalidArgument):
            registry.register([], [PermitAll()])
        assert len(registry) == 0

    def test_empty_attributes_rejected(self, registry: RuleRegistry) -> None:
        with pytest.raises(InvalidArgument):
            registry.register([ADMIN], [])
        assert len(registry) == 0

    def test_strings_become_security_config(self, registry: RuleRegistry) -> None:
        rule = registry.register([ADMIN], ["ROLE_ADMIN"])
        assert rule.attributes == (SecurityConfig("ROLE_ADMIN"),)

    def test_unsupported_attribute_rejected(self, registry: RuleRegistry) -> None:
        with pytest.raises(InvalidArgument):
            registry.register([ADMIN], [42])  # type: ignore[list-item]

    def test_bare_string_attributes_rejected(self, registry: RuleRegistry) -> None:
        """A lone string is not split into one attribute per character."""
        with pytest.raises(InvalidArgument, match="collection of access attributes"):
            registry.register([ADMIN], "ROLE_USER")  # type: ignore[arg-type]
        assert len(registry) == 0

    def test_single_attribute_rejected(self, registry: RuleRegistry) -> None:
        with pytest.raises(InvalidArgument):
            registry.register([ADMIN], PermitAll())  # type: ignore[arg-type]

    @pytest.mark.parametrize("patterns", [ADMIN, "/admin/**"])
    def test_single_pattern_rejected(self, registry: RuleRegistry, patterns) -> None:
        with pytest.raises(InvalidArgument, match="collection of request matchers"):
            registry.register(patterns, [PermitAll()])
        assert len(registry) == 0

    def test_order_preserved(self, registry: RuleRegistry) -> None:
        registry.register([ADMIN], [shorthand.has_role("ADMIN")])
        registry.register([API, AntPathRequestMatcher("/rpc/**")], [shorthand.authenticated()])
        registry.register([EVERYTHING], [shorthand.permit_all()])
        table = registry.compile()
        assert list(table) == [ADMIN, API, AntPathRequestMatcher("/rpc/**"), EVERYTHING]

    def test_duplicate_pattern_replaced_in_first_position(
        self, registry: RuleRegistry
    ) -> None:
        registry.register([ADMIN], [shorthand.has_role("ADMIN")])
        registry.register([API], [shorthand.authenticated()])
        registry.register([AntPathRequestMatcher("/admin/**")], [shorthand.deny_all()])
        table = registry.compile()
        assert list(table) == [ADMIN, API]
        assert table[ADMIN] == (DenyAll(),)
        # The registry itself still records all three registrations.
        assert len(registry.rules) == 3

    def test_frozen_after_compile(self, registry: RuleRegistry) -> None:
        registry.register([ADMIN], [PermitAll()])
        assert not registry.frozen
        registry.compile()
        assert registry.frozen
        with pytest.raises(IllegalState):
            registry.register([API], [PermitAll()])

    def test_compile_twice_returns_same_table(self, registry: RuleRegistry) -> None:
        registry.register([ADMIN], [PermitAll()])
        assert registry.compile() is registry.compile()

    def test_empty_registry_compiles_to_empty_table(self, registry: RuleRegistry) -> None:
        table = registry.compile()
        assert len(table) == 0
        assert not table


class TestLookupTable:
    def test_read_only_mapping(self) -> None:
        table = LookupTable([(ADMIN, (PermitAll(),))])
        with pytest.raises(TypeError):
            table[API] = (PermitAll(),)  # type: ignore[index]
        assert dict(table) == {ADMIN: (PermitAll(),)}

    def test_entries_are_ordered_pairs(self) -> None:
        table = LookupTable([(API, (DenyAll(),)), (ADMIN, (PermitAll(),))])
        assert table.entries() == ((API, (DenyAll(),)), (ADMIN, (PermitAll(),)))


# ===================================================================
# Metadata source
# ===================================================================

class TestMetadataSource:
    def test_build_empty_returns_none(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        assert MetadataSource.build(registry.compile(), handler) is None

    def test_first_match_wins(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([ADMIN], [shorthand.has_role("ADMIN")])
        registry.register([EVERYTHING], [shorthand.permit_all()])
        source = MetadataSource.build(registry.compile(), handler)
        assert source is not None
        assert source.lookup(_request("/admin/panel")) == (Role("ADMIN"),)
        assert source.lookup(_request("/public/home")) == (PermitAll(),)

    def test_broad_rule_first_shadows_later(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([EVERYTHING], [shorthand.permit_all()])
        registry.register([ADMIN], [shorthand.deny_all()])
        source = MetadataSource.build(registry.compile(), handler)
        assert source is not None
        assert source.lookup(_request("/admin/panel")) == (PermitAll(),)

    def test_no_match_returns_none(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([ADMIN], [shorthand.has_role("ADMIN")])
        source = MetadataSource.build(registry.compile(), handler)
        assert source is not None
        assert source.lookup(_request("/public")) is None

    def test_lookup_idempotent(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([ADMIN], [shorthand.has_role("ADMIN"), "AUDIT"])
        source = MetadataSource.build(registry.compile(), handler)
        assert source is not None
        request = _request("/admin/users")
        first = source.lookup(request)
        second = source.lookup(request)
        assert first == second == (Role("ADMIN"), SecurityConfig("AUDIT"))

    def test_method_specific_patterns(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register(
            [AntPathRequestMatcher("/api/**", method="POST")], [shorthand.has_role("WRITER")]
        )
        registry.register([API], [shorthand.authenticated()])
        source = MetadataSource.build(registry.compile(), handler)
        assert source is not None
        assert source.lookup(_request("/api/items", "POST")) == (Role("WRITER"),)
        assert source.lookup(_request("/api/items", "GET")) == (shorthand.authenticated(),)

    def test_all_attributes_distinct_in_order(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([ADMIN], [shorthand.has_role("ADMIN")])
        registry.register([API], [shorthand.authenticated(), shorthand.has_role("ADMIN")])
        registry.register([AnyRequestMatcher()], [shorthand.permit_all()])
        source = MetadataSource.build(registry.compile(), handler)
        assert source is not None
        assert source.all_attributes == (
            Role("ADMIN"),
            shorthand.authenticated(),
            PermitAll(),
        )
        assert len(source) == 3
        assert source.expression_handler is handler

    def test_malformed_raw_expression_fails_build(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([ADMIN], [shorthand.access("hasRole('ADMIN' and")])
        with pytest.raises(InvalidExpression):
            MetadataSource.build(registry.compile(), handler)

    def test_unknown_function_fails_build(
        self, registry: RuleRegistry, handler: DefaultExpressionHandler
    ) -> None:
        registry.register([ADMIN], [shorthand.access("isSuperUser()")])
        with pytest.raises(InvalidExpression, match="isSuperUser"):
            MetadataSource.build(registry.compile(), handler)

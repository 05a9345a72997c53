"""Request matchers -- the patterns access rules are registered under."""
from __future__ import annotations

from urlauthz.matching.ip import IpAddressMatcher, parse_network
from urlauthz.matching.path import (
    MATCH_ALL,
    AntPathRequestMatcher,
    AnyRequestMatcher,
    RegexRequestMatcher,
    clear_pattern_cache,
    pattern_cache_info,
)

__all__ = [
    "MATCH_ALL",
    "AntPathRequestMatcher",
    "AnyRequestMatcher",
    "IpAddressMatcher",
    "RegexRequestMatcher",
    "clear_pattern_cache",
    "parse_network",
    "pattern_cache_info",
]

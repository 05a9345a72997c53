"""Path-based request matchers.

Provides the request patterns rules are registered under:

* :class:`AntPathRequestMatcher` -- ant-style wildcards (``?``, ``*``,
  ``**``), the usual way of writing URL rules.
* :class:`RegexRequestMatcher` -- full regular expressions over the path.
* :class:`AnyRequestMatcher` -- matches every request (catch-all rule).

Matchers are frozen dataclasses: equal definitions hash and compare
equal, which is what the compiled lookup table keys on.  Compiled
patterns are cached at module level, so constructing the same matcher
many times costs a single compilation.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from urlauthz.core.errors import InvalidArgument
from urlauthz.core.types import HttpRequest

MATCH_ALL = "/**"
"""Ant pattern that selects every request path."""


# ---------------------------------------------------------------------------
# Compiled pattern cache (module-level)
# ---------------------------------------------------------------------------

def _ant_to_regex(pattern: str) -> str:
    """Translate an ant-style *pattern* into an anchored-by-fullmatch regex.

    * ``?`` matches one character other than ``/``.
    * ``*`` matches zero or more characters within a path segment.
    * ``/**`` as a whole segment matches zero or more path segments.
    * any other ``**`` matches any run of characters.
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("/**", i) and (i + 3 == n or pattern[i + 3] == "/"):
            parts.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return "".join(parts)


@lru_cache(maxsize=512)
def _compile_ant(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(_ant_to_regex(pattern), flags)


@lru_cache(maxsize=512)
def _compile_regex(pattern: str, case_insensitive: bool) -> re.Pattern[str]:
    """Compile and cache a user-supplied regex.

    Raises
    ------
    InvalidArgument
        If the pattern is syntactically invalid.
    """
    flags = re.IGNORECASE if case_insensitive else 0
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise InvalidArgument(
            f"Invalid regex request pattern {pattern!r}: {exc}",
            details={"pattern": pattern},
        ) from exc


def _normalise_method(method: str | None) -> str | None:
    return method.upper() if method else None


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AntPathRequestMatcher:
    """Matches the request path against an ant-style pattern.

    Parameters
    ----------
    pattern:
        The ant pattern, e.g. ``"/admin/**"`` or ``"/api/*/items"``.
    method:
        Optional HTTP method; when given, only requests with that method
        match.
    case_sensitive:
        Whether path comparison is case-sensitive (default ``True``).
    """

    pattern: str
    method: str | None = None
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        if not self.pattern:
            raise InvalidArgument("Ant pattern cannot be empty")
        object.__setattr__(self, "method", _normalise_method(self.method))

    def matches(self, request: HttpRequest) -> bool:
        if self.method is not None and request.method != self.method:
            return False
        if self.pattern in (MATCH_ALL, "**"):
            return True
        compiled = _compile_ant(self.pattern, self.case_sensitive)
        return compiled.fullmatch(request.path) is not None

    def __str__(self) -> str:
        if self.method:
            return f"Ant [pattern='{self.pattern}', {self.method}]"
        return f"Ant [pattern='{self.pattern}']"


@dataclass(frozen=True, slots=True)
class RegexRequestMatcher:
    """Matches the whole request path against a regular expression."""

    pattern: str
    method: str | None = None
    case_insensitive: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", _normalise_method(self.method))
        # Invalid patterns raise here, at configuration time.
        _compile_regex(self.pattern, self.case_insensitive)

    def matches(self, request: HttpRequest) -> bool:
        if self.method is not None and request.method != self.method:
            return False
        compiled = _compile_regex(self.pattern, self.case_insensitive)
        return compiled.fullmatch(request.path) is not None

    def __str__(self) -> str:
        if self.method:
            return f"Regex [pattern='{self.pattern}', {self.method}]"
        return f"Regex [pattern='{self.pattern}']"


@dataclass(frozen=True, slots=True)
class AnyRequestMatcher:
    """Matches every request."""

    def matches(self, request: HttpRequest) -> bool:
        return True

    def __str__(self) -> str:
        return "any request"


# ---------------------------------------------------------------------------
# Cache management
# ---------------------------------------------------------------------------

def clear_pattern_cache() -> None:
    """Clear the compiled pattern caches."""
    _compile_ant.cache_clear()
    _compile_regex.cache_clear()


def pattern_cache_info() -> dict[str, Any]:
    """Return cache statistics for both pattern caches."""
    return {
        "ant": _compile_ant.cache_info(),
        "regex": _compile_regex.cache_info(),
    }

"""Rule registry -- ordered access rules and their compiled lookup table.

Rules are registered at configuration time, in order.  Order is the only
tie-break between overlapping patterns: the first registered rule whose
pattern matches a request governs it, and later matching rules are
never consulted.

Compiling the registry produces a :class:`LookupTable` with one entry per
pattern, in registration order.  When the *same* pattern (by equality)
is registered twice, the later attribute set replaces the earlier one
while the entry keeps the position of its first occurrence.

Once compiled, the registry is frozen: further registration raises
:class:`~urlauthz.core.errors.IllegalState`.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from urlauthz.access.attributes import ConfigAttribute, SecurityConfig
from urlauthz.core.errors import IllegalState, InvalidArgument
from urlauthz.core.interfaces import RequestMatcher

logger = logging.getLogger(__name__)

Attributes = tuple[ConfigAttribute, ...]


def _as_attribute(value: ConfigAttribute | str) -> ConfigAttribute:
    if isinstance(value, ConfigAttribute):
        return value
    if isinstance(value, str) and value:
        return SecurityConfig(value)
    raise InvalidArgument(
        f"Unsupported access attribute: {value!r}",
        details={"attribute": repr(value)},
    )


# ---------------------------------------------------------------------------
# Access rule
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AccessRule:
    """One or more request patterns plus the attributes guarding them.

    Attributes
    ----------
    patterns:
        The request matchers this rule applies to (non-empty).
    attributes:
        The access attributes, all of which must hold (non-empty).
    """

    patterns: tuple[RequestMatcher, ...]
    attributes: Attributes

    def __post_init__(self) -> None:
        if not self.patterns:
            raise InvalidArgument("An access rule needs at least one request pattern")
        if not self.attributes:
            raise InvalidArgument("An access rule needs at least one access attribute")
        for pattern in self.patterns:
            if not isinstance(pattern, RequestMatcher):
                raise InvalidArgument(
                    f"Not a request matcher: {pattern!r}",
                    details={"pattern": repr(pattern)},
                )


# ---------------------------------------------------------------------------
# Lookup table
# ---------------------------------------------------------------------------

class LookupTable(Mapping[RequestMatcher, Attributes]):
    """Read-only, insertion-ordered mapping of pattern to attributes.

    Iteration follows registration order, which is the order
    :class:`~urlauthz.access.metadata.MetadataSource` scans in.
    """

    __slots__ = ("_index", "_entries")

    def __init__(
        self, entries: Iterable[tuple[RequestMatcher, Attributes]] = ()
    ) -> None:
        index: dict[RequestMatcher, Attributes] = {}
        for matcher, attributes in entries:
            if matcher in index:
                logger.debug(
                    "Pattern %s registered again; replacing %s with %s",
                    matcher,
                    [str(a) for a in index[matcher]],
                    [str(a) for a in attributes],
                )
            index[matcher] = tuple(attributes)
        self._index = index
        self._entries: tuple[tuple[RequestMatcher, Attributes], ...] = tuple(
            index.items()
        )

    def __getitem__(self, matcher: RequestMatcher) -> Attributes:
        return self._index[matcher]

    def __iter__(self) -> Iterator[RequestMatcher]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[tuple[RequestMatcher, Attributes], ...]:
        """Return the ordered ``(pattern, attributes)`` pairs."""
        return self._entries

    def __repr__(self) -> str:
        return f"LookupTable({len(self)} entries)"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class RuleRegistry:
    """Append-only, ordered collection of :class:`AccessRule`.

    Not thread-safe; it is populated once during application startup.
    """

    def __init__(self) -> None:
        self._rules: list[AccessRule] = []
        self._table: LookupTable | None = None

    @property
    def frozen(self) -> bool:
        """``True`` once :meth:`compile` has been called."""
        return self._table is not None

    @property
    def rules(self) -> tuple[AccessRule, ...]:
        """Registered rules in registration order."""
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def register(
        self,
        patterns: Iterable[RequestMatcher],
        attributes: Iterable[ConfigAttribute | str],
    ) -> AccessRule:
        """Append a rule mapping *patterns* to *attributes*.

        Bare strings in *attributes* become
        :class:`~urlauthz.access.attributes.SecurityConfig` tokens.

        Raises
        ------
        InvalidArgument
            If *patterns* or *attributes* is empty, or is a single
            string, matcher or attribute instead of a collection.
        IllegalState
            If the registry has already been compiled.
        """
        if self.frozen:
            raise IllegalState(
                "Cannot register access rules after the registry was compiled",
                details={"registered_rules": len(self._rules)},
            )
        if isinstance(patterns, (str, RequestMatcher)):
            raise InvalidArgument(
                f"patterns must be a collection of request matchers, got {patterns!r}",
                details={"patterns": repr(patterns)},
            )
        if isinstance(attributes, (str, ConfigAttribute)):
            raise InvalidArgument(
                f"attributes must be a collection of access attributes, got {attributes!r}",
                details={"attributes": repr(attributes)},
            )
        rule = AccessRule(
            patterns=tuple(patterns),
            attributes=tuple(_as_attribute(a) for a in attributes),
        )
        self._rules.append(rule)
        return rule

    def compile(self) -> LookupTable:
        """Build the ordered lookup table and freeze the registry.

        Compiling twice returns the same table.
        """
        if self._table is None:
            self._table = LookupTable(
                (pattern, rule.attributes)
                for rule in self._rules
                for pattern in rule.patterns
            )
            logger.info(
                "Compiled %d access rule(s) into %d lookup entries",
                len(self._rules),
                len(self._table),
            )
        return self._table

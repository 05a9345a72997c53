"""IP address / subnet matching.

Backs the ``has_ip_address`` requirement.  Accepts a literal IPv4 or IPv6
address (``"192.168.1.79"``) or a CIDR subnet (``"192.168.0.0/24"``).
An IPv4 client never matches an IPv6 network and vice versa.
"""
from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field

from urlauthz.core.errors import InvalidArgument
from urlauthz.core.types import HttpRequest

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def parse_network(expression: str) -> IPNetwork:
    """Parse *expression* into a network.

    A literal address becomes a single-host network.  Host bits set in a
    CIDR expression are ignored (``"10.0.0.7/8"`` is ``10.0.0.0/8``).

    Raises
    ------
    InvalidArgument
        If *expression* is neither an address nor a subnet.
    """
    if not expression or not expression.strip():
        raise InvalidArgument("IP address expression cannot be empty")
    try:
        return ipaddress.ip_network(expression.strip(), strict=False)
    except ValueError as exc:
        raise InvalidArgument(
            f"Invalid IP address or subnet: {expression!r}",
            details={"expression": expression},
        ) from exc


@dataclass(frozen=True, slots=True)
class IpAddressMatcher:
    """Matches a client address against an address or subnet."""

    expression: str
    network: IPNetwork = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "network", parse_network(self.expression))

    def matches_address(self, address: str) -> bool:
        """Return ``True`` if *address* lies inside the configured network.

        Unparseable addresses never match.
        """
        try:
            client = ipaddress.ip_address(address.strip())
        except ValueError:
            return False
        if client.version != self.network.version:
            return False
        return client in self.network

    def matches(self, request: HttpRequest) -> bool:
        if request.remote_address is None:
            return False
        return self.matches_address(request.remote_address)

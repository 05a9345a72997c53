#!/usr/bin/env python3
"""urlauthz quickstart.

Demonstrates:
1. Registering ordered URL rules with the builder.
2. Building the metadata source and decision manager.
3. Deciding a handful of requests for different principals.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import logging

from urlauthz import (
    AccessDenied,
    HttpRequest,
    SecurityContext,
    UrlAuthorizations,
)

DIVIDER = "-" * 60


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # ================================================================
    # Step 1: Register rules, most specific first
    # ================================================================
    print(DIVIDER)
    print("Step 1: Register rules")
    print(DIVIDER)

    urls = UrlAuthorizations()
    urls.ant_matchers("/login", "/static/**").permit_all()
    urls.ant_matchers("/admin/**").has_role("ADMIN")
    urls.ant_matchers("/reports/**", method="POST").access(
        "hasRole('ANALYST') and hasIpAddress('10.0.0.0/8')"
    )
    urls.any_request().authenticated()

    for rule in urls.registry.rules:
        patterns = ", ".join(str(p) for p in rule.patterns)
        attributes = ", ".join(str(a) for a in rule.attributes)
        print(f"  {patterns:<50} -> {attributes}")

    # ================================================================
    # Step 2: Build runtime components
    # ================================================================
    print(f"\n{DIVIDER}")
    print("Step 2: Build metadata source and decision manager")
    print(DIVIDER)

    source = urls.create_metadata_source()
    assert source is not None
    manager = urls.decision_manager()
    print(f"  {len(source)} request pattern(s), {len(manager.voters)} voter(s)")

    # ================================================================
    # Step 3: Decide requests
    # ================================================================
    print(f"\n{DIVIDER}")
    print("Step 3: Decide requests")
    print(DIVIDER)

    admin = SecurityContext(principal="alice", authorities=frozenset({"ROLE_ADMIN"}))
    analyst = SecurityContext(principal="bob", authorities=frozenset({"ROLE_ANALYST"}))
    guest = SecurityContext.anonymous_user()

    cases = [
        (guest, HttpRequest(path="/login")),
        (guest, HttpRequest(path="/admin/users")),
        (admin, HttpRequest(path="/admin/users")),
        (analyst, HttpRequest(method="POST", path="/reports/q3", remote_address="10.2.3.4")),
        (analyst, HttpRequest(method="POST", path="/reports/q3", remote_address="8.8.8.8")),
        (guest, HttpRequest(path="/home")),
        (analyst, HttpRequest(path="/home")),
    ]
    for security, request in cases:
        try:
            manager.decide(security, request, source.lookup(request))
            outcome = "GRANTED"
        except AccessDenied as exc:
            outcome = f"DENIED ({exc.code})"
        print(f"  {security.principal:<14} {request.method:<5} {request.path:<16} {outcome}")


if __name__ == "__main__":
    main()

"""
Store diff -- a read-only comparison oracle for two decrypted stores.

Walks store metadata, then the union of profile names, then the union
of site hosts, counting every mismatch and reporting one line each.
Secrets are never echoed; only their byte lengths are.

Usage:
    lines: list[str] = []
    count = diff_stores(old, new, report=lines.append)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from .models import Profile, Site, Store

logger = logging.getLogger("baccounts.diff")

T = TypeVar("T")

SITE_FIELDS = ("url", "name", "secret", "account")


def _secret_repr(secret: str) -> str:
    return f"({len(secret.encode('utf-8'))} bytes)"


class _Differ:
    """Accumulates the mismatch count and forwards report lines."""

    def __init__(self, report: Callable[[str], None]):
        self.report = report
        self.count = 0

    def mismatch(self, line: str) -> None:
        self.count += 1
        self.report(line)

    def paired(
        self,
        where: str,
        kind: str,
        lhs: dict[str, T],
        rhs: dict[str, T],
        recurse: Callable[[str, T, T], None],
    ) -> None:
        """Classify every key of ``lhs | rhs`` and recurse into shared ones."""
        for key in sorted(lhs.keys() | rhs.keys()):
            in_lhs, in_rhs = key in lhs, key in rhs
            label = f"{where}{kind} {key}"
            if in_lhs and in_rhs:
                recurse(label, lhs[key], rhs[key])
            elif in_lhs:
                self.mismatch(f"{label}: only in left")
            elif in_rhs:
                self.mismatch(f"{label}: only in right")
            else:
                raise RuntimeError(f"{label} is in neither store")

    def store(self, lhs: Store, rhs: Store) -> None:
        if lhs.schema_version != rhs.schema_version:
            self.mismatch(
                f"version mismatch: {lhs.schema_version} != {rhs.schema_version}"
            )
        if lhs.default_account != rhs.default_account:
            self.mismatch(
                f"default account mismatch: {lhs.default_account} != {rhs.default_account}"
            )
        self.paired("", "profile", _by_name(lhs), _by_name(rhs), self.profile)

    def profile(self, label: str, lhs: Profile, rhs: Profile) -> None:
        self.paired(f"{label} / ", "site", lhs.sites, rhs.sites, self.site)

    def site(self, label: str, lhs: Site, rhs: Site) -> None:
        for field in SITE_FIELDS:
            left, right = getattr(lhs, field), getattr(rhs, field)
            if left == right:
                continue
            if field == "secret":
                left, right = _secret_repr(left), _secret_repr(right)
            self.mismatch(f"{label}: {field} mismatch: {left} != {right}")


def _by_name(store: Store) -> dict[str, Profile]:
    # first profile with a given name wins, as in Store.find_profile
    profiles: dict[str, Profile] = {}
    for profile in store.profiles:
        profiles.setdefault(profile.name, profile)
    return profiles


def diff_stores(
    lhs: Store, rhs: Store, report: Optional[Callable[[str], None]] = None
) -> int:
    """Compare two stores field by field.

    Args:
        lhs: Left-hand store.
        rhs: Right-hand store.
        report: Called once per mismatch with a human-readable line.
            Defaults to logging each line at INFO.

    Returns:
        Total number of mismatches (0 means structurally identical).
    """
    differ = _Differ(report or logger.info)
    differ.store(lhs, rhs)
    logger.debug("Diff complete: %d mismatch(es)", differ.count)
    return differ.count

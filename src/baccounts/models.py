"""
Pydantic models for the credential store document.

A Store holds an ordered list of Profiles; a Profile holds Sites keyed
by host. Field aliases are the capitalized names existing data files
use on the wire, and declaration order is serialization order.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Callable, Iterator, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import AmbiguousOrMissingSite, InvalidUrl, MalformedStore, NotFound

if TYPE_CHECKING:
    from pathlib import Path

    from .gateway import Gateway

logger = logging.getLogger("baccounts.models")

SCHEMA_VERSION = "0.1.0"


def parse_host(url: str) -> str:
    """Extract the host component of a URL.

    The port is kept and any userinfo is dropped, so
    ``https://bob@mail.example.com:8443/x`` yields ``mail.example.com:8443``.

    Args:
        url: Absolute URL with a scheme.

    Returns:
        The host (and port, if any).

    Raises:
        InvalidUrl: If the URL cannot be parsed or carries no host.
    """
    try:
        parts = urlsplit(url)
        # .port raises on a malformed port
        parts.port
    except ValueError as exc:
        raise InvalidUrl(f"Cannot parse {url!r} as a URL: {exc}") from exc

    host = parts.netloc.rpartition("@")[2]
    if not parts.scheme or not host:
        raise InvalidUrl(f"URL {url!r} has no host (did you forget the scheme?)")
    return host


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Site(_Document):
    """One site credential record."""

    url: str = Field(alias="Url")
    name: str = Field(default="", alias="Name")
    secret: str = Field(default="", alias="EncodedPass")
    account: str = Field(default="", alias="Mail")

    @classmethod
    def from_url(cls, url: str, secret: str, account: str = "") -> Site:
        """Build a site whose display name is derived from the URL host.

        Raises:
            InvalidUrl: If ``url`` has no parsable host.
        """
        return cls(url=url, name=parse_host(url), secret=secret, account=account)

    @property
    def host(self) -> str:
        """Host parsed from ``url``; the key this site is stored under."""
        return parse_host(self.url)


class Profile(_Document):
    """A named set of sites keyed by host."""

    name: str = Field(alias="Name")
    sites: dict[str, Site] = Field(default_factory=dict, alias="Sites")
    is_default: bool = Field(default=False, alias="Default")

    @field_validator("sites", mode="before")
    @classmethod
    def _null_sites(cls, value):
        return {} if value is None else value

    def find_site(self, query: str) -> Site:
        """Return the only site whose URL contains ``query``.

        Zero matches and several matches are both failures; a
        candidate is never picked on the caller's behalf.

        Raises:
            AmbiguousOrMissingSite: Unless exactly one site matches.
        """
        matches = [site for site in self.sites.values() if query in site.url]
        if len(matches) != 1:
            logger.debug(
                "Query %r matched %d site(s) in profile %s",
                query, len(matches), self.name,
            )
            raise AmbiguousOrMissingSite(query, sorted(s.url for s in matches))
        return matches[0]

    def update_site(self, site: Site) -> None:
        """Insert or replace ``site`` under the host parsed from its URL.

        Raises:
            InvalidUrl: If the site's URL has no parsable host.
        """
        host = parse_host(site.url)
        if host in self.sites:
            logger.info("Replacing site %s in profile %s", host, self.name)
        self.sites[host] = site


class Store(_Document):
    """The whole decrypted document: every profile plus store metadata."""

    profiles: list[Profile] = Field(default_factory=list, alias="Profiles")
    default_account: str = Field(default="", alias="DefaultMail")
    schema_version: str = Field(default=SCHEMA_VERSION, alias="Version")

    @field_validator("profiles", mode="before")
    @classmethod
    def _null_profiles(cls, value):
        return [] if value is None else value

    @model_validator(mode="after")
    def _warn_on_duplicates(self) -> Store:
        dupes = [n for n, c in Counter(p.name for p in self.profiles).items() if c > 1]
        if dupes:
            logger.warning(
                "Duplicate profile names %s: only the first of each is used",
                ", ".join(sorted(dupes)),
            )
        defaults = [p.name for p in self.profiles if p.is_default]
        if len(defaults) > 1:
            logger.warning(
                "Several default profiles (%s): %s wins",
                ", ".join(defaults), defaults[0],
            )
        return self

    @classmethod
    def new(cls, account: str, profile_name: Optional[str] = None) -> Store:
        """Create a fresh store with one default profile.

        Args:
            account: Default account identifier (also the gpg recipient
                fallback).
            profile_name: Name of the first profile. Defaults to ``account``.
        """
        first = Profile(name=profile_name or account, is_default=True)
        return cls(profiles=[first], default_account=account)

    # ------------------------------------------------------------------
    # Lookup and mutation
    # ------------------------------------------------------------------

    def find_profile(self, name: str = "") -> Optional[Profile]:
        """Find a profile by exact name, or the default one if ``name`` is empty."""
        if not name:
            return next((p for p in self.profiles if p.is_default), None)
        return next((p for p in self.profiles if p.name == name), None)

    def update_profile(self, profile: Profile) -> None:
        """Replace the first stored profile with the same name, in place.

        Raises:
            NotFound: If no profile has that name. The store is untouched.
        """
        for index, existing in enumerate(self.profiles):
            if existing.name == profile.name:
                self.profiles[index] = profile
                return
        raise NotFound(f"Profile not found: {profile.name}")

    def set_default(self, name: str) -> Profile:
        """Make ``name`` the only default profile.

        Raises:
            NotFound: If no profile has that name. No flag is changed.
        """
        target = self.find_profile(name) if name else None
        if target is None:
            raise NotFound(f"Profile not found: {name}")
        for profile in self.profiles:
            profile.is_default = False
        target.is_default = True
        return target

    def iter_sites(self) -> Iterator[tuple[Profile, str, Site]]:
        """Yield ``(profile, host, site)`` for every stored site."""
        for profile in self.profiles:
            for host, site in profile.sites.items():
                yield profile, host, site

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        """Serialize to the pretty-printed wire format."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, data: bytes | str) -> Store:
        """Parse the wire format.

        Raises:
            MalformedStore: If ``data`` is not a valid store document.
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as exc:
            raise MalformedStore(f"Invalid store format: {exc}") from exc

    # ------------------------------------------------------------------
    # Encrypted boundary and comparison
    # ------------------------------------------------------------------

    @classmethod
    def decrypt(cls, path: Path, gateway: Optional[Gateway] = None) -> Store:
        """Load a store from an encrypted file. See :meth:`Gateway.decrypt`."""
        from .gateway import Gateway

        return (gateway or Gateway()).decrypt(path)

    def encrypt(
        self, recipient: str, path: Path, gateway: Optional[Gateway] = None
    ) -> None:
        """Write this store to an encrypted file. See :meth:`Gateway.encrypt`."""
        from .gateway import Gateway

        (gateway or Gateway()).encrypt(self, recipient, path)

    def diff(
        self, other: Store, report: Optional[Callable[[str], None]] = None
    ) -> int:
        """Count structural mismatches against ``other``. See :func:`diff_stores`."""
        from .diff import diff_stores

        return diff_stores(self, other, report=report)

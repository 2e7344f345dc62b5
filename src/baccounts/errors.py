"""Exceptions raised by the baccounts core.

Every failure is surfaced once to the caller; nothing here retries.
"""

from __future__ import annotations

from typing import Optional


class BaccountsError(Exception):
    """Base class for every error the core raises."""


class NotFound(BaccountsError):
    """Raised when a store file or a profile to replace does not exist."""


class AmbiguousOrMissingSite(BaccountsError):
    """Raised when a site query matches zero or more than one site.

    Attributes:
        query: The substring that was searched for.
        matches: URLs of every site that matched.
    """

    def __init__(self, query: str, matches: Optional[list[str]] = None):
        self.query = query
        self.matches = list(matches or [])
        if not self.matches:
            msg = f"No site matching '{query}' found"
        else:
            msg = (
                f"{len(self.matches)} sites matched '{query}': "
                + ", ".join(self.matches)
            )
        super().__init__(msg)

    @property
    def count(self) -> int:
        """Number of sites that matched."""
        return len(self.matches)


class InvalidUrl(BaccountsError):
    """Raised when a site URL cannot be parsed or has no host."""


class MalformedStore(BaccountsError):
    """Raised when decrypted plaintext is not a valid store document."""


class DecryptFailed(BaccountsError):
    """Raised when the decrypt subprocess cannot start or exits non-zero."""


class EncryptFailed(BaccountsError):
    """Raised when the encrypt subprocess cannot start, be fed, or exits non-zero."""


class KeyListingFailed(BaccountsError):
    """Raised when gpg cannot be run to list keys or exits non-zero."""

"""Shared test fixtures for baccounts."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest

from baccounts.gateway import Gateway
from baccounts.models import Profile, Site, Store

ARMOR_HEADER = b"-----BEGIN FAKE MESSAGE-----\n"
ARMOR_FOOTER = b"\n-----END FAKE MESSAGE-----\n"


class FakeCipher:
    """In-process stand-in for gpg.

    "Encrypts" by base64-armoring the plaintext with the recipient in a
    header line, and records every call so tests can inspect them.
    """

    def __init__(self):
        self.encrypted: list[tuple[bytes, str]] = []
        self.decrypted: list[Path] = []

    def encrypt(self, plaintext: bytes, recipient: str) -> bytes:
        self.encrypted.append((plaintext, recipient))
        body = base64.b64encode(plaintext)
        return ARMOR_HEADER + recipient.encode() + b"\n" + body + ARMOR_FOOTER

    def decrypt(self, path: Path) -> bytes:
        self.decrypted.append(path)
        data = Path(path).read_bytes()
        body = data[len(ARMOR_HEADER):-len(ARMOR_FOOTER)]
        _recipient, _, payload = body.partition(b"\n")
        return base64.b64decode(payload)


@pytest.fixture
def fake_cipher() -> FakeCipher:
    """Provide a fake cipher that needs no keyring."""
    return FakeCipher()


@pytest.fixture
def gateway(fake_cipher: FakeCipher) -> Gateway:
    """Provide a gateway wired to the fake cipher."""
    return Gateway(fake_cipher)


@pytest.fixture
def alice_store() -> Store:
    """Store with a default profile 'alice' holding one mail site."""
    alice = Profile(name="alice", is_default=True)
    alice.update_site(Site(
        url="https://mail.example.com",
        name="mail.example.com",
        secret="s1",
        account="a@example.com",
    ))
    return Store(profiles=[alice], default_account="a@example.com")


@pytest.fixture
def two_profile_store(alice_store: Store) -> Store:
    """alice (default) plus a 'work' profile with two sites."""
    work = Profile(name="work")
    work.update_site(Site.from_url("https://a.example.com/login", "d29yazE=", "w@corp.test"))
    work.update_site(Site.from_url("https://a.example.org/login", "d29yazI=", "w@corp.test"))
    store = alice_store.model_copy(deep=True)
    store.profiles.append(work)
    return store

"""Tests for the store diff engine."""

from __future__ import annotations

import pytest

from baccounts.diff import diff_stores
from baccounts.models import Profile, Site, Store


def _collect(lhs: Store, rhs: Store) -> tuple[int, list[str]]:
    lines: list[str] = []
    count = diff_stores(lhs, rhs, report=lines.append)
    return count, lines


class TestIdentity:
    """diff(store, store) == 0."""

    def test_same_object(self, two_profile_store: Store):
        """A store has no mismatches with itself."""
        assert _collect(two_profile_store, two_profile_store) == (0, [])

    def test_equal_copies(self, two_profile_store: Store):
        """A deep copy has no mismatches either."""
        assert two_profile_store.diff(two_profile_store.model_copy(deep=True)) == 0

    def test_empty_stores(self):
        """Two empty stores are identical."""
        assert diff_stores(Store(), Store()) == 0


class TestSecretMismatch:
    """The alice scenario: one secret changed."""

    def test_exactly_one_mismatch_without_leak(self, alice_store: Store):
        """Only byte counts are reported for a secret."""
        other = alice_store.model_copy(deep=True)
        other.profiles[0].sites["mail.example.com"].secret = "s2"

        count, lines = _collect(alice_store, other)

        assert count == 1
        assert len(lines) == 1
        assert "secret mismatch" in lines[0]
        assert "(2 bytes) != (2 bytes)" in lines[0]
        assert "s1" not in lines[0]
        assert "s2" not in lines[0]

    def test_byte_count_is_utf8_length(self, alice_store: Store):
        """Multibyte secrets are measured in bytes, not characters."""
        other = alice_store.model_copy(deep=True)
        other.profiles[0].sites["mail.example.com"].secret = "é"
        _, lines = _collect(alice_store, other)
        assert "(2 bytes) != (2 bytes)" in lines[0]

    def test_store_diff_method_reports(self, alice_store: Store):
        """Store.diff forwards report lines."""
        other = alice_store.model_copy(deep=True)
        other.profiles[0].sites["mail.example.com"].secret = "longer-secret"
        lines: list[str] = []
        assert alice_store.diff(other, report=lines.append) == 1
        assert "(2 bytes) != (13 bytes)" in lines[0]


class TestStructuralMismatches:
    """Metadata, profile and site set differences."""

    def test_metadata_fields(self, alice_store: Store):
        """Version and default account each count once."""
        other = alice_store.model_copy(deep=True)
        other.schema_version = "9.9"
        other.default_account = "b@example.com"

        count, lines = _collect(alice_store, other)

        assert count == 2
        assert any(line.startswith("version mismatch") for line in lines)
        assert any("default account mismatch" in line for line in lines)

    def test_profile_only_on_one_side(self, alice_store: Store, two_profile_store: Store):
        """A missing profile counts once, however many sites it holds."""
        count, lines = _collect(alice_store.model_copy(deep=True), two_profile_store)
        assert count == 1
        assert lines == ["profile work: only in right"]

        count, lines = _collect(two_profile_store, alice_store)
        assert lines == ["profile work: only in left"]

    def test_site_only_on_one_side(self, alice_store: Store):
        """A site present on one side counts once."""
        other = alice_store.model_copy(deep=True)
        other.profiles[0].update_site(Site.from_url("https://new.example", "x"))
        count, lines = _collect(alice_store, other)
        assert count == 1
        assert lines == ["profile alice / site new.example: only in right"]

    def test_every_site_field_counts(self, alice_store: Store):
        """url, name, secret and account are compared independently."""
        other = alice_store.model_copy(deep=True)
        other.profiles[0].sites["mail.example.com"] = Site(
            url="https://mail.example.com/inbox",
            name="Mail",
            secret="s1-rotated",
            account="alice@example.com",
        )
        count, lines = _collect(alice_store, other)
        assert count == 4
        fields = sorted(line.split(": ")[1].split()[0] for line in lines)
        assert fields == ["account", "name", "secret", "url"]

    def test_default_flag_not_compared(self, alice_store: Store):
        """Only names, hosts and site fields count; the default flag does not."""
        other = alice_store.model_copy(deep=True)
        other.profiles[0].is_default = False
        assert diff_stores(alice_store, other) == 0

    def test_count_is_symmetric(self, alice_store: Store, two_profile_store: Store):
        """Swapping sides gives the same count."""
        left = alice_store.model_copy(deep=True)
        left.profiles[0].sites["mail.example.com"].secret = "zzz"
        assert diff_stores(left, two_profile_store) == diff_stores(two_profile_store, left)


@pytest.mark.parametrize("prefix", ["", "s1"])
def test_default_report_goes_to_log(caplog, alice_store: Store, prefix: str):
    """Without a report callback, lines are logged under baccounts.diff."""
    other = alice_store.model_copy(deep=True)
    other.profiles[0].sites["mail.example.com"].secret = prefix + "-changed"
    with caplog.at_level("INFO", logger="baccounts.diff"):
        assert diff_stores(alice_store, other) == 1
    assert "secret mismatch" in caplog.text
    assert "-changed" not in caplog.text


def test_duplicate_profile_names_use_first(alice_store: Store):
    """With duplicated names the first profile is the one compared."""
    other = alice_store.model_copy(deep=True)
    other.profiles.append(Profile(name="alice"))
    assert diff_stores(alice_store, other) == 0

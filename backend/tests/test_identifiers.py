"""Tests for identifier validation and generation."""

import pytest

from flowquest import identifiers
from flowquest.identifiers import generate_identifier, is_valid_identifier


class TestIdentifierValidation:

    def test_accepts_24_lowercase_hex(self):
        assert is_valid_identifier("507f1f77bcf86cd799439011")

    @pytest.mark.parametrize("value", [
        "507f1f77bcf86cd79943901",      # 23 chars
        "507f1f77bcf86cd7994390111",    # 25 chars
        "507F1F77BCF86CD799439011",     # uppercase
        "507f1f77bcf86cd79943901g",     # non-hex
        " 507f1f77bcf86cd79943901",
        "",
    ])
    def test_rejects_malformed_strings(self, value):
        assert not is_valid_identifier(value)

    @pytest.mark.parametrize("value", [None, 12345, b"507f1f77bcf86cd799439011", ["507f1f77bcf86cd799439011"]])
    def test_rejects_non_strings(self, value):
        assert not is_valid_identifier(value)


class TestIdentifierGeneration:

    def test_generated_identifiers_are_valid(self):
        for _ in range(100):
            assert is_valid_identifier(generate_identifier())

    def test_generated_identifiers_are_unique(self):
        ids = {generate_identifier() for _ in range(1000)}
        assert len(ids) == 1000

    def test_generated_identifiers_sort_in_creation_order(self):
        """Successive identifiers increase, so sorting by id keeps insertion order."""
        ids = [generate_identifier() for _ in range(1000)]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_order_survives_counter_wrap_within_one_second(self, monkeypatch):
        monkeypatch.setattr(identifiers.time, "time", lambda: 1_700_000_000.5)
        monkeypatch.setattr(identifiers, "_last_seconds", 0)
        monkeypatch.setattr(identifiers, "_counter", 0xFFFFFD)

        ids = [generate_identifier() for _ in range(4)]
        assert ids == sorted(ids)
        assert [i[-6:] for i in ids] == ["fffffe", "ffffff", "000000", "000001"]

    def test_order_survives_clock_moving_backwards(self, monkeypatch):
        now = [1_700_000_100.0]
        monkeypatch.setattr(identifiers.time, "time", lambda: now[0])
        monkeypatch.setattr(identifiers, "_last_seconds", 0)

        first = generate_identifier()
        now[0] -= 50
        assert generate_identifier() > first

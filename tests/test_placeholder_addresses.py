"""
Ducat Ledger Placeholder Address Tests
"""

import pytest

from ducat.core.errors import PlaceholderAddressError
from ducat.core.field import FieldElement
from ducat.org.organization import Organization
from ducat.testing import create_known_addresses


class TestCreateKnownAddresses:
    """Tests for create_known_addresses."""

    def test_disabled_by_default(self, monkeypatch):
        """Test the helper refuses to run unless enabled."""
        monkeypatch.delenv("DUCAT_ENABLE_PLACEHOLDER_ADDRESSES", raising=False)
        with pytest.raises(PlaceholderAddressError):
            create_known_addresses(3)

    def test_enabled_by_env(self, placeholders_enabled):
        """Test addresses are offset-based field elements."""
        assert create_known_addresses(3, offset=10) == [
            FieldElement(10), FieldElement(11), FieldElement(12),
        ]

    def test_explicit_enable(self, monkeypatch):
        """Test enabled=True overrides the environment."""
        monkeypatch.delenv("DUCAT_ENABLE_PLACEHOLDER_ADDRESSES", raising=False)
        assert create_known_addresses(2, enabled=True) == [FieldElement(0), FieldElement(1)]

    def test_empty(self, placeholders_enabled):
        """Test zero addresses."""
        assert create_known_addresses(0, offset=5) == []

    def test_negative(self, placeholders_enabled):
        """Test negative arguments are rejected."""
        with pytest.raises(ValueError):
            create_known_addresses(-1)

    def test_disjoint_ranges_build_organizations(self, placeholders_enabled):
        """Test non-overlapping offsets give organizations distinct addresses."""
        a = Organization.create("a", 0, create_known_addresses(4, offset=0))
        b = Organization.create("b", 0, create_known_addresses(4, offset=4))
        assert not set(a.known_public_keys) & set(b.known_public_keys)

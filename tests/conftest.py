"""
Ducat Ledger Test Fixtures
"""

import pytest

from ducat.constants import PLACEHOLDER_ADDRESSES_ENV
from ducat.core.field import FieldElement
from ducat.identity.address import AddressIdentity
from ducat.ledger.snapshot import Ledger
from ducat.org.organization import Organization
from ducat.protocol.transaction import TransactionRecord


@pytest.fixture
def alice() -> AddressIdentity:
    """Deterministic identity A."""
    return AddressIdentity.derive(0xA11CE)


@pytest.fixture
def bob() -> AddressIdentity:
    """Deterministic identity B."""
    return AddressIdentity.derive(0xB0B)


@pytest.fixture
def carol() -> AddressIdentity:
    """Deterministic identity C."""
    return AddressIdentity.derive(0xCA201)


@pytest.fixture
def org_a(alice) -> Organization:
    """Organization with balance 100 owning alice."""
    return Organization.create("org-a", 100, [alice.public_identity()])


@pytest.fixture
def transfer_ab(alice, bob) -> TransactionRecord:
    """Transfer of 10 from alice to bob."""
    return TransactionRecord(alice.public_identity(), bob.public_identity(), 10)


@pytest.fixture
def serial_numbers() -> list:
    """Distinct serial numbers."""
    return [FieldElement(1000 + i) for i in range(5)]


@pytest.fixture
def empty_ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def placeholders_enabled(monkeypatch):
    """Enable placeholder address generation for one test."""
    monkeypatch.setenv(PLACEHOLDER_ADDRESSES_ENV, "1")

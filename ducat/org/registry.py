"""
Ducat Ledger Organization Registry

Explicit identifier -> Organization mapping, owned by the caller and passed
to whatever processes an epoch. There is no module-level registry.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ducat.core.errors import RegistryError
from ducat.core.field import FieldLike
from ducat.org.organization import Organization
from ducat.protocol.transaction import Transaction

logger = logging.getLogger(__name__)


class OrganizationRegistry:
    """Organizations keyed by identifier."""

    def __init__(self, organizations: Iterable[Organization] = ()):
        self._organizations: Dict[str, Organization] = {}
        for org in organizations:
            self.add(org)

    def add(self, org: Organization) -> Organization:
        """
        Raises:
            RegistryError: identifier already registered
        """
        if org.identifier in self._organizations:
            raise RegistryError(f"Organization already registered: {org.identifier}")
        self._organizations[org.identifier] = org
        return org

    def create(
        self,
        identifier: str,
        initial_balance: int,
        known_public_identities: Iterable[FieldLike] = (),
    ) -> Organization:
        """Create and register an organization."""
        if identifier in self._organizations:
            raise RegistryError(f"Organization already registered: {identifier}")
        return self.add(Organization.create(identifier, initial_balance, known_public_identities))

    def get(self, identifier: str) -> Optional[Organization]:
        return self._organizations.get(identifier)

    def __getitem__(self, identifier: str) -> Organization:
        try:
            return self._organizations[identifier]
        except KeyError:
            raise RegistryError(f"Unknown organization: {identifier}") from None

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._organizations

    def __iter__(self) -> Iterator[Organization]:
        return iter(list(self._organizations.values()))

    def __len__(self) -> int:
        return len(self._organizations)

    def identifiers(self) -> List[str]:
        return list(self._organizations)

    def involved_in(self, transaction: Transaction) -> List[Organization]:
        """Organizations owning the sender or receiver identity."""
        return [org for org in self._organizations.values() if org.is_involved(transaction)]

    def record_transaction(
        self,
        transaction: Transaction,
        serial_number: Optional[FieldLike] = None,
        root: Optional[FieldLike] = None,
    ) -> List[str]:
        """
        Route a transaction's commitments to every involved organization.

        Only the sending side records the serial number. Every involved
        organization is checked first, so a repeat at any of them leaves
        all of them unchanged.

        Returns:
            Identifiers of the organizations that recorded it

        Raises:
            DuplicateCommitmentError: an involved organization already holds
                the serial number or root
        """
        involved = self.involved_in(transaction)
        for org in involved:
            org.check_transaction(transaction, serial_number=serial_number, root=root)

        recorded = []
        for org in involved:
            org.record_transaction(transaction, serial_number=serial_number, root=root)
            recorded.append(org.identifier)
        if not recorded:
            logger.debug("Transaction involves no registered organization")
        return recorded

    def total_balance(self) -> int:
        return sum(org.final_balance for org in self._organizations.values())

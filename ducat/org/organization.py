"""
Ducat Ledger Organizations

An organization aggregates addresses and a balance. Between epochs it caches
the serial numbers it spent and the transaction roots it referenced; at the
epoch boundary those caches are validated against a ledger snapshot and the
pending balance delta is reconciled.

Balance invariant:
    final_balance == initial_balance + sum(closed epoch deltas)
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from ducat.core.errors import DuplicateCommitmentError
from ducat.core.field import FieldElement, FieldLike, to_field_element
from ducat.crypto.merkle import MerkleProof
from ducat.ledger.snapshot import (
    KIND_SERIAL_NUMBER,
    KIND_TRANSACTION_ROOT,
    LedgerSnapshot,
)
from ducat.org.validation import (
    ValidationResult,
    check_inclusion_proofs,
    check_membership,
)
from ducat.protocol.transaction import Transaction

logger = logging.getLogger(__name__)

KIND_PUBLIC_IDENTITY = "public identity"

LedgerSet = Union[LedgerSnapshot, Iterable[object]]


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    return value


class _OrderedCommitments:
    """Append-only list with a mirror set; rejects repeats."""

    __slots__ = ("kind", "_items", "_members")

    def __init__(self, kind: str):
        self.kind = kind
        self._items: List[FieldElement] = []
        self._members: Set[FieldElement] = set()

    def check(self, commitment: FieldLike) -> FieldElement:
        """Coerce without adding; raises DuplicateCommitmentError on a repeat."""
        value = to_field_element(commitment)
        if value in self._members:
            raise DuplicateCommitmentError(self.kind, value)
        return value

    def add(self, commitment: FieldLike) -> FieldElement:
        value = self.check(commitment)
        self._items.append(value)
        self._members.add(value)
        return value

    def __contains__(self, commitment: object) -> bool:
        return commitment in self._members

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> Tuple[FieldElement, ...]:
        return tuple(self._items)


class Organization:
    """
    Per-account ledger state and validation.

    Owned by one epoch-processing task at a time; not thread-safe.
    """

    def __init__(self, identifier: str, initial_balance: int = 0):
        if not isinstance(identifier, str) or not identifier:
            raise ValueError("Organization identifier must be a non-empty string")
        _require_int("initial_balance", initial_balance)

        self._identifier = identifier
        # NOTE: never mutated after construction
        self._initial_balance = initial_balance
        self._final_balance = initial_balance
        self._epoch_delta = 0
        self._epochs_closed = 0

        self._public_keys = _OrderedCommitments(KIND_PUBLIC_IDENTITY)
        self._serial_numbers = _OrderedCommitments(KIND_SERIAL_NUMBER)
        self._transaction_roots = _OrderedCommitments(KIND_TRANSACTION_ROOT)

    @classmethod
    def create(
        cls,
        identifier: str,
        initial_balance: int,
        known_public_identities: Iterable[FieldLike] = (),
    ) -> Organization:
        """
        Create an organization with its initial address set.

        Raises:
            DuplicateCommitmentError: known_public_identities has a repeat
        """
        org = cls(identifier, initial_balance)
        for public in known_public_identities:
            org._public_keys.add(public)
        logger.debug(
            f"Organization {identifier} created: balance={initial_balance}, "
            f"addresses={len(org._public_keys)}"
        )
        return org

    def __repr__(self) -> str:
        return (
            f"Organization({self._identifier!r}, balance={self._final_balance}, "
            f"delta={self._epoch_delta})"
        )

    # --------------------------------------------------------------------------
    # Accessors
    # --------------------------------------------------------------------------

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def initial_balance(self) -> int:
        return self._initial_balance

    @property
    def final_balance(self) -> int:
        return self._final_balance

    @property
    def epoch_delta(self) -> int:
        return self._epoch_delta

    @property
    def epochs_closed(self) -> int:
        return self._epochs_closed

    @property
    def known_public_keys(self) -> Tuple[FieldElement, ...]:
        return self._public_keys.items()

    @property
    def spent_serial_numbers(self) -> Tuple[FieldElement, ...]:
        return self._serial_numbers.items()

    @property
    def seen_transaction_roots(self) -> Tuple[FieldElement, ...]:
        return self._transaction_roots.items()

    # --------------------------------------------------------------------------
    # Mutation
    # --------------------------------------------------------------------------

    def register_public_identity(self, public: FieldLike) -> FieldElement:
        """
        Add an address to this organization.

        Raises:
            DuplicateCommitmentError: address already registered
        """
        value = self._public_keys.add(public)
        logger.debug(f"{self._identifier}: registered address {value.hex()[:16]}")
        return value

    def record_serial_number(self, commitment: FieldLike) -> FieldElement:
        """
        Cache a serial number spent by this organization.

        Raises:
            DuplicateCommitmentError: serial number already spent (double-spend)
        """
        try:
            return self._serial_numbers.add(commitment)
        except DuplicateCommitmentError:
            logger.warning(f"{self._identifier}: double-spend attempt rejected")
            raise

    def record_transaction_root(self, commitment: FieldLike) -> FieldElement:
        """
        Cache a transaction root referenced by this organization.

        Raises:
            DuplicateCommitmentError: root already recorded
        """
        return self._transaction_roots.add(commitment)

    def check_transaction(
        self,
        transaction: Transaction,
        serial_number: Optional[FieldLike] = None,
        root: Optional[FieldLike] = None,
    ) -> bool:
        """
        Check that record_transaction would succeed, without recording.

        Returns:
            True if the organization is involved

        Raises:
            DuplicateCommitmentError: serial number or root already recorded
        """
        if not self.is_involved(transaction):
            return False
        if serial_number is not None and self.has_public_identity(transaction.sender_identity()):
            try:
                self._serial_numbers.check(serial_number)
            except DuplicateCommitmentError:
                logger.warning(f"{self._identifier}: double-spend attempt rejected")
                raise
        if root is not None:
            self._transaction_roots.check(root)
        return True

    def record_transaction(
        self,
        transaction: Transaction,
        serial_number: Optional[FieldLike] = None,
        root: Optional[FieldLike] = None,
    ) -> bool:
        """
        Cache the commitments of a transaction this organization is part of.

        The serial number is a spend, so it is recorded only when the
        organization owns the sender identity. The root is recorded for
        either side. Nothing is recorded when the organization is not
        involved, and nothing at all when either commitment is a repeat.

        Returns:
            True if the organization is involved

        Raises:
            DuplicateCommitmentError: serial number or root already recorded
        """
        if not self.check_transaction(transaction, serial_number, root):
            return False
        if serial_number is not None and self.has_public_identity(transaction.sender_identity()):
            self._serial_numbers.add(serial_number)
        if root is not None:
            self._transaction_roots.add(root)
        return True

    def apply_epoch_delta(self, value: int) -> int:
        """Accumulate a pending balance change; returns the new epoch delta."""
        self._epoch_delta += _require_int("value", value)
        return self._epoch_delta

    def close_epoch(self, delta: Optional[int] = None) -> int:
        """
        Reconcile the epoch into the running balance.

        Adds delta (default: the pending epoch delta) to final_balance, then
        resets the epoch delta. Returns the new final balance.
        """
        if delta is None:
            delta = self._epoch_delta
        _require_int("delta", delta)

        if delta != self._epoch_delta:
            logger.warning(
                f"{self._identifier}: closing epoch with delta {delta}, "
                f"pending delta was {self._epoch_delta}"
            )

        self._final_balance += delta
        self._epoch_delta = 0
        self._epochs_closed += 1

        logger.info(
            f"{self._identifier}: epoch {self._epochs_closed} closed, "
            f"balance={self._final_balance}"
        )
        return self._final_balance

    # --------------------------------------------------------------------------
    # Validation
    # --------------------------------------------------------------------------

    def has_public_identity(self, public: object) -> bool:
        return public in self._public_keys

    def is_involved(self, transaction: Transaction) -> bool:
        """True iff the sender or receiver identity belongs to this organization."""
        return (
            self.has_public_identity(transaction.sender_identity())
            or self.has_public_identity(transaction.receiver_identity())
        )

    def validate_serial_numbers(self, ledger_serial_numbers: LedgerSet) -> ValidationResult:
        """Every spent serial number must be present in the ledger."""
        if isinstance(ledger_serial_numbers, LedgerSnapshot):
            ledger_serial_numbers = ledger_serial_numbers.serial_numbers
        return check_membership(
            self._serial_numbers.items(), ledger_serial_numbers, KIND_SERIAL_NUMBER
        )

    def validate_transaction_roots(self, ledger_transaction_roots: LedgerSet) -> ValidationResult:
        """Every referenced transaction root must be present in the ledger."""
        if isinstance(ledger_transaction_roots, LedgerSnapshot):
            ledger_transaction_roots = ledger_transaction_roots.transaction_roots
        return check_membership(
            self._transaction_roots.items(), ledger_transaction_roots, KIND_TRANSACTION_ROOT
        )

    def validate(self, snapshot: LedgerSnapshot) -> Tuple[ValidationResult, ValidationResult]:
        """Validate both caches against one snapshot."""
        return (
            self.validate_serial_numbers(snapshot),
            self.validate_transaction_roots(snapshot),
        )

    def validate_serial_number_proofs(
        self,
        proofs: Mapping[FieldElement, MerkleProof],
        root: FieldLike,
        leaf_count: int,
    ) -> ValidationResult:
        """
        Validate spent serial numbers by inclusion proof against an accumulator.

        root and leaf_count describe the ledger's serial-number tree, e.g.
        snapshot.serial_number_root and snapshot.serial_number_count.
        """
        return check_inclusion_proofs(
            self._serial_numbers.items(), proofs, root, leaf_count, KIND_SERIAL_NUMBER
        )

    def validate_transaction_root_proofs(
        self,
        proofs: Mapping[FieldElement, MerkleProof],
        root: FieldLike,
        leaf_count: int,
    ) -> ValidationResult:
        """Validate referenced transaction roots by inclusion proof."""
        return check_inclusion_proofs(
            self._transaction_roots.items(), proofs, root, leaf_count, KIND_TRANSACTION_ROOT
        )

    # --------------------------------------------------------------------------
    # Export
    # --------------------------------------------------------------------------

    def info(self) -> Dict[str, object]:
        """Organization state for display by the caller."""
        return {
            "identifier": self._identifier,
            "initial_balance": self._initial_balance,
            "final_balance": self._final_balance,
            "epoch_delta": self._epoch_delta,
            "epochs_closed": self._epochs_closed,
            "known_addresses": [pk.hex() for pk in self._public_keys.items()],
            "spent_serial_numbers": len(self._serial_numbers),
            "seen_transaction_roots": len(self._transaction_roots),
        }

"""
Ducat Ledger Snapshots

The authoritative serial-number and transaction-root sets published by the
ledger. Validation always runs against an immutable LedgerSnapshot so a
pass never sees a half-updated serial-number set.
"""

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field
from functools import cached_property
from typing import Iterable, List, Optional, Sequence, Set

from ducat.core.errors import DuplicateCommitmentError
from ducat.core.field import FieldElement, FieldLike, is_field_like, sort_key, to_field_element
from ducat.crypto.merkle import MerkleProof, MerkleTree
from ducat.protocol.transaction import TransactionRecord, transaction_root

logger = logging.getLogger(__name__)

KIND_SERIAL_NUMBER = "serial number"
KIND_TRANSACTION_ROOT = "transaction root"


def commitment_set(values: Iterable[object], kind: str) -> frozenset:
    """
    Build a membership set of field elements.

    Entries that are not field elements (or ints) are dropped with a
    warning; any local commitment relying on them then fails validation.
    """
    result: Set[FieldElement] = set()
    skipped = 0
    for value in values:
        if is_field_like(value):
            result.add(to_field_element(value))
        else:
            skipped += 1
    if skipped:
        logger.warning(f"Ignored {skipped} malformed {kind} entries in ledger set")
    return frozenset(result)


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    Immutable view of the ledger's commitment sets at one height.
    """
    height: int = 0
    serial_numbers: frozenset = field(default_factory=frozenset)
    transaction_roots: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_iterables(
        cls,
        serial_numbers: Iterable[object] = (),
        transaction_roots: Iterable[object] = (),
        height: int = 0,
    ) -> LedgerSnapshot:
        return cls(
            height=height,
            serial_numbers=commitment_set(serial_numbers, KIND_SERIAL_NUMBER),
            transaction_roots=commitment_set(transaction_roots, KIND_TRANSACTION_ROOT),
        )

    def __repr__(self) -> str:
        return (
            f"LedgerSnapshot(height={self.height}, "
            f"serial_numbers={len(self.serial_numbers)}, "
            f"transaction_roots={len(self.transaction_roots)})"
        )

    def contains_serial_number(self, commitment: FieldLike) -> bool:
        return to_field_element(commitment) in self.serial_numbers

    def contains_transaction_root(self, commitment: FieldLike) -> bool:
        return to_field_element(commitment) in self.transaction_roots

    # --------------------------------------------------------------------------
    # Accumulators
    # --------------------------------------------------------------------------

    @cached_property
    def _serial_number_tree(self) -> MerkleTree:
        return MerkleTree(sorted(self.serial_numbers, key=sort_key))

    @cached_property
    def _transaction_root_tree(self) -> MerkleTree:
        return MerkleTree(sorted(self.transaction_roots, key=sort_key))

    @property
    def serial_number_root(self) -> FieldElement:
        """Merkle root over the serial-number set, sorted by value."""
        return self._serial_number_tree.root

    @property
    def transaction_root_root(self) -> FieldElement:
        """Merkle root over the transaction-root set, sorted by value."""
        return self._transaction_root_tree.root

    @property
    def serial_number_count(self) -> int:
        """Leaf count of the serial-number accumulator."""
        return len(self.serial_numbers)

    @property
    def transaction_root_count(self) -> int:
        return len(self.transaction_roots)

    def prove_serial_number(self, commitment: FieldLike) -> Optional[MerkleProof]:
        return self._serial_number_tree.prove(to_field_element(commitment))

    def prove_transaction_root(self, commitment: FieldLike) -> Optional[MerkleProof]:
        return self._transaction_root_tree.prove(to_field_element(commitment))


class Ledger:
    """
    Mutable ledger sets guarded by a lock.

    Publishing and snapshotting are serialized, so every snapshot reflects
    a complete sequence of publications.
    """

    def __init__(self, height: int = 0):
        self._lock = threading.RLock()
        self._height = height
        self._serial_numbers: Set[FieldElement] = set()
        self._transaction_roots: Set[FieldElement] = set()
        self._snapshot: Optional[LedgerSnapshot] = None

    @property
    def height(self) -> int:
        with self._lock:
            return self._height

    def publish_serial_number(self, commitment: FieldLike) -> FieldElement:
        """
        Record a spend.

        Raises:
            DuplicateCommitmentError: serial number already spent
        """
        sn = to_field_element(commitment)
        with self._lock:
            if sn in self._serial_numbers:
                logger.warning(f"Double-spend attempt: serial number {sn.hex()[:16]}")
                raise DuplicateCommitmentError(KIND_SERIAL_NUMBER, sn)
            self._serial_numbers.add(sn)
            self._snapshot = None
        return sn

    def publish_transaction_root(self, commitment: FieldLike) -> FieldElement:
        """
        Record a transaction inclusion root.

        Raises:
            DuplicateCommitmentError: root already published
        """
        root = to_field_element(commitment)
        with self._lock:
            if root in self._transaction_roots:
                raise DuplicateCommitmentError(KIND_TRANSACTION_ROOT, root)
            self._transaction_roots.add(root)
            self._snapshot = None
        return root

    def publish_transactions(self, transactions: Sequence[TransactionRecord]) -> FieldElement:
        """Publish the Merkle root of a transaction batch and return it."""
        return self.publish_transaction_root(transaction_root(transactions))

    def advance(self) -> int:
        """Move to the next height."""
        with self._lock:
            self._height += 1
            self._snapshot = None
            return self._height

    def snapshot(self) -> LedgerSnapshot:
        """Immutable snapshot of the current sets."""
        with self._lock:
            if self._snapshot is None:
                self._snapshot = LedgerSnapshot(
                    height=self._height,
                    serial_numbers=frozenset(self._serial_numbers),
                    transaction_roots=frozenset(self._transaction_roots),
                )
            return self._snapshot

    def serial_numbers(self) -> List[FieldElement]:
        with self._lock:
            return sorted(self._serial_numbers, key=sort_key)

    def transaction_roots(self) -> List[FieldElement]:
        with self._lock:
            return sorted(self._transaction_roots, key=sort_key)

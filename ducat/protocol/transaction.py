"""
Ducat Ledger Transactions

Transactions are built and signed elsewhere. The validation core only needs
the sender and receiver public identities, described by the Transaction
protocol. TransactionRecord is a minimal concrete transaction for callers
that do not bring their own.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

from ducat.constants import DOMAIN_TRANSACTION, FIELD_MODULUS
from ducat.core.field import FieldElement, to_field_element
from ducat.crypto.hash import hash_fields
from ducat.crypto.merkle import merkle_root


@runtime_checkable
class Transaction(Protocol):
    """Anything exposing sender and receiver public identities."""

    def sender_identity(self) -> FieldElement:
        ...

    def receiver_identity(self) -> FieldElement:
        ...


@dataclass(frozen=True)
class TransactionRecord:
    """
    Transfer between two public identities.

    amount is in atomic units, never negative and below the field modulus.
    """
    sender: FieldElement
    receiver: FieldElement
    amount: int = 0

    def __post_init__(self):
        object.__setattr__(self, "sender", to_field_element(self.sender))
        object.__setattr__(self, "receiver", to_field_element(self.receiver))
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError("Amount must be int")
        if self.amount < 0:
            raise ValueError("Amount must be non-negative")
        if self.amount >= FIELD_MODULUS:
            raise ValueError("Amount must be below the field modulus")

    def sender_identity(self) -> FieldElement:
        return self.sender

    def receiver_identity(self) -> FieldElement:
        return self.receiver

    def commitment(self) -> FieldElement:
        """Leaf commitment H(sender || receiver || amount)."""
        return hash_fields(
            DOMAIN_TRANSACTION,
            (self.sender, self.receiver, FieldElement(self.amount)),
        )


def transaction_root(transactions: Sequence[TransactionRecord]) -> FieldElement:
    """Merkle root over the commitments of a batch of transactions."""
    return merkle_root([tx.commitment() for tx in transactions])

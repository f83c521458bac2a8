"""
Ducat Ledger Snapshots
"""

from ducat.ledger.snapshot import (
    Ledger,
    LedgerSnapshot,
    commitment_set,
    KIND_SERIAL_NUMBER,
    KIND_TRANSACTION_ROOT,
)

__all__ = [
    "Ledger",
    "LedgerSnapshot",
    "commitment_set",
    "KIND_SERIAL_NUMBER",
    "KIND_TRANSACTION_ROOT",
]

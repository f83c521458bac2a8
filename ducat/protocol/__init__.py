"""
Ducat Ledger Transaction Interface
"""

from ducat.protocol.transaction import Transaction, TransactionRecord, transaction_root

__all__ = [
    "Transaction",
    "TransactionRecord",
    "transaction_root",
]

"""
Ducat Ledger Core Data Structures
"""

from ducat.core.field import FieldElement, FieldLike, to_field_element, is_field_like
from ducat.core.errors import (
    DucatError,
    DuplicateCommitmentError,
    MissingLedgerCommitmentError,
    InvalidSecretEncodingError,
    FieldEncodingError,
    RegistryError,
    PlaceholderAddressError,
)

__all__ = [
    # Types
    "FieldElement",
    "FieldLike",
    "to_field_element",
    "is_field_like",
    # Errors
    "DucatError",
    "DuplicateCommitmentError",
    "MissingLedgerCommitmentError",
    "InvalidSecretEncodingError",
    "FieldEncodingError",
    "RegistryError",
    "PlaceholderAddressError",
]

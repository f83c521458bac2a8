"""
Ducat Ledger Errors

Mutation-time invariant violations raise. Validation failures are returned
as results and only become MissingLedgerCommitmentError on request.
"""

from __future__ import annotations
from typing import Iterable, Tuple


class DucatError(Exception):
    """Base ledger error."""
    pass


class DuplicateCommitmentError(DucatError):
    """A serial number, root or address is already present."""

    def __init__(self, kind: str, commitment: object):
        self.kind = kind
        self.commitment = commitment
        super().__init__(f"Duplicate {kind}: {commitment!r}")


class MissingLedgerCommitmentError(DucatError):
    """Claimed commitments are absent from the ledger snapshot."""

    def __init__(self, kind: str, missing: Iterable[object]):
        self.kind = kind
        self.missing: Tuple[object, ...] = tuple(missing)
        super().__init__(
            f"{len(self.missing)} {kind} commitment(s) missing from ledger"
        )


class InvalidSecretEncodingError(DucatError):
    """Secret cannot be encoded as a field scalar."""
    pass


class FieldEncodingError(DucatError):
    """Bytes are not a canonical field element encoding."""
    pass


class RegistryError(DucatError):
    """Organization registry error."""
    pass


class PlaceholderAddressError(DucatError):
    """Placeholder addresses requested without enabling them."""
    pass

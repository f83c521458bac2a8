"""
Ducat Ledger Address Identities

Placeholder addresses for tests live in ducat.testing and are not
exported here.
"""

from ducat.identity.address import (
    AddressIdentity,
    SecretLike,
    encode_secret,
    derive_public_identity,
)

__all__ = [
    "AddressIdentity",
    "SecretLike",
    "encode_secret",
    "derive_public_identity",
]

"""
Ducat Ledger Address Identities

Address generation as in Zcash: the public identity is a one-way
commitment to the secret scalar, pk = H(DOMAIN_ADDRESS || sk) mod r.
Only the public identity ever leaves the owner.
"""

from __future__ import annotations
import logging
import secrets
import struct
from dataclasses import dataclass
from typing import Union

from ducat.constants import (
    DOMAIN_ADDRESS,
    DOMAIN_SERIAL_NUMBER,
    FIELD_MODULUS,
    SECRET_MAX_BYTES,
)
from ducat.core.errors import InvalidSecretEncodingError
from ducat.core.field import FieldElement
from ducat.crypto.hash import hash_to_field

logger = logging.getLogger(__name__)

SecretLike = Union[FieldElement, int, bytes, str]


def encode_secret(secret: SecretLike) -> FieldElement:
    """
    Canonicalize a secret to a non-zero field scalar.

    Accepted encodings:
    - FieldElement
    - int in [1, r)
    - 1..32 big-endian bytes whose value is in [1, r)
    - hex string of such bytes, optional 0x prefix

    Out-of-range values are rejected rather than reduced, so two distinct
    encodings never collapse to the same secret.

    Raises:
        InvalidSecretEncodingError: on any other input
    """
    if isinstance(secret, FieldElement):
        value = secret.value
    elif isinstance(secret, bool):
        raise InvalidSecretEncodingError("Secret cannot be a bool")
    elif isinstance(secret, int):
        if secret < 0 or secret >= FIELD_MODULUS:
            raise InvalidSecretEncodingError("Secret integer out of field range")
        value = secret
    elif isinstance(secret, (bytes, bytearray)):
        value = _decode_secret_bytes(bytes(secret))
    elif isinstance(secret, str):
        text = secret[2:] if secret.lower().startswith("0x") else secret
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidSecretEncodingError(f"Malformed hex secret: {e}") from e
        value = _decode_secret_bytes(raw)
    else:
        raise InvalidSecretEncodingError(
            f"Unsupported secret type: {type(secret).__name__}"
        )

    if value == 0:
        raise InvalidSecretEncodingError("Secret scalar must be non-zero")

    return FieldElement(value)


def _decode_secret_bytes(raw: bytes) -> int:
    if len(raw) == 0:
        raise InvalidSecretEncodingError("Secret bytes are empty")
    if len(raw) > SECRET_MAX_BYTES:
        raise InvalidSecretEncodingError(
            f"Secret must be at most {SECRET_MAX_BYTES} bytes, got {len(raw)}"
        )
    value = int.from_bytes(raw, "big")
    if value >= FIELD_MODULUS:
        raise InvalidSecretEncodingError("Secret bytes exceed field modulus")
    return value


def derive_public_identity(secret: FieldElement) -> FieldElement:
    """pk = H(DOMAIN_ADDRESS || encode(sk)) interpreted in the field."""
    return hash_to_field(DOMAIN_ADDRESS, secret.to_bytes())


@dataclass(frozen=True, slots=True)
class AddressIdentity:
    """
    Public/secret pair of a spending identity.

    NOTE: secret is never transmitted and never shown by repr.
    """
    secret: FieldElement
    public: FieldElement

    def __post_init__(self):
        if derive_public_identity(self.secret) != self.public:
            raise ValueError("Public identity does not match secret")

    def __repr__(self) -> str:
        return f"AddressIdentity(public={self.public!r}, secret=<redacted>)"

    @classmethod
    def derive(cls, secret: SecretLike) -> AddressIdentity:
        """
        Derive the identity for a secret.

        Deterministic: the same secret always gives the same public identity.

        Raises:
            InvalidSecretEncodingError: secret cannot be encoded as a scalar
        """
        scalar = encode_secret(secret)
        return cls(secret=scalar, public=derive_public_identity(scalar))

    @classmethod
    def generate(cls) -> AddressIdentity:
        """Derive an identity from a fresh random secret."""
        scalar = FieldElement(secrets.randbelow(FIELD_MODULUS - 1) + 1)
        identity = cls(secret=scalar, public=derive_public_identity(scalar))
        logger.debug(f"Generated address {identity.public.hex()[:16]}")
        return identity

    def public_identity(self) -> FieldElement:
        return self.public

    def secret_value(self) -> FieldElement:
        """Owner-only accessor. Never log or transmit the result."""
        return self.secret

    def serial_number(self, nonce: int) -> FieldElement:
        """
        Serial number for the spend identified by nonce.

        sn = H(DOMAIN_SERIAL_NUMBER || sk || nonce_u64). Unique per
        (secret, nonce), deterministic, and unlinkable to the public
        identity without the secret.
        """
        if isinstance(nonce, bool) or not isinstance(nonce, int):
            raise TypeError("Nonce must be int")
        if nonce < 0 or nonce >= 2**64:
            raise ValueError("Nonce must fit in 64 bits")
        return hash_to_field(
            DOMAIN_SERIAL_NUMBER,
            self.secret.to_bytes() + struct.pack(">Q", nonce),
        )

"""
Ducat Ledger Hash Functions

SHA-256 (pycryptodome) with domain separation, and hash-to-field for
commitments. The digest is read big-endian and reduced modulo r.
"""

from __future__ import annotations
from typing import Iterable

from Crypto.Hash import SHA256

from ducat.core.field import FieldElement


def sha256(data: bytes) -> bytes:
    """Raw SHA-256 digest."""
    return SHA256.new(data).digest()


def tagged_hash(tag: bytes, data: bytes) -> bytes:
    """
    Domain-separated SHA-256.

    H(len(tag) || tag || data), with len as one byte so that no two
    (tag, data) pairs share a preimage.
    """
    if len(tag) > 255:
        raise ValueError("Domain tag too long")
    h = SHA256.new()
    h.update(bytes([len(tag)]))
    h.update(tag)
    h.update(data)
    return h.digest()


def hash_to_field(domain: bytes, data: bytes) -> FieldElement:
    """One-way commitment of data into the scalar field."""
    return FieldElement.from_bytes_reduce(tagged_hash(domain, data))


def hash_fields(domain: bytes, elements: Iterable[FieldElement]) -> FieldElement:
    """Commit to a sequence of field elements."""
    return hash_to_field(domain, b"".join(e.to_bytes() for e in elements))

"""
Ducat Ledger Cryptographic Primitives
"""

from ducat.crypto.hash import sha256, tagged_hash, hash_to_field, hash_fields
from ducat.crypto.merkle import merkle_root, MerkleTree, MerkleProof

__all__ = [
    # Hash functions
    "sha256",
    "tagged_hash",
    "hash_to_field",
    "hash_fields",
    # Merkle tree
    "merkle_root",
    "MerkleTree",
    "MerkleProof",
]

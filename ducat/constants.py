"""
Ducat Ledger Constants

All protocol constants defined here for single source of truth.
"""

from typing import Final

# ==============================================================================
# PRIME FIELD
# ==============================================================================

# BLS12-381 scalar field (r)
FIELD_MODULUS: Final[int] = (
    0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001
)
FIELD_ELEMENT_SIZE: Final[int] = 32             # Canonical encoding, big-endian
FIELD_BIT_LENGTH: Final[int] = FIELD_MODULUS.bit_length()

# ==============================================================================
# DOMAIN SEPARATION TAGS
# ==============================================================================

DOMAIN_ADDRESS: Final[bytes] = b"Ducat_Address_v1"
DOMAIN_SERIAL_NUMBER: Final[bytes] = b"Ducat_SerialNumber_v1"
DOMAIN_TRANSACTION: Final[bytes] = b"Ducat_Transaction_v1"
DOMAIN_MERKLE_LEAF: Final[bytes] = b"Ducat_MerkleLeaf_v1"
DOMAIN_MERKLE_NODE: Final[bytes] = b"Ducat_MerkleNode_v1"

# ==============================================================================
# IDENTITY
# ==============================================================================

SECRET_MAX_BYTES: Final[int] = FIELD_ELEMENT_SIZE
SERIAL_NONCE_SIZE: Final[int] = 8               # u64 per-spend nonce

# ==============================================================================
# PLACEHOLDER ADDRESSES (test / bootstrap only)
# ==============================================================================

PLACEHOLDER_ADDRESSES_ENV: Final[str] = "DUCAT_ENABLE_PLACEHOLDER_ADDRESSES"

# ==============================================================================
# EPOCH PROCESSING
# ==============================================================================

DEFAULT_MAX_CONCURRENT_VALIDATIONS: Final[int] = 8

"""
Ducat Ledger Test Helpers

Not part of the trust-critical path.
"""

from ducat.testing.addresses import create_known_addresses, placeholder_addresses_enabled

__all__ = [
    "create_known_addresses",
    "placeholder_addresses_enabled",
]

"""
Ducat Ledger
Shielded-ledger validation core

Address identities are one-way commitments to a secret scalar. Organizations
account for balances and prove that every serial number they spent and every
transaction root they referenced is anchored in the public ledger.
"""

__version__ = "0.3.0"
__author__ = "Ducat Ledger"

from ducat.constants import FIELD_MODULUS, FIELD_ELEMENT_SIZE

__all__ = [
    "FIELD_MODULUS",
    "FIELD_ELEMENT_SIZE",
    "__version__",
]

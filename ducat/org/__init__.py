"""
Ducat Ledger Organizations
"""

from ducat.org.organization import Organization, KIND_PUBLIC_IDENTITY
from ducat.org.validation import ValidationResult, check_membership, check_inclusion_proofs
from ducat.org.registry import OrganizationRegistry
from ducat.org.epoch import EpochProcessor, EpochReport, OrganizationEpochResult

__all__ = [
    # Organization
    "Organization",
    "KIND_PUBLIC_IDENTITY",
    # Validation
    "ValidationResult",
    "check_membership",
    "check_inclusion_proofs",
    # Registry / epochs
    "OrganizationRegistry",
    "EpochProcessor",
    "EpochReport",
    "OrganizationEpochResult",
]

"""
Ducat Ledger Membership Validation

Every commitment an organization claims must be anchored in the ledger:
local ⊆ ledger. Lookups go through a hash set of canonical field values,
which is field equality without a scan of the historical set.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, Tuple

from ducat.core.errors import MissingLedgerCommitmentError
from ducat.core.field import FieldElement, is_field_like, to_field_element
from ducat.crypto.merkle import MerkleProof
from ducat.ledger.snapshot import commitment_set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one membership check.

    Truthy iff no commitment is missing, so it can stand in for a bool.
    """
    kind: str
    checked: int
    missing: Tuple[FieldElement, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.missing

    def __bool__(self) -> bool:
        return self.valid

    def raise_for_failure(self) -> None:
        """
        Raises:
            MissingLedgerCommitmentError: if any commitment is missing
        """
        if self.missing:
            raise MissingLedgerCommitmentError(self.kind, self.missing)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "valid": self.valid,
            "checked": self.checked,
            "missing": [c.hex() for c in self.missing],
        }


def check_membership(
    local: Sequence[FieldElement],
    ledger: Iterable[object],
    kind: str,
) -> ValidationResult:
    """
    Check that every local commitment is present in the ledger set.

    Args:
        local: Commitments claimed by the organization
        ledger: Authoritative commitments (frozenset or any iterable)
        kind: Label for results and logs

    Returns:
        ValidationResult listing missing commitments in local order
    """
    if isinstance(ledger, frozenset) and all(isinstance(c, FieldElement) for c in ledger):
        members = ledger
    else:
        members = commitment_set(ledger, kind)

    missing = tuple(c for c in local if c not in members)
    result = ValidationResult(kind=kind, checked=len(local), missing=missing)

    if missing:
        logger.warning(
            f"{kind} validation failed: {len(missing)}/{len(local)} missing from ledger"
        )
    return result


def check_inclusion_proofs(
    local: Sequence[FieldElement],
    proofs: Mapping[FieldElement, MerkleProof],
    root: object,
    leaf_count: int,
    kind: str,
) -> ValidationResult:
    """
    Check local commitments against an accumulator root.

    Each commitment needs a proof whose leaf is that commitment and which
    verifies against root for a tree of leaf_count leaves. Absent, wrong
    or malformed proofs count as missing, and a malformed root fails every
    commitment.
    """
    if not is_field_like(root):
        logger.warning(f"Malformed {kind} accumulator root {type(root).__name__}")
        return ValidationResult(kind=kind, checked=len(local), missing=tuple(local))
    root = to_field_element(root)

    missing = []
    for commitment in local:
        proof = proofs.get(commitment)
        if (
            not isinstance(proof, MerkleProof)
            or proof.leaf != commitment
            or not proof.verify(root, leaf_count)
        ):
            missing.append(commitment)

    if missing:
        logger.warning(
            f"{kind} proof validation failed: {len(missing)}/{len(local)} unproven"
        )
    return ValidationResult(kind=kind, checked=len(local), missing=tuple(missing))

"""
Ducat Ledger Membership Validation Tests
"""

import random

import pytest

from ducat.constants import FIELD_MODULUS
from ducat.core.errors import MissingLedgerCommitmentError
from ducat.core.field import FieldElement
from ducat.crypto.merkle import MerkleProof, hash_leaf, hash_node
from ducat.ledger.snapshot import LedgerSnapshot
from ducat.org.organization import Organization
from ducat.org.validation import ValidationResult, check_inclusion_proofs, check_membership


class TestScenario:
    """Balance 100, address A, transfer A -> B with serial k1."""

    def test_epoch_and_validation(self, alice, transfer_ab):
        """Test the end-to-end bookkeeping scenario."""
        org = Organization.create("acme", 100, [alice.public_identity()])
        k1 = alice.serial_number(0)

        assert org.record_transaction(transfer_ab, serial_number=k1)
        org.apply_epoch_delta(-10)
        org.close_epoch(-10)

        assert org.final_balance == 90
        assert org.epoch_delta == 0
        assert org.validate_serial_numbers([k1])
        assert not org.validate_serial_numbers([])


class TestSerialNumberValidation:
    """Tests for validate_serial_numbers."""

    def test_empty_cache_always_valid(self, org_a):
        """Test an organization with no spends validates against anything."""
        assert org_a.validate_serial_numbers([])
        assert org_a.validate_serial_numbers([FieldElement(1)])

    def test_subset(self, org_a, serial_numbers):
        """Test validity iff spent ⊆ ledger."""
        for sn in serial_numbers[:3]:
            org_a.record_serial_number(sn)
        assert org_a.validate_serial_numbers(serial_numbers)
        assert org_a.validate_serial_numbers(serial_numbers[:3])
        assert not org_a.validate_serial_numbers(serial_numbers[1:])

    def test_removing_relied_element_flips(self, org_a):
        """Test dropping any relied-upon element makes validation fail."""
        rng = random.Random(7)
        spent = [FieldElement(rng.randrange(FIELD_MODULUS)) for _ in range(10)]
        extra = [FieldElement(rng.randrange(FIELD_MODULUS)) for _ in range(10)]
        for sn in spent:
            org_a.record_serial_number(sn)

        ledger = set(spent + extra)
        assert org_a.validate_serial_numbers(ledger)
        for sn in spent:
            result = org_a.validate_serial_numbers(ledger - {sn})
            assert not result
            assert result.missing == (sn,)
        for sn in extra:
            assert org_a.validate_serial_numbers(ledger - {sn})

    def test_field_equality(self, org_a):
        """Test ledger values are compared over the field."""
        org_a.record_serial_number(FieldElement(42))
        assert org_a.validate_serial_numbers([42 + FIELD_MODULUS])

    def test_snapshot_argument(self, org_a):
        """Test a LedgerSnapshot can be passed directly."""
        org_a.record_serial_number(5)
        snapshot = LedgerSnapshot.from_iterables([5], [])
        assert org_a.validate_serial_numbers(snapshot)
        assert org_a.validate_transaction_roots(LedgerSnapshot())

    def test_malformed_ledger_entries(self, org_a):
        """Test malformed ledger entries never raise and never satisfy a claim."""
        org_a.record_serial_number(5)
        result = org_a.validate_serial_numbers(["5", None, b"\x05", 5.0])
        assert not result
        assert result.missing == (FieldElement(5),)

    def test_result_detail(self, org_a):
        """Test the result reports what is missing, in recording order."""
        for v in (3, 1, 2):
            org_a.record_serial_number(v)
        result = org_a.validate_serial_numbers([1])
        assert result.kind == "serial number"
        assert result.checked == 3
        assert result.missing == (FieldElement(3), FieldElement(2))
        assert result.to_dict()["valid"] is False

    def test_raise_for_failure(self, org_a):
        """Test failures convert to MissingLedgerCommitmentError on request."""
        org_a.record_serial_number(9)
        org_a.validate_serial_numbers([9]).raise_for_failure()
        with pytest.raises(MissingLedgerCommitmentError) as exc:
            org_a.validate_serial_numbers([]).raise_for_failure()
        assert exc.value.missing == (FieldElement(9),)

    @pytest.mark.timeout(30)
    def test_large_ledger(self, org_a):
        """Test membership against a large ledger set stays fast."""
        ledger = [FieldElement(i) for i in range(200_000)]
        for i in range(0, 200_000, 97):
            org_a.record_serial_number(i)
        assert org_a.validate_serial_numbers(frozenset(ledger))


class TestTransactionRootValidation:
    """Tests for validate_transaction_roots."""

    def test_subset(self, org_a):
        """Test validity iff seen roots ⊆ ledger roots."""
        org_a.record_transaction_root(10)
        org_a.record_transaction_root(20)
        assert org_a.validate_transaction_roots([10, 20, 30])
        result = org_a.validate_transaction_roots([10, 30])
        assert not result
        assert result.kind == "transaction root"
        assert result.missing == (FieldElement(20),)

    def test_validate_both(self, org_a):
        """Test validate checks both caches against one snapshot."""
        org_a.record_serial_number(1)
        org_a.record_transaction_root(2)
        serials, roots = org_a.validate(LedgerSnapshot.from_iterables([1], []))
        assert serials
        assert not roots


def validate_spends(org, proofs, snapshot):
    return org.validate_serial_number_proofs(
        proofs, snapshot.serial_number_root, snapshot.serial_number_count
    )


class TestProofValidation:
    """Tests for accumulator-based validation."""

    def test_serial_number_proofs(self, org_a):
        """Test spends proven against the ledger's serial-number root."""
        snapshot = LedgerSnapshot.from_iterables([4, 8, 15, 16, 23, 42], [])
        for sn in (8, 42):
            org_a.record_serial_number(sn)
        proofs = {FieldElement(sn): snapshot.prove_serial_number(sn) for sn in (8, 42)}
        assert validate_spends(org_a, proofs, snapshot)

    def test_missing_proof(self, org_a):
        """Test a spend without a proof is reported missing."""
        snapshot = LedgerSnapshot.from_iterables([8], [])
        org_a.record_serial_number(8)
        org_a.record_serial_number(9)
        proofs = {FieldElement(8): snapshot.prove_serial_number(8)}
        result = validate_spends(org_a, proofs, snapshot)
        assert result.missing == (FieldElement(9),)

    def test_proof_for_other_leaf(self, org_a):
        """Test a proof of a different commitment does not count."""
        snapshot = LedgerSnapshot.from_iterables([8, 9], [])
        org_a.record_serial_number(7)
        proofs = {FieldElement(7): snapshot.prove_serial_number(8)}
        assert not validate_spends(org_a, proofs, snapshot)

    def test_stale_root(self, org_a):
        """Test proofs fail against a root from another snapshot."""
        old = LedgerSnapshot.from_iterables([8], [])
        new = LedgerSnapshot.from_iterables([8, 9], [])
        org_a.record_serial_number(8)
        proofs = {FieldElement(8): new.prove_serial_number(8)}
        assert not validate_spends(org_a, proofs, old)

    def test_transaction_root_proofs(self, org_a):
        """Test referenced roots proven against the ledger root accumulator."""
        snapshot = LedgerSnapshot.from_iterables([], [100, 200, 300])
        org_a.record_transaction_root(200)
        proofs = {FieldElement(200): snapshot.prove_transaction_root(200)}
        assert org_a.validate_transaction_root_proofs(
            proofs, snapshot.transaction_root_root, snapshot.transaction_root_count
        )

    def test_ledger_root_claimed_as_spend(self, org_a):
        """Test the accumulator root cannot be claimed with an empty path."""
        snapshot = LedgerSnapshot.from_iterables([4, 8, 15, 16], [])
        root = snapshot.serial_number_root
        org_a.record_serial_number(root)
        assert not snapshot.contains_serial_number(root)

        result = validate_spends(org_a, {root: MerkleProof(root, (), ())}, snapshot)
        assert not result
        assert result.missing == (root,)

    def test_interior_node_claimed_as_spend(self, org_a):
        """Test an interior node cannot be claimed with a shortened path."""
        snapshot = LedgerSnapshot.from_iterables([4, 8, 15, 16], [])
        proof = snapshot.prove_serial_number(4)
        interior = hash_node(hash_leaf(FieldElement(4)), proof.siblings[0])
        org_a.record_serial_number(interior)

        forged = MerkleProof(interior, proof.siblings[1:], proof.sibling_positions[1:])
        result = validate_spends(org_a, {interior: forged}, snapshot)
        assert not result
        assert result.missing == (interior,)

    def test_understated_leaf_count(self, org_a):
        """Test a shortened path fails even against a smaller stated tree."""
        snapshot = LedgerSnapshot.from_iterables([4, 8, 15, 16], [])
        proof = snapshot.prove_serial_number(4)
        interior = hash_node(hash_leaf(FieldElement(4)), proof.siblings[0])
        org_a.record_serial_number(interior)

        forged = MerkleProof(interior, proof.siblings[1:], proof.sibling_positions[1:])
        result = org_a.validate_serial_number_proofs(
            {interior: forged}, snapshot.serial_number_root, 2
        )
        assert not result

    @pytest.mark.parametrize("bad_proof", [None, "proof", b"\x00" * 32, 8, object()])
    def test_malformed_proof(self, org_a, bad_proof):
        """Test a malformed proof entry is a failure, not an exception."""
        snapshot = LedgerSnapshot.from_iterables([8, 9], [])
        org_a.record_serial_number(8)
        result = validate_spends(org_a, {FieldElement(8): bad_proof}, snapshot)
        assert not result
        assert result.missing == (FieldElement(8),)

    @pytest.mark.parametrize("bad_root", [None, "root", b"\x00" * 32, 1.5])
    def test_malformed_root(self, org_a, bad_root):
        """Test a malformed root fails every commitment without raising."""
        snapshot = LedgerSnapshot.from_iterables([8, 9], [])
        org_a.record_serial_number(8)
        org_a.record_serial_number(9)
        proofs = {FieldElement(sn): snapshot.prove_serial_number(sn) for sn in (8, 9)}
        result = org_a.validate_serial_number_proofs(proofs, bad_root, 2)
        assert not result
        assert result.missing == (FieldElement(8), FieldElement(9))

    def test_check_inclusion_proofs_direct(self):
        """Test check_inclusion_proofs with an explicit tree size."""
        snapshot = LedgerSnapshot.from_iterables([1, 2, 3], [])
        local = [FieldElement(2)]
        proofs = {FieldElement(2): snapshot.prove_serial_number(2)}
        root = snapshot.serial_number_root
        assert check_inclusion_proofs(local, proofs, root, 3, "serial number")
        assert not check_inclusion_proofs(local, proofs, root, 0, "serial number")


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_truthiness(self):
        """Test results behave as booleans."""
        assert ValidationResult("serial number", 0)
        assert not ValidationResult("serial number", 1, (FieldElement(1),))

    def test_check_membership_iterable(self):
        """Test check_membership accepts generators."""
        result = check_membership([FieldElement(1)], (i for i in range(3)), "serial number")
        assert result.valid

"""
Ducat Ledger Merkle Accumulator

Binary Merkle tree over field elements. The ledger commits to its
serial-number and transaction-root sets with it, so membership can be
checked from an inclusion proof instead of the full historical set.

Leaves and interior nodes are hashed under different domain tags, and a
proof must have exactly one sibling per level, so neither the root nor an
interior node can be passed off as a leaf.
"""

from __future__ import annotations
import struct
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ducat.constants import DOMAIN_MERKLE_LEAF, DOMAIN_MERKLE_NODE
from ducat.core.field import FieldElement
from ducat.crypto.hash import hash_fields


def is_power_of_two(n: int) -> bool:
    """Check if n is a power of 2."""
    return n > 0 and (n & (n - 1)) == 0


def tree_depth(leaf_count: int) -> int:
    """Number of levels above the leaves once padded to a power of 2."""
    if leaf_count <= 1:
        return 0
    return (leaf_count - 1).bit_length()


def hash_leaf(leaf: FieldElement) -> FieldElement:
    """Leaf commitment."""
    return hash_fields(DOMAIN_MERKLE_LEAF, (leaf,))


def hash_node(left: FieldElement, right: FieldElement) -> FieldElement:
    """Interior node commitment."""
    return hash_fields(DOMAIN_MERKLE_NODE, (left, right))


def _pad(nodes: Sequence[FieldElement]) -> List[FieldElement]:
    padded = list(nodes)
    while not is_power_of_two(len(padded)):
        padded.append(padded[-1])
    return padded


def merkle_root(leaves: Sequence[FieldElement]) -> FieldElement:
    """
    Compute Merkle root from a list of leaves.

    - Empty list returns zero
    - Otherwise, hash the leaves, pad to power of 2 and build tree bottom-up
    """
    if len(leaves) == 0:
        return FieldElement.zero()

    level = _pad([hash_leaf(leaf) for leaf in leaves])
    while len(level) > 1:
        level = [hash_node(level[i], level[i + 1]) for i in range(0, len(level), 2)]

    return level[0]


@dataclass(frozen=True)
class MerkleProof:
    """
    Merkle inclusion proof.

    For each sibling, the matching position flag is True if the sibling is
    on the right.
    """
    leaf: FieldElement
    siblings: Tuple[FieldElement, ...]
    sibling_positions: Tuple[bool, ...]

    def __post_init__(self):
        if len(self.siblings) != len(self.sibling_positions):
            raise ValueError("Sibling and position counts differ")

    def compute_root(self) -> FieldElement:
        current = hash_leaf(self.leaf)
        for sibling, is_right in zip(self.siblings, self.sibling_positions):
            if is_right:
                current = hash_node(current, sibling)
            else:
                current = hash_node(sibling, current)
        return current

    def verify(self, root: FieldElement, leaf_count: int) -> bool:
        """
        Verify this proof against the root of a tree of leaf_count leaves.

        A proof with more or fewer siblings than the tree has levels is
        rejected before any hashing.
        """
        if leaf_count < 1:
            return False
        if len(self.siblings) != tree_depth(leaf_count):
            return False
        return self.compute_root() == root

    def serialize(self) -> bytes:
        """leaf || count(u32) || (position(u8) || sibling)*"""
        parts = [self.leaf.serialize(), struct.pack(">I", len(self.siblings))]
        for sibling, is_right in zip(self.siblings, self.sibling_positions):
            parts.append(bytes([1 if is_right else 0]))
            parts.append(sibling.serialize())
        return b"".join(parts)

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[MerkleProof, int]:
        """Deserialize proof from bytes, return (MerkleProof, bytes_consumed)."""
        leaf, consumed = FieldElement.deserialize(data, offset)
        pos = offset + consumed

        (count,) = struct.unpack_from(">I", data, pos)
        pos += 4

        siblings = []
        positions = []
        for _ in range(count):
            positions.append(data[pos] == 1)
            pos += 1
            sibling, consumed = FieldElement.deserialize(data, pos)
            pos += consumed
            siblings.append(sibling)

        return cls(leaf, tuple(siblings), tuple(positions)), pos - offset


class MerkleTree:
    """
    Complete Merkle tree with proof generation.
    """

    def __init__(self, leaves: Sequence[FieldElement]):
        self._original_leaves = list(leaves)
        self._index: Dict[FieldElement, int] = {}
        for i, leaf in enumerate(self._original_leaves):
            self._index.setdefault(leaf, i)
        self._levels: List[List[FieldElement]] = []

        if len(self._original_leaves) == 0:
            self._root = FieldElement.zero()
            return

        current = _pad([hash_leaf(leaf) for leaf in self._original_leaves])
        self._levels = [current]
        while len(current) > 1:
            current = [hash_node(current[i], current[i + 1]) for i in range(0, len(current), 2)]
            self._levels.append(current)

        self._root = current[0]

    @property
    def root(self) -> FieldElement:
        return self._root

    @property
    def leaf_count(self) -> int:
        """Number of leaves before padding."""
        return len(self._original_leaves)

    @property
    def height(self) -> int:
        return len(self._levels)

    def get_proof(self, index: int) -> Optional[MerkleProof]:
        """Proof for the leaf at index, None if out of range."""
        if index < 0 or index >= len(self._original_leaves):
            return None

        siblings = []
        positions = []
        current_index = index

        for level in self._levels[:-1]:
            if current_index % 2 == 0:
                siblings.append(level[current_index + 1])
                positions.append(True)
            else:
                siblings.append(level[current_index - 1])
                positions.append(False)
            current_index //= 2

        return MerkleProof(
            leaf=self._original_leaves[index],
            siblings=tuple(siblings),
            sibling_positions=tuple(positions),
        )

    def prove(self, leaf: FieldElement) -> Optional[MerkleProof]:
        """Proof for a leaf value, None if the leaf is not in the tree."""
        index = self.find_index(leaf)
        if index is None:
            return None
        return self.get_proof(index)

    def verify_proof(self, proof: MerkleProof) -> bool:
        return proof.verify(self._root, self.leaf_count)

    def contains(self, leaf: FieldElement) -> bool:
        return leaf in self._index

    def find_index(self, leaf: FieldElement) -> Optional[int]:
        return self._index.get(leaf)

"""Ordered Merkle tree over string items.

Rules
- Leaf hash: sha256_hex(item).
- Pair hash: sha256_hex(sha256_hex(left_hex + right_hex)), where the children's
  hex digests are concatenated as text, left then right.
- Odd node: carried to the next level with its hash unchanged. This differs
  from the common "duplicate the last node" convention and must not be
  changed, or previously published roots stop matching.

Security notes:
- Input order is committed to; reordering items changes the root.
- Building over zero items is an error, never an implicit empty root.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from chaindigest.config import load_settings, resolve_hasher
from chaindigest.core.errors import EmptyInput, InvalidInput, ProofError
from chaindigest.core.sha256 import sha256_hex

from .node import TreeNode

log = logging.getLogger("chaindigest.merkle")

Hasher = Callable[[str], str]

_PROOF_SCHEMA = {"name": "chaindigest.merkle_proof", "version": "1.0"}


def double_hash(left_hex: str, right_hex: str, hasher: Hasher = sha256_hex) -> str:
    """Hash a pair of hex digests (text concatenation, hashed twice)."""

    return hasher(hasher(left_hex + right_hex))


def make_leaf(item: str, hasher: Hasher = sha256_hex) -> TreeNode:
    if not isinstance(item, str):
        raise InvalidInput(f"tree items must be str, got {type(item).__name__}")
    return TreeNode(data=item, hash=hasher(item))


def make_parent(left: TreeNode, right: Optional[TreeNode], hasher: Hasher = sha256_hex) -> TreeNode:
    """Combine two siblings, or promote ``left`` alone when ``right`` is None."""

    if right is None:
        h = left.hash
    else:
        h = double_hash(left.hash, right.hash, hasher)
    return TreeNode(data=h, hash=h, left=left, right=right)


def _next_level(nodes: Sequence[TreeNode], hasher: Hasher) -> List[TreeNode]:
    parents: List[TreeNode] = []
    n = len(nodes)
    for i in range(0, n - 1, 2):
        parents.append(make_parent(nodes[i], nodes[i + 1], hasher))
    if n % 2:
        parents.append(make_parent(nodes[-1], None, hasher))
    return parents


@dataclass(frozen=True)
class ProofStep:
    """One level of an inclusion proof.

    ``sibling`` is None when the node was promoted without a partner.
    ``position`` says which side the sibling sits on ("L" or "R").
    """

    sibling: Optional[str]
    position: Optional[str]


@dataclass(frozen=True)
class MerkleProof:
    """Inclusion proof for one leaf.

    Time/Space: O(log n) steps.
    """

    leaf_index: int
    leaf_count: int
    leaf_hash: str
    root: str
    steps: Tuple[ProofStep, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": dict(_PROOF_SCHEMA),
            "leaf_index": self.leaf_index,
            "leaf_count": self.leaf_count,
            "leaf_hash": self.leaf_hash,
            "root": self.root,
            "steps": [{"sibling": s.sibling, "position": s.position} for s in self.steps],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MerkleProof":
        """Parse a proof produced by :meth:`to_dict`.

        Raises:
            ProofError: on missing fields or inconsistent steps.
        """

        try:
            steps = []
            for s in raw["steps"]:
                sibling, position = s.get("sibling"), s.get("position")
                if (sibling is None) != (position is None):
                    raise ProofError("proof step must set both sibling and position, or neither")
                if position not in (None, "L", "R"):
                    raise ProofError(f"invalid proof step position: {position!r}")
                steps.append(ProofStep(sibling=sibling, position=position))
            return cls(
                leaf_index=int(raw["leaf_index"]),
                leaf_count=int(raw["leaf_count"]),
                leaf_hash=str(raw["leaf_hash"]),
                root=str(raw["root"]),
                steps=tuple(steps),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProofError(f"malformed proof: {e}") from e


class MerkleTree:
    """An immutable hash tree.

    Every level is kept (level 0 = leaves, last level = root) so inclusion
    proofs can be read off without recomputation. The only way to get a tree
    is to hash items, so the node invariants always hold.

    Usage:
        tree = MerkleTree.build(["a", "b", "c"])  # same as MerkleTree([...])
        tree.root().hash
        proof = tree.proof(2)
    """

    def __init__(self, items: Iterable[str], *, hasher: Optional[Hasher] = None) -> None:
        """Hash ``items`` into leaves and reduce them to a single root.

        Raises:
            EmptyInput: if ``items`` is empty.
            InvalidInput: if an item is not a string.
        """

        if hasher is None:
            hasher = resolve_hasher(load_settings().hash_backend)

        leaves = [make_leaf(item, hasher) for item in items]
        if not leaves:
            raise EmptyInput("cannot build a hash tree over zero items")

        levels: List[List[TreeNode]] = [leaves]
        while len(levels[-1]) > 1:
            levels.append(_next_level(levels[-1], hasher))
            log.debug(
                "merkle_level",
                extra={"level": len(levels) - 1, "node_count": len(levels[-1])},
            )

        self._levels: Tuple[Tuple[TreeNode, ...], ...] = tuple(tuple(lv) for lv in levels)
        log.info(
            "merkle_built",
            extra={"leaf_count": self.leaf_count, "depth": self.depth, "root": self.root_hash},
        )

    @classmethod
    def build(cls, items: Iterable[str], *, hasher: Optional[Hasher] = None) -> "MerkleTree":
        """Build a tree from ordered items."""

        return cls(items, hasher=hasher)

    def root(self) -> TreeNode:
        return self._levels[-1][0]

    @property
    def root_hash(self) -> str:
        return self.root().hash

    @property
    def levels(self) -> Tuple[Tuple[TreeNode, ...], ...]:
        return self._levels

    @property
    def leaves(self) -> Tuple[TreeNode, ...]:
        return self._levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        """Number of reduction levels above the leaves."""

        return len(self._levels) - 1

    def find(self, data: str) -> Optional[int]:
        """Index of the first leaf whose content equals ``data``."""

        for i, leaf in enumerate(self.leaves):
            if leaf.data == data:
                return i
        return None

    def proof(self, index: int) -> MerkleProof:
        """Build an inclusion proof for the leaf at ``index``.

        Raises:
            ProofError: if ``index`` is out of range.
        """

        if not 0 <= index < self.leaf_count:
            raise ProofError(f"leaf index {index} out of range for {self.leaf_count} leaves")

        steps: List[ProofStep] = []
        pos = index
        for level in self._levels[:-1]:
            if pos % 2 == 0:
                if pos + 1 < len(level):
                    steps.append(ProofStep(sibling=level[pos + 1].hash, position="R"))
                else:
                    steps.append(ProofStep(sibling=None, position=None))
            else:
                steps.append(ProofStep(sibling=level[pos - 1].hash, position="L"))
            pos //= 2

        return MerkleProof(
            leaf_index=index,
            leaf_count=self.leaf_count,
            leaf_hash=self.leaves[index].hash,
            root=self.root_hash,
            steps=tuple(steps),
        )


def compute_proof_root(proof: MerkleProof, *, hasher: Hasher = sha256_hex) -> str:
    """Fold a proof's steps upward from its leaf hash.

    The side of every step is fixed by ``leaf_index`` and ``leaf_count``, so a
    proof relabelled to a different index does not fold.

    Raises:
        ProofError: if a step disagrees with the path of ``leaf_index``.
    """

    if not 0 <= proof.leaf_index < proof.leaf_count:
        raise ProofError(
            f"leaf index {proof.leaf_index} out of range for {proof.leaf_count} leaves"
        )

    cur = proof.leaf_hash
    pos, width = proof.leaf_index, proof.leaf_count
    for step in proof.steps:
        if width == 1:
            raise ProofError("proof has more steps than the tree has levels")
        if pos % 2:
            expected = "L"
        elif pos + 1 < width:
            expected = "R"
        else:
            expected = None
        if step.position != expected or (step.sibling is None) != (expected is None):
            raise ProofError(
                f"step at index {pos} of width {width} must be {expected!r}, got {step.position!r}"
            )

        if expected == "R":
            cur = double_hash(cur, step.sibling, hasher)
        elif expected == "L":
            cur = double_hash(step.sibling, cur, hasher)
        pos, width = pos // 2, (width + 1) // 2

    if width != 1:
        raise ProofError("proof ends below the root level")
    return cur


def verify_proof(
    proof: MerkleProof, *, leaf_data: Optional[str] = None, hasher: Hasher = sha256_hex
) -> bool:
    """Return True if ``proof`` links its leaf, at its index, to ``proof.root``.

    When ``leaf_data`` is given the leaf hash is recomputed from it, so the
    proof also attests to that exact content.
    """

    if leaf_data is not None and hasher(leaf_data) != proof.leaf_hash:
        return False
    try:
        return compute_proof_root(proof, hasher=hasher) == proof.root
    except ProofError:
        return False


def build_merkle_tree(items: Iterable[str]) -> str:
    """Return the root hash over ordered ``items``."""

    return MerkleTree.build(items).root_hash

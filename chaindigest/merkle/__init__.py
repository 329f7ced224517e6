"""Merkle tree construction and inclusion proofs."""

from .node import TreeNode  # noqa: F401
from .tree import (  # noqa: F401
    MerkleProof,
    MerkleTree,
    ProofStep,
    build_merkle_tree,
    compute_proof_root,
    double_hash,
    verify_proof,
)

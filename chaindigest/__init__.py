"""chaindigest: SHA-256 and ordered Merkle-root commitments."""

from chaindigest.core import (  # noqa: F401
    ChainDigestError,
    EmptyInput,
    InvalidInput,
    ProofError,
    hex_digest,
    sha256,
    sha256_hex,
)
from chaindigest.merkle import (  # noqa: F401
    MerkleProof,
    MerkleTree,
    TreeNode,
    build_merkle_tree,
    verify_proof,
)

__version__ = "0.1.0"

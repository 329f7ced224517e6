import dataclasses
import json

import pytest

from chaindigest.core.errors import ProofError
from chaindigest.merkle import MerkleProof, MerkleTree, compute_proof_root, verify_proof


def test_every_leaf_proves_for_various_sizes() -> None:
    for n in (1, 2, 3, 4, 5, 7, 8, 11):
        items = [f"tx-{i}" for i in range(n)]
        tree = MerkleTree.build(items)
        for i, item in enumerate(items):
            proof = tree.proof(i)
            assert proof.root == tree.root_hash
            assert len(proof.steps) == tree.depth
            assert verify_proof(proof, leaf_data=item), (n, i)


def test_promotion_step_has_no_sibling() -> None:
    tree = MerkleTree.build(["a", "b", "c"])
    proof = tree.proof(2)
    assert proof.steps[0].sibling is None
    assert proof.steps[0].position is None
    assert proof.steps[1].position == "L"


def test_wrong_leaf_data_fails() -> None:
    tree = MerkleTree.build(["a", "b", "c", "d"])
    assert verify_proof(tree.proof(1), leaf_data="b")
    assert not verify_proof(tree.proof(1), leaf_data="x")


def test_tampered_sibling_fails() -> None:
    tree = MerkleTree.build(["a", "b", "c", "d"])
    raw = tree.proof(0).to_dict()
    raw["steps"][0]["sibling"] = "0" * 64
    assert not verify_proof(MerkleProof.from_dict(raw))


def test_dict_round_trip_through_json() -> None:
    tree = MerkleTree.build(["a", "b", "c", "d", "e"])
    proof = tree.proof(4)
    restored = MerkleProof.from_dict(json.loads(json.dumps(proof.to_dict())))
    assert restored == proof


def test_out_of_range_index() -> None:
    tree = MerkleTree.build(["a", "b"])
    with pytest.raises(ProofError):
        tree.proof(2)
    with pytest.raises(ProofError):
        tree.proof(-1)


def test_malformed_proof_dict() -> None:
    with pytest.raises(ProofError):
        MerkleProof.from_dict({"leaf_index": 0})
    with pytest.raises(ProofError):
        MerkleProof.from_dict(
            {"leaf_index": 0, "leaf_hash": "x", "root": "y", "steps": [{"sibling": "z", "position": "Q"}]}
        )
    with pytest.raises(ProofError):
        MerkleProof.from_dict(
            {"leaf_index": 0, "leaf_hash": "x", "root": "y", "steps": [{"sibling": "z"}]}
        )


def test_relabelled_index_fails() -> None:
    tree = MerkleTree.build(["a", "b", "c", "d"])
    forged = dataclasses.replace(tree.proof(0), leaf_index=3)
    assert not verify_proof(forged, leaf_data="a")
    with pytest.raises(ProofError):
        compute_proof_root(forged)


def test_relabelled_onto_promoted_slot_fails() -> None:
    tree = MerkleTree.build(["a", "b", "c"])
    assert not verify_proof(dataclasses.replace(tree.proof(0), leaf_index=2), leaf_data="a")
    assert not verify_proof(dataclasses.replace(tree.proof(2), leaf_index=0), leaf_data="c")


def test_step_count_must_match_depth() -> None:
    tree = MerkleTree.build(["a", "b", "c", "d", "e"])
    proof = tree.proof(1)
    assert not verify_proof(dataclasses.replace(proof, steps=proof.steps[:-1]))
    assert not verify_proof(dataclasses.replace(proof, steps=proof.steps + proof.steps[-1:]))


def test_leaf_count_outside_index_fails() -> None:
    tree = MerkleTree.build(["a", "b"])
    assert not verify_proof(dataclasses.replace(tree.proof(1), leaf_count=1))

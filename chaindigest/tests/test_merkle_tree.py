import hashlib
import logging

import pytest

from chaindigest.core.errors import EmptyInput, InvalidInput
from chaindigest.core.sha256 import sha256_hex
from chaindigest.merkle import MerkleTree, build_merkle_tree, double_hash


def _h(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _pair(a: str, b: str) -> str:
    return _h(_h(a + b))


def test_single_item_root_is_leaf_hash() -> None:
    tree = MerkleTree.build(["x"])
    assert tree.root().hash == sha256_hex("x")
    assert tree.root().data == "x"
    assert tree.root().is_leaf
    assert tree.depth == 0


def test_two_items_double_hash_of_hex_concat() -> None:
    tree = MerkleTree.build(["x", "y"])
    assert tree.root().hash == _h(_h(_h("x") + _h("y")))
    assert tree.root().data == tree.root().hash
    assert tree.root().left.data == "x"
    assert tree.root().right.data == "y"


def test_odd_node_promoted_without_rehash() -> None:
    tree = MerkleTree.build(["a", "b", "c"])
    level1 = tree.levels[1]
    assert len(level1) == 2
    assert level1[1].hash == _h("c")
    assert level1[1].is_promoted
    assert level1[1].right is None
    assert tree.root_hash == _pair(_pair(_h("a"), _h("b")), _h("c"))
    # Duplicate-last-node convention would give a different root.
    assert tree.root_hash != _pair(_pair(_h("a"), _h("b")), _pair(_h("c"), _h("c")))


def test_five_items_promote_twice() -> None:
    items = ["1", "2", "3", "4", "5"]
    h = [_h(i) for i in items]
    left = _pair(_pair(h[0], h[1]), _pair(h[2], h[3]))
    assert build_merkle_tree(items) == _pair(left, h[4])


def test_determinism() -> None:
    items = [str(i) for i in range(1, 17)]
    assert build_merkle_tree(items) == build_merkle_tree(list(items))


def test_order_sensitive() -> None:
    assert build_merkle_tree(["a", "b"]) != build_merkle_tree(["b", "a"])
    assert build_merkle_tree(["a", "a"]) == build_merkle_tree(["a", "a"])


def test_levels_halve_until_root() -> None:
    tree = MerkleTree.build([str(i) for i in range(16)])
    assert [len(lv) for lv in tree.levels] == [16, 8, 4, 2, 1]
    assert tree.depth == 4
    assert tree.leaf_count == 16


def test_empty_input_raises() -> None:
    with pytest.raises(EmptyInput):
        MerkleTree.build([])
    with pytest.raises(EmptyInput):
        build_merkle_tree(iter(()))


def test_non_string_item_raises() -> None:
    with pytest.raises(InvalidInput):
        MerkleTree.build(["a", 1])  # type: ignore[list-item]


def test_find_returns_first_match() -> None:
    tree = MerkleTree.build(["a", "b", "a"])
    assert tree.find("a") == 0
    assert tree.find("b") == 1
    assert tree.find("zzz") is None


def test_double_hash_matches_internal_nodes() -> None:
    tree = MerkleTree.build(["p", "q"])
    assert tree.root_hash == double_hash(_h("p"), _h("q"))


def test_hashlib_backend_gives_same_root(monkeypatch: pytest.MonkeyPatch) -> None:
    items = ["alpha", "beta", "gamma", "delta", "epsilon"]
    monkeypatch.setenv("CHAINDIGEST_HASH_BACKEND", "builtin")
    builtin_root = build_merkle_tree(items)
    monkeypatch.setenv("CHAINDIGEST_HASH_BACKEND", "hashlib")
    assert build_merkle_tree(items) == builtin_root


def test_constructor_hashes_items() -> None:
    items = ["a", "b", "c"]
    assert MerkleTree(items).root_hash == MerkleTree.build(items).root_hash
    with pytest.raises(EmptyInput):
        MerkleTree([])


def test_build_logs_levels_and_summary(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="chaindigest.merkle"):
        tree = MerkleTree.build(["a", "b", "c", "d", "e"])

    levels = [r for r in caplog.records if r.getMessage() == "merkle_level"]
    assert [(r.level, r.node_count) for r in levels] == [(1, 3), (2, 2), (3, 1)]

    (built,) = [r for r in caplog.records if r.getMessage() == "merkle_built"]
    assert built.levelno == logging.INFO
    assert built.leaf_count == 5
    assert built.depth == 3
    assert built.root == tree.root_hash

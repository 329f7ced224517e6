from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from chaindigest.commitment.signing import (
    generate_ed25519_keypair,
    load_public_key_pem,
    root_payload,
    sign_root,
    signing_metadata,
    verify_root_signature,
)
from chaindigest.config import Settings, load_settings
from chaindigest.core.errors import ChainDigestError, InvalidInput, ProofError
from chaindigest.core.sha256 import sha256_hex
from chaindigest.merkle.tree import MerkleProof, MerkleTree, verify_proof
from chaindigest.utils.json_safe import to_jsonable

log = logging.getLogger("chaindigest.cli")


def _print_json(obj) -> None:
    print(json.dumps(to_jsonable(obj), indent=2, sort_keys=True))


def _read_items(args: argparse.Namespace) -> List[str]:
    """Collect items from argv, then from --file (one per line)."""

    items: List[str] = list(getattr(args, "items", None) or [])
    path = getattr(args, "file", None)
    if path:
        with open(path, "r", encoding="utf-8") as f:
            try:
                items.extend(line.rstrip("\r\n") for line in f)
            except UnicodeDecodeError as e:
                raise InvalidInput(f"{path}: items file is not UTF-8: {e}") from e
    return items


def _build_tree(args: argparse.Namespace, settings: Settings) -> MerkleTree:
    items = _read_items(args)
    if settings.max_items and len(items) > settings.max_items:
        raise InvalidInput(
            f"{len(items)} items exceeds CHAINDIGEST_MAX_ITEMS={settings.max_items}"
        )
    return MerkleTree.build(items)


def cmd_digest(args: argparse.Namespace) -> int:
    if args.file:
        data = Path(args.file).read_bytes()
    elif args.text is not None:
        data = args.text.encode("utf-8")
    else:
        print("error: provide TEXT or --file", file=sys.stderr)
        return 2
    print(sha256_hex(data))
    return 0


def cmd_merkle_root(args: argparse.Namespace) -> int:
    tree = _build_tree(args, args.settings)
    if args.json:
        _print_json(
            {"root": tree.root_hash, "leaf_count": tree.leaf_count, "depth": tree.depth}
        )
    else:
        print(tree.root_hash)
    return 0


def cmd_merkle_proof(args: argparse.Namespace) -> int:
    tree = _build_tree(args, args.settings)
    _print_json(tree.proof(args.index))
    return 0


def cmd_verify_proof(args: argparse.Namespace) -> int:
    with open(args.proof, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ProofError(f"{args.proof}: not valid JSON: {e}") from e
    proof = MerkleProof.from_dict(raw)
    ok = verify_proof(proof, leaf_data=args.leaf)
    _print_json({"ok": ok, "root": proof.root, "leaf_index": proof.leaf_index})
    return 0 if ok else 3


def cmd_keygen(args: argparse.Namespace) -> int:
    kp = generate_ed25519_keypair(args.out_dir, prefix=args.prefix)
    _print_json(kp)
    return 0


def cmd_sign_root(args: argparse.Namespace) -> int:
    tree = _build_tree(args, args.settings)
    payload = root_payload(tree)
    _print_json(
        {
            "payload": payload,
            "signature": sign_root(args.key, payload),
            "metadata": signing_metadata(signer_id=args.signer_id),
        }
    )
    return 0


def cmd_verify_root(args: argparse.Namespace) -> int:
    tree = _build_tree(args, args.settings)
    ok = verify_root_signature(load_public_key_pem(args.pubkey), root_payload(tree), args.signature)
    _print_json({"ok": ok, "root": tree.root_hash})
    return 0 if ok else 3


def _add_item_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("items", nargs="*", help="Items in order")
    p.add_argument("--file", default=None, help="Read additional items from a file, one per line")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="chaindigest", description="SHA-256 digests and Merkle roots")
    sub = p.add_subparsers(dest="cmd", required=True)

    dg = sub.add_parser("digest", help="Print the SHA-256 hex digest of text or a file")
    dg.add_argument("text", nargs="?", default=None, help="Text to hash (UTF-8)")
    dg.add_argument("--file", default=None, help="Hash raw file bytes instead")
    dg.set_defaults(func=cmd_digest)

    mr = sub.add_parser("merkle-root", help="Print the Merkle root of ordered items")
    _add_item_args(mr)
    mr.add_argument("--json", action="store_true", help="Print JSON with root, leaf_count, depth")
    mr.set_defaults(func=cmd_merkle_root)

    mp = sub.add_parser("merkle-proof", help="Print an inclusion proof for one item")
    mp.add_argument("index", type=int, help="Zero-based leaf index")
    _add_item_args(mp)
    mp.set_defaults(func=cmd_merkle_proof)

    vp = sub.add_parser("verify-proof", help="Verify an inclusion proof JSON file")
    vp.add_argument("proof", help="Path to proof JSON")
    vp.add_argument("--leaf", default=None, help="Leaf content to check against the proof")
    vp.set_defaults(func=cmd_verify_proof)

    kg = sub.add_parser("keygen", help="Generate an Ed25519 keypair (PEM)")
    kg.add_argument("out_dir", help="Output directory")
    kg.add_argument("--prefix", default="chaindigest_ed25519", help="Key filename prefix")
    kg.set_defaults(func=cmd_keygen)

    sr = sub.add_parser("sign-root", help="Sign the Merkle root of ordered items")
    sr.add_argument("--key", required=True, help="Path to Ed25519 PRIVATE key PEM")
    sr.add_argument("--signer-id", default=None, help="Optional signer id")
    _add_item_args(sr)
    sr.set_defaults(func=cmd_sign_root)

    vr = sub.add_parser("verify-root", help="Verify a root signature over ordered items")
    vr.add_argument("--pubkey", required=True, help="Path to Ed25519 PUBLIC key PEM")
    vr.add_argument("--signature", required=True, help="Base64 signature")
    _add_item_args(vr)
    vr.set_defaults(func=cmd_verify_root)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    settings = load_settings()
    logging.basicConfig(stream=sys.stderr, level=settings.log_level)

    parser = build_parser()
    args = parser.parse_args(argv)
    args.settings = settings
    try:
        return int(args.func(args))
    except (ChainDigestError, OSError) as e:
        log.debug("command_failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

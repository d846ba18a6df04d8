from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .distribution.claims import (
    audit_claims,
    build_claims,
    check_claim,
    claim_for,
    load_recipients,
    read_claims,
    write_claims,
)
from .errors import InvalidInput, NotFound
from .settings import settings

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def cmd_build(args: argparse.Namespace) -> int:
    try:
        recipients = load_recipients(Path(args.input))
        _, doc = build_claims(recipients)
    except (OSError, InvalidInput) as e:
        logging.debug("build failed", exc_info=True)
        print(f"Cannot build claims: {e}", file=sys.stderr)
        return 2
    try:
        out = write_claims(doc, Path(args.out) if args.out else settings.claims_path)
    except OSError as e:
        print(f"Cannot write claims: {e}", file=sys.stderr)
        return 2
    print(f"Merkle root: {doc.merkle_root}")
    print(f"Wrote {len(doc.claims)} claims to {out}")
    return 0


def cmd_proof(args: argparse.Namespace) -> int:
    try:
        recipients = load_recipients(Path(args.input))
        _, doc = build_claims(recipients)
    except (OSError, InvalidInput) as e:
        print(f"Cannot load recipients: {e}", file=sys.stderr)
        return 2
    try:
        claim = claim_for(doc, args.index)
    except NotFound as e:
        print(str(e), file=sys.stderr)
        return 3
    out = claim.model_dump(mode="json")
    out["merkle_root"] = doc.merkle_root
    print(json.dumps(out, indent=2, sort_keys=True))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    try:
        doc = read_claims(Path(args.claims))
        recipients = load_recipients(Path(args.recipients)) if args.recipients else None
    except (OSError, InvalidInput) as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2

    if args.index is not None:
        try:
            claim = claim_for(doc, args.index)
        except NotFound as e:
            print(str(e), file=sys.stderr)
            return 3
        overrides = {}
        if args.account is not None:
            overrides["account"] = args.account
        if args.amount is not None:
            overrides["amount"] = args.amount
        results = [check_claim(doc, claim.model_copy(update=overrides))]
    else:
        try:
            results = audit_claims(doc, recipients)
        except InvalidInput as e:
            print(f"Cannot rebuild root from recipients: {e}", file=sys.stderr)
            return 2

    failures = 0
    for r in results:
        label = "document" if r.index is None else f"claim {r.index}"
        print(f"{label}: {'OK' if r.ok else 'MISMATCH'}" + (f" ({r.reason})" if r.reason else ""))
        if not r.ok:
            failures += 1
    if failures:
        print(f"FAIL: {failures} mismatches", file=sys.stderr)
        return 4
    print(f"All {len(results)} checks OK.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="airdrop-merkle",
        description="Commit an airdrop distribution to a Merkle root and verify claims",
    )
    p.add_argument(
        "--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
        help=f"Logging level (default: {settings.airdrop_log_level})",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_build = sub.add_parser("build", help="Build the claims document (root + proofs) from a recipients file")
    p_build.add_argument("--input", required=True, help="Recipients JSON: [{account, amount}, ...]")
    p_build.add_argument("--out", help=f"Output path (default: {settings.claims_path})")
    p_build.set_defaults(func=cmd_build)

    p_proof = sub.add_parser("proof", help="Print the proof for one recipient index")
    p_proof.add_argument("--input", required=True, help="Recipients JSON")
    p_proof.add_argument("--index", required=True, type=int)
    p_proof.set_defaults(func=cmd_proof)

    p_verify = sub.add_parser("verify", help="Verify claims against the document's merkle root")
    p_verify.add_argument("--claims", required=True, help="Claims JSON written by `build`")
    p_verify.add_argument("--index", type=int, help="Verify only this claim (default: all)")
    p_verify.add_argument("--account", help="Override the claim's account (with --index)")
    p_verify.add_argument("--amount", type=int, help="Override the claim's amount (with --index)")
    p_verify.add_argument("--recipients", help="Also rebuild the root from this recipients file")
    p_verify.set_defaults(func=cmd_verify)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=(args.log_level or settings.airdrop_log_level).upper())
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())


from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from ..errors import InvalidInput, NotFound
from ..settings import settings
from ..tree.merkle import Entry, MerkleTree, verify
from .models import Claim, ClaimsDocument, Recipient


@dataclass(frozen=True)
class ClaimCheck:
    index: int | None  # None for document-level checks
    ok: bool
    reason: str | None = None


def parse_recipients(data: Any) -> list[Recipient]:
    """Validate a decoded recipients file: a JSON array, or ``{"recipients": [...]}``."""
    if isinstance(data, dict) and "recipients" in data:
        data = data["recipients"]
    if not isinstance(data, list):
        raise InvalidInput("recipients must be a JSON array of {account, amount} objects")
    out: list[Recipient] = []
    for pos, raw in enumerate(data):
        try:
            rec = Recipient.model_validate(raw)
        except ValidationError as e:
            raise InvalidInput(f"recipient #{pos} is invalid: {e}") from e
        if rec.index is None:
            rec = rec.model_copy(update={"index": pos})
        out.append(rec)
    return out


def load_recipients(path: Path) -> list[Recipient]:
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise InvalidInput(f"{path} is not valid JSON: {e}") from e
    return parse_recipients(data)


def to_entries(recipients: Iterable[Recipient]) -> list[Entry]:
    """Return one entry per index, ordered by index.

    Exact repeats collapse; two different recipients sharing an index are rejected.
    """
    by_index: dict[int, Entry] = {}
    for rec in recipients:
        entry = Entry(rec.index, rec.account, rec.amount)
        prev = by_index.get(entry.index)
        if prev is None:
            by_index[entry.index] = entry
        elif prev != entry:
            raise InvalidInput(
                f"index {entry.index} is assigned to both {prev.account} ({prev.amount}) "
                f"and {entry.account} ({entry.amount})"
            )
        else:
            logging.debug("Dropping duplicate recipient at index %d", entry.index)
    return [by_index[i] for i in sorted(by_index)]


def build_claims(recipients: Iterable[Recipient], checksum: bool | None = None) -> tuple[MerkleTree, ClaimsDocument]:
    if checksum is None:
        checksum = settings.airdrop_checksum_accounts
    entries = to_entries(recipients)
    tree = MerkleTree(entries)
    claims = [
        Claim(
            index=e.index,
            account=e.account if checksum else e.account.lower(),
            amount=e.amount,
            proof=tree.hex_proof(e.index, e.account, e.amount),
        )
        for e in entries
    ]
    doc = ClaimsDocument(
        merkle_root=None if tree.is_empty else tree.root_hex(),
        tree_size=len(tree),
        token_total=sum(e.amount for e in entries),
        claims=claims,
    )
    logging.info("Committed %d recipients to root %s", len(entries), doc.merkle_root)
    return tree, doc


def dump_claims(doc: ClaimsDocument) -> str:
    return json.dumps(doc.model_dump(mode="json"), indent=2, sort_keys=True) + "\n"


def write_claims(doc: ClaimsDocument, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_claims(doc))
    return path


def read_claims(path: Path) -> ClaimsDocument:
    try:
        return ClaimsDocument.model_validate_json(Path(path).read_text())
    except ValidationError as e:
        raise InvalidInput(f"{path} is not a claims document: {e}") from e


def claim_for(doc: ClaimsDocument, index: int) -> Claim:
    for c in doc.claims:
        if c.index == index:
            return c
    raise NotFound(f"no claim with index {index}")


def check_claim(doc: ClaimsDocument, claim: Claim) -> ClaimCheck:
    if doc.merkle_root is None:
        return ClaimCheck(claim.index, False, "document has no merkle_root")
    if verify(doc.merkle_root, claim.index, claim.account, claim.amount, claim.proof):
        return ClaimCheck(claim.index, True)
    return ClaimCheck(claim.index, False, "proof does not reach merkle_root")


def audit_claims(doc: ClaimsDocument, recipients: Iterable[Recipient] | None = None) -> list[ClaimCheck]:
    """Check every claim against the document root; optionally re-derive the root."""
    results: list[ClaimCheck] = []
    if not doc.is_pinned_format():
        results.append(ClaimCheck(
            None, False,
            f"unsupported format {doc.scheme}/{doc.hash_alg}/{doc.leaf_encoding}",
        ))
        return results
    if recipients is not None:
        tree, _ = build_claims(recipients)
        rebuilt = None if tree.is_empty else tree.root_hex()
        if rebuilt != doc.merkle_root:
            results.append(ClaimCheck(None, False, f"recipients rebuild to root {rebuilt}"))
    results.extend(check_claim(doc, c) for c in doc.claims)
    return results


from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from ..errors import EmptyTree, InvalidInput, NotFound
from .hashing import HASH_BYTES, Account, combine, encode_leaf, from_hex, to_hex

EMPTY_ROOT = b""  # sentinel; never equal to a 32-byte hash


@dataclass(frozen=True)
class Entry:
    index: int
    account: Account
    amount: int

    def leaf(self) -> bytes:
        return encode_leaf(self.index, self.account, self.amount)


EntryLike = Union[Entry, Tuple[int, Account, int]]


def _leaf_of(entry: EntryLike) -> bytes:
    if isinstance(entry, Entry):
        return entry.leaf()
    try:
        index, account, amount = entry
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"entry must be (index, account, amount), got {entry!r}") from e
    return encode_leaf(index, account, amount)


def _dedup(sorted_leaves: List[bytes]) -> List[bytes]:
    return [leaf for i, leaf in enumerate(sorted_leaves) if i == 0 or sorted_leaves[i - 1] != leaf]


def _next_layer(layer: Sequence[bytes]) -> Tuple[bytes, ...]:
    nxt = []
    for i in range(0, len(layer), 2):
        if i + 1 < len(layer):
            nxt.append(combine(layer[i], layer[i + 1]))
        else:
            # unpaired tail moves up as-is, no padding
            nxt.append(layer[i])
    return tuple(nxt)


def build_layers(leaves: List[bytes]) -> Tuple[Tuple[bytes, ...], ...]:
    """Return layers from sorted leaves up to the root (layers[0] = leaves)."""
    if not leaves:
        return ((EMPTY_ROOT,),)
    layers = [tuple(leaves)]
    while len(layers[-1]) > 1:
        layers.append(_next_layer(layers[-1]))
    return tuple(layers)


class MerkleTree:
    """Sorted-pair Merkle tree over (index, account, amount) entries.

    The tree is built once and never mutated afterwards, so one instance can be
    shared by any number of concurrent readers.
    """

    def __init__(self, entries: Iterable[EntryLike] = ()):
        # every leaf is computed before any layer exists: a bad entry fails the whole build
        leaves = sorted(_leaf_of(e) for e in entries)
        unique = _dedup(leaves)
        self._layers = build_layers(unique)
        self._positions = {leaf: pos for pos, leaf in enumerate(unique)}
        logging.debug(
            "Built merkle tree: %d leaves (%d duplicates dropped), depth %d",
            len(unique), len(leaves) - len(unique), self.depth,
        )

    @classmethod
    def build(cls, entries: Iterable[EntryLike]) -> "MerkleTree":
        return cls(entries)

    @property
    def layers(self) -> Tuple[Tuple[bytes, ...], ...]:
        return self._layers

    @property
    def leaves(self) -> Tuple[bytes, ...]:
        return () if self.is_empty else self._layers[0]

    @property
    def is_empty(self) -> bool:
        return not self._positions

    @property
    def depth(self) -> int:
        """Number of levels a proof can traverse (0 for one leaf or none)."""
        return len(self._layers) - 1

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, entry: EntryLike) -> bool:
        try:
            return _leaf_of(entry) in self._positions
        except InvalidInput:
            return False

    def root_hex(self) -> str:
        if self.is_empty:
            raise EmptyTree("tree has no entries; there is no root to export")
        return to_hex(self.root)

    def proof(self, index: int, account: Account, amount: int) -> List[bytes]:
        if self.is_empty:
            raise EmptyTree("cannot prove membership in an empty tree")
        leaf = encode_leaf(index, account, amount)
        pos = self._positions.get(leaf)
        if pos is None:
            raise NotFound(f"entry (index={index}, account={account!r}, amount={amount}) is not in the tree")
        siblings: List[bytes] = []
        for layer in self._layers[:-1]:
            sib = pos - 1 if pos % 2 else pos + 1
            if sib < len(layer):
                siblings.append(layer[sib])
            pos //= 2
        return siblings

    def hex_proof(self, index: int, account: Account, amount: int) -> List[str]:
        return [to_hex(s) for s in self.proof(index, account, amount)]

    def verify(self, index: int, account: Account, amount: int, proof: Sequence[Union[str, bytes]]) -> bool:
        return verify(self.root, index, account, amount, proof)


def verify(
    root: Union[str, bytes],
    index: int,
    account: Account,
    amount: int,
    proof: Sequence[Union[str, bytes]],
) -> bool:
    """Recompute the root from one entry and its sibling path.

    Returns False rather than raising for malformed input, including the empty
    tree sentinel, so callers can treat it as a plain predicate.
    """
    try:
        expected = from_hex(root)
        current = encode_leaf(index, account, amount)
        for sib in proof:
            sib_bytes = from_hex(sib)
            if len(sib_bytes) != HASH_BYTES:
                return False
            current = combine(current, sib_bytes)
    except InvalidInput as e:
        logging.debug("Rejecting proof with malformed input: %s", e)
        return False
    if len(expected) != HASH_BYTES:
        return False
    return current == expected


__all__ = ["EMPTY_ROOT", "Entry", "MerkleTree", "build_layers", "verify"]

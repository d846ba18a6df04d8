"""airdrop_merkle: commit an airdrop distribution to a single Merkle root.

Builds a sorted-pair Keccak-256 Merkle tree over (index, account, amount)
entries, exports the root and per-recipient proofs, and verifies proofs the
same way an on-chain distributor does.
"""
from .errors import EmptyTree, InvalidInput, MerkleError, NotFound  # noqa: F401
from .tree import Entry, MerkleTree, encode_leaf, verify  # noqa: F401

__version__ = "0.1.0"

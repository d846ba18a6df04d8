"""Sorted-pair Keccak Merkle tree: leaf encoding, construction, proofs and verification."""
from .hashing import combine, encode_leaf  # noqa: F401
from .merkle import EMPTY_ROOT, Entry, MerkleTree, verify  # noqa: F401

from __future__ import annotations


class MerkleError(Exception):
    """Base class for every error raised by airdrop_merkle."""


class InvalidInput(MerkleError, ValueError):
    """An index, account or amount does not fit its fixed-width encoding."""


class NotFound(MerkleError, LookupError):
    """A proof was requested for an entry that is not in the committed set."""


class EmptyTree(MerkleError):
    """Root or proof requested from a tree built without entries."""


__all__ = ["MerkleError", "InvalidInput", "NotFound", "EmptyTree"]

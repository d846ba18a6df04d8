
"""Leaf encoding and pair hashing for the airdrop Merkle tree.

The commitment is pinned to the following rules; changing any of them changes
every leaf and every root:

  * Hash: Keccak-256 (the Ethereum variant, not NIST SHA3-256).
  * Leaf: ``keccak256(uint256(index) || address(account) || uint256(amount))``,
    integers as 32-byte big-endian, the account as its raw 20 bytes. This is
    Solidity's ``keccak256(abi.encodePacked(index, account, amount))``.
  * Parent: ``keccak256(min(a, b) || max(a, b))`` with unsigned byte ordering,
    so a proof carries no left/right markers.
"""
from __future__ import annotations

from typing import Union

from eth_utils import decode_hex, is_hex_address, keccak, to_canonical_address

from ..errors import InvalidInput

HASH_ALG = "keccak-256"
LEAF_ENCODING = "uint256,address,uint256"
SCHEME = "sorted-pair-v1"

HASH_BYTES = 32
ADDRESS_BYTES = 20
UINT256_BYTES = 32
UINT256_MAX = 2**256 - 1

Account = Union[str, bytes]


def _uint256(name: str, value: int) -> bytes:
    # bool is an int subclass; True must not silently encode as 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidInput(f"{name} must be non-negative, got {value}")
    if value > UINT256_MAX:
        raise InvalidInput(f"{name} does not fit in uint256")
    return value.to_bytes(UINT256_BYTES, "big")


def address_bytes(account: Account) -> bytes:
    """Return the canonical 20 bytes of ``account`` (hex text in any case, or raw bytes)."""
    if isinstance(account, (bytes, bytearray)):
        if len(account) != ADDRESS_BYTES:
            raise InvalidInput(f"account must be {ADDRESS_BYTES} bytes, got {len(account)}")
        return bytes(account)
    if isinstance(account, str) and is_hex_address(account):
        return to_canonical_address(account)
    raise InvalidInput(f"account is not a {ADDRESS_BYTES}-byte hex address: {account!r}")


def encode_leaf(index: int, account: Account, amount: int) -> bytes:
    packed = _uint256("index", index) + address_bytes(account) + _uint256("amount", amount)
    return keccak(packed)


def combine(a: bytes, b: bytes) -> bytes:
    if b < a:
        a, b = b, a
    return keccak(a + b)


def to_hex(value: bytes) -> str:
    return "0x" + value.hex()


def from_hex(value: Union[str, bytes]) -> bytes:
    """Decode a ``0x``-prefixed (or bare) hex string; bytes pass through unchanged."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return decode_hex(value)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"not a hex string: {value!r}") from e


__all__ = [
    "HASH_ALG",
    "LEAF_ENCODING",
    "SCHEME",
    "HASH_BYTES",
    "ADDRESS_BYTES",
    "UINT256_MAX",
    "address_bytes",
    "encode_leaf",
    "combine",
    "to_hex",
    "from_hex",
]

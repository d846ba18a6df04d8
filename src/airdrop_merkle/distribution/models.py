
from __future__ import annotations

from eth_utils import is_hex_address, to_checksum_address
from pydantic import BaseModel, Field, field_serializer, field_validator

from ..tree.hashing import HASH_ALG, LEAF_ENCODING, SCHEME, UINT256_MAX


def _check_uint256(v: int | None) -> int | None:
    if v is not None and not 0 <= v <= UINT256_MAX:
        raise ValueError("must be between 0 and 2**256 - 1")
    return v


class Recipient(BaseModel):
    account: str
    amount: int
    index: int | None = None  # position in the recipients file when omitted

    @field_validator("account")
    @classmethod
    def _normalize_account(cls, v: str) -> str:
        v = v.strip()
        if not is_hex_address(v):
            raise ValueError(f"not a 20-byte hex address: {v!r}")
        return to_checksum_address(v)

    @field_validator("amount", "index", mode="before")
    @classmethod
    def _integer_or_decimal(cls, v: object) -> object:
        # lax int coercion would turn true into 1 and 2.0 into 2
        if isinstance(v, (bool, float)):
            raise ValueError(f"must be an integer or decimal string, got {v!r}")
        if isinstance(v, str):
            v = v.strip()
            if not (v.isascii() and v.isdigit()):
                raise ValueError(f"not a decimal integer: {v!r}")
        return v

    @field_validator("amount", "index")
    @classmethod
    def _uint256(cls, v: int | None) -> int | None:
        return _check_uint256(v)


class Claim(BaseModel):
    index: int
    account: str
    amount: int
    proof: list[str] = Field(default_factory=list)

    # decimal strings keep full precision for JSON consumers limited to 53-bit numbers
    @field_serializer("amount")
    def _amount_str(self, v: int) -> str:
        return str(v)


class ClaimsDocument(BaseModel):
    scheme: str = SCHEME
    hash_alg: str = HASH_ALG
    leaf_encoding: str = LEAF_ENCODING
    merkle_root: str | None = None  # null when there are no recipients
    tree_size: int = 0
    token_total: int = 0
    claims: list[Claim] = Field(default_factory=list)

    @field_serializer("token_total")
    def _total_str(self, v: int) -> str:
        return str(v)

    def is_pinned_format(self) -> bool:
        return (self.scheme, self.hash_alg, self.leaf_encoding) == (SCHEME, HASH_ALG, LEAF_ENCODING)

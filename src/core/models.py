from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.enums import MessageStatus
from core.errors import MalformedCheckpoint

JsonDict = Dict[str, Any]

ZERO_HASH = "0x" + "00" * 32


def to_int(value: Any) -> Any:
    """
    Coerce JSON-RPC style quantities into ints.

    Accepts ints, decimal strings and 0x-prefixed hex strings. Anything else is
    returned untouched so pydantic reports the type error itself.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        if text.isdigit():
            return int(text)
    return value


def to_hash32(value: Any) -> str:
    """Normalise a 32-byte hash given as bytes or hex text to lowercase 0x-hex."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise ValueError(f"expected 32 bytes, got {len(value)}")
        return "0x" + bytes(value).hex()
    if isinstance(value, str):
        text = value.lower()
        if not text.startswith("0x"):
            text = "0x" + text
        if len(text) != 66:
            raise ValueError(f"expected 32-byte hex string, got {value!r}")
        int(text, 16)
        return text
    raise ValueError(f"unsupported hash value: {value!r}")


# ======================================================================
# 1. BridgeMessage: the record under evaluation
# ======================================================================

class MessageReceipt(BaseModel):
    """
    Proof-of-emission record for a bridge message on its source chain.

    Only `block_number` takes part in the sync decision. JSON-RPC receipts
    carry it as a hex quantity; both forms are accepted.
    """

    block_number: int = Field(
        ...,
        ge=0,
        description="Source-chain block height at which the message was emitted.",
    )

    transaction_hash: Optional[str] = Field(
        default=None,
        description="Hash of the source-chain transaction that emitted the message.",
    )

    block_hash: Optional[str] = Field(
        default=None,
        description="Hash of the source-chain block that contains the receipt.",
    )

    class Config:
        extra = "allow"

    @field_validator("block_number", mode="before")
    @classmethod
    def _coerce_block_number(cls, v: Any) -> Any:
        return to_int(v)


class BridgeMessagePayload(BaseModel):
    """
    Payload of the bridge message as emitted on the source chain.

    The sync check only needs to know the payload exists; the fields are kept
    so callers can pass the decoded `Message` struct through unchanged.
    """

    id: Optional[int] = None
    src_chain_id: Optional[int] = None
    dest_chain_id: Optional[int] = None
    owner: Optional[str] = None
    to: Optional[str] = None
    data: Optional[str] = None

    class Config:
        extra = "allow"

    @field_validator("id", "src_chain_id", "dest_chain_id", mode="before")
    @classmethod
    def _coerce_quantities(cls, v: Any) -> Any:
        return to_int(v)


class BridgeMessage(BaseModel):
    """
    A bridge transaction as seen by the transaction listing.

    The model is frozen: evaluation borrows it and cannot change it.
    """

    status: MessageStatus = Field(
        ...,
        description="Lifecycle status of the message on the destination chain.",
    )

    receipt: Optional[MessageReceipt] = Field(
        default=None,
        description="Source-chain receipt of the transaction that sent the message.",
    )

    message: Optional[BridgeMessagePayload] = Field(
        default=None,
        description="Decoded bridge message payload.",
    )

    src_chain_id: int = Field(..., ge=0)
    dest_chain_id: int = Field(..., ge=0)

    class Config:
        frozen = True
        extra = "allow"

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, v: Any) -> MessageStatus:
        return MessageStatus.from_raw(v)

    @field_validator("src_chain_id", "dest_chain_id", mode="before")
    @classmethod
    def _coerce_chain_id(cls, v: Any) -> Any:
        return to_int(v)


# ======================================================================
# 2. SyncCheckpoint: typed result of the oracle read
# ======================================================================

class SyncCheckpoint(BaseModel):
    """
    Snippet stored by the destination chain's cross-chain sync contract.

    `block_hash` names a source-chain block the destination chain has synced.
    Older deployments return only (blockHash, signalRoot); newer ones prepend
    the remote block id.
    """

    block_hash: str
    remote_block_id: Optional[int] = None
    signal_root: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("block_hash", mode="before")
    @classmethod
    def _normalise_block_hash(cls, v: Any) -> str:
        return to_hash32(v)

    @field_validator("signal_root", mode="before")
    @classmethod
    def _normalise_signal_root(cls, v: Any) -> Optional[str]:
        return None if v is None else to_hash32(v)

    @field_validator("remote_block_id", mode="before")
    @classmethod
    def _coerce_remote_block_id(cls, v: Any) -> Any:
        return to_int(v)

    @property
    def is_empty(self) -> bool:
        """True when the oracle has never synced anything for this slot."""
        return self.block_hash == ZERO_HASH

    @classmethod
    def from_call_result(cls, raw: Any) -> "SyncCheckpoint":
        """
        Validate a raw `getSyncedSnippet` result once, at the client boundary.

        Accepted shapes:
            (remoteBlockId, blockHash, signalRoot)
            (blockHash, signalRoot)
            {"blockHash": ..., "remoteBlockId": ..., "signalRoot": ...}
        """
        if isinstance(raw, Mapping):
            fields = {
                "block_hash": raw.get("blockHash", raw.get("block_hash")),
                "remote_block_id": raw.get("remoteBlockId", raw.get("remote_block_id")),
                "signal_root": raw.get("signalRoot", raw.get("signal_root")),
            }
        elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes, bytearray)):
            if len(raw) == 3:
                fields = {"remote_block_id": raw[0], "block_hash": raw[1], "signal_root": raw[2]}
            elif len(raw) == 2:
                fields = {"block_hash": raw[0], "signal_root": raw[1]}
            else:
                raise MalformedCheckpoint(f"Unexpected snippet arity {len(raw)}: {raw!r}")
        else:
            raise MalformedCheckpoint(f"Unexpected snippet type {type(raw).__name__}: {raw!r}")

        if fields["block_hash"] is None:
            raise MalformedCheckpoint(f"Snippet has no blockHash: {raw!r}")

        try:
            return cls(**fields)
        except ValidationError as exc:
            raise MalformedCheckpoint(f"Invalid snippet {raw!r}: {exc}") from exc


# ======================================================================
# 3. SourceBlock / BlockLookup: source-chain block resolution
# ======================================================================

class SourceBlock(BaseModel):
    """
    Source-chain block header, reduced to what the height comparison needs.

    `number` is None for blocks the node knows but has not placed on its
    canonical chain (pending, or reorganised away).
    """

    hash: str
    number: Optional[int] = None
    parent_hash: Optional[str] = None
    timestamp: Optional[int] = None

    class Config:
        frozen = True

    @field_validator("hash", "parent_hash", mode="before")
    @classmethod
    def _normalise_hashes(cls, v: Any) -> Optional[str]:
        return None if v is None else to_hash32(v)

    @field_validator("number", "timestamp", mode="before")
    @classmethod
    def _coerce_quantities(cls, v: Any) -> Any:
        return to_int(v)


class BlockLookup(BaseModel):
    """
    Result of asking a source chain for a block by hash: Found(block) | NotFound.

    Not-found is an expected, frequent answer while chains converge, so it is
    a value rather than an exception.
    """

    block_hash: str
    block: Optional[SourceBlock] = None

    class Config:
        frozen = True

    @property
    def found(self) -> bool:
        return self.block is not None

    @property
    def height(self) -> Optional[int]:
        return self.block.number if self.block is not None else None

    @classmethod
    def of(cls, block: SourceBlock) -> "BlockLookup":
        return cls(block_hash=block.hash, block=block)

    @classmethod
    def not_found(cls, block_hash: str) -> "BlockLookup":
        return cls(block_hash=block_hash, block=None)

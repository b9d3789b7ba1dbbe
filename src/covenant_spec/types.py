"""Core types for the covenant specs.

Transactions follow the Bitcoin SV wire model: ordered inputs spending
outpoints, ordered (script, value) outputs, a transaction-level locktime and
a per-input sequence number. Contract states are immutable values; a
continuation is always a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from .config import DEFAULT_TX_VERSION, OUTPOINT_SIZE, TXID_SIZE, UINT_MAX


class ContractKind(Enum):
    AUCTION = "auction"
    ESCROW = "escrow"
    HASHED_MAP = "hashed_map"


class Outcome(IntEnum):
    RELEASE_BY_SELLER = 0
    RELEASE_BY_ARBITER = 1
    RETURN_BY_BUYER = 2
    RETURN_BY_ARBITER = 3


class Role(Enum):
    SELLER = "seller"
    BUYER = "buyer"
    ARBITER = "arbiter"


@dataclass(frozen=True)
class Outpoint:
    txid: bytes
    index: int

    @classmethod
    def from_hex(cls, txid_hex: str, index: int) -> "Outpoint":
        """Build from the conventional (byte-reversed) txid display hex."""
        return cls(txid=bytes.fromhex(txid_hex)[::-1], index=index)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Outpoint":
        if len(raw) != OUTPOINT_SIZE:
            raise ValueError(f"outpoint must be {OUTPOINT_SIZE} bytes, got {len(raw)}")
        return cls(txid=raw[:TXID_SIZE], index=int.from_bytes(raw[TXID_SIZE:], "little"))

    def to_bytes(self) -> bytes:
        return self.txid + int(self.index).to_bytes(4, "little", signed=False)

    def display_hex(self) -> str:
        return self.txid[::-1].hex()


@dataclass(frozen=True)
class TxInput:
    outpoint: Outpoint
    script_sig: bytes = b""
    sequence: int = UINT_MAX


@dataclass(frozen=True)
class TxOutput:
    script: bytes
    value: int


@dataclass
class Transaction:
    inputs: List[TxInput] = field(default_factory=list)
    outputs: List[TxOutput] = field(default_factory=list)
    locktime: int = 0
    version: int = DEFAULT_TX_VERSION


@dataclass(frozen=True)
class Utxo:
    """The output being spent: where it is, what locks it and its value."""

    outpoint: Outpoint
    script: bytes
    value: int


@dataclass(frozen=True)
class Change:
    pkh: bytes
    amount: int = 0


# --- Contract states ---


@dataclass(frozen=True)
class AuctionState:
    ordinal_prevout: bytes
    transfer_inscription: bytes
    bidder: bytes
    auctioneer: bytes
    deadline: int


@dataclass(frozen=True)
class EscrowState:
    seller_pkh: bytes
    buyer_pkh: bytes
    arbiter_pkh: bytes
    nonce: bytes


@dataclass(frozen=True)
class HashedMapState:
    digest: bytes


# --- Calls ---


class MapMethod(Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    CAN_GET = "can_get"
    NOT_EXIST = "not_exist"
    UNLOCK = "unlock"


@dataclass
class BidCall:
    bidder: bytes
    bid: int
    change: Optional[Change] = None


@dataclass
class CloseCall:
    signature: bytes
    change: Optional[Change] = None


@dataclass
class SpendCall:
    spender_sig: bytes
    spender_key: bytes
    oracle_sig: bytes
    oracle_key: bytes
    outcome: int


@dataclass
class MapCall:
    method: MapMethod
    key: int
    image: dict[int, bytes] = field(default_factory=dict)
    value: Optional[bytes] = None
    change: Optional[Change] = None

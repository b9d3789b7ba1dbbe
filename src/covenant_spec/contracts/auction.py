"""BSV-20 ordinal auction covenant.

The locked value is the current highest bid. ``bid`` is a compare-and-swap:
the continuation carries the new bidder at the new bid while the displaced
bidder is refunded. Once the deadline has passed the auctioneer may ``close``,
which must also consume the auctioned ordinal as the first input and pay it
to the winner together with the proceeds to the auctioneer.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..config import (
    COMPRESSED_PUBKEY_SIZE,
    ORDINAL_OUTPUT_VALUE,
    OUTPOINT_SIZE,
    UNCOMPRESSED_PUBKEY_SIZE,
)
from ..context import SpendContext, check_hash_outputs, check_sig
from ..crypto.hash_algorithms import hash160
from ..encoding import (
    OP_DROP,
    change_outputs,
    decode_script_num,
    decode_state_script,
    encode_script_num,
    encode_state_script,
    p2pkh_script,
    push_data,
)
from ..errors import ErrorCode, SpecError
from ..timelock import check_deadline
from ..types import AuctionState, Change, TxOutput

AUCTION_CODE = push_data(b"bsv20-auction") + bytes([OP_DROP])

_PUBKEY_SIZES = (COMPRESSED_PUBKEY_SIZE, UNCOMPRESSED_PUBKEY_SIZE)


def _check_pubkey(name: str, key: bytes) -> None:
    if len(key) not in _PUBKEY_SIZES:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{name} must be a SEC1 public key")


def deploy(
    ordinal_prevout: bytes, transfer_inscription: bytes, auctioneer: bytes, deadline: int
) -> AuctionState:
    """Initial state: the auctioneer holds the opening bid."""
    if len(ordinal_prevout) != OUTPOINT_SIZE:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"ordinal prevout must be {OUTPOINT_SIZE} bytes")
    _check_pubkey("auctioneer", auctioneer)
    if deadline < 0:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "deadline must be non-negative")
    return AuctionState(
        ordinal_prevout=ordinal_prevout,
        transfer_inscription=transfer_inscription,
        bidder=auctioneer,
        auctioneer=auctioneer,
        deadline=deadline,
    )


def locking_script(state: AuctionState) -> bytes:
    return encode_state_script(
        AUCTION_CODE,
        (
            state.ordinal_prevout,
            state.transfer_inscription,
            state.bidder,
            state.auctioneer,
            encode_script_num(state.deadline),
        ),
    )


def from_locking_script(script: bytes) -> AuctionState:
    fields = decode_state_script(script, AUCTION_CODE)
    if len(fields) != 5:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"auction state has {len(fields)} fields, expected 5")
    prevout, inscription, bidder, auctioneer, deadline = fields
    return AuctionState(
        ordinal_prevout=prevout,
        transfer_inscription=inscription,
        bidder=bidder,
        auctioneer=auctioneer,
        deadline=decode_script_num(deadline),
    )


def bid_outputs(
    state: AuctionState,
    highest_bid: int,
    bidder: bytes,
    bid: int,
    change: Optional[Change] = None,
) -> tuple[AuctionState, list[TxOutput]]:
    """Successor state and the outputs a valid ``bid`` must produce."""
    successor = replace(state, bidder=bidder)
    outputs = [
        TxOutput(script=locking_script(successor), value=bid),
        TxOutput(script=p2pkh_script(hash160(state.bidder)), value=highest_bid),
    ]
    return successor, outputs + change_outputs(change)


def close_outputs(
    state: AuctionState, locked_value: int, change: Optional[Change] = None
) -> list[TxOutput]:
    ordinal_script = p2pkh_script(hash160(state.bidder)) + state.transfer_inscription
    outputs = [
        TxOutput(script=ordinal_script, value=ORDINAL_OUTPUT_VALUE),
        TxOutput(script=p2pkh_script(hash160(state.auctioneer)), value=locked_value),
    ]
    return outputs + change_outputs(change)


def bid(
    state: AuctionState,
    ctx: SpendContext,
    bidder: bytes,
    bid: int,
    change: Optional[Change] = None,
) -> AuctionState:
    highest_bid = ctx.utxo.value
    if bid <= highest_bid:
        raise SpecError(ErrorCode.BID_TOO_LOW, "the auction bid is lower than the current highest bid")
    _check_pubkey("bidder", bidder)

    successor, outputs = bid_outputs(state, highest_bid, bidder, bid, change)
    check_hash_outputs(ctx, outputs, "hashOutputs check failed")
    return successor


def close(
    state: AuctionState,
    ctx: SpendContext,
    sig_auctioneer: bytes,
    change: Optional[Change] = None,
) -> None:
    check_deadline(state.deadline, ctx.locktime, ctx.sequence, reason="auction is not over yet")
    check_sig(ctx, sig_auctioneer, state.auctioneer)

    # The same transaction must consume the auctioned ordinal as input 0.
    if ctx.prevouts[:OUTPOINT_SIZE] != state.ordinal_prevout:
        raise SpecError(
            ErrorCode.PREVOUT_MISMATCH, "first input is not spending specified ordinal UTXO"
        )

    check_hash_outputs(ctx, close_outputs(state, ctx.utxo.value, change), "hashOutputs mismatch")

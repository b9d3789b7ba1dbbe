"""State transition entrypoints for the covenant specs."""

from __future__ import annotations

import logging
from typing import Optional, Union

from .context import SpendContext
from .contracts import auction, escrow, hashed_map
from .encoding import decode_transaction
from .errors import ErrorCode, SpecError
from .types import (
    AuctionState,
    BidCall,
    CloseCall,
    ContractKind,
    EscrowState,
    HashedMapState,
    MapCall,
    MapMethod,
    Outpoint,
    SpendCall,
    Transaction,
    Utxo,
)

logger = logging.getLogger(__name__)

ContractState = Union[AuctionState, EscrowState, HashedMapState]
Call = Union[BidCall, CloseCall, SpendCall, MapCall]

_KIND_BY_STATE = {
    AuctionState: ContractKind.AUCTION,
    EscrowState: ContractKind.ESCROW,
    HashedMapState: ContractKind.HASHED_MAP,
}

_LOCKING_SCRIPT = {
    ContractKind.AUCTION: auction.locking_script,
    ContractKind.ESCROW: escrow.locking_script,
    ContractKind.HASHED_MAP: hashed_map.locking_script,
}

_MAP_METHODS_WITH_VALUE = frozenset({
    MapMethod.INSERT,
    MapMethod.UPDATE,
    MapMethod.CAN_GET,
    MapMethod.UNLOCK,
})


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(self, ok: bool, error: Optional[SpecError] = None):
        self.ok = ok
        self.error = error

    @classmethod
    def success(cls) -> "TransitionResult":
        return cls(True, None)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)

    def __repr__(self) -> str:
        return f"TransitionResult(ok={self.ok}, error={self.error})"


def contract_kind(state: ContractState) -> ContractKind:
    kind = _KIND_BY_STATE.get(type(state))
    if kind is None:
        raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"unknown contract state {type(state).__name__}")
    return kind


def locking_script(state: ContractState) -> bytes:
    return _LOCKING_SCRIPT[contract_kind(state)](state)


def spend_context(
    state: ContractState,
    tx: Union[Transaction, bytes],
    input_index: int,
    value: int,
    outpoint: Optional[Outpoint] = None,
) -> SpendContext:
    """Bind a proposed transaction (structured or raw) to the contract utxo it spends."""
    if isinstance(tx, (bytes, bytearray)):
        tx = decode_transaction(bytes(tx))
    if not 0 <= input_index < len(tx.inputs):
        raise SpecError(ErrorCode.INVALID_FORMAT, f"input index {input_index} out of range")
    if outpoint is None:
        outpoint = tx.inputs[input_index].outpoint
    utxo = Utxo(outpoint=outpoint, script=locking_script(state), value=value)
    return SpendContext.from_transaction(tx, input_index, utxo)


def _require_value(call: MapCall) -> bytes:
    if call.value is None:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{call.method.value} requires a value")
    return call.value


def _dispatch_map(state: HashedMapState, call: MapCall, ctx: SpendContext) -> Optional[HashedMapState]:
    m = call.method
    value = _require_value(call) if m in _MAP_METHODS_WITH_VALUE else None
    if m == MapMethod.INSERT:
        return hashed_map.insert(state, ctx, call.image, call.key, value, call.change)[0]
    if m == MapMethod.UPDATE:
        return hashed_map.update(state, ctx, call.image, call.key, value, call.change)[0]
    if m == MapMethod.DELETE:
        return hashed_map.delete(state, ctx, call.image, call.key, call.change)[0]
    if m == MapMethod.CAN_GET:
        return hashed_map.can_get(state, ctx, call.image, call.key, value, call.change)[0]
    if m == MapMethod.NOT_EXIST:
        return hashed_map.not_exist(state, ctx, call.image, call.key, call.change)[0]
    if m == MapMethod.UNLOCK:
        hashed_map.unlock(state, ctx, call.image, call.key, value)
        return None

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"map method not implemented: {m}")


def _dispatch(state: ContractState, call: Call, ctx: SpendContext) -> Optional[ContractState]:
    kind = contract_kind(state)
    if kind == ContractKind.AUCTION and isinstance(call, BidCall):
        return auction.bid(state, ctx, call.bidder, call.bid, call.change)
    if kind == ContractKind.AUCTION and isinstance(call, CloseCall):
        auction.close(state, ctx, call.signature, call.change)
        return None
    if kind == ContractKind.ESCROW and isinstance(call, SpendCall):
        escrow.spend(
            state,
            ctx,
            call.spender_sig,
            call.spender_key,
            call.oracle_sig,
            call.oracle_key,
            call.outcome,
        )
        return None
    if kind == ContractKind.HASHED_MAP and isinstance(call, MapCall):
        return _dispatch_map(state, call, ctx)

    raise SpecError(
        ErrorCode.NOT_IMPLEMENTED, f"{type(call).__name__} not supported by {kind.value} contract"
    )


def apply_call(
    state: ContractState,
    call: Call,
    tx: Union[Transaction, bytes],
    input_index: int,
    value: int,
    outpoint: Optional[Outpoint] = None,
) -> tuple[Optional[ContractState], TransitionResult]:
    """Validate one contract call and return the successor state.

    The successor is None for terminal calls (close, escrow spend, unlock)
    and for rejected calls. Nothing is mutated: a rejection needs no rollback.
    """
    try:
        ctx = spend_context(state, tx, input_index, value, outpoint)
        successor = _dispatch(state, call, ctx)
    except SpecError as exc:
        logger.debug(f"{type(call).__name__} on {type(state).__name__} rejected: {exc}")
        return None, TransitionResult.failure(exc)
    return successor, TransitionResult.success()


def verify_call(
    state: ContractState,
    call: Call,
    tx: Union[Transaction, bytes],
    input_index: int,
    value: int,
    outpoint: Optional[Outpoint] = None,
) -> TransitionResult:
    return apply_call(state, call, tx, input_index, value, outpoint)[1]

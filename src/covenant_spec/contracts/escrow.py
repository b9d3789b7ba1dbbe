"""Blind escrow covenant.

Funds move only with two signatures: the spender's over the transaction and
an oracle stamp over ``nonce || outcome``. Release outcomes let the buyer
spend, return outcomes let the seller spend, and each outcome names the one
party whose stamp counts. The spend's outputs are not constrained.
"""

from __future__ import annotations

from ..config import PKH_SIZE
from ..context import SpendContext, check_sig
from ..crypto.hash_algorithms import hash160, hash256
from ..crypto.signatures import verify_stamp
from ..encoding import OP_DROP, decode_state_script, encode_script_num, encode_state_script, push_data
from ..errors import ErrorCode, SpecError
from ..types import EscrowState, Outcome, Role

ESCROW_CODE = push_data(b"blind-escrow") + bytes([OP_DROP])

# outcome -> (role allowed to spend, role whose stamp attests the outcome)
OUTCOME_ROLES: dict[Outcome, tuple[Role, Role]] = {
    Outcome.RELEASE_BY_SELLER: (Role.BUYER, Role.SELLER),
    Outcome.RELEASE_BY_ARBITER: (Role.BUYER, Role.ARBITER),
    Outcome.RETURN_BY_BUYER: (Role.SELLER, Role.BUYER),
    Outcome.RETURN_BY_ARBITER: (Role.SELLER, Role.ARBITER),
}


def deploy(seller_pkh: bytes, buyer_pkh: bytes, arbiter_pkh: bytes, nonce: bytes) -> EscrowState:
    for name, pkh in (("seller", seller_pkh), ("buyer", buyer_pkh), ("arbiter", arbiter_pkh)):
        if len(pkh) != PKH_SIZE:
            raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} pubkey hash must be {PKH_SIZE} bytes")
    return EscrowState(seller_pkh=seller_pkh, buyer_pkh=buyer_pkh, arbiter_pkh=arbiter_pkh, nonce=nonce)


def locking_script(state: EscrowState) -> bytes:
    return encode_state_script(
        ESCROW_CODE, (state.seller_pkh, state.buyer_pkh, state.arbiter_pkh, state.nonce)
    )


def from_locking_script(script: bytes) -> EscrowState:
    fields = decode_state_script(script, ESCROW_CODE)
    if len(fields) != 4:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"escrow state has {len(fields)} fields, expected 4")
    return deploy(*fields)


def role_pkh(state: EscrowState, role: Role) -> bytes:
    if role is Role.SELLER:
        return state.seller_pkh
    if role is Role.BUYER:
        return state.buyer_pkh
    if role is Role.ARBITER:
        return state.arbiter_pkh
    raise SpecError(ErrorCode.INTERNAL_ERROR, f"unknown role {role!r}")


def parse_outcome(code: int) -> Outcome:
    try:
        return Outcome(code)
    except ValueError:
        raise SpecError(ErrorCode.INVALID_OUTCOME, f"unknown outcome code {code}") from None


def oracle_message(nonce: bytes, outcome: Outcome) -> bytes:
    return nonce + encode_script_num(int(outcome))


def oracle_digest(nonce: bytes, outcome: Outcome) -> bytes:
    return hash256(oracle_message(nonce, outcome))


def spend(
    state: EscrowState,
    ctx: SpendContext,
    spender_sig: bytes,
    spender_key: bytes,
    oracle_sig: bytes,
    oracle_key: bytes,
    outcome: int,
) -> None:
    parsed = parse_outcome(outcome)
    spender_role, oracle_role = OUTCOME_ROLES[parsed]

    if hash160(spender_key) != role_pkh(state, spender_role):
        raise SpecError(
            ErrorCode.UNAUTHORIZED, f"spender is not the {spender_role.value} for {parsed.name}"
        )
    check_sig(ctx, spender_sig, spender_key)

    if hash160(oracle_key) != role_pkh(state, oracle_role):
        raise SpecError(ErrorCode.INVALID_STAMP, f"invalid stamp: oracle is not the {oracle_role.value}")
    if not verify_stamp(oracle_sig, oracle_digest(state.nonce, parsed), oracle_key):
        raise SpecError(ErrorCode.INVALID_STAMP, "invalid stamp")

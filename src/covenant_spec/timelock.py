"""nLockTime deadline policy.

A deadline below LOCKTIME_BLOCK_HEIGHT_MARKER is a block height, otherwise a
UNIX timestamp. A deadline only binds when the transaction locktime is in the
same domain, the spending input is not final and ``locktime >= deadline``.
"""

from __future__ import annotations

from .config import LOCKTIME_BLOCK_HEIGHT_MARKER, UINT_MAX
from .errors import ErrorCode, SpecError


def is_block_height(value: int) -> bool:
    return value < LOCKTIME_BLOCK_HEIGHT_MARKER


def same_domain(a: int, b: int) -> bool:
    return is_block_height(a) == is_block_height(b)


def check_deadline(
    deadline: int, locktime: int, sequence: int, reason: str = "deadline not reached"
) -> None:
    if not same_domain(deadline, locktime):
        raise SpecError(ErrorCode.LOCKTIME_DOMAIN_MISMATCH, f"{reason}: locktime domain mismatch")
    if sequence >= UINT_MAX:
        raise SpecError(
            ErrorCode.SEQUENCE_FINAL, f"{reason}: input sequence should be less than UINT_MAX"
        )
    if locktime < deadline:
        raise SpecError(ErrorCode.DEADLINE_NOT_REACHED, reason)

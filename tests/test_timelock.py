"""nLockTime deadline policy."""

from __future__ import annotations

import pytest

from covenant_spec.config import LOCKTIME_BLOCK_HEIGHT_MARKER, UINT_MAX
from covenant_spec.errors import SpecError
from covenant_spec.timelock import check_deadline, is_block_height, same_domain

HEIGHT = 800_000
TIMESTAMP = 1_700_000_000


def _code(deadline: int, locktime: int, sequence: int) -> str:
    with pytest.raises(SpecError) as exc:
        check_deadline(deadline, locktime, sequence)
    return exc.value.code.name


def test_domains() -> None:
    assert is_block_height(0)
    assert is_block_height(LOCKTIME_BLOCK_HEIGHT_MARKER - 1)
    assert not is_block_height(LOCKTIME_BLOCK_HEIGHT_MARKER)
    assert same_domain(HEIGHT, 1)
    assert not same_domain(HEIGHT, TIMESTAMP)


@pytest.mark.parametrize(
    "deadline,locktime",
    [(HEIGHT, HEIGHT), (HEIGHT, HEIGHT + 1), (TIMESTAMP, TIMESTAMP), (TIMESTAMP, UINT_MAX)],
)
def test_deadline_reached(deadline: int, locktime: int) -> None:
    check_deadline(deadline, locktime, UINT_MAX - 1)


def test_deadline_not_reached() -> None:
    assert _code(HEIGHT, HEIGHT - 1, 0) == "DEADLINE_NOT_REACHED"
    assert _code(TIMESTAMP, TIMESTAMP - 1, 0) == "DEADLINE_NOT_REACHED"


def test_final_sequence_disables_locktime() -> None:
    assert _code(HEIGHT, HEIGHT, UINT_MAX) == "SEQUENCE_FINAL"


@pytest.mark.parametrize("deadline,locktime", [(HEIGHT, TIMESTAMP), (TIMESTAMP, HEIGHT)])
def test_domain_mismatch_either_way(deadline: int, locktime: int) -> None:
    assert _code(deadline, locktime, 0) == "LOCKTIME_DOMAIN_MISMATCH"


def test_reason_is_carried() -> None:
    with pytest.raises(SpecError) as exc:
        check_deadline(HEIGHT, 0, 0, reason="auction is not over yet")
    assert exc.value.message == "auction is not over yet"

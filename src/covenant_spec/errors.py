"""Covenant spec error codes and exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCategory(IntEnum):
    SUCCESS = 0x00
    VALIDATION = 0x01
    AUTHORIZATION = 0x02
    STATE = 0x04
    CONTRACT = 0x05
    INTERNAL = 0xFF


class ErrorCode(IntEnum):
    # Success
    SUCCESS = 0x0000

    # Validation
    INVALID_FORMAT = 0x0100
    INVALID_SIGNATURE = 0x0103
    INVALID_AMOUNT = 0x0105
    INVALID_PAYLOAD = 0x0107
    INVALID_OUTCOME = 0x0108

    # Authorization
    UNAUTHORIZED = 0x0200
    INVALID_STAMP = 0x0201

    # State
    KEY_NOT_FOUND = 0x0400
    KEY_EXISTS = 0x0401
    VALUE_MISMATCH = 0x0402
    MAP_DIGEST_MISMATCH = 0x0403

    # Contract
    BID_TOO_LOW = 0x0500
    DEADLINE_NOT_REACHED = 0x0501
    LOCKTIME_DOMAIN_MISMATCH = 0x0502
    SEQUENCE_FINAL = 0x0503
    PREVOUT_MISMATCH = 0x0504
    HASH_OUTPUTS_MISMATCH = 0x0505

    # Internal
    INTERNAL_ERROR = 0xFF00
    NOT_IMPLEMENTED = 0xFF01
    UNKNOWN = 0xFFFF

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory(self.value >> 8)


@dataclass(frozen=True)
class SpecError(Exception):
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.name}({self.code:#06x}): {self.message}"


# Allow Python's Exception machinery to set __traceback__/__context__/__cause__
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(("__traceback__", "__context__", "__cause__"))
_frozen_setattr = SpecError.__setattr__


def _spec_error_setattr(self: SpecError, name: str, value: object) -> None:
    if name in _EXCEPTION_ATTRS:
        object.__setattr__(self, name, value)
    else:
        _frozen_setattr(self, name, value)


SpecError.__setattr__ = _spec_error_setattr  # type: ignore[method-assign]

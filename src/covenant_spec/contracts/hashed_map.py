"""Hashed map state covenant.

Only a digest of the map lives on chain. Callers supply the full image with
every call; the image must hash to the locked digest before anything derived
from it is trusted, and the continuation must carry the digest of the image
after the operation.

Canonical form: entries ordered by ``sha256(script_num(key))``, each
contributing ``sha256(script_num(key)) || sha256(value)``. Two images with
the same entries therefore have the same digest whatever order they were
built in.
"""

from __future__ import annotations

from typing import Mapping, Optional

from ..config import MAX_MAP_SIZE, MAX_MAP_VALUE_SIZE
from ..context import SpendContext, check_hash_outputs
from ..crypto.hash_algorithms import digest, sha256
from ..encoding import OP_DROP, change_outputs, decode_state_script, encode_script_num, encode_state_script, push_data
from ..errors import ErrorCode, SpecError
from ..types import Change, HashedMapState, TxOutput

MAP_CODE = push_data(b"hashed-map-state") + bytes([OP_DROP])


def _check_entry(key: int, value: bytes) -> None:
    if not isinstance(key, int) or isinstance(key, bool):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "map key must be an integer")
    if not isinstance(value, (bytes, bytearray)):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "map value must be bytes")
    if len(value) > MAX_MAP_VALUE_SIZE:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "map value too large")


def _check_image(image: Mapping[int, bytes]) -> None:
    if len(image) > MAX_MAP_SIZE:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "map exceeds MAX_MAP_SIZE")
    for key, value in image.items():
        _check_entry(key, value)


def serialize_map(image: Mapping[int, bytes]) -> bytes:
    entries = sorted(
        (sha256(encode_script_num(key)), sha256(bytes(value))) for key, value in image.items()
    )
    return b"".join(k + v for k, v in entries)


def map_digest(image: Mapping[int, bytes]) -> bytes:
    return digest(serialize_map(image))


def deploy(image: Optional[Mapping[int, bytes]] = None) -> HashedMapState:
    image = image or {}
    _check_image(image)
    return HashedMapState(digest=map_digest(image))


def locking_script(state: HashedMapState) -> bytes:
    return encode_state_script(MAP_CODE, (state.digest,))


def from_locking_script(script: bytes) -> HashedMapState:
    fields = decode_state_script(script, MAP_CODE)
    if len(fields) != 1 or len(fields[0]) != 32:
        raise SpecError(ErrorCode.INVALID_FORMAT, "hashed map state must be a single 32-byte digest")
    return HashedMapState(digest=fields[0])


def continuation_outputs(
    successor: HashedMapState, value: int, change: Optional[Change] = None
) -> list[TxOutput]:
    return [TxOutput(script=locking_script(successor), value=value)] + change_outputs(change)


def _authenticate(state: HashedMapState, image: Mapping[int, bytes]) -> None:
    _check_image(image)
    if map_digest(image) != state.digest:
        raise SpecError(ErrorCode.MAP_DIGEST_MISMATCH, "hashedmap digest mismatch")


def _require_member(image: Mapping[int, bytes], key: int, value: bytes) -> None:
    if key not in image:
        raise SpecError(ErrorCode.KEY_NOT_FOUND, f"key {key} not found")
    if bytes(image[key]) != bytes(value):
        raise SpecError(ErrorCode.VALUE_MISMATCH, f"value for key {key} does not match")


def _transition(
    ctx: SpendContext, after: dict[int, bytes], change: Optional[Change]
) -> tuple[HashedMapState, dict[int, bytes]]:
    _check_image(after)
    successor = HashedMapState(digest=map_digest(after))
    check_hash_outputs(
        ctx, continuation_outputs(successor, ctx.utxo.value, change), "hashOutputs check failed"
    )
    return successor, after


def insert(
    state: HashedMapState,
    ctx: SpendContext,
    image: Mapping[int, bytes],
    key: int,
    value: bytes,
    change: Optional[Change] = None,
) -> tuple[HashedMapState, dict[int, bytes]]:
    _authenticate(state, image)
    _check_entry(key, value)
    if key in image:
        raise SpecError(ErrorCode.KEY_EXISTS, f"key {key} already exists")
    after = dict(image)
    after[key] = bytes(value)
    return _transition(ctx, after, change)


def update(
    state: HashedMapState,
    ctx: SpendContext,
    image: Mapping[int, bytes],
    key: int,
    value: bytes,
    change: Optional[Change] = None,
) -> tuple[HashedMapState, dict[int, bytes]]:
    _authenticate(state, image)
    _check_entry(key, value)
    if key not in image:
        raise SpecError(ErrorCode.KEY_NOT_FOUND, f"key {key} not found")
    after = dict(image)
    after[key] = bytes(value)
    return _transition(ctx, after, change)


def delete(
    state: HashedMapState,
    ctx: SpendContext,
    image: Mapping[int, bytes],
    key: int,
    change: Optional[Change] = None,
) -> tuple[HashedMapState, dict[int, bytes]]:
    _authenticate(state, image)
    if key not in image:
        raise SpecError(ErrorCode.KEY_NOT_FOUND, f"key {key} not found")
    after = {k: v for k, v in image.items() if k != key}
    return _transition(ctx, after, change)


def can_get(
    state: HashedMapState,
    ctx: SpendContext,
    image: Mapping[int, bytes],
    key: int,
    value: bytes,
    change: Optional[Change] = None,
) -> tuple[HashedMapState, dict[int, bytes]]:
    _authenticate(state, image)
    _require_member(image, key, value)
    return _transition(ctx, dict(image), change)


def not_exist(
    state: HashedMapState,
    ctx: SpendContext,
    image: Mapping[int, bytes],
    key: int,
    change: Optional[Change] = None,
) -> tuple[HashedMapState, dict[int, bytes]]:
    _authenticate(state, image)
    if key in image:
        raise SpecError(ErrorCode.KEY_EXISTS, f"key {key} already exists")
    return _transition(ctx, dict(image), change)


def unlock(
    state: HashedMapState,
    ctx: SpendContext,
    image: Mapping[int, bytes],
    key: int,
    value: bytes,
) -> None:
    """Terminal spend: proves membership, leaves no continuation."""
    _authenticate(state, image)
    _require_member(image, key, value)

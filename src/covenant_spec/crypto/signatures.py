"""secp256k1 ECDSA for spender signatures and oracle stamps.

Spender signatures are DER encoded with a trailing sighash-type byte and sign
the input's signature digest. Oracle stamps are raw 64-byte ``r || s`` over
an application message digest. Verification never raises on malformed keys
or signatures; it reports ``False``.
"""

from __future__ import annotations

import hashlib
from typing import Optional

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.der import UnexpectedDER
from ecdsa.errors import MalformedPointError
from ecdsa.util import sigdecode_der, sigdecode_string, sigencode_der, sigencode_string

from ..config import COMPRESSED_PUBKEY_SIZE, STAMP_SIZE, UNCOMPRESSED_PUBKEY_SIZE


def load_public_key(public_key: bytes) -> Optional[VerifyingKey]:
    if len(public_key) not in (COMPRESSED_PUBKEY_SIZE, UNCOMPRESSED_PUBKEY_SIZE):
        return None
    try:
        return VerifyingKey.from_string(bytes(public_key), curve=SECP256k1)
    except (MalformedPointError, ValueError):
        return None


def verify(signature: bytes, message_hash: bytes, public_key: bytes) -> bool:
    """Check a DER signature over a 32-byte digest."""
    vk = load_public_key(public_key)
    if vk is None:
        return False
    try:
        return vk.verify_digest(bytes(signature), message_hash, sigdecode=sigdecode_der)
    except (BadSignatureError, UnexpectedDER):
        return False


def verify_stamp(stamp: bytes, message_hash: bytes, public_key: bytes) -> bool:
    """Check a raw ``r || s`` oracle stamp over a 32-byte digest."""
    if len(stamp) != STAMP_SIZE:
        return False
    vk = load_public_key(public_key)
    if vk is None:
        return False
    try:
        return vk.verify_digest(bytes(stamp), message_hash, sigdecode=sigdecode_string)
    except BadSignatureError:
        return False


# --- Signing oracle ---


def signing_key(secret: bytes) -> SigningKey:
    return SigningKey.from_string(secret, curve=SECP256k1)


def public_key(key: SigningKey, compressed: bool = True) -> bytes:
    return key.get_verifying_key().to_string("compressed" if compressed else "uncompressed")


def _sigencode_der_low_s(r: int, s: int, order: int) -> bytes:
    return sigencode_der(r, min(s, order - s), order)


def sign_digest(key: SigningKey, message_hash: bytes) -> bytes:
    """Deterministic (RFC 6979) DER signature with a low S value."""
    return key.sign_digest_deterministic(
        message_hash, hashfunc=hashlib.sha256, sigencode=_sigencode_der_low_s
    )


def sign_stamp(key: SigningKey, message_hash: bytes) -> bytes:
    return key.sign_digest_deterministic(message_hash, hashfunc=hashlib.sha256, sigencode=sigencode_string)

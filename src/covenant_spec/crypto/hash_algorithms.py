"""Hash algorithm assignments for covenant commitments."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from Cryptodome.Hash import RIPEMD160


@dataclass(frozen=True)
class HashAssignment:
    purpose: str
    algorithm: str
    output_size: int
    input_spec: str


ASSIGNMENTS = [
    HashAssignment("txid", "SHA256d", 32, "serialized transaction bytes"),
    HashAssignment("hash_outputs", "SHA256d", 32, "serialized output section"),
    HashAssignment("signature_digest", "SHA256d", 32, "BIP143 FORKID preimage"),
    HashAssignment("oracle_digest", "SHA256d", 32, "nonce || script_num(outcome)"),
    HashAssignment("map_digest", "SHA256d", 32, "sorted sha256(key) || sha256(value) pairs"),
    HashAssignment("pubkey_hash", "HASH160", 20, "SEC1 public key bytes"),
]


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash256(data: bytes) -> bytes:
    return sha256(sha256(data))


def hash160(data: bytes) -> bytes:
    return RIPEMD160.new(sha256(data)).digest()


def digest(data: bytes) -> bytes:
    """Commitment digest shared by output sets and map images."""
    return hash256(data)

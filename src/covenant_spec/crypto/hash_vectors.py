"""Digest test vector generators (SHA256d, HASH160)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .hash_algorithms import hash160, hash256


@dataclass
class HashVector:
    name: str
    description: Optional[str]
    input_hex: str
    input_ascii: Optional[str]
    input_length: int
    expected_hex: str


def _inputs() -> List[tuple[str, Optional[str], bytes]]:
    return [
        ("empty_string", None, b""),
        ("abc", None, b"abc"),
        ("hello_world", None, b"Hello, world!"),
        ("55_bytes_a", "Max single block input (55 bytes)", bytes([0x61] * 55)),
        ("64_bytes_a", "Exactly one SHA256 block (64 bytes)", bytes([0x61] * 64)),
        (
            "compressed_pubkey_g",
            "Compressed secp256k1 generator point",
            bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"),
        ),
        ("all_bytes", "All byte values 0x00-0xFF", bytes(range(0, 256))),
    ]


def _vectors(fn: Callable[[bytes], bytes]) -> List[HashVector]:
    vectors: List[HashVector] = []
    for name, description, data in _inputs():
        text = data.decode("ascii") if data.isascii() else None
        vectors.append(
            HashVector(
                name=name,
                description=description,
                input_hex=data.hex(),
                input_ascii=text if text is not None and text.isprintable() else None,
                input_length=len(data),
                expected_hex=fn(data).hex(),
            )
        )
    return vectors


def hash256_vectors() -> Dict[str, Any]:
    return {
        "algorithm": "SHA256d",
        "output_size": 32,
        "test_vectors": [v.__dict__ for v in _vectors(hash256)],
    }


def hash160_vectors() -> Dict[str, Any]:
    return {
        "algorithm": "HASH160",
        "output_size": 20,
        "test_vectors": [v.__dict__ for v in _vectors(hash160)],
    }

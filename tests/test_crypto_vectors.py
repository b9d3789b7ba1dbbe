"""Digest vectors (SHA256d, HASH160)."""

from __future__ import annotations

from covenant_spec.crypto.hash_algorithms import ASSIGNMENTS, hash160, hash256, sha256
from covenant_spec.crypto.hash_vectors import hash160_vectors, hash256_vectors


def _emit_hash_vectors(vector_test_group, rel_path: str, algorithm: str, payload: dict) -> None:
    for item in payload.get("test_vectors", []):
        vector_test_group(
            rel_path,
            {
                "name": f"{algorithm.lower()}_{item['name']}",
                "description": item.get("description") or "",
                "input": {
                    "kind": "hash",
                    "algorithm": algorithm,
                    "input_hex": item["input_hex"],
                    "input_ascii": item.get("input_ascii"),
                    "input_length": item["input_length"],
                },
                "expected": {"digest_hex": item["expected_hex"]},
            },
        )


def test_crypto_hash256_vectors(vector_test_group) -> None:
    payload = hash256_vectors()
    by_name = {v["name"]: v["expected_hex"] for v in payload["test_vectors"]}
    assert by_name["empty_string"] == "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"
    assert by_name["abc"] == "4f8b42c22dd3729b519ba6f68d2da7cc5b2d606d05daed5ad5128cc03e6c6358"
    _emit_hash_vectors(vector_test_group, "crypto/hash256.json", "SHA256d", payload)


def test_crypto_hash160_vectors(vector_test_group) -> None:
    payload = hash160_vectors()
    by_name = {v["name"]: v["expected_hex"] for v in payload["test_vectors"]}
    assert by_name["compressed_pubkey_g"] == "751e76e8199196d454941c45d1b3a323f1433bd6"
    assert all(len(bytes.fromhex(v)) == 20 for v in by_name.values())
    _emit_hash_vectors(vector_test_group, "crypto/hash160.json", "HASH160", payload)


def test_hash256_is_double_sha256() -> None:
    data = b"covenant"
    assert hash256(data) == sha256(sha256(data))
    assert hash256(data) != sha256(data)


def test_hash160_size() -> None:
    assert len(hash160(b"")) == 20


def test_assignment_sizes() -> None:
    for assignment in ASSIGNMENTS:
        expected = 20 if assignment.algorithm == "HASH160" else 32
        assert assignment.output_size == expected, assignment.purpose

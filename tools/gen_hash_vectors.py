"""Generate digest YAML vectors from the Python specs."""

from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from covenant_spec.contracts.hashed_map import map_digest, serialize_map  # noqa: E402
from covenant_spec.crypto.hash_vectors import hash160_vectors, hash256_vectors  # noqa: E402
from yaml_dump import write_yaml  # noqa: E402


def _prune(obj):  # drop None fields
    if isinstance(obj, dict):
        return {k: _prune(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [_prune(v) for v in obj]
    return obj


def map_digest_vectors() -> dict:
    images = [
        ("empty", {}),
        ("single", {1: bytes.fromhex("0001")}),
        ("two_entries", {1: bytes.fromhex("0001"), 2: bytes.fromhex("0002")}),
        ("negative_key", {-1: b"\x0a"}),
    ]
    return {
        "algorithm": "SHA256d(sorted sha256(key) || sha256(value))",
        "test_vectors": [
            {
                "name": name,
                "entries": [[k, v.hex()] for k, v in image.items()],
                "serialized_hex": serialize_map(image).hex(),
                "expected_hex": map_digest(image).hex(),
            }
            for name, image in images
        ],
    }


def main() -> None:
    out = ROOT / "fixtures" / "crypto"
    out.mkdir(parents=True, exist_ok=True)

    write_yaml(out / "hash256.yaml", _prune(hash256_vectors()))
    write_yaml(out / "hash160.yaml", _prune(hash160_vectors()))
    write_yaml(out / "map_digest.yaml", _prune(map_digest_vectors()))


if __name__ == "__main__":
    main()

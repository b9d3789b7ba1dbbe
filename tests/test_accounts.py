"""Deterministic test account generation.

Derives all 10 test identities from seed bytes 1..10 on secp256k1 and
collects them for output to accounts.json.
"""

from __future__ import annotations

from covenant_spec.crypto.hash_algorithms import hash160
import covenant_spec.test_accounts as accounts_module
from covenant_spec.test_accounts import ALICE, BOB, MINER, NAMES, name_of, pkh, uncompressed


def _derive_account(seed_byte: int, name: str, public_key: bytes) -> dict[str, str]:
    return {
        "name": name,
        "private_key": bytes([seed_byte] + [0] * 31).hex(),
        "public_key": public_key.hex(),
        "pubkey_hash": pkh(public_key).hex(),
    }


def test_accounts_deterministic(vector_test_group) -> None:
    """Verify that seed bytes 1..10 produce the expected test identities."""
    keys = [getattr(accounts_module, name.upper()) for name in NAMES]
    accounts = [_derive_account(i + 1, name, key) for i, (name, key) in enumerate(zip(NAMES, keys))]

    assert len(accounts) == 10
    assert name_of(MINER) == "Miner"
    assert name_of(ALICE) == "Alice"
    # seed 1 is the generator point
    assert MINER.hex() == "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    assert ALICE.hex() == "02c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5"
    assert BOB.hex() == "02f9308a019258c31049344f85f89d5229b531c845836f99b08601f113bce036f9"
    assert pkh(MINER).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"

    for acct in accounts:
        assert len(bytes.fromhex(acct["private_key"])) == 32
        assert len(bytes.fromhex(acct["public_key"])) == 33
        assert len(bytes.fromhex(acct["pubkey_hash"])) == 20

    for acct in accounts:
        vector_test_group("accounts.json", acct)


def test_uncompressed_key_has_its_own_hash() -> None:
    full = uncompressed(ALICE)
    assert len(full) == 65
    assert full[0] == 0x04
    assert full[1:33] == ALICE[1:]
    assert hash160(full) != pkh(ALICE)

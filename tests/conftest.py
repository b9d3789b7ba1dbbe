"""Pytest hooks to generate call fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from covenant_spec.state_transition import Call, ContractState, TransitionResult, apply_call
from covenant_spec.types import Transaction
from tools.fixtures_io import call_to_json, state_to_json, tx_to_json

_CALL_CASES: dict[str, list[dict[str, Any]]] = {}
_WIRE_VECTORS: list[dict[str, Any]] = []
_VECTOR_CASES: dict[str, list[dict[str, Any]]] = {}

CallTest = Callable[
    [str, str, ContractState, Call, Transaction, int, int],
    tuple[Optional[ContractState], TransitionResult],
]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated fixtures",
    )


@pytest.fixture
def call_test() -> CallTest:
    """Run a contract call, collect it as a fixture case and return the outcome."""

    def _call_test(
        rel_path: str,
        name: str,
        state: ContractState,
        call: Call,
        tx: Transaction,
        input_index: int,
        value: int,
    ) -> tuple[Optional[ContractState], TransitionResult]:
        successor, result = apply_call(state, call, tx, input_index, value)
        _CALL_CASES.setdefault(rel_path, []).append(
            {
                "name": name,
                "contract": state_to_json(state),
                "call": call_to_json(call),
                "tx": tx_to_json(tx),
                "input_index": input_index,
                "value": value,
                "expected": {
                    "ok": result.ok,
                    "error": result.error.code.name if result.error else None,
                    "successor": state_to_json(successor),
                },
            }
        )
        return successor, result

    return _call_test


@pytest.fixture
def wire_vector() -> Callable[[str, dict[str, Any]], None]:
    """Collect a wire-format vector case."""

    def _wire_vector(name: str, vector: dict[str, Any]) -> None:
        payload = {"name": name}
        payload.update(vector)
        _WIRE_VECTORS.append(payload)

    return _wire_vector


@pytest.fixture
def vector_test_group() -> Callable[[str, dict[str, Any]], None]:
    """Collect pre-built test_vectors under a specific fixture path."""

    def _vector_test_group(rel_path: str, vector: dict[str, Any]) -> None:
        _VECTOR_CASES.setdefault(rel_path, []).append(vector)

    return _vector_test_group


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    for rel_path, cases in _CALL_CASES.items():
        if not cases:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"cases": cases}, indent=2))

    if _WIRE_VECTORS:
        (out / "wire_format.json").write_text(
            json.dumps({"vectors": _WIRE_VECTORS}, indent=2)
        )

    for rel_path, vectors in _VECTOR_CASES.items():
        if not vectors:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"test_vectors": vectors}, indent=2))

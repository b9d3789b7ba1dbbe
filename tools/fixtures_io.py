"""Helpers to serialize/deserialize fixtures for the covenant specs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

from covenant_spec.contracts import auction, escrow, hashed_map
from covenant_spec.encoding import encode_transaction
from covenant_spec.state_transition import Call, ContractState, contract_kind, locking_script
from covenant_spec.types import (
    BidCall,
    Change,
    CloseCall,
    ContractKind,
    MapCall,
    MapMethod,
    Outpoint,
    SpendCall,
    Transaction,
    TxInput,
    TxOutput,
)

_FROM_LOCKING_SCRIPT = {
    ContractKind.AUCTION: auction.from_locking_script,
    ContractKind.ESCROW: escrow.from_locking_script,
    ContractKind.HASHED_MAP: hashed_map.from_locking_script,
}


@dataclass
class ToolConfig:
    """Settings shared by the fixture tools."""
    fixtures_dir: str = "fixtures"
    verbose: bool = False
    stop_on_first_failure: bool = False

    @classmethod
    def from_env(cls) -> "ToolConfig":
        config = cls()
        config.fixtures_dir = os.environ.get("FIXTURES_DIR", config.fixtures_dir)
        config.verbose = os.environ.get("VERBOSE", "").lower() in ("true", "1", "yes")
        config.stop_on_first_failure = os.environ.get(
            "STOP_ON_FIRST_FAILURE", ""
        ).lower() in ("true", "1", "yes")
        return config


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v)


def _bytes_to_hex(v: bytes) -> str:
    return v.hex()


# --- Transactions ---


def tx_to_json(tx: Transaction) -> dict[str, Any]:
    return {
        "version": tx.version,
        "locktime": tx.locktime,
        "inputs": [
            {
                "txid": _bytes_to_hex(i.outpoint.txid),
                "index": i.outpoint.index,
                "script_sig": _bytes_to_hex(i.script_sig),
                "sequence": i.sequence,
            }
            for i in tx.inputs
        ],
        "outputs": [
            {"script": _bytes_to_hex(o.script), "value": o.value} for o in tx.outputs
        ],
        "raw_hex": encode_transaction(tx).hex(),
    }


def tx_from_json(data: dict[str, Any]) -> Transaction:
    return Transaction(
        version=data.get("version", 1),
        locktime=data.get("locktime", 0),
        inputs=[
            TxInput(
                outpoint=Outpoint(txid=_hex_to_bytes(i["txid"]), index=i["index"]),
                script_sig=_hex_to_bytes(i.get("script_sig", "")),
                sequence=i["sequence"],
            )
            for i in data.get("inputs", [])
        ],
        outputs=[
            TxOutput(script=_hex_to_bytes(o["script"]), value=o["value"])
            for o in data.get("outputs", [])
        ],
    )


# --- Contract states ---


def state_to_json(state: Optional[ContractState]) -> Optional[dict[str, Any]]:
    if state is None:
        return None
    return {
        "kind": contract_kind(state).value,
        "locking_script": _bytes_to_hex(locking_script(state)),
    }


def state_from_json(data: Optional[dict[str, Any]]) -> Optional[ContractState]:
    if data is None:
        return None
    kind = ContractKind(data["kind"])
    return _FROM_LOCKING_SCRIPT[kind](_hex_to_bytes(data["locking_script"]))


# --- Calls ---


def _change_to_json(change: Optional[Change]) -> Optional[dict[str, Any]]:
    if change is None:
        return None
    return {"pkh": _bytes_to_hex(change.pkh), "amount": change.amount}


def _change_from_json(data: Optional[dict[str, Any]]) -> Optional[Change]:
    if data is None:
        return None
    return Change(pkh=_hex_to_bytes(data["pkh"]), amount=data["amount"])


def call_to_json(call: Call) -> dict[str, Any]:
    if isinstance(call, BidCall):
        return {
            "method": "bid",
            "bidder": _bytes_to_hex(call.bidder),
            "bid": call.bid,
            "change": _change_to_json(call.change),
        }
    if isinstance(call, CloseCall):
        return {
            "method": "close",
            "signature": _bytes_to_hex(call.signature),
            "change": _change_to_json(call.change),
        }
    if isinstance(call, SpendCall):
        return {
            "method": "spend",
            "spender_sig": _bytes_to_hex(call.spender_sig),
            "spender_key": _bytes_to_hex(call.spender_key),
            "oracle_sig": _bytes_to_hex(call.oracle_sig),
            "oracle_key": _bytes_to_hex(call.oracle_key),
            "outcome": call.outcome,
        }
    if isinstance(call, MapCall):
        return {
            "method": call.method.value,
            "key": call.key,
            "value": _bytes_to_hex(call.value) if call.value is not None else None,
            # JSON object keys are strings; keep the map as an entry list
            "image": [[k, _bytes_to_hex(v)] for k, v in call.image.items()],
            "change": _change_to_json(call.change),
        }
    raise TypeError(f"unsupported call {type(call).__name__}")


def call_from_json(data: dict[str, Any]) -> Call:
    method = data["method"]
    if method == "bid":
        return BidCall(
            bidder=_hex_to_bytes(data["bidder"]),
            bid=data["bid"],
            change=_change_from_json(data.get("change")),
        )
    if method == "close":
        return CloseCall(
            signature=_hex_to_bytes(data["signature"]),
            change=_change_from_json(data.get("change")),
        )
    if method == "spend":
        return SpendCall(
            spender_sig=_hex_to_bytes(data["spender_sig"]),
            spender_key=_hex_to_bytes(data["spender_key"]),
            oracle_sig=_hex_to_bytes(data["oracle_sig"]),
            oracle_key=_hex_to_bytes(data["oracle_key"]),
            outcome=data["outcome"],
        )
    value = data.get("value")
    return MapCall(
        method=MapMethod(method),
        key=data["key"],
        value=_hex_to_bytes(value) if value is not None else None,
        image={k: _hex_to_bytes(v) for k, v in data.get("image", [])},
        change=_change_from_json(data.get("change")),
    )

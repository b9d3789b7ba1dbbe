"""Wire format: script numbers, outputs, state scripts and transactions."""

from __future__ import annotations

import pytest

from covenant_spec.encoding import (
    Writer,
    change_output,
    decode_script_num,
    decode_state_script,
    decode_transaction,
    encode_output,
    encode_script_num,
    encode_state_script,
    encode_transaction,
    p2pkh_output,
    p2pkh_script,
    push_data,
    txid,
)
from covenant_spec.errors import SpecError
from covenant_spec.test_accounts import ALICE, pkh
from covenant_spec.types import Change, Outpoint, Transaction, TxInput, TxOutput
from tools.fixtures_io import tx_to_json

CODE = push_data(b"code") + b"\x75"


def _sample_tx() -> Transaction:
    return Transaction(
        inputs=[
            TxInput(Outpoint(txid=bytes(range(32)), index=1), script_sig=b"\x51", sequence=0xFFFFFFFE),
            TxInput(Outpoint(txid=bytes([0xAA]) * 32, index=0)),
        ],
        outputs=[
            TxOutput(script=p2pkh_script(pkh(ALICE)), value=1),
            TxOutput(script=b"\x6a", value=0),
        ],
        locktime=500000101,
    )


@pytest.mark.parametrize(
    "value,expected",
    [(0, "00"), (0xFC, "fc"), (0xFD, "fdfd00"), (0xFFFF, "fdffff"), (0x10000, "fe00000100"),
     (0x100000000, "ff0000000001000000")],
)
def test_varint(value: int, expected: str) -> None:
    w = Writer()
    w.write_varint(value)
    assert w.getvalue().hex() == expected


@pytest.mark.parametrize(
    "value,expected",
    [(0, ""), (1, "01"), (3, "03"), (127, "7f"), (128, "8000"), (255, "ff00"), (256, "0001"),
     (-1, "81"), (-128, "8080"), (32767, "ff7f"), (32768, "008000")],
)
def test_script_num(value: int, expected: str) -> None:
    assert encode_script_num(value).hex() == expected
    assert decode_script_num(bytes.fromhex(expected)) == value


def test_push_data_lengths() -> None:
    assert push_data(b"") == b"\x00"
    assert push_data(b"\x01" * 75)[0] == 75
    assert push_data(b"\x01" * 76)[:2] == b"\x4c\x4c"
    assert push_data(b"\x01" * 256)[:3] == b"\x4d\x00\x01"


def test_p2pkh_script_layout() -> None:
    script = p2pkh_script(pkh(ALICE))
    assert len(script) == 25
    assert script[:3].hex() == "76a914"
    assert script[-2:].hex() == "88ac"
    assert script[3:23] == pkh(ALICE)


def test_p2pkh_script_rejects_bad_hash() -> None:
    with pytest.raises(SpecError) as exc:
        p2pkh_script(b"\x00" * 19)
    assert exc.value.code.name == "INVALID_FORMAT"


def test_encode_output() -> None:
    assert encode_output(b"\x51", 1000).hex() == "e8030000000000000151"
    assert p2pkh_output(pkh(ALICE), 1)[:9].hex() == "0100000000000000" + "19"


def test_encode_output_rejects_bad_value() -> None:
    with pytest.raises(SpecError) as exc:
        encode_output(b"\x51", -1)
    assert exc.value.code.name == "INVALID_AMOUNT"


def test_zero_change_has_no_output() -> None:
    assert change_output(None) == b""
    assert change_output(Change(pkh=pkh(ALICE), amount=0)) == b""
    assert change_output(Change(pkh=pkh(ALICE), amount=5)) == p2pkh_output(pkh(ALICE), 5)


def test_state_script_round_trip() -> None:
    fields = [b"", b"\x01" * 20, b"\x02" * 100]
    script = encode_state_script(CODE, fields)
    assert script[len(CODE)] == 0x6A
    assert script[-1] == 0
    assert decode_state_script(script, CODE) == fields


def test_state_script_wrong_code() -> None:
    script = encode_state_script(CODE, [b"\x01"])
    other = push_data(b"edoc") + b"\x75"
    with pytest.raises(SpecError) as exc:
        decode_state_script(script, other)
    assert exc.value.code.name == "INVALID_FORMAT"


def test_state_script_wrong_version() -> None:
    script = encode_state_script(CODE, [b"\x01"])
    with pytest.raises(SpecError) as exc:
        decode_state_script(script[:-1] + b"\x01", CODE)
    assert exc.value.code.name == "INVALID_FORMAT"


def test_transaction_wire(wire_vector) -> None:
    tx = _sample_tx()
    raw = encode_transaction(tx)
    assert raw[:4] == b"\x01\x00\x00\x00"
    assert raw[-4:] == (500000101).to_bytes(4, "little")
    assert decode_transaction(raw) == tx
    assert len(txid(tx)) == 32
    wire_vector("two_inputs_two_outputs", {"tx": tx_to_json(tx), "expected_hex": raw.hex()})


def test_decode_truncated_transaction() -> None:
    raw = encode_transaction(_sample_tx())
    with pytest.raises(SpecError) as exc:
        decode_transaction(raw[:-1])
    assert exc.value.code.name == "INVALID_FORMAT"


def test_decode_trailing_bytes() -> None:
    raw = encode_transaction(_sample_tx())
    with pytest.raises(SpecError) as exc:
        decode_transaction(raw + b"\x00")
    assert exc.value.code.name == "INVALID_FORMAT"


def test_outpoint_display_order() -> None:
    display = "ff" + "00" * 31
    op = Outpoint.from_hex(display, 2)
    assert op.txid[-1] == 0xFF
    assert op.display_hex() == display
    assert Outpoint.from_bytes(op.to_bytes()) == op

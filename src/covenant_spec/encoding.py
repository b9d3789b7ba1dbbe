"""Wire-format encoding utilities (outputs, transactions, scripts)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .config import MAX_SATOSHIS, OUTPOINT_SIZE, PKH_SIZE, STATE_VERSION
from .crypto.hash_algorithms import hash256
from .errors import ErrorCode, SpecError
from .types import Change, Outpoint, Transaction, TxInput, TxOutput

# Opcodes used by the contract templates
OP_0 = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E
OP_RETURN = 0x6A
OP_DROP = 0x75
OP_DUP = 0x76
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xA9
OP_CHECKSIG = 0xAC


@dataclass
class Writer:
    buf: bytearray = field(default_factory=bytearray)

    def write_u8(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(1, "little", signed=False))

    def write_u16(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(2, "little", signed=False))

    def write_u32(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(4, "little", signed=False))

    def write_u64(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(8, "little", signed=False))

    def write_varint(self, v: int) -> None:
        if v < 0xFD:
            self.write_u8(v)
        elif v <= 0xFFFF:
            self.write_u8(0xFD)
            self.write_u16(v)
        elif v <= 0xFFFFFFFF:
            self.write_u8(0xFE)
            self.write_u32(v)
        else:
            self.write_u8(0xFF)
            self.write_u64(v)

    def write_bytes(self, b: bytes) -> None:
        self.buf.extend(b)

    def write_var_bytes(self, b: bytes) -> None:
        self.write_varint(len(b))
        self.write_bytes(b)

    def getvalue(self) -> bytes:
        return bytes(self.buf)


class Reader:
    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def read(self, n: int) -> bytes:
        if n < 0 or self.pos + n > len(self.data):
            raise SpecError(ErrorCode.INVALID_FORMAT, f"unexpected end of data at offset {self.pos}")
        out = self.data[self.pos:self.pos + n]
        self.pos += n
        return out

    def read_u8(self) -> int:
        return self.read(1)[0]

    def read_u16(self) -> int:
        return int.from_bytes(self.read(2), "little")

    def read_u32(self) -> int:
        return int.from_bytes(self.read(4), "little")

    def read_u64(self) -> int:
        return int.from_bytes(self.read(8), "little")

    def read_varint(self) -> int:
        prefix = self.read_u8()
        if prefix < 0xFD:
            return prefix
        if prefix == 0xFD:
            return self.read_u16()
        if prefix == 0xFE:
            return self.read_u32()
        return self.read_u64()

    def read_var_bytes(self) -> bytes:
        return self.read(self.read_varint())


def _expect_len(name: str, value: bytes, size: int) -> None:
    if len(value) != size:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} must be {size} bytes")


# --- Script numbers and push data ---


def encode_script_num(n: int) -> bytes:
    """Minimal sign-magnitude little-endian encoding (0 encodes as empty)."""
    if n == 0:
        return b""
    negative = n < 0
    magnitude = -n if negative else n
    out = bytearray()
    while magnitude:
        out.append(magnitude & 0xFF)
        magnitude >>= 8
    if out[-1] & 0x80:
        out.append(0x80 if negative else 0x00)
    elif negative:
        out[-1] |= 0x80
    return bytes(out)


def decode_script_num(raw: bytes) -> int:
    if not raw:
        return 0
    value = int.from_bytes(raw, "little")
    sign_bit = 0x80 << (8 * (len(raw) - 1))
    if value & sign_bit:
        return -(value & ~sign_bit)
    return value


def push_data(data: bytes) -> bytes:
    n = len(data)
    if n == 0:
        return bytes([OP_0])
    if n <= 75:
        return bytes([n]) + data
    if n <= 0xFF:
        return bytes([OP_PUSHDATA1, n]) + data
    if n <= 0xFFFF:
        return bytes([OP_PUSHDATA2]) + n.to_bytes(2, "little") + data
    return bytes([OP_PUSHDATA4]) + n.to_bytes(4, "little") + data


def read_push(r: Reader) -> bytes:
    op = r.read_u8()
    if op == OP_0:
        return b""
    if op <= 75:
        return r.read(op)
    if op == OP_PUSHDATA1:
        return r.read(r.read_u8())
    if op == OP_PUSHDATA2:
        return r.read(r.read_u16())
    if op == OP_PUSHDATA4:
        return r.read(r.read_u32())
    raise SpecError(ErrorCode.INVALID_FORMAT, f"expected push opcode, got {op:#04x}")


# --- Outputs ---


def p2pkh_script(pkh: bytes) -> bytes:
    _expect_len("pubkey hash", pkh, PKH_SIZE)
    return bytes([OP_DUP, OP_HASH160, PKH_SIZE]) + pkh + bytes([OP_EQUALVERIFY, OP_CHECKSIG])


def encode_output(script: bytes, value: int) -> bytes:
    if not isinstance(script, (bytes, bytearray)):
        raise SpecError(ErrorCode.INVALID_FORMAT, "output script must be bytes")
    if value < 0 or value > MAX_SATOSHIS:
        raise SpecError(ErrorCode.INVALID_AMOUNT, f"output value out of range: {value}")
    w = Writer()
    w.write_u64(value)
    w.write_var_bytes(bytes(script))
    return w.getvalue()


def encode_outputs(outputs: Iterable[TxOutput]) -> bytes:
    return b"".join(encode_output(o.script, o.value) for o in outputs)


def p2pkh_output(pkh: bytes, value: int) -> bytes:
    return encode_output(p2pkh_script(pkh), value)


def change_outputs(change: Optional[Change]) -> list[TxOutput]:
    """Change is optional; a zero amount yields no output at all."""
    if change is None or change.amount == 0:
        return []
    return [TxOutput(script=p2pkh_script(change.pkh), value=change.amount)]


def change_output(change: Optional[Change]) -> bytes:
    return encode_outputs(change_outputs(change))


# --- Contract state scripts ---


def encode_state_script(code_part: bytes, fields: Iterable[bytes]) -> bytes:
    """Lay out `code || OP_RETURN || state || u32le(len(state)) || version`."""
    state = b"".join(push_data(f) for f in fields)
    w = Writer()
    w.write_bytes(code_part)
    w.write_u8(OP_RETURN)
    w.write_bytes(state)
    w.write_u32(len(state))
    w.write_u8(STATE_VERSION)
    return w.getvalue()


def decode_state_script(script: bytes, code_part: bytes) -> list[bytes]:
    if len(script) < len(code_part) + 6:
        raise SpecError(ErrorCode.INVALID_FORMAT, "state script too short")
    if script[-1] != STATE_VERSION:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"unsupported state version {script[-1]}")
    state_len = int.from_bytes(script[-5:-1], "little")
    state_start = len(script) - 5 - state_len
    if state_start != len(code_part) + 1:
        raise SpecError(ErrorCode.INVALID_FORMAT, "state length does not match script layout")
    if script[:len(code_part)] != code_part or script[len(code_part)] != OP_RETURN:
        raise SpecError(ErrorCode.INVALID_FORMAT, "unexpected contract code")

    r = Reader(script[state_start:-5])
    fields: list[bytes] = []
    while r.remaining():
        fields.append(read_push(r))
    return fields


# --- Transactions ---


def encode_outpoint(outpoint: Outpoint) -> bytes:
    _expect_len("txid", outpoint.txid, 32)
    return outpoint.to_bytes()


def encode_transaction(tx: Transaction) -> bytes:
    w = Writer()
    w.write_u32(tx.version)
    w.write_varint(len(tx.inputs))
    for txin in tx.inputs:
        w.write_bytes(encode_outpoint(txin.outpoint))
        w.write_var_bytes(txin.script_sig)
        w.write_u32(txin.sequence)
    w.write_varint(len(tx.outputs))
    w.write_bytes(encode_outputs(tx.outputs))
    w.write_u32(tx.locktime)
    return w.getvalue()


def decode_transaction(raw: bytes) -> Transaction:
    r = Reader(raw)
    version = r.read_u32()
    inputs = []
    for _ in range(r.read_varint()):
        outpoint = Outpoint.from_bytes(r.read(OUTPOINT_SIZE))
        script_sig = r.read_var_bytes()
        inputs.append(TxInput(outpoint=outpoint, script_sig=script_sig, sequence=r.read_u32()))
    outputs = []
    for _ in range(r.read_varint()):
        value = r.read_u64()
        outputs.append(TxOutput(script=r.read_var_bytes(), value=value))
    locktime = r.read_u32()
    if r.remaining():
        raise SpecError(ErrorCode.INVALID_FORMAT, f"{r.remaining()} trailing bytes after transaction")
    return Transaction(inputs=inputs, outputs=outputs, locktime=locktime, version=version)


def txid(tx: Transaction) -> bytes:
    """Transaction id in internal byte order."""
    return hash256(encode_transaction(tx))

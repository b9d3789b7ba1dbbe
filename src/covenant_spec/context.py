"""Spending context derived from a proposed transaction.

The covenants read the same fields a script would see in its sighash
preimage: the output-set digest (``hashOutputs``), the serialized prevouts of
every input, the spending input's sequence and the transaction locktime.
Signature digests follow BIP143 with SIGHASH_FORKID.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import DEFAULT_SIGHASH_TYPE, UINT_MAX
from .crypto.hash_algorithms import hash256
from .crypto.signatures import verify
from .encoding import Writer, encode_outpoint, encode_outputs
from .errors import ErrorCode, SpecError
from .types import Transaction, TxOutput, Utxo


def _check_u32(name: str, value: int) -> None:
    if not 0 <= value <= UINT_MAX:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} out of u32 range: {value}")


@dataclass(frozen=True)
class SpendContext:
    tx: Transaction
    input_index: int
    utxo: Utxo

    @classmethod
    def from_transaction(cls, tx: Transaction, input_index: int, utxo: Utxo) -> "SpendContext":
        if not 0 <= input_index < len(tx.inputs):
            raise SpecError(ErrorCode.INVALID_FORMAT, f"input index {input_index} out of range")
        if tx.inputs[input_index].outpoint != utxo.outpoint:
            raise SpecError(ErrorCode.INVALID_FORMAT, "input does not spend the given utxo")
        _check_u32("version", tx.version)
        _check_u32("locktime", tx.locktime)
        for txin in tx.inputs:
            _check_u32("outpoint index", txin.outpoint.index)
            _check_u32("sequence", txin.sequence)
        return cls(tx=tx, input_index=input_index, utxo=utxo)

    @property
    def sequence(self) -> int:
        return self.tx.inputs[self.input_index].sequence

    @property
    def locktime(self) -> int:
        return self.tx.locktime

    @property
    def prevouts(self) -> bytes:
        return b"".join(encode_outpoint(txin.outpoint) for txin in self.tx.inputs)

    @property
    def hash_prevouts(self) -> bytes:
        return hash256(self.prevouts)

    @property
    def hash_sequence(self) -> bytes:
        w = Writer()
        for txin in self.tx.inputs:
            w.write_u32(txin.sequence)
        return hash256(w.getvalue())

    @property
    def hash_outputs(self) -> bytes:
        return hash256(encode_outputs(self.tx.outputs))

    def sighash_preimage(self, sighash_type: int = DEFAULT_SIGHASH_TYPE) -> bytes:
        w = Writer()
        w.write_u32(self.tx.version)
        w.write_bytes(self.hash_prevouts)
        w.write_bytes(self.hash_sequence)
        w.write_bytes(encode_outpoint(self.utxo.outpoint))
        w.write_var_bytes(self.utxo.script)
        w.write_u64(self.utxo.value)
        w.write_u32(self.sequence)
        w.write_bytes(self.hash_outputs)
        w.write_u32(self.locktime)
        w.write_u32(sighash_type)
        return w.getvalue()

    def signature_digest(self, sighash_type: int = DEFAULT_SIGHASH_TYPE) -> bytes:
        return hash256(self.sighash_preimage(sighash_type))


def check_sig(ctx: SpendContext, signature: bytes, public_key: bytes) -> None:
    """Spender authorization: DER signature plus sighash byte over the input digest."""
    if len(signature) < 2:
        raise SpecError(ErrorCode.INVALID_SIGNATURE, "signature check failed")
    der, sighash_type = signature[:-1], signature[-1]
    if sighash_type != DEFAULT_SIGHASH_TYPE:
        raise SpecError(ErrorCode.INVALID_SIGNATURE, "signature check failed: unsupported sighash type")
    if not verify(der, ctx.signature_digest(sighash_type), public_key):
        raise SpecError(ErrorCode.INVALID_SIGNATURE, "signature check failed")


def check_hash_outputs(ctx: SpendContext, outputs: list[TxOutput], reason: str) -> None:
    """Compare the digest of the expected outputs with the proposed transaction's."""
    if hash256(encode_outputs(outputs)) != ctx.hash_outputs:
        raise SpecError(ErrorCode.HASH_OUTPUTS_MISMATCH, reason)

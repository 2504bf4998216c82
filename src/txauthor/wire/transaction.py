"""Transaction wire format — outpoints, inputs, outputs, raw serialization.

Legacy (pre-segwit) layout with a trailing expiry height:
- version (4) | varint #inputs | inputs | varint #outputs | outputs
  | locktime (4) | expiry (4)
- input: prev txid (32) | prev index (4) | varint + signature script | sequence (4)
- output: value (8) | varint + locking script

Size accounting in :mod:`txauthor.txsizes` follows this layout byte for byte.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from io import BytesIO

from txauthor.utils.crypto import sha256d

# ---------------------------------------------------------------------------
# VarInt encoding / decoding
# ---------------------------------------------------------------------------


def encode_varint(n: int) -> bytes:
    """Encode an integer as a Bitcoin-style variable-length integer."""
    if n < 0:
        msg = f"varint cannot encode negative value {n}"
        raise ValueError(msg)
    if n < 0xFD:
        return struct.pack("<B", n)
    if n <= 0xFFFF:
        return b"\xfd" + struct.pack("<H", n)
    if n <= 0xFFFFFFFF:
        return b"\xfe" + struct.pack("<I", n)
    return b"\xff" + struct.pack("<Q", n)


def read_varint(stream: BytesIO) -> int:
    """Read a Bitcoin-style variable-length integer from a byte stream."""
    first = stream.read(1)
    if len(first) == 0:
        msg = "Unexpected end of stream reading varint"
        raise ValueError(msg)
    n = first[0]
    if n < 0xFD:
        return n
    if n == 0xFD:
        return struct.unpack("<H", _read_exact(stream, 2))[0]
    if n == 0xFE:
        return struct.unpack("<I", _read_exact(stream, 4))[0]
    return struct.unpack("<Q", _read_exact(stream, 8))[0]


def _read_exact(stream: BytesIO, n: int) -> bytes:
    data = stream.read(n)
    if len(data) != n:
        msg = f"Unexpected end of stream: wanted {n} bytes, got {len(data)}"
        raise ValueError(msg)
    return data


# Default sequence: 0xFFFFFFFF (final, no RBF)
DEFAULT_SEQUENCE = 0xFFFFFFFF

DEFAULT_VERSION = 1
DEFAULT_LOCKTIME = 0
# 0 means the transaction never expires.
DEFAULT_EXPIRY = 0


# ---------------------------------------------------------------------------
# OutPoint
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutPoint:
    """Reference to a previous transaction output.

    Attributes:
        tx_id: 32-byte hash of the previous transaction (internal byte order).
        index: Output index within the previous transaction.
    """

    tx_id: bytes
    index: int

    def __post_init__(self) -> None:
        if len(self.tx_id) != 32:
            msg = f"tx_id must be 32 bytes, got {len(self.tx_id)}"
            raise ValueError(msg)
        if not 0 <= self.index <= 0xFFFFFFFF:
            msg = f"output index out of range: {self.index}"
            raise ValueError(msg)

    @property
    def tx_id_hex(self) -> str:
        """Previous transaction ID in display (reversed) hex."""
        return self.tx_id[::-1].hex()

    @classmethod
    def from_hex(cls, txid_hex: str, index: int) -> OutPoint:
        """Build an outpoint from a display-order txid string."""
        return cls(tx_id=bytes.fromhex(txid_hex)[::-1], index=index)

    def serialize(self) -> bytes:
        return self.tx_id + struct.pack("<I", self.index)


# ---------------------------------------------------------------------------
# TxInput
# ---------------------------------------------------------------------------


@dataclass
class TxInput:
    """A transaction input.

    Attributes:
        previous_outpoint: The output being spent.
        script_sig: Unlocking script; empty until the input is signed.
        sequence: Sequence number (default 0xFFFFFFFF).
    """

    previous_outpoint: OutPoint
    script_sig: bytes = b""
    sequence: int = DEFAULT_SEQUENCE

    def serialize(self) -> bytes:
        """Serialize the input to bytes."""
        result = self.previous_outpoint.serialize()
        result += encode_varint(len(self.script_sig))
        result += self.script_sig
        result += struct.pack("<I", self.sequence)
        return result

    def serialize_size(self) -> int:
        """Number of bytes :meth:`serialize` produces."""
        return 32 + 4 + len(encode_varint(len(self.script_sig))) + len(self.script_sig) + 4

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxInput:
        """Deserialize a transaction input from a byte stream."""
        tx_id = _read_exact(stream, 32)
        index = struct.unpack("<I", _read_exact(stream, 4))[0]
        script_len = read_varint(stream)
        script_sig = _read_exact(stream, script_len)
        sequence = struct.unpack("<I", _read_exact(stream, 4))[0]
        return cls(
            previous_outpoint=OutPoint(tx_id=tx_id, index=index),
            script_sig=script_sig,
            sequence=sequence,
        )


# ---------------------------------------------------------------------------
# TxOutput
# ---------------------------------------------------------------------------


@dataclass
class TxOutput:
    """A transaction output.

    Attributes:
        value: Output value in satoshis.
        script_pubkey: Locking script (scriptPubKey).
    """

    value: int
    script_pubkey: bytes

    def serialize(self) -> bytes:
        """Serialize the output to bytes."""
        result = struct.pack("<q", self.value)
        result += encode_varint(len(self.script_pubkey))
        result += self.script_pubkey
        return result

    def serialize_size(self) -> int:
        """Number of bytes :meth:`serialize` produces."""
        return 8 + len(encode_varint(len(self.script_pubkey))) + len(self.script_pubkey)

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxOutput:
        """Deserialize a transaction output from a byte stream."""
        value = struct.unpack("<q", _read_exact(stream, 8))[0]
        script_len = read_varint(stream)
        script_pubkey = _read_exact(stream, script_len)
        return cls(value=value, script_pubkey=script_pubkey)


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclass
class Transaction:
    """An unsigned or signed transaction.

    Attributes:
        version: Transaction version (default 1).
        inputs: Transaction inputs.
        outputs: Transaction outputs.
        locktime: Transaction locktime (default 0).
        expiry: Block height after which the transaction is invalid (0 = never).
    """

    version: int = DEFAULT_VERSION
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    locktime: int = DEFAULT_LOCKTIME
    expiry: int = DEFAULT_EXPIRY

    def serialize(self) -> bytes:
        """Serialize the transaction to raw bytes."""
        result = struct.pack("<i", self.version)
        result += encode_varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize()
        result += encode_varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()
        result += struct.pack("<I", self.locktime)
        result += struct.pack("<I", self.expiry)
        return result

    def serialize_size(self) -> int:
        """Serialized size in bytes, computed without building the byte string."""
        return (
            4
            + len(encode_varint(len(self.inputs)))
            + sum(inp.serialize_size() for inp in self.inputs)
            + len(encode_varint(len(self.outputs)))
            + sum(out.serialize_size() for out in self.outputs)
            + 4
            + 4
        )

    def to_hex(self) -> str:
        """Serialize to hex string."""
        return self.serialize().hex()

    @classmethod
    def deserialize(cls, stream: BytesIO) -> Transaction:
        """Deserialize a transaction from a byte stream."""
        version = struct.unpack("<i", _read_exact(stream, 4))[0]
        n_inputs = read_varint(stream)
        inputs = [TxInput.deserialize(stream) for _ in range(n_inputs)]
        n_outputs = read_varint(stream)
        outputs = [TxOutput.deserialize(stream) for _ in range(n_outputs)]
        locktime = struct.unpack("<I", _read_exact(stream, 4))[0]
        expiry = struct.unpack("<I", _read_exact(stream, 4))[0]
        return cls(
            version=version,
            inputs=inputs,
            outputs=outputs,
            locktime=locktime,
            expiry=expiry,
        )

    @classmethod
    def from_hex(cls, hex_str: str) -> Transaction:
        """Deserialize a transaction from a hex string."""
        return cls.from_bytes(bytes.fromhex(hex_str))

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        """Deserialize a transaction from raw bytes."""
        return cls.deserialize(BytesIO(data))

    def txid(self) -> str:
        """Transaction ID (double-SHA256, reversed, hex).

        Only stable once every input carries its final signature script.
        """
        return sha256d(self.serialize())[::-1].hex()

    @property
    def total_output_value(self) -> int:
        return sum(out.value for out in self.outputs)

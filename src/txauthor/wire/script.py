"""Standard script construction — P2PKH, P2SH, type detection.

Only the script shapes the authoring code needs to size and to pay change
to are covered here; full script evaluation is out of scope.
"""

from __future__ import annotations

import enum
import struct

# ---------------------------------------------------------------------------
# Opcodes
# ---------------------------------------------------------------------------


class OpCode(int, enum.Enum):
    """Commonly used opcodes."""

    OP_0 = 0x00
    OP_PUSHDATA1 = 0x4C
    OP_PUSHDATA2 = 0x4D
    OP_PUSHDATA4 = 0x4E
    OP_DUP = 0x76
    OP_EQUAL = 0x87
    OP_EQUALVERIFY = 0x88
    OP_HASH160 = 0xA9
    OP_CHECKSIG = 0xAC


class ScriptType(enum.StrEnum):
    """Known locking script types."""

    P2PKH = "pubkeyhash"
    P2SH = "scripthash"
    UNKNOWN = "unknown"


# Script version stamped on generated change scripts.
DEFAULT_SCRIPT_VERSION = 0


def push_data(data: bytes) -> bytes:
    """Encode a data push using minimal encoding rules."""
    length = len(data)
    if length == 0:
        return bytes([OpCode.OP_0])
    if length <= 0x4B:
        return bytes([length]) + data
    if length <= 0xFF:
        return bytes([OpCode.OP_PUSHDATA1, length]) + data
    if length <= 0xFFFF:
        return bytes([OpCode.OP_PUSHDATA2]) + struct.pack("<H", length) + data
    return bytes([OpCode.OP_PUSHDATA4]) + struct.pack("<I", length) + data


def _require_hash20(value: bytes, name: str) -> None:
    if len(value) != 20:
        msg = f"{name} must be 20 bytes, got {len(value)}"
        raise ValueError(msg)


# ---------------------------------------------------------------------------
# Locking scripts
# ---------------------------------------------------------------------------


def p2pkh_lock_script(pubkey_hash: bytes) -> bytes:
    """Build a P2PKH locking script.

    ``OP_DUP OP_HASH160 <20 bytes> OP_EQUALVERIFY OP_CHECKSIG`` (25 bytes)
    """
    _require_hash20(pubkey_hash, "pubkey_hash")
    return (
        bytes([OpCode.OP_DUP, OpCode.OP_HASH160])
        + push_data(pubkey_hash)
        + bytes([OpCode.OP_EQUALVERIFY, OpCode.OP_CHECKSIG])
    )


def p2sh_lock_script(script_hash: bytes) -> bytes:
    """Build a P2SH locking script.

    ``OP_HASH160 <20 bytes> OP_EQUAL`` (23 bytes)
    """
    _require_hash20(script_hash, "script_hash")
    return bytes([OpCode.OP_HASH160]) + push_data(script_hash) + bytes([OpCode.OP_EQUAL])


def p2pkh_unlock_script(signature: bytes, pubkey: bytes) -> bytes:
    """Build a P2PKH signature script: ``<sig> <pubkey>``."""
    return push_data(signature) + push_data(pubkey)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def detect_script_type(script: bytes) -> ScriptType:
    """Classify a locking script."""
    if len(script) == 0:
        return ScriptType.UNKNOWN

    if (
        len(script) == 25
        and script[0] == OpCode.OP_DUP
        and script[1] == OpCode.OP_HASH160
        and script[2] == 0x14
        and script[23] == OpCode.OP_EQUALVERIFY
        and script[24] == OpCode.OP_CHECKSIG
    ):
        return ScriptType.P2PKH

    if (
        len(script) == 23
        and script[0] == OpCode.OP_HASH160
        and script[1] == 0x14
        and script[22] == OpCode.OP_EQUAL
    ):
        return ScriptType.P2SH

    return ScriptType.UNKNOWN

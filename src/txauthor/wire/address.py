"""Base58Check addresses — decoding P2PKH / P2SH addresses into scripts.

Used by change sources that are configured with an address rather than a
raw script.
"""

from __future__ import annotations

from txauthor.utils.crypto import sha256d
from txauthor.wire.script import p2pkh_lock_script, p2sh_lock_script

_B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# Network version bytes
MAINNET_PUBKEY_HASH = 0x00
TESTNET_PUBKEY_HASH = 0x6F
MAINNET_SCRIPT_HASH = 0x05
TESTNET_SCRIPT_HASH = 0xC4

_PUBKEY_HASH_VERSIONS = (MAINNET_PUBKEY_HASH, TESTNET_PUBKEY_HASH)
_SCRIPT_HASH_VERSIONS = (MAINNET_SCRIPT_HASH, TESTNET_SCRIPT_HASH)


def base58_encode(payload: bytes) -> str:
    """Encode raw bytes to Base58 (no checksum)."""
    n = int.from_bytes(payload, "big")
    result: list[int] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_B58_ALPHABET[remainder])
    for byte in payload:
        if byte != 0:
            break
        result.append(_B58_ALPHABET[0])
    return bytes(reversed(result)).decode("ascii")


def base58_decode(s: str) -> bytes:
    """Decode a Base58 string to raw bytes (no checksum)."""
    n = 0
    for char in s:
        digit = _B58_ALPHABET.find(char.encode("ascii", errors="replace"))
        if digit < 0:
            msg = f"Invalid Base58 character: {char!r}"
            raise ValueError(msg)
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_count = len(s) - len(s.lstrip("1"))
    return b"\x00" * pad_count + result


def base58check_encode(payload: bytes) -> str:
    """Encode bytes with a 4-byte SHA256d checksum (Base58Check)."""
    return base58_encode(payload + sha256d(payload)[:4])


def base58check_decode(s: str) -> bytes:
    """Decode a Base58Check string, verifying the checksum.

    Raises:
        ValueError: If the string is malformed or the checksum is invalid.
    """
    raw = base58_decode(s)
    if len(raw) < 4:
        msg = "Base58Check string too short"
        raise ValueError(msg)
    payload, checksum = raw[:-4], raw[-4:]
    if checksum != sha256d(payload)[:4]:
        msg = "Base58Check checksum mismatch"
        raise ValueError(msg)
    return payload


def hash_to_address(version: int, hash20: bytes) -> str:
    """Encode a version byte and 20-byte hash as a Base58Check address."""
    if len(hash20) != 20:
        msg = f"address hash must be 20 bytes, got {len(hash20)}"
        raise ValueError(msg)
    return base58check_encode(bytes([version]) + hash20)


def address_to_script(address: str) -> bytes:
    """Return the locking script paying to a P2PKH or P2SH address.

    Raises:
        ValueError: If the address is invalid or of an unsupported kind.
    """
    payload = base58check_decode(address)
    if len(payload) != 21:
        msg = f"Invalid address payload length: {len(payload)}"
        raise ValueError(msg)
    version, hash20 = payload[0], payload[1:]
    if version in _PUBKEY_HASH_VERSIONS:
        return p2pkh_lock_script(hash20)
    if version in _SCRIPT_HASH_VERSIONS:
        return p2sh_lock_script(hash20)
    msg = f"Unsupported address version byte: {version:#04x}"
    raise ValueError(msg)

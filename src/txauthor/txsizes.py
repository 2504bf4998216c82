"""Worst-case serialized size estimation for signed transactions.

Sizes follow the legacy layout in :mod:`txauthor.wire.transaction`. Input
sizes are computed from the *redeem* (signature) script each input will carry
once signed, so an unsigned transaction can be priced before signing.
"""

from __future__ import annotations

from collections.abc import Iterable

# P2PKH_PK_SCRIPT_SIZE is the size of a locking script paying to a compressed
# pubkey hash:
#   - OP_DUP
#   - OP_HASH160
#   - OP_DATA_20
#   - 20 bytes pubkey hash
#   - OP_EQUALVERIFY
#   - OP_CHECKSIG
P2PKH_PK_SCRIPT_SIZE = 1 + 1 + 1 + 20 + 1 + 1

# P2SH_PK_SCRIPT_SIZE is the size of a locking script paying to a script hash:
#   - OP_HASH160
#   - OP_DATA_20
#   - 20 bytes script hash
#   - OP_EQUAL
P2SH_PK_SCRIPT_SIZE = 1 + 1 + 20 + 1

# REDEEM_P2PKH_SIG_SCRIPT_SIZE is the worst case (largest) size of a signature
# script redeeming a compressed P2PKH output with a low-S signature:
#   - OP_DATA_72
#   - 71 bytes DER signature + 1 byte sighash
#   - OP_DATA_33
#   - 33 bytes serialized compressed pubkey
REDEEM_P2PKH_SIG_SCRIPT_SIZE = 1 + 72 + 1 + 33

# REDEEM_P2PK_SIG_SCRIPT_SIZE is the worst case size of a signature script
# redeeming a P2PK output:
#   - OP_DATA_72
#   - 71 bytes DER signature + 1 byte sighash
REDEEM_P2PK_SIG_SCRIPT_SIZE = 1 + 72

# Fixed per-transaction bytes: 4 version + 4 locktime + 4 expiry.
TX_FIXED_OVERHEAD = 4 + 4 + 4

# Fixed per-input bytes: 32 prev txid + 4 prev index + 4 sequence.
INPUT_FIXED_OVERHEAD = 32 + 4 + 4

# Fixed per-output bytes: 8 value.
OUTPUT_FIXED_OVERHEAD = 8


def varint_serialize_size(n: int) -> int:
    """Number of bytes needed to encode *n* as a varint."""
    if n < 0xFD:
        return 1
    if n <= 0xFFFF:
        return 3
    if n <= 0xFFFFFFFF:
        return 5
    return 9


def estimate_input_size(script_size: int) -> int:
    """Worst-case serialized size of an input carrying a *script_size* byte signature script."""
    return INPUT_FIXED_OVERHEAD + varint_serialize_size(script_size) + script_size


def estimate_output_size(script_size: int) -> int:
    """Serialized size of an output with a *script_size* byte locking script."""
    return OUTPUT_FIXED_OVERHEAD + varint_serialize_size(script_size) + script_size


# Input spending a compressed P2PKH output (148 bytes).
REDEEM_P2PKH_INPUT_SIZE = estimate_input_size(REDEEM_P2PKH_SIG_SCRIPT_SIZE)

# Output paying to a P2PKH script (34 bytes).
P2PKH_OUTPUT_SIZE = estimate_output_size(P2PKH_PK_SCRIPT_SIZE)

# Output paying to a P2SH script (32 bytes).
P2SH_OUTPUT_SIZE = estimate_output_size(P2SH_PK_SCRIPT_SIZE)


def estimate_serialize_size(
    redeem_script_sizes: Iterable[int],
    output_script_sizes: Iterable[int],
) -> int:
    """Estimate the size of a signed transaction.

    Args:
        redeem_script_sizes: Signature script size of each input once signed.
        output_script_sizes: Locking script size of each output, change
            included when the caller wants it priced in.

    Returns:
        Serialized size in bytes. Non-decreasing in both input and output
        count.

    Raises:
        ValueError: If any script size is negative.
    """
    in_sizes = list(redeem_script_sizes)
    out_sizes = list(output_script_sizes)
    if any(size < 0 for size in in_sizes) or any(size < 0 for size in out_sizes):
        msg = "script sizes must be non-negative"
        raise ValueError(msg)

    return (
        TX_FIXED_OVERHEAD
        + varint_serialize_size(len(in_sizes))
        + sum(estimate_input_size(size) for size in in_sizes)
        + varint_serialize_size(len(out_sizes))
        + sum(estimate_output_size(size) for size in out_sizes)
    )

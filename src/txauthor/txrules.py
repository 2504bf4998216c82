"""Relay policy rules — fee for a serialized size, dust detection.

Rates are expressed in satoshis per kilobyte (1000 bytes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from txauthor.txsizes import REDEEM_P2PKH_INPUT_SIZE, estimate_output_size

if TYPE_CHECKING:
    from txauthor.wire.transaction import TxOutput

SATOSHIS_PER_COIN = 100_000_000

# Largest amount a single fee or output may carry.
MAX_AMOUNT = 21_000_000 * SATOSHIS_PER_COIN

# Minimum relay fee most nodes enforce.
DEFAULT_RELAY_FEE_PER_KB = 1000


def fee_for_serialize_size(relay_fee_per_kb: int, tx_serialize_size: int) -> int:
    """Fee required to relay a transaction of *tx_serialize_size* bytes.

    Computes ``ceil(relay_fee_per_kb * tx_serialize_size / 1000)``, clamped
    to :data:`MAX_AMOUNT`. Non-decreasing in size; a zero rate is a zero fee.

    Raises:
        ValueError: If either argument is negative.
    """
    if relay_fee_per_kb < 0:
        msg = f"relay fee must be non-negative, got {relay_fee_per_kb}"
        raise ValueError(msg)
    if tx_serialize_size < 0:
        msg = f"serialize size must be non-negative, got {tx_serialize_size}"
        raise ValueError(msg)
    fee = -(-relay_fee_per_kb * tx_serialize_size // 1000)
    return min(fee, MAX_AMOUNT)


def is_dust_amount(amount: int, script_size: int, relay_fee_per_kb: int) -> bool:
    """Report whether an output of *amount* is dust at the given relay fee.

    An output is dust when spending it would cost more than a third of its
    value: the fee for the output itself plus a P2PKH input redeeming it,
    multiplied by three.
    """
    total_size = estimate_output_size(script_size) + REDEEM_P2PKH_INPUT_SIZE
    return amount * 1000 < 3 * total_size * relay_fee_per_kb


def is_dust_output(output: TxOutput, relay_fee_per_kb: int) -> bool:
    """Report whether *output* is dust at the given relay fee."""
    return is_dust_amount(output.value, len(output.script_pubkey), relay_fee_per_kb)

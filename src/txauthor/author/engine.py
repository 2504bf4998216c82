"""Authoring engine — unsigned transactions that pay their fee out of the payment.

Builds a single-payment transaction whose fee is subtracted from the payment
output rather than added on top of it:

1. Fetch inputs worth at least the payment amount.
2. Price the transaction as if it carried a change output.
3. Subtract that fee from the payment.
4. Return any surplus of gathered funds over the *requested* payment as
   change.

The fee is priced once, with change assumed, and is never recomputed after
change turns out to be zero.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from txauthor.config.settings import AuthorConfig
from txauthor.errors.author_errors import InsufficientBalanceError, annotate
from txauthor.txrules import fee_for_serialize_size
from txauthor.txsizes import estimate_serialize_size
from txauthor.wire.transaction import Transaction, TxInput, TxOutput

if TYPE_CHECKING:
    from txauthor.author.sources import ChangeSource, InputSource

logger = logging.getLogger(__name__)

SizeEstimator = Callable[[Sequence[int], Sequence[int]], int]
FeeEstimator = Callable[[int, int], int]

OP_NEW_UNSIGNED_TRANSACTION_MINUS_FEE = "txauthor.new_unsigned_transaction_minus_fee"


@dataclass(frozen=True)
class AuthoredTx:
    """An unsigned transaction and what went into building it.

    Attributes:
        tx: The transaction; inputs carry empty signature scripts.
        change_index: Index of the change output, or -1 without change.
        estimated_signed_serialize_size: Size the fee was computed from.
        total_input: Value of all spent previous outputs.
    """

    tx: Transaction
    change_index: int
    estimated_signed_serialize_size: int
    total_input: int

    @property
    def payment_index(self) -> int:
        """Index of the payment output."""
        if self.change_index < 0:
            return 0
        return self.change_index ^ 1

    @property
    def payment_output(self) -> TxOutput:
        return self.tx.outputs[self.payment_index]

    @property
    def change_output(self) -> TxOutput | None:
        if self.change_index < 0:
            return None
        return self.tx.outputs[self.change_index]

    @property
    def fee(self) -> int:
        """Fee paid: spent value not carried by any output."""
        return self.total_input - self.tx.total_output_value


@contextmanager
def _calling(op: str, collaborator: str) -> Iterator[None]:
    """Tag exceptions escaping a collaborator call with *op* and re-raise them as is."""
    try:
        yield
    except Exception as exc:
        annotate(exc, f"{op} ({collaborator})")
        raise


def new_unsigned_transaction_minus_fee(
    output: TxOutput,
    relay_fee_per_kb: int,
    input_source: InputSource,
    change_source: ChangeSource,
    *,
    op: str = OP_NEW_UNSIGNED_TRANSACTION_MINUS_FEE,
    size_estimator: SizeEstimator = estimate_serialize_size,
    fee_estimator: FeeEstimator = fee_for_serialize_size,
) -> AuthoredTx:
    """Author an unsigned transaction paying *output* less the relay fee.

    Args:
        output: Requested payment. Not modified; the transaction carries a
            new output with the same script and the fee deducted.
        relay_fee_per_kb: Fee rate in satoshis per 1000 bytes.
        input_source: Queried exactly once, for ``output.value``.
        change_source: Asked for a script only when change is positive.
        op: Operation name attached to errors.
        size_estimator: Maps (redeem script sizes, output script sizes) to
            a signed size in bytes.
        fee_estimator: Maps (rate, size) to a fee.

    Returns:
        The :class:`AuthoredTx`. With change, the payment is output 0 and
        change is output 1.

    Raises:
        InsufficientBalanceError: If the inputs cannot cover the payment, or
            the payment cannot cover its own fee.
        ValueError: If the payment value is negative or the change source
            hands back a script of a different size than it reported.
    """
    if output.value < 0:
        msg = f"payment value must be non-negative, got {output.value}"
        raise ValueError(msg)

    target = output.value
    with _calling(op, "input source"):
        detail = input_source.fetch(target)
    if detail.amount < target:
        raise InsufficientBalanceError(
            f"gathered {detail.amount} of {target} required",
            op=op,
            amount=detail.amount,
            target=target,
        )

    with _calling(op, "change source"):
        change_script_size = change_source.script_size()
    with _calling(op, "size estimator"):
        max_signed_size = size_estimator(
            detail.redeem_script_sizes,
            [len(output.script_pubkey), change_script_size],
        )
    with _calling(op, "fee estimator"):
        fee = fee_estimator(relay_fee_per_kb, max_signed_size)

    payment_value = output.value - fee
    if payment_value < 0:
        raise InsufficientBalanceError(
            f"payment of {target} cannot cover its fee of {fee}",
            op=op,
            amount=detail.amount,
            target=target,
        )

    outputs = [TxOutput(value=payment_value, script_pubkey=output.script_pubkey)]
    change_index = -1
    change = detail.amount - output.value
    if change > 0:
        with _calling(op, "change source"):
            change_script, change_version = change_source.script()
            if len(change_script) != change_script_size:
                msg = (
                    f"change script is {len(change_script)} bytes, "
                    f"change source reported {change_script_size}"
                )
                raise ValueError(msg)
        outputs.append(TxOutput(value=change, script_pubkey=change_script))
        change_index = len(outputs) - 1
        logger.debug(
            "Change output %d: %d sat (script version %d)", change_index, change, change_version
        )

    tx = Transaction(
        inputs=[
            TxInput(previous_outpoint=inp.previous_outpoint, sequence=inp.sequence)
            for inp in detail.inputs
        ],
        outputs=outputs,
    )
    logger.debug(
        "Authored tx: %d inputs, payment %d -> %d, fee %d, est. size %d",
        len(tx.inputs),
        output.value,
        payment_value,
        fee,
        max_signed_size,
    )
    return AuthoredTx(
        tx=tx,
        change_index=change_index,
        estimated_signed_serialize_size=max_signed_size,
        total_input=detail.amount,
    )


class TransactionAuthor:
    """Authoring service bound to a configuration.

    Supplies the configured relay fee when a call does not name one and
    keeps the size and fee estimators swappable.
    """

    def __init__(
        self,
        config: AuthorConfig | None = None,
        *,
        size_estimator: SizeEstimator = estimate_serialize_size,
        fee_estimator: FeeEstimator = fee_for_serialize_size,
    ) -> None:
        self._config = config or AuthorConfig()
        self._size_estimator = size_estimator
        self._fee_estimator = fee_estimator

    @property
    def config(self) -> AuthorConfig:
        return self._config

    def author_minus_fee(
        self,
        output: TxOutput,
        input_source: InputSource,
        change_source: ChangeSource,
        *,
        relay_fee_per_kb: int | None = None,
    ) -> AuthoredTx:
        """Author a fee-from-payment transaction; see :func:`new_unsigned_transaction_minus_fee`."""
        if relay_fee_per_kb is None:
            relay_fee_per_kb = self._config.relay_fee_per_kb
        authored = new_unsigned_transaction_minus_fee(
            output,
            relay_fee_per_kb,
            input_source,
            change_source,
            op="TransactionAuthor.author_minus_fee",
            size_estimator=self._size_estimator,
            fee_estimator=self._fee_estimator,
        )
        logger.info(
            "Authored unsigned transaction paying %d with fee %d",
            authored.payment_output.value,
            authored.fee,
        )
        return authored

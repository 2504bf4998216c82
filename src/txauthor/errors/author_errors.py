"""TxAuthorError — base exception and domain errors for transaction authoring."""

from __future__ import annotations


class TxAuthorError(Exception):
    """Base error for all txauthor operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
        op: Name of the operation that raised the error, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "txauthor-error",
        op: str = "",
    ) -> None:
        super().__init__(f"{op}: {message}" if op else message)
        self.message = message
        self.code = code
        self.op = op


class InsufficientBalanceError(TxAuthorError):
    """Gathered funds cannot cover the payment, or the fee it must absorb.

    Attributes:
        amount: Total value gathered from the input source.
        target: Value the payment needed.
    """

    def __init__(self, message: str, *, op: str = "", amount: int = 0, target: int = 0) -> None:
        super().__init__(message, code="insufficient-balance", op=op)
        self.amount = amount
        self.target = target


def annotate(exc: BaseException, op: str) -> None:
    """Attach the calling operation's name to *exc* as an exception note.

    The exception keeps its type and message; the note shows in tracebacks.
    """
    exc.add_note(f"op: {op}")

"""Error taxonomy for transaction authoring."""

from txauthor.errors.author_errors import InsufficientBalanceError, TxAuthorError, annotate

__all__ = ["InsufficientBalanceError", "TxAuthorError", "annotate"]

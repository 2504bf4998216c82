"""Transaction authoring — engine and collaborator sources."""

from txauthor.author.engine import (
    AuthoredTx,
    TransactionAuthor,
    new_unsigned_transaction_minus_fee,
)
from txauthor.author.sources import (
    ChangeSource,
    InputDetail,
    InputSource,
    ScriptChangeSource,
    Unspent,
    UnspentCursor,
)

__all__ = [
    "AuthoredTx",
    "ChangeSource",
    "InputDetail",
    "InputSource",
    "ScriptChangeSource",
    "TransactionAuthor",
    "Unspent",
    "UnspentCursor",
    "new_unsigned_transaction_minus_fee",
]

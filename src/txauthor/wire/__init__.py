"""Wire-level transaction, script and address primitives."""

from txauthor.wire.transaction import OutPoint, Transaction, TxInput, TxOutput

__all__ = ["OutPoint", "Transaction", "TxInput", "TxOutput"]

"""Input and change sources — the collaborators an authoring call pulls from.

An *input source* is asked once for enough previous outputs to reach a
target amount and answers with an :class:`InputDetail`. A *change source*
reports the size of the change script it would produce and hands the script
over when a change output is actually needed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, Self

from txauthor.txsizes import REDEEM_P2PKH_SIG_SCRIPT_SIZE
from txauthor.wire.address import address_to_script
from txauthor.wire.script import DEFAULT_SCRIPT_VERSION, p2pkh_lock_script
from txauthor.wire.transaction import OutPoint, TxInput

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InputDetail:
    """Previous outputs gathered to fund a transaction.

    Attributes:
        amount: Sum of the values of the outputs referenced by ``inputs``.
        inputs: Unsigned inputs spending those outputs, in selection order.
        redeem_script_sizes: Signature script size each input needs once
            signed; parallel to ``inputs``.
    """

    amount: int
    inputs: tuple[TxInput, ...]
    redeem_script_sizes: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.inputs) != len(self.redeem_script_sizes):
            msg = (
                f"inputs ({len(self.inputs)}) and redeem_script_sizes "
                f"({len(self.redeem_script_sizes)}) differ in length"
            )
            raise ValueError(msg)
        if self.amount < 0:
            msg = f"amount must be non-negative, got {self.amount}"
            raise ValueError(msg)


@dataclass(frozen=True)
class Unspent:
    """A spendable previous output.

    Attributes:
        outpoint: Where the output lives.
        value: Output value in satoshis.
        redeem_script_size: Size of the signature script that will spend it.
    """

    outpoint: OutPoint
    value: int
    redeem_script_size: int = REDEEM_P2PKH_SIG_SCRIPT_SIZE

    def __post_init__(self) -> None:
        if self.value < 0:
            msg = f"unspent value must be non-negative, got {self.value}"
            raise ValueError(msg)
        if self.redeem_script_size < 0:
            msg = f"redeem script size must be non-negative, got {self.redeem_script_size}"
            raise ValueError(msg)


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


class InputSource(Protocol):
    """Supplies previous outputs worth at least ``target`` when it can.

    When less than ``target`` is available, ``fetch`` returns everything it
    could gather instead of failing; callers compare ``amount`` themselves.
    """

    def fetch(self, target: int) -> InputDetail: ...


class ChangeSource(Protocol):
    """Supplies the locking script for a change output."""

    def script_size(self) -> int: ...

    def script(self) -> tuple[bytes, int]: ...


# ---------------------------------------------------------------------------
# UnspentCursor
# ---------------------------------------------------------------------------


class UnspentCursor:
    """Input source walking an ordered pool of unspent outputs.

    The cursor holds its position in the pool and the running total of what
    it has consumed. :meth:`advance_to` moves the position forward until the
    total reaches the target or the pool runs out; it never moves back, so
    successive calls see a non-decreasing total. Selection order is the pool
    order; ordering policy belongs to whoever builds the pool.

    A lock serialises ``advance_to`` so several authoring calls may share
    one cursor.
    """

    def __init__(self, unspents: Iterable[Unspent]) -> None:
        self._pool: tuple[Unspent, ...] = tuple(unspents)
        self._position = 0
        self._total = 0
        self._lock = threading.Lock()

    @property
    def position(self) -> int:
        """Number of unspents consumed so far."""
        return self._position

    @property
    def total(self) -> int:
        """Value of the unspents consumed so far."""
        return self._total

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._pool)

    def advance_to(self, target: int) -> InputDetail:
        """Consume unspents until their total reaches *target*.

        Returns:
            A fresh :class:`InputDetail` covering every unspent consumed so
            far, including those consumed by earlier calls.
        """
        with self._lock:
            while self._total < target and self._position < len(self._pool):
                self._total += self._pool[self._position].value
                self._position += 1
            consumed = self._pool[: self._position]
            total = self._total

        logger.debug(
            "Cursor advanced to %d/%d unspents, total %d (target %d)",
            len(consumed),
            len(self._pool),
            total,
            target,
        )
        return InputDetail(
            amount=total,
            inputs=tuple(TxInput(previous_outpoint=u.outpoint) for u in consumed),
            redeem_script_sizes=tuple(u.redeem_script_size for u in consumed),
        )

    def fetch(self, target: int) -> InputDetail:
        """:class:`InputSource` entry point; same as :meth:`advance_to`."""
        return self.advance_to(target)


# ---------------------------------------------------------------------------
# ScriptChangeSource
# ---------------------------------------------------------------------------


class ScriptChangeSource:
    """Change source paying every change output to one fixed script."""

    def __init__(self, script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> None:
        if not script:
            msg = "change script must not be empty"
            raise ValueError(msg)
        self._script = bytes(script)
        self._version = version

    @classmethod
    def from_pubkey_hash(cls, pubkey_hash: bytes) -> Self:
        """Pay change to a P2PKH script for *pubkey_hash*."""
        return cls(p2pkh_lock_script(pubkey_hash))

    @classmethod
    def from_address(cls, address: str) -> Self:
        """Pay change to a Base58Check P2PKH or P2SH address."""
        return cls(address_to_script(address))

    def script_size(self) -> int:
        return len(self._script)

    def script(self) -> tuple[bytes, int]:
        return self._script, self._version

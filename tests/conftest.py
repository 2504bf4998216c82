"""Shared test fixtures for the txauthor test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from txauthor.author.sources import InputDetail, ScriptChangeSource, Unspent, UnspentCursor
from txauthor.config.settings import AuthorConfig
from txauthor.txsizes import REDEEM_P2PKH_SIG_SCRIPT_SIZE
from txauthor.wire.script import p2pkh_lock_script, p2sh_lock_script
from txauthor.wire.transaction import OutPoint, TxOutput

if TYPE_CHECKING:
    from collections.abc import Callable


class RecordingChangeSource:
    """Change source paying to P2PKH that counts how often it is asked."""

    def __init__(self) -> None:
        self._script = p2pkh_lock_script(b"\xc4" * 20)
        self.script_calls = 0

    def script_size(self) -> int:
        return len(self._script)

    def script(self) -> tuple[bytes, int]:
        self.script_calls += 1
        return self._script, 0


class RecordingInputSource:
    """Input source over an :class:`UnspentCursor` that records each target."""

    def __init__(self, unspents: list[Unspent]) -> None:
        self._cursor = UnspentCursor(unspents)
        self.targets: list[int] = []

    def fetch(self, target: int) -> InputDetail:
        self.targets.append(target)
        return self._cursor.fetch(target)


def _make_unspents(
    *values: int, redeem_script_size: int = REDEEM_P2PKH_SIG_SCRIPT_SIZE
) -> list[Unspent]:
    return [
        Unspent(
            outpoint=OutPoint(tx_id=(i + 1).to_bytes(32, "big"), index=i),
            value=value,
            redeem_script_size=redeem_script_size,
        )
        for i, value in enumerate(values)
    ]


@pytest.fixture
def make_unspents() -> Callable[..., list[Unspent]]:
    """Factory for P2PKH-redeemed unspents with distinct outpoints, in order."""
    return _make_unspents


@pytest.fixture
def input_source() -> Callable[..., RecordingInputSource]:
    """Factory for a recording input source over unspents of the given values."""

    def _factory(*values: int) -> RecordingInputSource:
        return RecordingInputSource(_make_unspents(*values))

    return _factory


@pytest.fixture
def payment() -> Callable[[int], TxOutput]:
    """Factory for a payment to a P2SH script."""

    def _factory(value: int) -> TxOutput:
        return TxOutput(value=value, script_pubkey=p2sh_lock_script(b"\x5a" * 20))

    return _factory


@pytest.fixture
def change_source() -> RecordingChangeSource:
    """Provide a P2PKH change source that records its calls."""
    return RecordingChangeSource()


@pytest.fixture
def p2pkh_change() -> ScriptChangeSource:
    """Provide a fixed-script P2PKH change source."""
    return ScriptChangeSource.from_pubkey_hash(b"\xc4" * 20)


@pytest.fixture
def author_config() -> AuthorConfig:
    """Provide an AuthorConfig with a 1000 sat/kB relay fee."""
    return AuthorConfig(relay_fee_per_kb=1000)

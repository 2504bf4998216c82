"""Tests for input and change sources — author/sources.py."""

from __future__ import annotations

import threading

import pytest

from txauthor.author.sources import InputDetail, ScriptChangeSource, Unspent, UnspentCursor
from txauthor.txsizes import P2PKH_PK_SCRIPT_SIZE, P2SH_PK_SCRIPT_SIZE, REDEEM_P2PK_SIG_SCRIPT_SIZE
from txauthor.wire.address import MAINNET_SCRIPT_HASH, TESTNET_PUBKEY_HASH, hash_to_address
from txauthor.wire.script import ScriptType, detect_script_type
from txauthor.wire.transaction import OutPoint, TxInput

# ---------------------------------------------------------------------------
# InputDetail / Unspent
# ---------------------------------------------------------------------------


class TestInputDetail:
    def test_length_mismatch_rejected(self) -> None:
        inp = TxInput(previous_outpoint=OutPoint(b"\x00" * 32, 0))
        with pytest.raises(ValueError, match="differ in length"):
            InputDetail(amount=1, inputs=(inp,), redeem_script_sizes=())

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            InputDetail(amount=-1, inputs=(), redeem_script_sizes=())

    def test_empty_detail(self) -> None:
        detail = InputDetail(amount=0, inputs=(), redeem_script_sizes=())
        assert detail.amount == 0


class TestUnspent:
    def test_default_redeem_size_is_p2pkh(self) -> None:
        u = Unspent(outpoint=OutPoint(b"\x01" * 32, 3), value=10)
        assert u.redeem_script_size == 1 + 72 + 1 + 33

    def test_negative_value_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            Unspent(outpoint=OutPoint(b"\x01" * 32, 0), value=-5)

    def test_negative_redeem_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="redeem script size"):
            Unspent(outpoint=OutPoint(b"\x01" * 32, 0), value=5, redeem_script_size=-1)


# ---------------------------------------------------------------------------
# UnspentCursor
# ---------------------------------------------------------------------------


class TestUnspentCursor:
    """Cursor over an ordered unspent pool."""

    def test_takes_just_enough(self, make_unspents) -> None:
        cursor = UnspentCursor(make_unspents(100, 200, 300, 400))
        detail = cursor.advance_to(250)
        assert detail.amount == 300
        assert len(detail.inputs) == 2
        assert cursor.position == 2
        assert cursor.total == 300

    def test_zero_target_takes_nothing(self, make_unspents) -> None:
        cursor = UnspentCursor(make_unspents(100))
        detail = cursor.advance_to(0)
        assert detail.amount == 0
        assert detail.inputs == ()
        assert not cursor.exhausted

    def test_shortfall_returns_everything(self, make_unspents) -> None:
        cursor = UnspentCursor(make_unspents(100, 200))
        detail = cursor.advance_to(10_000)
        assert detail.amount == 300
        assert len(detail.inputs) == 2
        assert cursor.exhausted

    def test_empty_pool(self) -> None:
        cursor = UnspentCursor([])
        detail = cursor.fetch(1)
        assert detail.amount == 0
        assert cursor.exhausted

    def test_detail_parallel_to_inputs(self, make_unspents) -> None:
        unspents = make_unspents(50, 60, redeem_script_size=REDEEM_P2PK_SIG_SCRIPT_SIZE)
        detail = UnspentCursor(unspents).advance_to(100)
        assert detail.redeem_script_sizes == (REDEEM_P2PK_SIG_SCRIPT_SIZE,) * 2
        assert [inp.previous_outpoint for inp in detail.inputs] == [u.outpoint for u in unspents]
        assert all(inp.script_sig == b"" for inp in detail.inputs)

    def test_cumulative_and_non_decreasing(self, make_unspents) -> None:
        cursor = UnspentCursor(make_unspents(100, 100, 100))
        first = cursor.advance_to(100)
        second = cursor.advance_to(50)
        third = cursor.advance_to(250)
        assert first.amount == 100
        assert second.amount == 100
        assert third.amount == 300
        assert len(third.inputs) == 3

    def test_each_call_gets_fresh_detail(self, make_unspents) -> None:
        cursor = UnspentCursor(make_unspents(100, 100))
        first = cursor.advance_to(100)
        second = cursor.advance_to(100)
        assert first is not second
        assert first.inputs[0] is not second.inputs[0]
        first.inputs[0].script_sig = b"\x01"
        assert second.inputs[0].script_sig == b""

    def test_pool_copied_from_caller(self, make_unspents) -> None:
        unspents = make_unspents(100)
        cursor = UnspentCursor(unspents)
        unspents.clear()
        assert cursor.advance_to(100).amount == 100

    def test_large_pool_keeps_outpoints_distinct(self, make_unspents) -> None:
        unspents = make_unspents(*([1] * 600))
        detail = UnspentCursor(unspents).advance_to(600)
        outpoints = [inp.previous_outpoint for inp in detail.inputs]
        assert len(outpoints) == 600
        assert len(set(outpoints)) == 600

    def test_concurrent_advances_consistent(self, make_unspents) -> None:
        cursor = UnspentCursor(make_unspents(*([1] * 500)))
        results: list[int] = []
        lock = threading.Lock()

        def worker(target: int) -> None:
            detail = cursor.advance_to(target)
            with lock:
                results.append(detail.amount)

        threads = [threading.Thread(target=worker, args=(t,)) for t in range(0, 500, 10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cursor.total == cursor.position == 490
        assert all(amount >= 0 for amount in results)
        assert max(results) == 490


# ---------------------------------------------------------------------------
# ScriptChangeSource
# ---------------------------------------------------------------------------


class TestScriptChangeSource:
    def test_script_and_size_agree(self) -> None:
        src = ScriptChangeSource(b"\x51\x52\x53", version=0)
        script, version = src.script()
        assert src.script_size() == len(script) == 3
        assert version == 0

    def test_empty_script_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            ScriptChangeSource(b"")

    def test_from_pubkey_hash(self) -> None:
        src = ScriptChangeSource.from_pubkey_hash(b"\x11" * 20)
        script, _ = src.script()
        assert src.script_size() == P2PKH_PK_SCRIPT_SIZE
        assert detect_script_type(script) == ScriptType.P2PKH

    def test_from_p2pkh_address(self) -> None:
        address = hash_to_address(TESTNET_PUBKEY_HASH, b"\x22" * 20)
        src = ScriptChangeSource.from_address(address)
        script, _ = src.script()
        assert detect_script_type(script) == ScriptType.P2PKH
        assert script[3:23] == b"\x22" * 20

    def test_from_p2sh_address(self) -> None:
        address = hash_to_address(MAINNET_SCRIPT_HASH, b"\x33" * 20)
        src = ScriptChangeSource.from_address(address)
        assert src.script_size() == P2SH_PK_SCRIPT_SIZE
        assert detect_script_type(src.script()[0]) == ScriptType.P2SH

    def test_from_bad_address(self) -> None:
        with pytest.raises(ValueError):
            ScriptChangeSource.from_address("1BoatSLRHtKNngkdXEeobR76b53LETtpyX")

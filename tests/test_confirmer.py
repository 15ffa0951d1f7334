import asyncio

from web3.datastructures import AttributeDict

from conftest import FakeClient
from engine.confirmer import ReceiptConfirmer
from engine.models import OutcomeStatus
from utils.retry import RetryPolicy

TX = "0x" + "ab" * 32


class LateReceipt(FakeClient):
    def __init__(self, ready_after, **kw):
        super().__init__(**kw)
        self.ready_after = ready_after

    async def get_receipt(self, tx_hash):
        self.receipt_calls.append(tx_hash)
        if len(self.receipt_calls) <= self.ready_after:
            return None
        return self.receipt


def test_success_receipt(chain):
    client = FakeClient(receipt=AttributeDict({"status": 1, "blockNumber": 77, "gasUsed": 21000}))
    outcome = asyncio.run(ReceiptConfirmer(client, chain, RetryPolicy(3, 0)).confirm(TX))
    assert outcome.status is OutcomeStatus.CONFIRMED
    assert outcome.success is True
    assert outcome.block_number == 77
    assert outcome.gas_used == 21000
    assert outcome.is_terminal


def test_reverted_receipt(chain):
    client = FakeClient(receipt={"status": 0, "blockNumber": 78, "gasUsed": 21000})
    outcome = asyncio.run(ReceiptConfirmer(client, chain, RetryPolicy(3, 0)).confirm(TX))
    assert outcome.status is OutcomeStatus.CONFIRMED
    assert outcome.success is False


def test_receipt_found_on_second_poll(chain):
    client = LateReceipt(ready_after=1)
    outcome = asyncio.run(ReceiptConfirmer(client, chain, RetryPolicy(3, 0)).confirm(TX))
    assert outcome.status is OutcomeStatus.CONFIRMED
    assert len(client.receipt_calls) == 2


def test_missing_receipt_reports_pending_after_budget(chain):
    client = LateReceipt(ready_after=100)
    outcome = asyncio.run(ReceiptConfirmer(client, chain, RetryPolicy(3, 0)).confirm(TX))
    assert outcome.status is OutcomeStatus.STILL_PENDING
    assert outcome.tx_hash == TX
    assert not outcome.is_terminal
    assert len(client.receipt_calls) == 3


def test_lookup_errors_do_not_escape(chain, caplog):
    client = FakeClient(receipt_errors=[TimeoutError("t1"), TimeoutError("t2"), TimeoutError("t3")])
    with caplog.at_level("ERROR", logger="engine.confirmer"):
        outcome = asyncio.run(ReceiptConfirmer(client, chain, RetryPolicy(3, 0)).confirm(TX))
    assert outcome.status is OutcomeStatus.STILL_PENDING
    assert any("Error checking transaction status" in r.getMessage() for r in caplog.records)


def test_explorer_link_logged(chain, caplog):
    client = FakeClient()
    with caplog.at_level("INFO", logger="engine.confirmer"):
        asyncio.run(ReceiptConfirmer(client, chain, RetryPolicy(3, 0)).confirm(TX))
    assert any(f"https://explorer.local/tx/{TX}" in r.getMessage() for r in caplog.records)

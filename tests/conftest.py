import os
import sys
from types import SimpleNamespace

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from engine.models import ChainEndpoint, EngineSettings  # noqa: E402
from utils.retry import RetryPolicy  # noqa: E402


class FakeClient:
    """
    In-memory stand-in for utils.helper.Web3Helper.

    - balances: {address: wei}, or a callable(address) -> wei
    - send_errors: exceptions raised by successive send_transaction calls
      before sends start to succeed
    - receipts: receipt returned by get_receipt (None = never mined)
    Successful sends bump the sender's nonce.
    """

    def __init__(self, balances=None, gas_price=1_000_000_000, send_errors=None,
                 receipt=None, receipt_errors=None):
        self.balances = balances or {}
        self._gas_price = gas_price
        self.send_errors = list(send_errors or [])
        self.receipt = receipt if receipt is not None else {"status": 1, "blockNumber": 123, "gasUsed": 21000}
        self.receipt_errors = list(receipt_errors or [])
        self.nonces = {}
        self.balance_calls = []
        self.nonce_calls = []
        self.sent = []
        self.send_attempts = []
        self.receipt_calls = []

    async def get_balance(self, address):
        self.balance_calls.append(address)
        value = self.balances(address) if callable(self.balances) else self.balances.get(address, 0)
        if isinstance(value, Exception):
            raise value
        return value

    async def gas_price(self):
        if isinstance(self._gas_price, Exception):
            raise self._gas_price
        return self._gas_price

    async def get_nonce(self, address):
        self.nonce_calls.append(address)
        return self.nonces.get(address, 0)

    async def send_transaction(self, account, pending):
        self.send_attempts.append(pending)
        if self.send_errors:
            raise self.send_errors.pop(0)
        self.sent.append(pending)
        self.nonces[pending.sender] = pending.nonce + 1
        return "0x" + f"{len(self.sent):064x}"

    async def get_receipt(self, tx_hash):
        self.receipt_calls.append(tx_hash)
        if self.receipt_errors:
            raise self.receipt_errors.pop(0)
        return self.receipt


def make_account(n: int = 1):
    return SimpleNamespace(address="0x" + f"{n:040x}")


@pytest.fixture
def chain():
    return ChainEndpoint(
        name="testnet",
        rpc_url="http://localhost:8545",
        chain_id=31337,
        symbol="ETH",
        explorer="https://explorer.local",
    )


@pytest.fixture
def settings():
    return EngineSettings.immediate(retry=RetryPolicy(3, 0))

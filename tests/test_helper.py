import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from hexbytes import HexBytes
from web3.exceptions import TransactionNotFound

from engine.models import PendingTransaction
from utils.errors import FeeCollisionError, SubmissionError, classify_submission_error
from utils.helper import FileHelper, Web3Helper

KEY_1 = '1' * 64
KEY_2 = '2' * 64


@pytest.fixture
def helper(chain, monkeypatch):
    monkeypatch.delenv("EXTRA_RPC_URLS", raising=False)
    h = Web3Helper(chain)
    h.w3 = MagicMock()
    return h


def _pending():
    return PendingTransaction(
        sender="0x" + "0" * 39 + "1", receiver="0x" + "0" * 39 + "2",
        value=10 ** 10, gas_price=210_000_000, gas_limit=21000, nonce=0, chain_id=31337,
    )


def _signer():
    acct = MagicMock()
    acct.sign_transaction.return_value = SimpleNamespace(raw_transaction=b"\x01\x02")
    return acct


def test_rpc_urls_include_extras_once(chain, monkeypatch):
    monkeypatch.setenv("EXTRA_RPC_URLS", "http://a:8545, http://b:8545,http://localhost:8545")
    h = Web3Helper(chain)
    assert h.rpc_urls == ["http://localhost:8545", "http://a:8545", "http://b:8545"]
    assert len(h.rpc_urls) == len(set(h.rpc_urls))
    assert h.provider.current_url == h.rpc_urls[0]


def test_parse_private_keys_blob(helper):
    blob = "\n".join([
        "# wallets",
        KEY_1,
        "0x" + KEY_2 + "  # second",
        "xyz",
        KEY_1.upper(),
    ])
    assert helper._parse_privatekeys_blob(blob) == [KEY_1, KEY_2]


def test_load_private_keys_file(helper, tmp_path):
    path = tmp_path / "wallet.txt"
    path.write_text("\n".join([KEY_1, "0x" + KEY_2, "not-a-key"]))
    keys, addrs = helper.load_privatekeys_file(str(path))
    assert keys == [KEY_1, KEY_2]
    assert len(addrs) == 2
    assert all(a.startswith("0x") and len(a) == 42 for a in addrs)
    assert helper.pk_addresses == addrs


def test_missing_key_file_returns_empty(helper, tmp_path):
    assert helper.load_privatekeys_file(str(tmp_path / "nope.txt")) == ([], [])


def test_get_receipt_none_while_unknown(helper):
    helper.w3.eth.get_transaction_receipt = AsyncMock(side_effect=TransactionNotFound("not yet"))
    assert asyncio.run(helper.get_receipt("0x" + "ab" * 32)) is None


def test_get_nonce_uses_configured_block_tag(helper):
    helper.w3.eth.get_transaction_count = AsyncMock(return_value=7)
    addr = "0x" + "ab" * 20
    assert asyncio.run(helper.get_nonce(addr)) == 7
    args = helper.w3.eth.get_transaction_count.call_args.args
    assert args[1] == "pending"
    assert args[0].lower() == addr


def test_send_transaction_returns_hex_hash(helper):
    helper.w3.eth.send_raw_transaction = AsyncMock(return_value=HexBytes(b"\xab" * 32))
    signer = _signer()
    tx_hash = asyncio.run(helper.send_transaction(signer, _pending()))
    assert tx_hash == "0x" + "ab" * 32
    sent = signer.sign_transaction.call_args.args[0]
    assert sent["gasPrice"] == 210_000_000 and sent["gas"] == 21000
    helper.w3.eth.send_raw_transaction.assert_awaited_once_with(b"\x01\x02")


def test_send_transaction_classifies_fee_collision(helper):
    helper.w3.eth.send_raw_transaction = AsyncMock(
        side_effect=ValueError({"code": -32000, "message": "replacement transaction underpriced"}))
    with pytest.raises(FeeCollisionError):
        asyncio.run(helper.send_transaction(_signer(), _pending()))


def test_send_transaction_classifies_other_rejections(helper):
    helper.w3.eth.send_raw_transaction = AsyncMock(
        side_effect=ValueError({"code": -32000, "message": "insufficient funds for gas * price + value"}))
    with pytest.raises(SubmissionError) as exc:
        asyncio.run(helper.send_transaction(_signer(), _pending()))
    assert not isinstance(exc.value, FeeCollisionError)


def test_send_transaction_leaves_transport_errors_alone(helper):
    helper.w3.eth.send_raw_transaction = AsyncMock(side_effect=ConnectionError("refused"))
    with pytest.raises(ConnectionError):
        asyncio.run(helper.send_transaction(_signer(), _pending()))


@pytest.mark.parametrize("msg, kind", [
    ("replacement fee too low", FeeCollisionError),
    ("Replacement transaction underpriced", FeeCollisionError),
    ("nonce too low", SubmissionError),
    ("", SubmissionError),
])
def test_classify_submission_error(msg, kind):
    err = classify_submission_error(Exception(msg))
    assert type(err) is kind


def test_ensure_placeholder_creates_parent(tmp_path):
    target = tmp_path / "resources" / "wallet.txt"
    FileHelper.ensure_placeholder(str(target), "wallets")
    assert target.read_text().startswith("#")
    FileHelper.ensure_placeholder(str(target), "wallets")  # leaves existing file alone

import asyncio
import logging
import random
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from eth_account import Account
from web3 import Web3

from engine.gas import GasPriceResolver, bump_gas_price
from engine.models import EngineSettings, PendingTransaction, RunParameters, TransactionOutcome, ChainEndpoint
from utils.errors import FeeCollisionError, SubmissionError
from utils.retry import retry

logger = logging.getLogger(__name__)

AMOUNT_QUANT = Decimal("0.0000000001")  # 10 dp


def random_amount_wei(low: Decimal, high: Decimal, rng: Optional[random.Random] = None) -> int:
    """Pseudo-random transfer amount in [low, high] ether, rounded to 10 dp, in wei."""
    rng = rng or random
    raw = Decimal(repr(rng.uniform(float(low), float(high))))
    amount = raw.quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP)
    amount = min(max(amount, low), high)
    return int(Web3.to_wei(amount, "ether"))


def new_recipient() -> str:
    # throwaway key; only the address is kept
    return Account.create().address


class TransactionDispatcher:
    """
    Builds, signs and submits one transfer per call for a single sender.

    Each call: fresh recipient -> random amount -> gas price -> fresh nonce ->
    submit (bounded retry) -> on replacement underpriced, one more submit at
    bumped gas -> pause before the receipt is polled.
    """

    def __init__(self, client, account, chain: ChainEndpoint, params: RunParameters,
                 settings: Optional[EngineSettings] = None, rng: Optional[random.Random] = None,
                 recipient_factory=None):
        self.client = client
        self.account = account
        self.address = account.address
        self.chain = chain
        self.params = params
        self.settings = settings or EngineSettings()
        self.rng = rng
        self.recipient_factory = recipient_factory or new_recipient
        self.gas = GasPriceResolver(
            client,
            manual_gwei=params.manual_gas_gwei,
            buffer_percent=self.settings.gas_buffer_percent,
            fallback_wei=self.settings.fallback_gas_price_wei,
        )

    async def _submit(self, tx: PendingTransaction) -> str:
        return await self.client.send_transaction(self.account, tx)

    async def dispatch(self, index: int) -> TransactionOutcome:
        policy = self.settings.retry

        receiver = self.recipient_factory()
        logger.info("Generated address %d: %s", index, receiver)

        amount = random_amount_wei(self.settings.amount_min_ether, self.settings.amount_max_ether, self.rng)

        try:
            gas_price = await retry(self.gas.resolve, policy, label="gas price")
        except Exception as e:
            logger.error("[red]Failed to fetch gas price from the network: %s[/red]", e)
            return TransactionOutcome.submission_failed(f"gas price unavailable: {e}")

        try:
            nonce = await retry(lambda: self.client.get_nonce(self.address), policy, label="nonce")
        except Exception as e:
            logger.error("[red]Failed to fetch nonce for %s: %s[/red]", self.address, e)
            return TransactionOutcome.submission_failed(f"nonce unavailable: {e}")

        tx = PendingTransaction(
            sender=self.address,
            receiver=receiver,
            value=amount,
            gas_price=gas_price,
            gas_limit=self.params.gas_limit,
            nonce=nonce,
            chain_id=self.chain.chain_id,
        )

        try:
            tx_hash = await retry(lambda: self._submit(tx), policy, label="send")
        except FeeCollisionError as e:
            logger.error("[red]Failed to send transaction: %s[/red]", e)
            tx = replace(tx, gas_price=bump_gas_price(tx.gas_price, self.settings.fee_bump_percent))
            logger.warning("[yellow]Replacement underpriced, resending at %s Gwei[/yellow]",
                           Web3.from_wei(tx.gas_price, "gwei"))
            try:
                tx_hash = await self._submit(tx)
            except Exception as retry_error:
                logger.error("[red]Failed retry with higher gas: %s[/red]", retry_error)
                return TransactionOutcome.submission_failed(f"fee collision: {retry_error}")
        except SubmissionError as e:
            logger.error("[red]Failed to send transaction: %s[/red]", e)
            return TransactionOutcome.submission_failed(str(e))
        except Exception as e:
            logger.error("[red]Failed to send transaction (network): %s[/red]", e)
            return TransactionOutcome.submission_failed(f"network: {e}")

        self._log_submitted(index, tx_hash, tx)

        if self.settings.confirm_delay:
            await asyncio.sleep(self.settings.confirm_delay)
        return TransactionOutcome.submitted(tx_hash, tx)

    def _log_submitted(self, index: int, tx_hash: str, tx: PendingTransaction) -> None:
        logger.info(
            "Transaction %d:\n  Hash: [green]%s[/green]\n  From: [green]%s[/green]\n"
            "  To: [green]%s[/green]\n  Amount: [green]%s[/green] %s\n"
            "  Gas Price: [green]%s[/green] Gwei\n  Gas Limit: [green]%d[/green]",
            index, tx_hash, tx.sender, tx.receiver,
            Web3.from_wei(tx.value, "ether"), self.chain.symbol,
            Web3.from_wei(tx.gas_price, "gwei"), tx.gas_limit,
        )

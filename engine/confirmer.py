import logging
from typing import Optional

from engine.models import ChainEndpoint, TransactionOutcome
from utils.errors import ReceiptNotReady
from utils.retry import RetryPolicy, retry

logger = logging.getLogger(__name__)


def _field(receipt, name: str):
    # AttributeDict supports both; plain dicts from fakes only support []
    try:
        return receipt[name]
    except (KeyError, TypeError):
        return getattr(receipt, name, None)


class ReceiptConfirmer:
    """Polls a receipt a bounded number of times, then gives up and reports pending."""

    def __init__(self, client, chain: ChainEndpoint, policy: Optional[RetryPolicy] = None):
        self.client = client
        self.chain = chain
        self.policy = policy or RetryPolicy()

    async def _fetch(self, tx_hash: str):
        receipt = await self.client.get_receipt(tx_hash)
        if receipt is None:
            raise ReceiptNotReady(tx_hash)
        return receipt

    async def confirm(self, tx_hash: str) -> TransactionOutcome:
        try:
            receipt = await retry(lambda: self._fetch(tx_hash), self.policy, label="receipt")
        except ReceiptNotReady:
            logger.warning("[yellow]Transaction is still pending after multiple retries.[/yellow]")
            return TransactionOutcome.still_pending(tx_hash)
        except Exception as e:
            logger.error("[red]Error checking transaction status: %s[/red]", e)
            return TransactionOutcome.still_pending(tx_hash)

        block_number = _field(receipt, "blockNumber")
        gas_used = _field(receipt, "gasUsed")
        success = _field(receipt, "status") == 1
        if success:
            logger.info(
                "[green]Transaction Success![/green]\n  Block Number: %s\n  Gas Used: %s\n  Transaction hash: %s",
                block_number, gas_used, self.chain.tx_url(tx_hash),
            )
        else:
            logger.error("[red]Transaction FAILED[/red] in block %s: %s", block_number, self.chain.tx_url(tx_hash))
        return TransactionOutcome.confirmed(tx_hash, block_number, gas_used, success)

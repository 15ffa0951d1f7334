import logging
from decimal import Decimal
from typing import Optional

from web3 import Web3

logger = logging.getLogger(__name__)


def apply_percent(value_wei: int, percent: int) -> int:
    """``value * (100 + percent) / 100`` in integer wei, floored."""
    return int(value_wei) * (100 + int(percent)) // 100


def bump_gas_price(gas_price_wei: int, bump_percent: int = 20) -> int:
    return apply_percent(gas_price_wei, bump_percent)


class GasPriceResolver:
    """
    Legacy gas price for the next transaction.

    With a manual override (Gwei) the override is used, otherwise the node's
    ``eth_gasPrice``; either way a buffer percent is added on top. If the node
    cannot be asked, the fixed fallback is returned instead of an error.
    """

    def __init__(self, client, manual_gwei: Optional[Decimal] = None,
                 buffer_percent: int = 5, fallback_wei: int = Web3.to_wei(Decimal("0.1"), "gwei")):
        self.client = client
        self.manual_gwei = None if manual_gwei is None else Decimal(str(manual_gwei))
        self.buffer_percent = int(buffer_percent)
        self.fallback_wei = int(fallback_wei)

    async def resolve(self) -> int:
        try:
            if self.manual_gwei is not None:
                base = int(Web3.to_wei(self.manual_gwei, "gwei"))
            else:
                base = await self.client.gas_price()
            price = apply_percent(base, self.buffer_percent)
        except Exception as e:
            logger.warning("[yellow]Error getting gas price: %s[/yellow]", e)
            return self.fallback_wei
        if price <= 0:
            logger.warning("[yellow]Gas price resolved to %s wei, using fallback[/yellow]", price)
            return self.fallback_wei
        return price

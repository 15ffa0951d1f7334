import asyncio
import logging
from typing import Optional

from web3 import Web3

from engine.models import EngineSettings
from utils.retry import retry

logger = logging.getLogger(__name__)


class BalanceMonitor:
    """
    Background balance printer for one sender.

    Runs as its own asyncio task next to the dispatch loop and is never awaited
    by it. It switches itself off once a sample comes back under the minimum;
    a failed sample is only logged. ``stop()`` is the runner's signal that the
    account is done; the loop exits at its next wake-up.
    """

    def __init__(self, client, address: str, symbol: str = "ETH", settings: Optional[EngineSettings] = None):
        self.client = client
        self.address = address
        self.symbol = symbol
        self.settings = settings or EngineSettings()
        self.active = False
        self.samples = 0
        self.last_balance: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        self.active = True
        self._task = asyncio.create_task(self.run(), name=f"balance-monitor-{self.address}")
        return self._task

    def stop(self) -> None:
        self.active = False

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    async def sample(self) -> Optional[int]:
        """Take one reading. Returns None once inactive, also when stopped mid-read."""
        if not self.active:
            return None
        balance = await retry(lambda: self.client.get_balance(self.address), self.settings.retry, label="balance")
        if not self.active:
            return None
        self.samples += 1
        self.last_balance = balance
        logger.info("[blue]Current Balance: %s %s[/blue]", Web3.from_wei(balance, "ether"), self.symbol)
        if balance < self.settings.min_balance_wei:
            logger.error("[red]Insufficient balance for transactions.[/red]")
            self.active = False
        return balance

    async def run(self) -> None:
        while self.active:
            try:
                await self.sample()
            except Exception as e:
                logger.error("[red]Failed to check balance: %s[/red]", e)
            if not self.active:
                break
            await asyncio.sleep(self.settings.balance_poll_interval)

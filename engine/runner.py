import logging
import random
from typing import Iterable, List, Optional

from eth_account import Account
from web3 import Web3

from engine.confirmer import ReceiptConfirmer
from engine.dispatcher import TransactionDispatcher
from engine.models import (
    AccountReport,
    ChainEndpoint,
    EngineSettings,
    OutcomeStatus,
    RunParameters,
)
from engine.monitor import BalanceMonitor
from utils.retry import retry

logger = logging.getLogger(__name__)


class AccountRunner:
    """Runs the configured number of transfers for one sender, one after another."""

    def __init__(self, client, account, chain: ChainEndpoint, params: RunParameters,
                 settings: Optional[EngineSettings] = None, rng: Optional[random.Random] = None,
                 dispatcher: Optional[TransactionDispatcher] = None):
        self.client = client
        self.account = account
        self.address = account.address
        self.chain = chain
        self.params = params
        self.settings = settings or EngineSettings()
        self.dispatcher = dispatcher or TransactionDispatcher(
            client, account, chain, params, settings=self.settings, rng=rng)
        self.confirmer = ReceiptConfirmer(client, chain, self.settings.retry)
        self.monitor = BalanceMonitor(client, self.address, chain.symbol, self.settings)

    async def run(self) -> AccountReport:
        report = AccountReport(address=self.address)
        logger.info("[cyan]Processing transactions for address: %s[/cyan]", self.address)

        try:
            balance = await retry(lambda: self.client.get_balance(self.address), self.settings.retry, label="balance")
        except Exception as e:
            logger.error("[red]Failed to check balance for %s (%s). Skipping to next address.[/red]", self.address, e)
            report.skipped, report.skip_reason = True, "balance check failed"
            return report

        if balance < self.settings.min_balance_wei:
            logger.error("[red]Insufficient or zero balance (%s %s). Skipping to next address.[/red]",
                         Web3.from_wei(balance, "ether"), self.chain.symbol)
            report.skipped, report.skip_reason = True, "insufficient balance"
            return report

        self.monitor.start()
        try:
            for i in range(1, self.params.transactions_per_account + 1):
                outcome = await self.dispatcher.dispatch(i)
                if outcome.status is OutcomeStatus.SUBMITTED:
                    outcome = await self.confirmer.confirm(outcome.tx_hash)
                report.outcomes.append(outcome)
        finally:
            self.monitor.stop()

        logger.info("[green]Finished transactions for address: %s[/green]", self.address)
        return report


def accounts_from_keys(private_keys: Iterable[str]) -> list:
    return [Account.from_key(k) for k in private_keys]


def summarize(reports: List[AccountReport]) -> dict:
    return {
        "accounts": len(reports),
        "skipped": sum(1 for r in reports if r.skipped),
        "confirmed": sum(r.count(OutcomeStatus.CONFIRMED, success=True) for r in reports),
        "failed": sum(r.count(OutcomeStatus.CONFIRMED, success=False) for r in reports),
        "pending": sum(r.count(OutcomeStatus.STILL_PENDING) for r in reports),
        "not_sent": sum(r.count(OutcomeStatus.SUBMISSION_FAILED) for r in reports),
    }


async def run_accounts(client, accounts, chain: ChainEndpoint, params: RunParameters,
                       settings: Optional[EngineSettings] = None,
                       rng: Optional[random.Random] = None) -> List[AccountReport]:
    """Process every account strictly in sequence and log a run summary."""
    settings = settings or EngineSettings()
    reports: List[AccountReport] = []
    for account in accounts:
        runner = AccountRunner(client, account, chain, params, settings=settings, rng=rng)
        reports.append(await runner.run())

    s = summarize(reports)
    logger.info(
        "[bold green]All transactions completed.[/bold green] accounts=%d skipped=%d "
        "confirmed=%d failed=%d pending=%d not_sent=%d",
        s["accounts"], s["skipped"], s["confirmed"], s["failed"], s["pending"], s["not_sent"],
    )
    return reports

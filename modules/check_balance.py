import asyncio
import logging
from typing import Dict, List, Optional

from rich.table import Table
from web3 import Web3

from engine.models import ChainEndpoint, EngineSettings
from modules.send_volume import select_chain
from utils.helper import Web3Helper, FileHelper, console, setup_logging
from utils.retry import retry

import config


class BalanceChecker:
    """
    Native balance of every wallet in WALLET_FILE on one chain, with wallets
    below the dispatch minimum flagged (those would be skipped by send_volume).
    """
    def __init__(self, chain_config):
        self.console = console
        self.chain = ChainEndpoint.from_config(chain_config)
        self.wallet_file = config.WALLET_FILE

        setup_logging(console_obj=self.console)
        self.logger = logging.getLogger(__name__)

        self.settings = EngineSettings.from_config()
        self.web3h = Web3Helper(self.chain, console=self.console)
        self.wallet_addresses: List[str] = []

        try:
            FileHelper.ensure_placeholder(self.wallet_file, 'wallets')
        except OSError as e:
            self.logger.warning("[yellow]Could not ensure placeholder file: %s[/yellow]", e)

    async def collect_balances(self) -> Dict[str, Optional[int]]:
        out: Dict[str, Optional[int]] = {}
        for addr in self.wallet_addresses:
            try:
                out[addr] = await retry(lambda: self.web3h.get_balance(addr), self.settings.retry, label="balance")
            except Exception as e:
                self.logger.error("[red]Failed to check balance for %s: %s[/red]", addr, e)
                out[addr] = None
        return out

    def render(self, balances: Dict[str, Optional[int]]) -> Table:
        table = Table(title=f"Wallet Balance ({self.chain.name})")
        table.add_column("#", justify="right")
        table.add_column("Wallet")
        table.add_column(self.chain.symbol, justify="right")
        table.add_column("Ready")
        for idx, (addr, bal) in enumerate(balances.items(), start=1):
            if bal is None:
                table.add_row(str(idx), addr, "N/A", "[yellow]?[/yellow]")
                continue
            ok = bal >= self.settings.min_balance_wei
            table.add_row(str(idx), addr, f"{Web3.from_wei(bal, 'ether'):.8f}",
                          "[green]yes[/green]" if ok else "[red]low[/red]")
        return table

    def run(self):
        _, self.wallet_addresses = self.web3h.load_privatekeys_file(self.wallet_file)
        if not self.wallet_addresses:
            self.console.log(f"[bold red]No wallets loaded from {self.wallet_file}.[/bold red]")
            return {}
        self.console.rule("[bold cyan]Fetching balances")
        balances = asyncio.run(self.collect_balances())
        self.console.print(self.render(balances))
        return balances


def main():
    chain_config = select_chain()
    if chain_config is None:
        print("No chain selected.")
        return
    app = BalanceChecker(chain_config)
    app.run()


if __name__ == "__main__":
    main()

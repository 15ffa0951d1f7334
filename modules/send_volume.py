import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import questionary

from engine.models import ChainEndpoint, EngineSettings, RunParameters
from engine.runner import accounts_from_keys, run_accounts
from utils.helper import Web3Helper, FileHelper, console, setup_logging

import config


def _positive_int(text: str):
    return True if text.strip().isdecimal() and int(text) > 0 else "Enter a positive integer"


def _non_negative_int(text: str):
    return True if text.strip().isdecimal() else "Enter an integer >= 0"


def _non_negative_decimal(text: str):
    try:
        return True if Decimal(text.strip()) >= 0 else "Enter a number >= 0"
    except InvalidOperation:
        return "Enter a number, e.g. 0.1"


def select_chain():
    network_type = questionary.select("Select network type:", choices=["Mainnet", "Testnet"]).ask()
    if network_type is None:
        return None
    chains = config.TESTNET_CHAINS if network_type == "Testnet" else config.MAINNET_CHAINS
    choices = [questionary.Choice(title=f"{c.CHAIN_NAME} ({c.CHAIN_ID})", value=c) for c in chains]
    return questionary.select("Select chain:", choices=choices).ask()


class VolumeSender:
    """
    Sends tiny native transfers from every loaded wallet to throwaway
    addresses. Prompts are collected here; the engine does the rest.
    """

    def __init__(self, chain_config):
        self.console = console
        self.chain_config = chain_config
        self.chain = ChainEndpoint.from_config(chain_config)
        self.wallet_file = config.WALLET_FILE

        setup_logging(console_obj=self.console)
        self.logger = logging.getLogger(__name__)

        self.settings = EngineSettings.from_config()
        self.web3h = Web3Helper(self.chain, console=self.console, nonce_block_tag=self.settings.nonce_block_tag)

        try:
            FileHelper.ensure_placeholder(self.wallet_file, 'wallets')
        except OSError as e:
            self.logger.warning("[yellow]Could not ensure placeholder wallets file %s: %s[/yellow]", self.wallet_file, e)

        self.wallet_private_keys: list[str] = []
        self.sender_addresses: list[str] = []

    def load_private_keys(self) -> None:
        keys, addrs = self.web3h.load_privatekeys_file(self.wallet_file)
        self.wallet_private_keys = keys
        self.sender_addresses = addrs

    def ask_run_parameters(self) -> Optional[RunParameters]:
        count = questionary.text(
            "Enter the number of transactions you want to send for each address:",
            validate=_positive_int,
        ).ask()
        if count is None:
            return None

        manual_gwei = None
        if questionary.confirm("Do you want to set gas price manually?", default=False).ask():
            raw = questionary.text("Enter gas price in Gwei (e.g., 0.1):", validate=_non_negative_decimal).ask()
            if raw is None:
                return None
            manual_gwei = Decimal(raw.strip())
            self.logger.info("[green]Setting gas price to %s Gwei (+ %d%% buffer)[/green]",
                             manual_gwei, self.settings.gas_buffer_percent)

        gas_limit = config.DEFAULT_GAS_LIMIT
        if questionary.confirm("Do you want to set gas limit manually?", default=False).ask():
            raw = questionary.text(f"Enter gas limit (default is {config.DEFAULT_GAS_LIMIT}):",
                                   default=str(config.DEFAULT_GAS_LIMIT), validate=_non_negative_int).ask()
            if raw is None:
                return None
            gas_limit = int(raw.strip())
            self.logger.info("[green]Setting gas limit to %d[/green]", gas_limit)

        return RunParameters(int(count), manual_gwei, gas_limit)

    def run(self):
        self.console.rule(f"[bold cyan]{self.chain.name}[/bold cyan]")
        self.console.print(f"[green]RPC URL:[/green] {self.web3h.provider.current_url}")
        self.console.print(f"[green]Chain ID:[/green] {self.chain.chain_id}")

        self.load_private_keys()
        if not self.wallet_private_keys:
            self.console.log(f"[bold red]No private keys loaded from {self.wallet_file}. Exiting.[/bold red]")
            return
        self.console.log(f"[green]Loaded {len(self.sender_addresses)} wallet(s).")

        params = self.ask_run_parameters()
        if params is None:
            self.console.log("[yellow]Cancelled by user[/yellow]")
            return

        accounts = accounts_from_keys(self.wallet_private_keys)
        self.console.rule("[bold cyan]Sending[/bold cyan]")
        return asyncio.run(run_accounts(self.web3h, accounts, self.chain, params, self.settings))


def main():
    chain_config = select_chain()
    if chain_config is None:
        print("No chain selected.")
        return
    app = VolumeSender(chain_config)
    app.run()


if __name__ == "__main__":
    main()

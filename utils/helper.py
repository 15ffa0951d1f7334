import os
import re
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound, Web3Exception
from eth_account import Account

from .rpc_provider import RotatingAsyncHTTPProvider
from .errors import classify_submission_error
import config


console = Console()


def setup_logging(level: Optional[str] = None, console_obj: Optional[Console] = None) -> None:
    """Route stdlib logging through rich. Markup is on so log lines can be coloured."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console_obj or console, markup=True, show_path=False)],
        force=True,
    )
    # web3/urllib3 chatter drowns the status lines
    for noisy in ("web3", "urllib3", "aiohttp"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class Web3Helper:
    """
    Async Web3 wiring for one chain: RPC rotation, balance / gas / nonce
    queries, legacy tx submission and receipt lookup, plus private key loading.

    This class owns a rotating provider and an AsyncWeb3 instance. It is the
    only place that looks at node error text; callers receive
    ``SubmissionError`` / ``FeeCollisionError`` instead.
    """

    def __init__(self, chain, console=None, nonce_block_tag: str = config.NONCE_BLOCK_TAG):
        self.console = console
        self.chain = chain
        self.nonce_block_tag = nonce_block_tag

        self.rpc_urls: List[str] = self._build_rpc_urls(chain)
        self.provider = RotatingAsyncHTTPProvider(self.rpc_urls)
        self.w3 = AsyncWeb3(self.provider)

        self.private_keys: list[str] = []
        self.pk_addresses: list[str] = []

    # ---------- RPC ----------
    def _build_rpc_urls(self, chain) -> List[str]:
        urls: List[str] = []
        if config.ALCHEMY_API_KEY:
            alchemy = getattr(chain, "alchemy_rpc_url", None)
            if alchemy:
                urls.append(str(alchemy))
        if getattr(chain, "rpc_url", None):
            urls.append(str(chain.rpc_url))
        urls.extend(getattr(chain, "extra_rpc_urls", ()) or ())

        extras_raw = os.getenv('EXTRA_RPC_URLS', '')
        urls.extend([u.strip() for u in extras_raw.split(',') if u.strip()])

        dedup = list(dict.fromkeys(u for u in urls if u))
        if not dedup:
            raise RuntimeError('No RPC URLs configured. Set RPC_URL on the chain or EXTRA_RPC_URLS in .env')
        return dedup

    # ---------- Queries ----------
    async def get_balance(self, address: str) -> int:
        return int(await self.w3.eth.get_balance(Web3.to_checksum_address(address)))

    async def gas_price(self) -> int:
        return int(await self.w3.eth.gas_price)

    async def get_nonce(self, address: str) -> int:
        return int(await self.w3.eth.get_transaction_count(
            Web3.to_checksum_address(address), self.nonce_block_tag))

    async def get_receipt(self, tx_hash: str):
        """Receipt for ``tx_hash`` or None while the node has not mined it."""
        try:
            return await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    # ---------- Tx lifecycle ----------
    async def send_transaction(self, account, pending) -> str:
        """
        Sign ``pending`` with ``account`` and broadcast it. Node rejections are
        re-raised as SubmissionError (FeeCollisionError for replacement
        underpriced); transport errors propagate unchanged.
        """
        signed = account.sign_transaction(pending.to_tx_params())
        try:
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError) as e:
            raise classify_submission_error(e) from e
        return Web3.to_hex(tx_hash)

    def explorer_tx_url(self, tx_hash: str) -> str:
        return self.chain.tx_url(tx_hash)

    # ---------- Private keys ----------
    def _parse_privatekeys_blob(self, blob: str) -> list[str]:
        """Split on commas/whitespace, strip comments and 0x, keep 64-hex keys once each."""
        keys: list[str] = []
        seen = set()
        for line in (blob or "").splitlines():
            line = FileHelper._strip_comment(line)
            for tok in re.split(r"[,\s]+", line):
                tok = tok.strip().strip('"').strip("'")
                if tok.lower().startswith("0x"):
                    tok = tok[2:]
                if not re.fullmatch(r"[0-9a-fA-F]{64}", tok or ""):
                    continue
                k = tok.lower()
                if k not in seen:
                    seen.add(k)
                    keys.append(k)
        return keys

    def _derive_addresses_from_private_keys(self, keys: list[str]) -> tuple[list[str], list[str]]:
        filtered_keys: list[str] = []
        derived: list[str] = []
        for k in keys:
            try:
                addr = Account.from_key(k).address
                filtered_keys.append(k)
                derived.append(Web3.to_checksum_address(addr))
            except Exception as e:
                masked = f"{k[:6]}...{k[-4:]}" if len(k) > 12 else "****"
                logging.getLogger(__name__).warning(
                    "[yellow]Skipping invalid private key: %s (%s)[/yellow]", masked, e)
        return filtered_keys, derived

    def load_privatekeys_file(self, key_file: str) -> tuple[list[str], list[str]]:
        try:
            with open(key_file, "r", encoding="utf-8-sig") as f:
                blob = f.read()
        except OSError as e:
            logging.getLogger(__name__).error(
                "[red]Failed to read private keys file %s: %s[/red]", key_file, e)
            self.private_keys = []
            self.pk_addresses = []
            return ([], [])

        keys, addrs = self._derive_addresses_from_private_keys(self._parse_privatekeys_blob(blob))
        self.private_keys = keys
        self.pk_addresses = addrs
        return (keys, addrs)


class FileHelper:
    """
    Basic file helpers to ensure placeholders and load simple lists.
    """

    TEMPLATES = {
        'wallets': "# Enter your private keys here (one per line). Supports 0x-prefixed or raw hex.\n",
    }

    @staticmethod
    def ensure_placeholder(file_path: str, kind: str) -> None:
        if not os.path.exists(file_path):
            parent = os.path.dirname(file_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(FileHelper.TEMPLATES.get(kind, ''))

    @staticmethod
    def _strip_comment(line: str) -> str:
        s = line.strip()
        if not s or s.startswith('#'):
            return ''
        if '#' in s:
            s = s.split('#', 1)[0].strip()
        return s

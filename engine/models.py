from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from web3 import Web3

import config
from utils.retry import RetryPolicy


@dataclass(frozen=True)
class ChainEndpoint:
    name: str
    rpc_url: str
    chain_id: int
    symbol: str
    explorer: str
    extra_rpc_urls: tuple = ()
    alchemy_rpc_url: str = ""

    @classmethod
    def from_config(cls, chain_config, extra_rpc_urls=()) -> "ChainEndpoint":
        return cls(
            name=str(getattr(chain_config, "CHAIN_NAME", chain_config.__name__)),
            rpc_url=str(chain_config.RPC_URL),
            chain_id=int(chain_config.CHAIN_ID),
            symbol=str(getattr(chain_config, "SYMBOL", "ETH")),
            explorer=str(getattr(chain_config, "EXPLORER", "")).rstrip("/"),
            extra_rpc_urls=tuple(extra_rpc_urls),
            alchemy_rpc_url=str(getattr(chain_config, "ALCHEMY_RPC_URL", "") or ""),
        )

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer}/tx/{tx_hash}"


@dataclass(frozen=True)
class RunParameters:
    transactions_per_account: int
    manual_gas_gwei: Optional[Decimal] = None
    gas_limit: int = config.DEFAULT_GAS_LIMIT

    def __post_init__(self):
        if self.transactions_per_account < 1:
            raise ValueError("transactions_per_account must be a positive integer")
        if self.manual_gas_gwei is not None and Decimal(str(self.manual_gas_gwei)) < 0:
            raise ValueError("manual gas price must be >= 0")
        if self.gas_limit < 0:
            raise ValueError("gas_limit must be >= 0")


@dataclass(frozen=True)
class PendingTransaction:
    sender: str
    receiver: str
    value: int          # wei
    gas_price: int      # wei
    gas_limit: int
    nonce: int
    chain_id: int

    def to_tx_params(self) -> dict:
        # legacy (type 0) tx: gasPrice, no EIP-1559 fields
        return {
            "to": self.receiver,
            "value": int(self.value),
            "gas": int(self.gas_limit),
            "gasPrice": int(self.gas_price),
            "nonce": int(self.nonce),
            "chainId": int(self.chain_id),
        }


class OutcomeStatus(Enum):
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    STILL_PENDING = "still_pending"
    SUBMISSION_FAILED = "submission_failed"


@dataclass(frozen=True)
class TransactionOutcome:
    status: OutcomeStatus
    tx_hash: Optional[str] = None
    transaction: Optional[PendingTransaction] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    success: Optional[bool] = None
    reason: Optional[str] = None

    @classmethod
    def submitted(cls, tx_hash: str, transaction: PendingTransaction) -> "TransactionOutcome":
        return cls(OutcomeStatus.SUBMITTED, tx_hash=tx_hash, transaction=transaction)

    @classmethod
    def confirmed(cls, tx_hash: str, block_number: int, gas_used: int, success: bool) -> "TransactionOutcome":
        return cls(OutcomeStatus.CONFIRMED, tx_hash=tx_hash, block_number=block_number,
                   gas_used=gas_used, success=success)

    @classmethod
    def still_pending(cls, tx_hash: str) -> "TransactionOutcome":
        return cls(OutcomeStatus.STILL_PENDING, tx_hash=tx_hash)

    @classmethod
    def submission_failed(cls, reason: str) -> "TransactionOutcome":
        return cls(OutcomeStatus.SUBMISSION_FAILED, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.status in (OutcomeStatus.CONFIRMED, OutcomeStatus.SUBMISSION_FAILED)


@dataclass
class AccountReport:
    address: str
    skipped: bool = False
    skip_reason: Optional[str] = None
    outcomes: List[TransactionOutcome] = field(default_factory=list)

    def count(self, status: OutcomeStatus, success: Optional[bool] = None) -> int:
        return sum(
            1 for o in self.outcomes
            if o.status is status and (success is None or o.success is success)
        )


@dataclass(frozen=True)
class EngineSettings:
    """Tunables shared by every engine component for one run."""
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    gas_buffer_percent: int = config.GAS_BUFFER_PERCENT
    fee_bump_percent: int = config.FEE_BUMP_PERCENT
    fallback_gas_price_wei: int = Web3.to_wei(Decimal(config.FALLBACK_GAS_PRICE_GWEI), "gwei")
    min_balance_wei: int = Web3.to_wei(Decimal(config.MIN_BALANCE_ETHER), "ether")
    balance_poll_interval: float = config.BALANCE_POLL_INTERVAL
    confirm_delay: float = config.CONFIRM_DELAY
    amount_min_ether: Decimal = Decimal(config.AMOUNT_MIN_ETHER)
    amount_max_ether: Decimal = Decimal(config.AMOUNT_MAX_ETHER)
    nonce_block_tag: str = config.NONCE_BLOCK_TAG

    @classmethod
    def from_config(cls) -> "EngineSettings":
        return cls(retry=RetryPolicy(config.MAX_RETRIES, config.RETRY_DELAY))

    @classmethod
    def immediate(cls, **overrides) -> "EngineSettings":
        """Same thresholds, every delay zeroed. Handy for dry runs and tests."""
        base = dict(retry=RetryPolicy(config.MAX_RETRIES, 0), balance_poll_interval=0, confirm_delay=0)
        base.update(overrides)
        return cls(**base)

# config.py
import os
from dotenv import load_dotenv
from pathlib import Path

load_dotenv()

BASE_PATH = Path(__file__).resolve().parent / "resources"
MODULE_PATH = str(Path(__file__).resolve().parent / "modules")

WALLET_FILE = os.getenv("WALLET_FILE", os.path.join(BASE_PATH, "wallet.txt"))  # private keys

ALCHEMY_API_KEY = os.getenv('ALCHEMY_API_KEY')
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ---------- Dispatch engine ----------
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
RETRY_DELAY = float(os.getenv("RETRY_DELAY", "3"))            # seconds between attempts
GAS_BUFFER_PERCENT = int(os.getenv("GAS_BUFFER_PERCENT", "5"))
FEE_BUMP_PERCENT = int(os.getenv("FEE_BUMP_PERCENT", "20"))   # replacement-underpriced resend
FALLBACK_GAS_PRICE_GWEI = os.getenv("FALLBACK_GAS_PRICE_GWEI", "0.1")
MIN_BALANCE_ETHER = os.getenv("MIN_BALANCE_ETHER", "0.0001")
BALANCE_POLL_INTERVAL = float(os.getenv("BALANCE_POLL_INTERVAL", "5"))
CONFIRM_DELAY = float(os.getenv("CONFIRM_DELAY", "15"))
DEFAULT_GAS_LIMIT = int(os.getenv("DEFAULT_GAS_LIMIT", "21000"))
AMOUNT_MIN_ETHER = os.getenv("AMOUNT_MIN_ETHER", "0.00000001")
AMOUNT_MAX_ETHER = os.getenv("AMOUNT_MAX_ETHER", "0.0000001")
NONCE_BLOCK_TAG = os.getenv("NONCE_BLOCK_TAG", "pending")


# ---------- Mainnets ----------
class ETHER :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://eth-mainnet.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://ethereum-rpc.publicnode.com"

    CHAIN_ID = 1
    CHAIN_NAME = "ethereum"
    SYMBOL = "ETH"
    EXPLORER = "https://etherscan.io"

class Base :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://base-mainnet.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://mainnet.base.org"

    CHAIN_ID = 8453
    CHAIN_NAME = "base"
    SYMBOL = "ETH"
    EXPLORER = "https://basescan.org"

class OP :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://opt-mainnet.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://mainnet.optimism.io"

    CHAIN_ID = 10
    CHAIN_NAME = "optimism"
    SYMBOL = "ETH"
    EXPLORER = "https://optimistic.etherscan.io"

class ARB :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://arb-mainnet.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://arb1.arbitrum.io/rpc"

    CHAIN_ID = 42161
    CHAIN_NAME = "arbitrum"
    SYMBOL = "ETH"
    EXPLORER = "https://arbiscan.io"

class Linea :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://linea-mainnet.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://rpc.linea.build"

    CHAIN_ID = 59144
    CHAIN_NAME = "linea"
    SYMBOL = "ETH"
    EXPLORER = "https://lineascan.build"

class POLYGON :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://polygon-mainnet.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://polygon-rpc.com"

    CHAIN_ID = 137
    CHAIN_NAME = "polygon"
    SYMBOL = "POL"
    EXPLORER = "https://polygonscan.com"


# ---------- Testnets ----------
class Sepolia :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://eth-sepolia.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://ethereum-sepolia-rpc.publicnode.com"

    CHAIN_ID = 11155111
    CHAIN_NAME = "sepolia"
    SYMBOL = "ETH"
    EXPLORER = "https://sepolia.etherscan.io"

class BaseSepolia :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://base-sepolia.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://sepolia.base.org"

    CHAIN_ID = 84532
    CHAIN_NAME = "base-sepolia"
    SYMBOL = "ETH"
    EXPLORER = "https://sepolia.basescan.org"

class OPSepolia :
    ALCHEMY_API_KEY = ALCHEMY_API_KEY
    ALCHEMY_RPC_URL = f"https://opt-sepolia.g.alchemy.com/v2/{ALCHEMY_API_KEY}"
    RPC_URL = "https://sepolia.optimism.io"

    CHAIN_ID = 11155420
    CHAIN_NAME = "optimism-sepolia"
    SYMBOL = "ETH"
    EXPLORER = "https://sepolia-optimism.etherscan.io"


MAINNET_CHAINS = [ETHER, Base, OP, ARB, Linea, POLYGON]
TESTNET_CHAINS = [Sepolia, BaseSepolia, OPSepolia]

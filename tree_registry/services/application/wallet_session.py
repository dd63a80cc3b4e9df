"""
Application service: wallet session lifecycle and balance display.
"""
import asyncio
import logging
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Callable, Optional, Union

from tree_registry.config import settings
from tree_registry.infrastructure.chain_constants import ChainConstants
from tree_registry.infrastructure.tree_contract import TreeContract
from tree_registry.infrastructure.wallet_provider import (
    NoAccountError,
    Web3WalletProvider,
    WalletProviderError,
    get_wallet_provider,
)

logger = logging.getLogger(__name__)

ContractFactory = Callable[[Web3WalletProvider], TreeContract]


def format_balance(
    raw: Union[int, str],
    decimals: int = ChainConstants.DEFAULT_DECIMALS,
    places: int = ChainConstants.BALANCE_DISPLAY_PLACES,
) -> str:
    """
    Convert a base-unit amount into a display string.

    Args:
        raw: Amount in base units
        decimals: Token decimals
        places: Decimal places shown

    Returns:
        Amount rounded half-up, e.g. "1234560000000000000" -> "1.23"
    """
    with localcontext() as ctx:
        ctx.prec = 100
        amount = Decimal(int(raw)).scaleb(-decimals)
        return str(amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def build_tree_contract(provider: Web3WalletProvider) -> TreeContract:
    """Contract factory bound to the configured address and ABI."""
    return TreeContract.from_abi_file(
        provider,
        address=settings.contract_address,
        abi_path=settings.contract_abi_path,
        mint_signature=settings.mint_signature,
    )


class WalletSession:
    """
    Authorized connection to a wallet provider.

    Holds the active account and the Tree contract handle. Initialization
    succeeds at most once; later ``connect()`` calls are no-ops.
    """

    def __init__(
        self,
        provider: Optional[Web3WalletProvider],
        contract_factory: Optional[ContractFactory] = None,
        token_address: Optional[str] = None,
        decimals: int = ChainConstants.DEFAULT_DECIMALS,
    ):
        """
        Initialize an unconnected session.

        Args:
            provider: Wallet provider, or None when no provider is available
            contract_factory: Builds the contract handle once connected
            token_address: ERC-20 token shown as balance (None = native balance)
            decimals: Decimals of the balance token
        """
        self.provider = provider
        self.contract_factory = contract_factory or build_tree_contract
        self.token_address = token_address
        self.decimals = decimals

        self.account: Optional[str] = None
        self.contract: Optional[TreeContract] = None
        self.balance: Optional[str] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def connect(self) -> bool:
        """
        Authorize against the provider and bind the contract.

        Failures are logged and leave the session uninitialized.

        Returns:
            True if the session is initialized after the call
        """
        if self.provider is None:
            logger.warning("No wallet provider available. Configure RPC_URL to connect a Celo wallet.")
            return False

        async with self._lock:
            if self._initialized:
                logger.info(f"Wallet session already initialized for {self.account}")
                return True

            try:
                await self.provider.enable()
                accounts = await self.provider.get_accounts()
                if not accounts:
                    raise NoAccountError("No account found")
                contract = self.contract_factory(self.provider)
            except (WalletProviderError, OSError, ValueError) as e:
                logger.error(f"Wallet connection failed: {e}")
                return False

            self.account = accounts[0]
            self.contract = contract
            self._initialized = True
            logger.info(f"Wallet session initialized for account {self.account}")
            return True

    async def get_balance(self) -> Optional[str]:
        """
        Refresh the displayed balance of the active account.

        Returns:
            Two-decimal balance string, or None if it could not be read
        """
        if not self._initialized:
            logger.warning("Cannot read balance: wallet session is not initialized")
            return None

        try:
            if self.token_address:
                raw = await self.provider.get_token_balance(self.token_address, self.account)
            else:
                raw = await self.provider.get_native_balance(self.account)
        except WalletProviderError as e:
            logger.error(f"Balance query failed: {e}")
            return None

        self.balance = format_balance(raw, self.decimals)
        logger.debug(f"Balance of {self.account}: {self.balance}")
        return self.balance


# Singleton instance
_wallet_session: Optional[WalletSession] = None


def get_wallet_session() -> WalletSession:
    """
    Get or create the process-wide wallet session.

    Returns:
        WalletSession instance
    """
    global _wallet_session
    if _wallet_session is None:
        _wallet_session = WalletSession(
            provider=get_wallet_provider(),
            token_address=settings.balance_token_address,
            decimals=settings.token_decimals,
        )
    return _wallet_session

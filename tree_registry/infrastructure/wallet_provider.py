"""
Infrastructure layer: wallet provider over a Celo JSON-RPC endpoint.
"""
import asyncio
import logging
from typing import Any, List, Optional

from aiohttp import ClientError, ClientTimeout
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from tree_registry.config import settings
from tree_registry.infrastructure.chain_constants import (
    ERC20_BALANCE_ABI,
    ChainConstants,
)

logger = logging.getLogger(__name__)

# Errors raised by web3 and its HTTP transport for a failed chain call.
CHAIN_ERRORS = (Web3Exception, ClientError, asyncio.TimeoutError)


class WalletProviderError(Exception):
    """Base exception for wallet provider and contract errors."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class WalletAuthorizationError(WalletProviderError):
    """The provider refused or could not grant access to the chain."""


class NoAccountError(WalletProviderError):
    """The provider authorized the session but exposes no account."""


class Web3WalletProvider:
    """
    Wallet provider backed by web3's async HTTP provider.

    Transactions are signed locally when a private key is configured,
    otherwise they are sent through the node's managed accounts.
    """

    def __init__(
        self,
        rpc_url: str,
        private_key: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the provider.

        Args:
            rpc_url: JSON-RPC endpoint
            private_key: Optional key used to sign transactions locally
            timeout: HTTP timeout in seconds
        """
        self.rpc_url = rpc_url
        self.web3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": ClientTimeout(total=timeout)},
                exception_retry_configuration=None,
            )
        )
        # Celo blocks carry extraData longer than the Ethereum limit
        self.web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        self._account = self.web3.eth.account.from_key(private_key) if private_key else None

    async def close(self):
        """Close the underlying HTTP session."""
        await self.web3.provider.disconnect()

    async def enable(self) -> None:
        """
        Request access to the chain.

        Raises:
            WalletAuthorizationError: If the endpoint is unreachable
        """
        try:
            connected = await self.web3.is_connected()
        except CHAIN_ERRORS as e:
            raise WalletAuthorizationError(f"Wallet provider error: {e}")
        if not connected:
            raise WalletAuthorizationError(
                f"Wallet provider at {self.rpc_url} is not reachable"
            )

    async def get_accounts(self) -> List[str]:
        """
        List the accounts this provider can sign for.

        Returns:
            Checksummed account addresses, local signer first
        """
        if self._account is not None:
            return [self._account.address]
        try:
            return list(await self.web3.eth.accounts)
        except CHAIN_ERRORS as e:
            raise WalletProviderError(f"Failed to list accounts: {e}")

    async def get_native_balance(self, account: str) -> int:
        """Native CELO balance of an account in base units."""
        try:
            return await self.web3.eth.get_balance(account)
        except CHAIN_ERRORS as e:
            raise WalletProviderError(f"Failed to read balance of {account}: {e}")

    async def get_token_balance(self, token_address: str, account: str) -> int:
        """ERC-20 balance of an account in base units."""
        token = self.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token_address),
            abi=ERC20_BALANCE_ABI,
        )
        try:
            return await token.functions.balanceOf(account).call()
        except CHAIN_ERRORS as e:
            raise WalletProviderError(f"Failed to read token balance of {account}: {e}")

    async def send_transaction(self, function_call: Any, sender: str) -> Any:
        """
        Send a contract transaction and wait for its receipt.

        Args:
            function_call: Bound contract function (``contract.functions.x(...)``)
            sender: Address sending the transaction

        Returns:
            Transaction receipt

        Raises:
            WalletProviderError: If sending fails or the transaction reverts
        """
        try:
            if self._account is not None:
                nonce = await self.web3.eth.get_transaction_count(sender)
                transaction = await function_call.build_transaction({
                    "from": sender,
                    "nonce": nonce,
                })
                signed = self._account.sign_transaction(transaction)
                tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = await function_call.transact({"from": sender})

            logger.info(f"Transaction sent: {AsyncWeb3.to_hex(tx_hash)}")
            receipt = await self.web3.eth.wait_for_transaction_receipt(tx_hash)
        except CHAIN_ERRORS as e:
            raise WalletProviderError(f"Transaction failed: {e}")

        if receipt["status"] == ChainConstants.RECEIPT_STATUS_FAILED:
            raise WalletProviderError(
                f"Transaction {AsyncWeb3.to_hex(tx_hash)} reverted"
            )
        return receipt


# Singleton instance
_wallet_provider: Optional[Web3WalletProvider] = None


def get_wallet_provider() -> Optional[Web3WalletProvider]:
    """
    Get or create the singleton wallet provider.

    Returns:
        Web3WalletProvider instance, or None when no RPC endpoint is configured
    """
    global _wallet_provider
    if _wallet_provider is None and settings.rpc_url:
        _wallet_provider = Web3WalletProvider(
            rpc_url=settings.rpc_url,
            private_key=settings.wallet_private_key,
            timeout=settings.rpc_timeout,
        )
    return _wallet_provider

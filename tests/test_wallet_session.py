"""
Unit tests for the wallet session.

Tests cover:
- Idempotent connection
- Missing provider and missing accounts
- Authorization and binding failures
- Balance conversion and display
"""
import asyncio
import pytest
from unittest.mock import MagicMock

from tree_registry.infrastructure.tree_contract import ContractBindingError
from tree_registry.infrastructure.wallet_provider import (
    WalletAuthorizationError,
    WalletProviderError,
)
from tree_registry.services.application.wallet_session import (
    WalletSession,
    format_balance,
)

from conftest import ACCOUNT, TOKEN_ADDRESS


# ============================================================
# Connection Tests
# ============================================================

class TestConnect:
    """Tests for session initialization."""

    @pytest.mark.asyncio
    async def test_connect_initializes_session(self, session, mock_contract):
        """First connect should record the first account and bind the contract."""
        connected = await session.connect()

        assert connected is True
        assert session.is_initialized
        assert session.account == ACCOUNT
        assert session.contract is mock_contract

    @pytest.mark.asyncio
    @pytest.mark.parametrize("calls", [1, 2, 5])
    async def test_connect_is_idempotent(self, session, mock_provider, calls):
        """N sequential connects should authorize exactly once."""
        for _ in range(calls):
            assert await session.connect() is True

        mock_provider.enable.assert_awaited_once()
        mock_provider.get_accounts.assert_awaited_once()
        assert session.account == ACCOUNT

    @pytest.mark.asyncio
    async def test_concurrent_connects_authorize_once(self, session, mock_provider):
        """Overlapping connects should not run authorization twice."""
        results = await asyncio.gather(*(session.connect() for _ in range(4)))

        assert all(results)
        mock_provider.enable.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_connect_keeps_account(self, session, mock_provider):
        """A later connect must not reset the active account."""
        await session.connect()
        mock_provider.get_accounts.return_value = ["0x0000000000000000000000000000000000000001"]

        await session.connect()

        assert session.account == ACCOUNT

    @pytest.mark.asyncio
    async def test_no_provider_leaves_session_uninitialized(self):
        """Without a provider, connect reports and returns without raising."""
        factory = MagicMock()
        session = WalletSession(provider=None, contract_factory=factory)

        connected = await session.connect()

        assert connected is False
        assert not session.is_initialized
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_zero_accounts_leaves_session_uninitialized(self, mock_provider):
        """An empty account list must not initialize or bind the contract."""
        mock_provider.get_accounts.return_value = []
        factory = MagicMock()
        session = WalletSession(provider=mock_provider, contract_factory=factory)

        connected = await session.connect()

        assert connected is False
        assert not session.is_initialized
        assert session.account is None
        assert session.contract is None
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_authorization_failure_is_not_raised(self, session, mock_provider):
        """A refused authorization is logged, not propagated."""
        mock_provider.enable.side_effect = WalletAuthorizationError("unreachable")

        connected = await session.connect()

        assert connected is False
        assert not session.is_initialized
        mock_provider.get_accounts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_connect_can_be_retried(self, session, mock_provider):
        """After a failure, a later connect may still succeed."""
        mock_provider.enable.side_effect = [WalletAuthorizationError("unreachable"), None]

        assert await session.connect() is False
        assert await session.connect() is True
        assert session.is_initialized

    @pytest.mark.asyncio
    async def test_binding_failure_leaves_session_uninitialized(self, mock_provider):
        """An ABI that does not match the mint signature blocks initialization."""
        def factory(provider):
            raise ContractBindingError("Contract ABI has no mint function")

        session = WalletSession(provider=mock_provider, contract_factory=factory)

        assert await session.connect() is False
        assert session.contract is None
        assert session.account is None


# ============================================================
# Balance Tests
# ============================================================

class TestBalance:
    """Tests for balance display."""

    @pytest.mark.asyncio
    async def test_token_balance_is_formatted(self, session, mock_provider):
        """Token balance should be shown with two decimals."""
        await session.connect()

        balance = await session.get_balance()

        assert balance == "1.23"
        assert session.balance == "1.23"
        mock_provider.get_token_balance.assert_awaited_once_with(TOKEN_ADDRESS, ACCOUNT)

    @pytest.mark.asyncio
    async def test_native_balance_without_token(self, mock_provider, mock_contract):
        """Without a token address the native balance is shown."""
        session = WalletSession(
            provider=mock_provider,
            contract_factory=lambda provider: mock_contract,
            token_address=None,
        )
        await session.connect()

        assert await session.get_balance() == "5.00"
        mock_provider.get_token_balance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_balance_failure_keeps_previous_value(self, session, mock_provider):
        """A failed balance read returns None and keeps the last display."""
        await session.connect()
        await session.get_balance()
        mock_provider.get_token_balance.side_effect = WalletProviderError("timeout")

        assert await session.get_balance() is None
        assert session.balance == "1.23"

    @pytest.mark.asyncio
    async def test_balance_requires_initialized_session(self, session, mock_provider):
        """Balance is not queried before connect."""
        assert await session.get_balance() is None
        mock_provider.get_token_balance.assert_not_awaited()


class TestFormatBalance:
    """Tests for base unit conversion."""

    @pytest.mark.parametrize("raw,expected", [
        ("1234560000000000000", "1.23"),
        (1234560000000000000, "1.23"),
        (0, "0.00"),
        ("1235000000000000000", "1.24"),
        ("1234999999999999999", "1.23"),
        (10**18 * 42, "42.00"),
        (5 * 10**15, "0.01"),
        (4 * 10**15, "0.00"),
    ])
    def test_eighteen_decimals(self, raw, expected):
        """Base units divided by 10^18, rounded half-up to two places."""
        assert format_balance(raw) == expected

    def test_custom_decimals(self):
        """Tokens with other decimals are converted accordingly."""
        assert format_balance(2500000, decimals=6) == "2.50"

    def test_large_balance_keeps_precision(self):
        """Very large balances are not rounded in the integer part."""
        assert format_balance(123456789012345678901234567890 * 10**18) == (
            "123456789012345678901234567890.00"
        )

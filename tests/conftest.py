"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample tree records
- Mock wallet provider and Tree contract
- Wallet session and registration workflow wired to the mocks
- FastAPI test client
"""
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from tree_registry.main import app
from tree_registry.api.rate_limit import limiter
from tree_registry.domain.models import TreeRecord, TreeSubmission
from tree_registry.infrastructure.tree_contract import TreeContract
from tree_registry.infrastructure.wallet_provider import Web3WalletProvider
from tree_registry.services.application.registration_workflow import (
    RegistrationWorkflow,
    get_registration_workflow,
)
from tree_registry.services.application.wallet_session import WalletSession


ACCOUNT = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
TOKEN_ADDRESS = "0x874069Fa1Eb16D44d622F2e0Ca25eeA172369bC1"
CONTRACT_ADDRESS = "0x0cc968a21B00F76407F167b0d4D9EAE893FF9FbE"
TX_HASH = "0x" + "ab" * 32


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def sample_trees() -> list[TreeRecord]:
    """Three well-formed tree records, in token index order."""
    return [
        TreeRecord(
            species="Acacia",
            age="2",
            location="Nairobi",
            proof_of_plant="ipfs://plant-0",
            proof_of_life="ipfs://life-0",
        ),
        TreeRecord(
            species="Baobab",
            age="5",
            location="Dakar",
            proof_of_plant="ipfs://plant-1",
            proof_of_life="ipfs://life-1",
        ),
        TreeRecord(
            species="Mango",
            age="1",
            location="Accra",
            proof_of_plant="ipfs://plant-2",
            proof_of_life="ipfs://life-2",
        ),
    ]


@pytest.fixture
def new_tree() -> TreeSubmission:
    """A tree submitted through the mint form."""
    return TreeSubmission(
        species="Neem",
        age="3",
        location="Kano",
        proof_of_plant="ipfs://plant-new",
        proof_of_life="ipfs://life-new",
    )


# ============================================================
# Mock Chain Fixtures
# ============================================================

@pytest.fixture
def mock_provider():
    """Create a mock wallet provider exposing one account."""
    provider = AsyncMock(spec=Web3WalletProvider)
    provider.get_accounts.return_value = [ACCOUNT]
    provider.get_token_balance.return_value = 1234560000000000000
    provider.get_native_balance.return_value = 5 * 10**18
    return provider


@pytest.fixture
def mock_contract(sample_trees):
    """Create a mock Tree contract holding the sample trees."""
    contract = AsyncMock(spec=TreeContract)
    contract.address = CONTRACT_ADDRESS
    contract.get_total_minted_trees.return_value = len(sample_trees)
    contract.get_tree_info.side_effect = lambda index: sample_trees[index]
    contract.mint.return_value = {"transactionHash": TX_HASH, "status": 1}
    return contract


@pytest.fixture
def session(mock_provider, mock_contract) -> WalletSession:
    """Unconnected wallet session wired to the mocks."""
    return WalletSession(
        provider=mock_provider,
        contract_factory=lambda provider: mock_contract,
        token_address=TOKEN_ADDRESS,
    )


@pytest.fixture
def workflow(session) -> RegistrationWorkflow:
    """Registration workflow over the mocked session."""
    return RegistrationWorkflow(session=session, token_uri="https://ipfs")


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(workflow):
    """Synchronous test client with the workflow dependency overridden."""
    app.dependency_overrides[get_registration_workflow] = lambda: workflow
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        limiter.enabled = True
        app.dependency_overrides.clear()

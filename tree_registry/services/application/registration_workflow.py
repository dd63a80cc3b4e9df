"""
Application service: tree registration workflow.

Coordinates the wallet session, the Tree contract and the page view:
page-load initialization, mint submission and registry listing.
"""
import asyncio
import logging
from typing import List, Optional

from tree_registry.config import settings
from tree_registry.domain.models import (
    MintOutcome,
    MintState,
    RegistrySnapshot,
    TreeRecord,
)
from tree_registry.infrastructure.tree_contract import transaction_hash
from tree_registry.infrastructure.wallet_provider import WalletProviderError
from tree_registry.services.application.wallet_session import (
    WalletSession,
    get_wallet_session,
)
from tree_registry.services.domain.page_view import PageView, render_page

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Tree successfully minted! {account}"
FAILURE_MESSAGE = "An error occurred while minting the tree."


class MintInProgressError(Exception):
    """A mint was submitted while another one is still pending."""


class RegistrationWorkflow:
    """
    Orchestrates tree registration on top of a wallet session.

    The mint button moves Idle -> Minting -> (Success | Failure) -> Idle.
    Overlapping submissions are rejected while Minting.
    """

    def __init__(
        self,
        session: WalletSession,
        token_uri: str = "https://ipfs",
        batch_size: int = 1,
    ):
        """
        Initialize the workflow.

        Args:
            session: Wallet session providing account and contract handle
            token_uri: Token URI attached to minted trees
            batch_size: getTreeInfo reads issued concurrently per step
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.session = session
        self.token_uri = token_uri
        self.batch_size = batch_size

        self.state = MintState.IDLE
        self.last_outcome: Optional[MintOutcome] = None
        self.registry = RegistrySnapshot()

    async def initialize(self) -> bool:
        """
        Page-load sequence: connect the session, then show the balance.

        Returns:
            True if the session is initialized
        """
        connected = await self.session.connect()
        if connected:
            await self.session.get_balance()
        return connected

    async def mint_tree(self, tree: TreeRecord) -> MintOutcome:
        """
        Mint a token for a tree and refresh the registry on success.

        Args:
            tree: Submitted tree attributes

        Returns:
            MintOutcome in state SUCCESS or FAILURE

        Raises:
            MintInProgressError: If another mint is pending
        """
        if self.state is MintState.MINTING:
            raise MintInProgressError("A mint transaction is already in progress")

        self.state = MintState.MINTING
        try:
            outcome = await self._mint(tree)
        finally:
            self.state = MintState.IDLE

        self.last_outcome = outcome
        return outcome

    async def _mint(self, tree: TreeRecord) -> MintOutcome:
        if not self.session.is_initialized:
            logger.error("Cannot mint: wallet session is not initialized")
            return MintOutcome(state=MintState.FAILURE, message=FAILURE_MESSAGE)

        account = self.session.account
        logger.info(f"Minting tree '{tree.species}' at '{tree.location}' for {account}")

        try:
            receipt = await self.session.contract.mint(
                to=account,
                tree=tree,
                token_uri=self.token_uri,
            )
        except Exception as e:
            logger.exception(f"Minting failed for {account}: {e}")
            return MintOutcome(
                state=MintState.FAILURE,
                message=FAILURE_MESSAGE,
                account=account,
            )

        tx_hash = transaction_hash(receipt)
        logger.info(f"Tree minted for {account} (tx {tx_hash})")

        await self.load_trees()
        await self.session.get_balance()

        return MintOutcome(
            state=MintState.SUCCESS,
            message=SUCCESS_MESSAGE.format(account=account),
            account=account,
            transaction_hash=tx_hash,
        )

    async def load_trees(self) -> RegistrySnapshot:
        """
        Rebuild the registry from the contract.

        Records are fetched in index order, ``batch_size`` at a time.
        A failed read stops the listing; records fetched before it are kept.

        Returns:
            RegistrySnapshot
        """
        contract = self.session.contract
        if contract is None:
            logger.warning("Registry not loaded: wallet session is not initialized")
            self.registry = RegistrySnapshot(complete=False)
            return self.registry

        trees: List[TreeRecord] = []
        total = 0
        complete = True
        try:
            total = await contract.get_total_minted_trees()
            for start in range(0, total, self.batch_size):
                stop = min(start + self.batch_size, total)
                results = await asyncio.gather(
                    *(contract.get_tree_info(index) for index in range(start, stop)),
                    return_exceptions=True,
                )
                for result in results:
                    if isinstance(result, BaseException):
                        raise result
                    trees.append(result)
        except (WalletProviderError, ValueError) as e:
            logger.error(f"Registry load aborted after {len(trees)}/{total} trees: {e}")
            complete = False

        logger.info(f"Loaded {len(trees)} trees from registry")
        self.registry = RegistrySnapshot(trees=trees, total=total, complete=complete)
        return self.registry

    def view(self, notice: Optional[str] = None, show_outcome: bool = True) -> PageView:
        """Current page view. Fresh page loads pass show_outcome=False."""
        return render_page(
            mint_state=self.state,
            registry=self.registry,
            last_outcome=self.last_outcome if show_outcome else None,
            balance=self.session.balance,
            account=self.session.account,
            notice=notice,
        )


# Singleton instance
_workflow: Optional[RegistrationWorkflow] = None


def get_registration_workflow() -> RegistrationWorkflow:
    """
    Get or create the process-wide registration workflow.

    Returns:
        RegistrationWorkflow instance
    """
    global _workflow
    if _workflow is None:
        _workflow = RegistrationWorkflow(
            session=get_wallet_session(),
            token_uri=settings.token_uri,
            batch_size=settings.registry_batch_size,
        )
    return _workflow

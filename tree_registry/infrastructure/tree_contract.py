"""
Infrastructure layer: Tree NFT contract binding.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from web3 import AsyncWeb3

from tree_registry.domain.models import TreeRecord
from tree_registry.infrastructure.chain_constants import TreeContractMethods
from tree_registry.infrastructure.wallet_provider import (
    CHAIN_ERRORS,
    Web3WalletProvider,
    WalletProviderError,
)

logger = logging.getLogger(__name__)


class ContractBindingError(WalletProviderError):
    """The ABI does not match the configured contract interface."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class ContractCallError(WalletProviderError):
    """A read call on the contract failed."""


def load_abi(abi_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load a contract ABI from a JSON file.

    Accepts either a bare ABI list or a build artifact with an ``abi`` key.
    """
    with open(abi_path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("abi", [])
    if not isinstance(data, list):
        raise ContractBindingError(f"{abi_path} does not contain an ABI list")
    return data


def validate_mint_signature(abi: List[Dict[str, Any]], mint_signature: str) -> None:
    """
    Check that the ABI exposes ``mint`` with the arity of the chosen variant.

    Raises:
        ContractBindingError: If no matching ``mint`` function exists
    """
    try:
        expected = TreeContractMethods.mint_arity(mint_signature)
    except ValueError as e:
        raise ContractBindingError(str(e))

    arities = [
        len(entry.get("inputs", []))
        for entry in abi
        if entry.get("type") == "function" and entry.get("name") == TreeContractMethods.MINT
    ]
    if not arities:
        raise ContractBindingError("Contract ABI has no mint function")
    if expected not in arities:
        raise ContractBindingError(
            f"mint signature '{mint_signature}' expects {expected} inputs, "
            f"ABI declares {sorted(arities)}"
        )


def transaction_hash(receipt: Any) -> Optional[str]:
    """Hex transaction hash of a receipt, if present."""
    value = receipt.get("transactionHash") if receipt else None
    if value is None or isinstance(value, str):
        return value
    return AsyncWeb3.to_hex(value)


class TreeContract:
    """
    Address+ABI bound handle on the Tree NFT contract.

    Immutable after construction.
    """

    def __init__(
        self,
        contract: Any,
        provider: Web3WalletProvider,
        abi: List[Dict[str, Any]],
        mint_signature: str = "implicit",
    ):
        validate_mint_signature(abi, mint_signature)
        self.contract = contract
        self.provider = provider
        self.mint_signature = mint_signature

    @property
    def address(self) -> str:
        return self.contract.address

    @classmethod
    def from_abi_file(
        cls,
        provider: Web3WalletProvider,
        address: str,
        abi_path: Union[str, Path],
        mint_signature: str = "implicit",
    ) -> "TreeContract":
        """
        Bind the contract deployed at ``address`` using the ABI at ``abi_path``.

        Raises:
            ContractBindingError: If the ABI does not match ``mint_signature``
        """
        abi = load_abi(abi_path)
        contract = provider.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=abi,
        )
        logger.info(f"Bound Tree contract at {contract.address} (mint: {mint_signature})")
        return cls(contract, provider, abi, mint_signature)

    async def get_total_minted_trees(self) -> int:
        try:
            total = await self.contract.functions.getTotalMintedTrees().call()
        except CHAIN_ERRORS as e:
            raise ContractCallError(f"getTotalMintedTrees failed: {e}")
        return int(total)

    async def get_tree_info(self, index: int) -> TreeRecord:
        try:
            values = await self.contract.functions.getTreeInfo(index).call()
        except CHAIN_ERRORS as e:
            raise ContractCallError(f"getTreeInfo({index}) failed: {e}")
        return TreeRecord.from_contract_tuple(values)

    async def mint(self, to: str, tree: TreeRecord, token_uri: str) -> Any:
        """
        Mint a token recording ``tree`` for account ``to``.

        With the explicit signature the token id is the current total supply,
        read right before sending.

        Returns:
            Transaction receipt
        """
        args: List[Any] = [
            tree.species,
            tree.age,
            tree.location,
            tree.proof_of_plant,
            tree.proof_of_life,
            token_uri,
        ]
        if self.mint_signature == "explicit":
            token_id = await self.get_total_minted_trees()
            args.insert(0, token_id)
            logger.debug(f"Using client-side token id {token_id}")

        function_call = self.contract.functions.mint(to, *args)
        return await self.provider.send_transaction(function_call, sender=to)

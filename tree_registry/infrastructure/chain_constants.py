"""
Chain and contract constants.

This module contains the fixed contract-level values used by the wallet
provider and the Tree NFT binding. Centralizing these values makes it easy to
point the service at another deployment.
"""


class TreeContractMethods:
    """Tree NFT contract method names."""

    MINT = "mint"

    # Number of ABI inputs of `mint` for each supported signature variant.
    # implicit: mint(to, species, age, location, proofOfPlant, proofOfLife, tokenURI)
    # explicit: mint(to, tokenId, species, age, location, proofOfPlant, proofOfLife, tokenURI)
    MINT_ARITY = {
        "implicit": 7,
        "explicit": 8,
    }

    @classmethod
    def mint_arity(cls, mint_signature: str) -> int:
        """
        Get the expected number of `mint` inputs for a signature variant.

        Args:
            mint_signature: 'implicit' or 'explicit'

        Returns:
            Number of ABI inputs

        Raises:
            ValueError: If the variant is unknown
        """
        try:
            return cls.MINT_ARITY[mint_signature]
        except KeyError:
            raise ValueError(f"Unknown mint signature variant: {mint_signature!r}")


# Minimal ERC-20 surface needed for the balance display
ERC20_BALANCE_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class ChainConstants:
    """General chain configuration constants."""

    # Base units per display unit for 18-decimal tokens
    DEFAULT_DECIMALS = 18

    # Display precision of balances
    BALANCE_DISPLAY_PLACES = 2

    # Receipt status of a reverted transaction
    RECEIPT_STATUS_FAILED = 0

"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from tree_registry.domain.models import MintState, TreeRecord


class TreeListResponse(BaseModel):
    """Response model for the registry listing."""
    total: int = Field(
        description="Total number of minted trees reported by the contract"
    )
    complete: bool = Field(
        description="False when the listing stopped early on a failed read"
    )
    trees: List[TreeRecord] = Field(
        description="Tree records in token index order"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "total": 1,
                "complete": True,
                "trees": [
                    {
                        "species": "Acacia",
                        "age": "2",
                        "location": "Nairobi",
                        "proofOfPlant": "ipfs://bafy...plant",
                        "proofOfLife": "ipfs://bafy...life",
                    }
                ]
            }
        }


class SessionResponse(BaseModel):
    """Response model for the wallet session."""
    initialized: bool = Field(
        description="Whether a wallet account is connected"
    )
    account: Optional[str] = Field(
        default=None,
        description="Active account address"
    )
    contract_address: Optional[str] = Field(
        default=None,
        description="Address of the bound Tree contract"
    )
    balance: Optional[str] = Field(
        default=None,
        description="Balance of the active account, two decimals"
    )
    mint_state: MintState = Field(
        description="Current state of the mint workflow"
    )

"""
Domain models for tree records and the registration workflow.

These models represent the core domain entities and should be independent
of any infrastructure concerns (web3 providers, contract bindings, etc.).
"""
from enum import Enum
from typing import List, Optional, Sequence
from pydantic import BaseModel, Field, field_validator


class TreeRecord(BaseModel):
    """
    A planted tree as stored by the Tree NFT contract.

    Records read back from the chain are shown as-is, so no constraints are
    placed on the field values here. Inbound submissions use TreeSubmission.
    """
    species: str
    age: str
    location: str
    proof_of_plant: str = Field(
        alias="proofOfPlant",
        description="URI or hash proving the tree was planted"
    )
    proof_of_life: str = Field(
        alias="proofOfLife",
        description="URI or hash proving the tree is alive"
    )

    class Config:
        populate_by_name = True

    @field_validator("age", mode="before")
    @classmethod
    def _age_as_string(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_contract_tuple(cls, values: Sequence) -> "TreeRecord":
        """Build a record from the positional tuple returned by getTreeInfo."""
        if len(values) < 5:
            raise ValueError(f"getTreeInfo returned {len(values)} fields, expected 5")
        species, age, location, proof_of_plant, proof_of_life = (str(v) for v in values[:5])
        return cls(
            species=species,
            age=age,
            location=location,
            proof_of_plant=proof_of_plant,
            proof_of_life=proof_of_life,
        )

    def as_row(self) -> List[str]:
        """Table columns in display order."""
        return [
            self.species,
            self.age,
            self.location,
            self.proof_of_plant,
            self.proof_of_life,
        ]


class TreeSubmission(TreeRecord):
    """Tree attributes submitted for minting; every field is required and non-empty."""
    species: str = Field(min_length=1)
    age: str = Field(min_length=1)
    location: str = Field(min_length=1)
    proof_of_plant: str = Field(
        alias="proofOfPlant",
        min_length=1,
        description="URI or hash proving the tree was planted"
    )
    proof_of_life: str = Field(
        alias="proofOfLife",
        min_length=1,
        description="URI or hash proving the tree is alive"
    )


class RegistrySnapshot(BaseModel):
    """Full listing of minted trees, rebuilt on every load."""
    trees: List[TreeRecord] = Field(default_factory=list)
    total: int = Field(default=0, description="Total supply reported by the contract")
    complete: bool = Field(
        default=True,
        description="False when a read failed and only a prefix was fetched"
    )


class MintState(str, Enum):
    """States of the mint button."""
    IDLE = "idle"
    MINTING = "minting"
    SUCCESS = "success"
    FAILURE = "failure"


class MintOutcome(BaseModel):
    """Result of a single mint submission."""
    state: MintState
    message: str
    account: Optional[str] = None
    transaction_hash: Optional[str] = None

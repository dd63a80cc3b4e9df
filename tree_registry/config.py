"""
Application configuration using Pydantic settings.
"""
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings
from pydantic import Field


PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Wallet provider (JSON-RPC)
    rpc_url: str = Field(
        default="https://alfajores-forno.celo-testnet.org",
        description="JSON-RPC endpoint of the Celo-compatible chain (empty = no provider)"
    )
    rpc_timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds for JSON-RPC requests"
    )
    wallet_private_key: Optional[str] = Field(
        default=None,
        description="Private key used to sign transactions locally. "
                    "When unset, node-managed accounts are used."
    )

    # Tree NFT contract
    contract_address: str = Field(
        default="0x0cc968a21B00F76407F167b0d4D9EAE893FF9FbE",
        description="Address of the deployed Tree NFT contract"
    )
    contract_abi_path: Path = Field(
        default=PACKAGE_DIR / "contract" / "Tree.abi.json",
        description="Path to the Tree NFT contract ABI"
    )
    mint_signature: Literal["implicit", "explicit"] = Field(
        default="implicit",
        description="'implicit' lets the contract assign the token id, "
                    "'explicit' passes the current total supply as token id"
    )
    token_uri: str = Field(
        default="https://ipfs",
        description="Token URI attached to every minted tree"
    )

    # Balance display
    balance_token_address: Optional[str] = Field(
        default="0x874069Fa1Eb16D44d622F2e0Ca25eeA172369bC1",
        description="ERC-20 token shown as balance (cUSD). Unset = native balance"
    )
    token_decimals: int = Field(
        default=18,
        description="Decimals of the balance token"
    )

    # Registry listing
    registry_batch_size: int = Field(
        default=1,
        ge=1,
        description="Number of getTreeInfo reads issued concurrently (1 = sequential)"
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Interface the server binds to"
    )
    port: int = Field(
        default=3000,
        description="Port the server listens on"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    mint_rate_limit: str = Field(
        default="10/minute",
        description="Rate limit applied to mint submissions per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Tree Registry",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()

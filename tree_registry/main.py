"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tree_registry.config import PACKAGE_DIR, settings
from tree_registry.middleware.error_handler import ErrorHandlerMiddleware
from tree_registry.api import pages
from tree_registry.api.rate_limit import limiter
from tree_registry.api.v1.routers import session, trees

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Connects the wallet session on startup and closes the provider on shutdown.
    """
    from tree_registry.infrastructure.wallet_provider import get_wallet_provider
    from tree_registry.services.application.registration_workflow import (
        get_registration_workflow,
    )

    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Chain: rpc_url={settings.rpc_url or '<none>'}, "
                f"contract={settings.contract_address}, mint_signature={settings.mint_signature}")
    logger.info(f"Mint rate limit: {settings.mint_rate_limit}")

    await get_registration_workflow().initialize()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    provider = get_wallet_provider()
    if provider is not None:
        await provider.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Tree registration on a Celo-compatible chain

    Register planted trees as non-fungible tokens and browse the trees
    registered so far.

    ## Features

    - **Mint**: record species, age, location, proof-of-plant and proof-of-life
      of a tree in the Tree NFT contract
    - **Registry**: list every minted tree in token index order
    - **Wallet session**: connect once, show the active account and its
      cUSD balance
    - **Rate Limiting**: protects mint submissions from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include API routers
app.include_router(trees.router, prefix="/api/v1")
app.include_router(session.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


# Static assets, then pages last so the fallback route does not shadow them
app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")
app.include_router(pages.router)


def run():
    """Serve the application with uvicorn."""
    uvicorn.run(
        "tree_registry.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

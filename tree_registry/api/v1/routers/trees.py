"""
API router for tree registry endpoints.
"""
from fastapi import APIRouter, Request

from tree_registry.api.dependencies import WorkflowDep
from tree_registry.api.rate_limit import limiter
from tree_registry.api.v1.models.responses import TreeListResponse
from tree_registry.config import settings
from tree_registry.domain.models import MintOutcome, TreeSubmission


router = APIRouter(
    prefix="/trees",
    tags=["trees"],
)


@router.get(
    "",
    response_model=TreeListResponse,
    summary="List registered trees",
    description="""
    Read every minted tree from the Tree NFT contract.

    Records are returned in token index order. When a read fails part way,
    the records fetched so far are returned with `complete=false`.
    """,
)
async def list_trees(workflow: WorkflowDep) -> TreeListResponse:
    """
    List registered trees.

    Args:
        workflow: Registration workflow (injected dependency)

    Returns:
        TreeListResponse with the registry snapshot
    """
    snapshot = await workflow.load_trees()
    return TreeListResponse(
        total=snapshot.total,
        complete=snapshot.complete,
        trees=snapshot.trees,
    )


@router.post(
    "",
    response_model=MintOutcome,
    summary="Register a tree",
    description="""
    Mint a Tree NFT for the active wallet account.

    Both outcomes are reported in the body: `success` carries the
    transaction hash, `failure` a generic error message. The registry is
    reloaded after a successful mint.
    """,
    responses={
        409: {
            "description": "Another mint transaction is still pending",
        },
        429: {
            "description": "Rate limit exceeded",
        },
    }
)
@limiter.limit(settings.mint_rate_limit)
async def mint_tree(
    request: Request,
    tree: TreeSubmission,
    workflow: WorkflowDep,
) -> MintOutcome:
    """
    Register a tree.

    Args:
        request: Incoming request (used for rate limiting)
        tree: Tree attributes
        workflow: Registration workflow (injected dependency)

    Returns:
        MintOutcome of the submission

    Raises:
        MintInProgressError: If a mint is already in progress (409 via the error middleware)
    """
    return await workflow.mint_tree(tree)

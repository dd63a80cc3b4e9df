"""
HTML pages: landing page with mint form and registry table, intro page.
"""
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from tree_registry.api.dependencies import WorkflowDep
from tree_registry.api.rate_limit import limiter
from tree_registry.config import PACKAGE_DIR, settings
from tree_registry.domain.models import TreeSubmission
from tree_registry.services.application.registration_workflow import (
    MintInProgressError,
    RegistrationWorkflow,
)

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))

router = APIRouter(include_in_schema=False)

RequiredField = Annotated[str, Form(min_length=1)]


def _render_index(
    request: Request,
    workflow: RegistrationWorkflow,
    notice: Optional[str] = None,
    show_outcome: bool = True,
    status_code: int = 200,
) -> HTMLResponse:
    view = workflow.view(notice=notice, show_outcome=show_outcome)
    return templates.TemplateResponse(
        request,
        "index.html",
        {"view": view, "app_name": settings.app_name},
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, workflow: WorkflowDep):
    """Landing page. Every load connects (idempotently) and reloads the registry."""
    await workflow.initialize()
    await workflow.load_trees()
    return _render_index(request, workflow, show_outcome=False)


@router.post("/mint", response_class=HTMLResponse)
@limiter.limit(settings.mint_rate_limit)
async def mint_form(
    request: Request,
    workflow: WorkflowDep,
    species: RequiredField,
    age: RequiredField,
    location: RequiredField,
    proof_of_plant: Annotated[str, Form(alias="proofOfPlant", min_length=1)],
    proof_of_life: Annotated[str, Form(alias="proofOfLife", min_length=1)],
):
    """Mint form submission; re-renders the landing page with the outcome banner."""
    tree = TreeSubmission(
        species=species,
        age=age,
        location=location,
        proof_of_plant=proof_of_plant,
        proof_of_life=proof_of_life,
    )
    try:
        await workflow.mint_tree(tree)
    except MintInProgressError as e:
        logger.warning(f"Rejected mint submission: {e}")
        return _render_index(request, workflow, notice=str(e), status_code=409)
    return _render_index(request, workflow)


@router.get("/intro{rest:path}", response_class=HTMLResponse)
async def intro(request: Request, rest: str):
    """
    Intro page.

    Any path with the /intro prefix is rewritten here, including /intro.html,
    /intro/... and /introduction.
    """
    return templates.TemplateResponse(
        request,
        "intro.html",
        {"app_name": settings.app_name},
    )


@router.get("/{full_path:path}", response_class=HTMLResponse)
async def fallback(request: Request, full_path: str, workflow: WorkflowDep):
    """Unknown page paths fall back to the landing page."""
    if full_path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")
    return await index(request, workflow)

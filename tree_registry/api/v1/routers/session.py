"""
API router for the wallet session.
"""
from fastapi import APIRouter

from tree_registry.api.dependencies import WorkflowDep
from tree_registry.api.v1.models.responses import SessionResponse
from tree_registry.services.application.registration_workflow import RegistrationWorkflow


router = APIRouter(
    prefix="/session",
    tags=["session"],
)


def _session_response(workflow: RegistrationWorkflow) -> SessionResponse:
    session = workflow.session
    return SessionResponse(
        initialized=session.is_initialized,
        account=session.account,
        contract_address=session.contract.address if session.contract else None,
        balance=session.balance,
        mint_state=workflow.state,
    )


@router.get(
    "",
    response_model=SessionResponse,
    summary="Get wallet session",
)
async def get_session(workflow: WorkflowDep) -> SessionResponse:
    """Current wallet session and mint state."""
    return _session_response(workflow)


@router.post(
    "/connect",
    response_model=SessionResponse,
    summary="Connect wallet session",
    description="""
    Connect to the wallet provider and refresh the balance.

    Idempotent: once a session is initialized, further calls only
    refresh the balance.
    """,
)
async def connect_session(workflow: WorkflowDep) -> SessionResponse:
    await workflow.initialize()
    return _session_response(workflow)

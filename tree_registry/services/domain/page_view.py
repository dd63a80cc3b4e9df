"""
Domain service: pure rendering of workflow state into a page view.

The view is computed from state only; templates and API responses
consume the resulting PageView without touching the workflow.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from tree_registry.domain.models import MintOutcome, MintState, RegistrySnapshot


MINT_LABEL = "Mint"
MINTING_LABEL = "Minting..."


class PageView(BaseModel):
    """Everything the landing page displays."""
    button_label: str
    button_disabled: bool
    success_alert: Optional[str] = None
    error_alert: Optional[str] = None
    rows: List[List[str]] = Field(
        default_factory=list,
        description="Registry rows: species, age, location, proofOfPlant, proofOfLife"
    )
    registry_complete: bool = True
    balance: Optional[str] = None
    account: Optional[str] = None


def render_page(
    mint_state: MintState,
    registry: RegistrySnapshot,
    last_outcome: Optional[MintOutcome] = None,
    balance: Optional[str] = None,
    account: Optional[str] = None,
    notice: Optional[str] = None,
) -> PageView:
    """
    Render the landing page for the given state.

    Args:
        mint_state: Current state of the mint button
        registry: Latest registry snapshot
        last_outcome: Result of the most recent mint, if any
        balance: Displayed balance
        account: Active account
        notice: Extra error message that overrides the outcome banner

    Returns:
        PageView for the templates
    """
    minting = mint_state is MintState.MINTING

    success_alert = None
    error_alert = None
    if notice:
        error_alert = notice
    elif last_outcome is not None and not minting:
        if last_outcome.state is MintState.SUCCESS:
            success_alert = last_outcome.message
        elif last_outcome.state is MintState.FAILURE:
            error_alert = last_outcome.message

    return PageView(
        button_label=MINTING_LABEL if minting else MINT_LABEL,
        button_disabled=minting,
        success_alert=success_alert,
        error_alert=error_alert,
        rows=[tree.as_row() for tree in registry.trees],
        registry_complete=registry.complete,
        balance=balance,
        account=account,
    )

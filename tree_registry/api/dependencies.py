"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from tree_registry.services.application.registration_workflow import (
    RegistrationWorkflow,
    get_registration_workflow,
)


# Type alias for cleaner route signatures. The workflow carries the wallet
# session, so routes reach the session through it.
WorkflowDep = Annotated[RegistrationWorkflow, Depends(get_registration_workflow)]

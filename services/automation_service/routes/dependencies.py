# dependencies.py - Shared route dependencies and error mapping

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..automation_engine import AutomationEngine
from ..exceptions import (
    AutomationError, AutomationValidationError, NotFoundError, InactiveWorkflowError,
    UnsupportedActionError, ActionExecutionError
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = [
    (AutomationValidationError, status.HTTP_400_BAD_REQUEST),
    (UnsupportedActionError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InactiveWorkflowError, status.HTTP_409_CONFLICT),
    (ActionExecutionError, status.HTTP_502_BAD_GATEWAY),
]

def get_engine(request: Request) -> AutomationEngine:
    """Get automation engine from app state."""
    if not hasattr(request.app.state, 'automation_engine'):
        raise HTTPException(status_code=500, detail="Automation engine not initialized")
    return request.app.state.automation_engine

def status_code_for(exc: AutomationError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR

async def automation_exception_handler(request: Request, exc: AutomationError):
    """Translate automation errors into JSON responses."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {str(exc)}")

    content = {"detail": str(exc), "error": exc.__class__.__name__}
    if exc.execution_id:
        content["execution_id"] = exc.execution_id

    return JSONResponse(status_code=status_code, content=content)

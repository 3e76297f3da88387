# automations.py - CRUD and execution endpoints for automation workflows
# This file defines the API endpoints for managing and running automation workflows.

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Optional
import logging

from ..models import (
    AutomationWorkflow, AutomationWorkflowCreateRequest, AutomationStatusUpdateRequest,
    AutomationExecuteRequest, AutomationExecution, AutomationAnalytics,
    AutomationStatus, ExecutionResult
)
from ..automation_engine import AutomationEngine
from .dependencies import get_engine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/automations", tags=["automations"])

@router.post("/", response_model=AutomationWorkflow)
async def create_automation(
    request: AutomationWorkflowCreateRequest,
    site_id: Optional[str] = None,
    engine: AutomationEngine = Depends(get_engine)
):
    """Create a new automation workflow (always stored as draft)."""
    site_id = site_id or request.site_id
    if not site_id:
        raise HTTPException(status_code=400, detail="site_id is required")

    return await engine.create_automation_workflow(site_id, request, request.created_by)

@router.get("/", response_model=List[AutomationWorkflow])
async def list_automations(
    site_id: str,
    status: Optional[AutomationStatus] = None,
    engine: AutomationEngine = Depends(get_engine)
):
    """List automation workflows of a site, newest first."""
    return await engine.get_automation_workflows(site_id, status)

@router.get("/{workflow_id}", response_model=AutomationWorkflow)
async def get_automation(
    workflow_id: str,
    engine: AutomationEngine = Depends(get_engine)
):
    return await engine.get_automation_workflow(workflow_id)

@router.patch("/{workflow_id}/status", response_model=AutomationWorkflow)
async def update_automation_status(
    workflow_id: str,
    request: AutomationStatusUpdateRequest,
    engine: AutomationEngine = Depends(get_engine)
):
    return await engine.update_automation_status(workflow_id, request.status)

@router.post("/{workflow_id}/execute", response_model=ExecutionResult)
async def execute_automation(
    workflow_id: str,
    request: AutomationExecuteRequest,
    engine: AutomationEngine = Depends(get_engine)
):
    """Run the workflow's actions synchronously and return their output."""
    result = await engine.execute_automation_workflow(workflow_id, request.trigger, request.input)
    logger.info(f"Executed automation {workflow_id} as {result.execution_id}")
    return result

@router.get("/{workflow_id}/executions", response_model=List[AutomationExecution])
async def list_automation_executions(
    workflow_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    engine: AutomationEngine = Depends(get_engine)
):
    """List executions of a workflow, most recent first."""
    return await engine.get_automation_executions(workflow_id, limit)

@router.get("/{workflow_id}/analytics", response_model=AutomationAnalytics)
async def get_automation_analytics(
    workflow_id: str,
    engine: AutomationEngine = Depends(get_engine)
):
    return await engine.get_automation_analytics(workflow_id)

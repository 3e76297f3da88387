# executions.py - Execution lookup and site monitoring endpoints

from fastapi import APIRouter, Depends
from typing import List

from ..models import AutomationExecution, WorkflowMonitor
from ..automation_engine import AutomationEngine
from .dependencies import get_engine

router = APIRouter(tags=["executions"])

@router.get("/executions/{execution_id}", response_model=AutomationExecution)
async def get_execution(
    execution_id: str,
    engine: AutomationEngine = Depends(get_engine)
):
    """Get specific automation execution details."""
    return await engine.get_automation_execution(execution_id)

@router.get("/monitoring/sites/{site_id}", response_model=List[WorkflowMonitor])
async def monitor_site(
    site_id: str,
    engine: AutomationEngine = Depends(get_engine)
):
    """Analytics and recent executions for every active automation of a site."""
    return await engine.monitor_automation_workflows(site_id)

# templates.py - Automation template catalog endpoints

from fastapi import APIRouter, Depends
from typing import List

from ..models import (
    AutomationTemplate, AutomationTemplateCreateRequest, AutomationWorkflow,
    TemplateWorkflowCreateRequest
)
from ..automation_engine import AutomationEngine
from .dependencies import get_engine

router = APIRouter(prefix="/templates", tags=["templates"])

@router.get("/", response_model=List[AutomationTemplate])
async def list_templates(engine: AutomationEngine = Depends(get_engine)):
    return await engine.get_automation_templates()

@router.post("/", response_model=AutomationTemplate)
async def create_template(
    request: AutomationTemplateCreateRequest,
    engine: AutomationEngine = Depends(get_engine)
):
    return await engine.create_automation_template(request)

@router.post("/{template_id}/workflows", response_model=AutomationWorkflow)
async def create_workflow_from_template(
    template_id: str,
    request: TemplateWorkflowCreateRequest,
    engine: AutomationEngine = Depends(get_engine)
):
    """Create a draft workflow from a catalog template."""
    return await engine.create_workflow_from_template(template_id, request)

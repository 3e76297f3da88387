# events.py - Inbound business events
# Business events (lead created, email opened, ...) fan out to matching automations.

from fastapi import APIRouter, Depends
from typing import List
import logging

from ..models import AutomationEventRequest, EventDispatchResult
from ..automation_engine import AutomationEngine
from .dependencies import get_engine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/events", tags=["events"])

@router.post("/", response_model=List[EventDispatchResult])
async def receive_event(
    request: AutomationEventRequest,
    engine: AutomationEngine = Depends(get_engine)
):
    """Run every active automation of the site whose triggers match the event."""
    logger.info(f"Received {request.trigger.value} event for site {request.site_id}")
    return await engine.dispatch_event(request.site_id, request.trigger.value, request.payload)

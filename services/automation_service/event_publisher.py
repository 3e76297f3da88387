# services/automation_service/event_publisher.py
# Analytics event publishing for the automation service

import httpx
import logging
from typing import Dict, Any, Optional

from .models import AnalyticsEvent
from .config import settings

logger = logging.getLogger(__name__)

WORKFLOW_CREATED = "automation_workflow_created"
STATUS_UPDATED = "automation_status_updated"
EXECUTED = "automation_executed"
EXECUTION_FAILED = "automation_execution_failed"

class AnalyticsEventPublisher:
    """Sends analytics events to the analytics sink. Fire-and-forget."""

    def __init__(self, sink_url: Optional[str] = None, enabled: Optional[bool] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.sink_url = sink_url or settings.analytics_sink_url
        self.enabled = settings.analytics_enabled if enabled is None else enabled
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.analytics_timeout)

    async def publish(self, metric: str, site_id: str,
                      metadata: Optional[Dict[str, Any]] = None) -> AnalyticsEvent:
        event = AnalyticsEvent(metric=metric, site_id=site_id, metadata=metadata or {})
        await self._send_to_sink(event)
        return event

    async def publish_workflow_created(self, site_id: str, workflow_id: str, automation_type: str):
        return await self.publish(WORKFLOW_CREATED, site_id,
                                  {"workflow_id": workflow_id, "type": automation_type})

    async def publish_status_updated(self, site_id: str, workflow_id: str, status: str):
        return await self.publish(STATUS_UPDATED, site_id,
                                  {"workflow_id": workflow_id, "status": status})

    async def publish_executed(self, site_id: str, workflow_id: str, execution_id: str, trigger: str):
        return await self.publish(EXECUTED, site_id, {
            "workflow_id": workflow_id,
            "execution_id": execution_id,
            "trigger": trigger
        })

    async def publish_execution_failed(self, site_id: str, workflow_id: str, execution_id: str,
                                       trigger: str, error: str):
        return await self.publish(EXECUTION_FAILED, site_id, {
            "workflow_id": workflow_id,
            "execution_id": execution_id,
            "trigger": trigger,
            "error": error
        })

    async def _send_to_sink(self, event: AnalyticsEvent):
        if not self.enabled:
            return

        try:
            response = await self.http_client.post(
                f"{self.sink_url}/analytics/events",
                json=event.model_dump(mode="json")
            )
            response.raise_for_status()

        except Exception as e:
            logger.warning(f"Failed to send analytics event {event.metric} to sink: {str(e)}")

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

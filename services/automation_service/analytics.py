# analytics.py - Execution history aggregation
# This file derives per-workflow success rates, durations and performance counters.

import logging
from typing import List, Optional

from .models import (
    AutomationAnalytics, AutomationExecution, AutomationStatus, ExecutionStatus,
    PerformanceMetrics, WorkflowMonitor, ActionType
)
from .automation_registry import WorkflowStore, ExecutionStore
from .config import settings

logger = logging.getLogger(__name__)

def _count_with_output(executions: List[AutomationExecution], action_type: ActionType) -> int:
    return sum(1 for e in executions if e.output and action_type.value in e.output)

def compute_automation_analytics(workflow_id: str,
                                 executions: List[AutomationExecution]) -> AutomationAnalytics:
    """Summarize an execution history (expected most recent first)."""
    total = len(executions)
    successful = sum(1 for e in executions if e.status == ExecutionStatus.COMPLETED)
    failed = sum(1 for e in executions if e.status == ExecutionStatus.FAILED)

    durations = [e.duration_ms for e in executions if e.duration_ms is not None]
    average_execution_time = sum(durations) / len(durations) if durations else 0.0
    success_rate = successful / total * 100 if total > 0 else 0.0

    # Coarse proxies: an execution counts once per action type present in its output
    performance_metrics = PerformanceMetrics(
        emails_sent=_count_with_output(executions, ActionType.SEND_EMAIL),
        sms_sent=_count_with_output(executions, ActionType.SEND_SMS),
        tasks_created=_count_with_output(executions, ActionType.CREATE_TASK),
        leads_converted=_count_with_output(executions, ActionType.UPDATE_LEAD),
        social_posts=_count_with_output(executions, ActionType.POST_SOCIAL),
        webhooks_sent=_count_with_output(executions, ActionType.SEND_WEBHOOK),
        revenue_generated=0.0,
        engagement_rate=success_rate,
    )

    return AutomationAnalytics(
        workflow_id=workflow_id,
        total_executions=total,
        successful_executions=successful,
        failed_executions=failed,
        average_execution_time=average_execution_time,
        success_rate=success_rate,
        last_execution=executions[0].started_at if executions else None,
        next_execution=None,
        performance_metrics=performance_metrics,
    )

class AnalyticsAggregator:
    def __init__(self, workflow_store: WorkflowStore, execution_store: ExecutionStore):
        self.workflow_store = workflow_store
        self.execution_store = execution_store

    async def get_analytics(self, workflow_id: str) -> AutomationAnalytics:
        executions = await self.execution_store.list_executions(workflow_id)
        return compute_automation_analytics(workflow_id, executions)

    async def monitor(self, site_id: str, recent: Optional[int] = None) -> List[WorkflowMonitor]:
        """Analytics plus recent executions for every active workflow of a site."""
        recent = recent or settings.monitor_recent_executions
        workflows = await self.workflow_store.list_workflows(site_id, status=AutomationStatus.ACTIVE)
        monitoring_data = []

        for workflow in workflows:
            analytics = await self.get_analytics(workflow.id)
            recent_executions = await self.execution_store.list_executions(workflow.id, recent)

            monitoring_data.append(WorkflowMonitor(
                workflow_id=workflow.id,
                workflow_name=workflow.name,
                status=workflow.status,
                is_active=workflow.is_active,
                analytics=analytics,
                recent_executions=recent_executions,
                last_execution=recent_executions[0].started_at if recent_executions else None,
                next_execution=None,
            ))

        logger.info(f"Monitored {len(monitoring_data)} active automations for site {site_id}")
        return monitoring_data

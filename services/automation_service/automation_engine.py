# automation_engine.py - Core execution engine for marketing automation workflows
# This file owns the trigger -> condition -> action pipeline and the workflow lifecycle.

import logging
from datetime import datetime
from typing import Dict, List, Optional, Any

from .models import (
    AutomationWorkflow, AutomationWorkflowCreateRequest, AutomationStatus,
    AutomationExecution, AutomationAnalytics, AutomationTemplate,
    AutomationTemplateCreateRequest, TemplateWorkflowCreateRequest,
    ExecutionResult, EventDispatchResult, WorkflowMonitor
)
from .automation_registry import WorkflowStore, ExecutionStore
from .action_dispatcher import ActionDispatcher
from .execution_tracker import ExecutionTracker
from .analytics import AnalyticsAggregator
from .event_publisher import AnalyticsEventPublisher
from .condition_evaluator import mapping_matches
from .exceptions import (
    AutomationError, AutomationValidationError, NotFoundError, InactiveWorkflowError
)
from . import templates
from .config import settings

logger = logging.getLogger(__name__)

class AutomationEngine:
    """Marketing automation engine with explicitly injected collaborators."""

    def __init__(self, workflow_store: WorkflowStore, execution_store: ExecutionStore,
                 dispatcher: ActionDispatcher, publisher: AnalyticsEventPublisher):
        self.workflow_store = workflow_store
        self.dispatcher = dispatcher
        self.publisher = publisher
        self.tracker = ExecutionTracker(execution_store)
        self.aggregator = AnalyticsAggregator(workflow_store, execution_store)

    # =========================
    # WORKFLOW LIFECYCLE
    # =========================

    async def create_automation_workflow(self, site_id: str, request: AutomationWorkflowCreateRequest,
                                         created_by: str) -> AutomationWorkflow:
        """Validate and store a new workflow. New workflows always start as DRAFT."""
        if not request.triggers:
            raise AutomationValidationError("Automation workflow must have at least one trigger")
        if not request.actions:
            raise AutomationValidationError("Automation workflow must have at least one action")
        for action in request.actions:
            if not self.dispatcher.supports(action.type):
                logger.warning(f"Action type {action.type} has no registered handler; executions will fail")

        workflow = AutomationWorkflow(
            name=request.name,
            description=request.description,
            type=request.type,
            status=AutomationStatus.DRAFT,
            triggers=request.triggers,
            actions=request.actions,
            conditions=request.conditions,
            is_active=request.is_active,
            site_id=site_id,
            created_by=created_by
        )
        await self.workflow_store.create_workflow(workflow)

        await self.publisher.publish_workflow_created(site_id, workflow.id, workflow.type.value)
        logger.info(f"Created automation workflow {workflow.id}: {workflow.name}")
        return workflow

    async def get_automation_workflows(self, site_id: str,
                                       status: Optional[AutomationStatus] = None) -> List[AutomationWorkflow]:
        return await self.workflow_store.list_workflows(site_id, status)

    async def get_automation_workflow(self, workflow_id: str) -> AutomationWorkflow:
        workflow = await self.workflow_store.get_workflow(workflow_id)
        if not workflow:
            raise NotFoundError("Automation workflow not found")
        return workflow

    async def update_automation_status(self, workflow_id: str,
                                       status: AutomationStatus) -> AutomationWorkflow:
        """Move a workflow to any status. Transitions are not restricted."""
        workflow = await self.get_automation_workflow(workflow_id)
        previous = workflow.status
        workflow.status = status
        workflow.updated_at = datetime.utcnow()
        await self.workflow_store.update_workflow(workflow)

        await self.publisher.publish_status_updated(workflow.site_id, workflow_id, status.value)
        logger.info(f"Automation {workflow_id} status {previous.value} -> {status.value}")
        return workflow

    # =========================
    # EXECUTION
    # =========================

    async def execute_automation_workflow(self, workflow_id: str, trigger: str,
                                          input_data: Optional[Dict[str, Any]] = None) -> ExecutionResult:
        """Run every action of an active workflow in declared order.

        The first failing action stops the run: later actions are not invoked,
        the execution is stored as FAILED with the output gathered so far, and
        the action's error is re-raised. Already performed actions are not
        compensated.
        """
        workflow = await self.get_automation_workflow(workflow_id)
        if not workflow.is_runnable:
            raise InactiveWorkflowError()

        input_data = input_data or {}
        execution = await self.tracker.open_execution(workflow, trigger, input_data)
        output: Dict[str, Any] = {}

        try:
            for action in workflow.actions:
                if action.conditions and not mapping_matches(action.conditions, input_data):
                    logger.info(f"Action {action.type} skipped in execution {execution.id}: conditions not met")
                    continue

                output[action.type] = await self.dispatcher.execute(action, input_data)

        except Exception as e:
            error = str(e) or e.__class__.__name__
            if isinstance(e, AutomationError):
                e.execution_id = execution.id
            try:
                await self.tracker.fail_execution(execution, error, output)
            except Exception as record_error:
                # The action error is what the caller must see
                logger.error(f"Failed to record failure of execution {execution.id}: {str(record_error)}")
            await self.publisher.publish_execution_failed(
                workflow.site_id, workflow_id, execution.id, trigger, error
            )
            raise

        await self.tracker.complete_execution(execution, output)
        await self.publisher.publish_executed(workflow.site_id, workflow_id, execution.id, trigger)

        return ExecutionResult(execution_id=execution.id, status="completed", output=output)

    async def dispatch_event(self, site_id: str, trigger: str,
                             payload: Optional[Dict[str, Any]] = None) -> List[EventDispatchResult]:
        """Execute every active workflow of a site whose triggers match an inbound event."""
        payload = payload or {}
        results = []

        for workflow in await self.find_matching_workflows(site_id, trigger, payload):
            try:
                result = await self.execute_automation_workflow(workflow.id, trigger, payload)
                results.append(EventDispatchResult(
                    workflow_id=workflow.id,
                    execution_id=result.execution_id,
                    status="completed"
                ))
            except AutomationError as e:
                logger.error(f"Automation {workflow.id} failed on {trigger}: {str(e)}")
                results.append(EventDispatchResult(
                    workflow_id=workflow.id,
                    execution_id=e.execution_id,
                    status="failed",
                    error=str(e)
                ))

        logger.info(f"Event {trigger} for site {site_id} ran {len(results)} automations")
        return results

    async def find_matching_workflows(self, site_id: str, trigger: str,
                                      payload: Dict[str, Any]) -> List[AutomationWorkflow]:
        candidates = await self.workflow_store.list_workflows(site_id, AutomationStatus.ACTIVE)
        matched = []

        for workflow in candidates:
            if not workflow.is_runnable:
                continue
            if workflow.conditions and not mapping_matches(workflow.conditions, payload):
                continue
            # Schedules are informational; every trigger fires immediately
            if any(t.type.value == trigger and mapping_matches(t.conditions, payload)
                   for t in workflow.triggers):
                matched.append(workflow)

        return matched

    # =========================
    # EXECUTION HISTORY & ANALYTICS
    # =========================

    async def get_automation_executions(self, workflow_id: str,
                                        limit: Optional[int] = None) -> List[AutomationExecution]:
        await self.get_automation_workflow(workflow_id)
        return await self.tracker.list_executions(workflow_id, limit or settings.default_execution_limit)

    async def get_automation_execution(self, execution_id: str) -> AutomationExecution:
        return await self.tracker.get_execution(execution_id)

    async def get_automation_analytics(self, workflow_id: str) -> AutomationAnalytics:
        await self.get_automation_workflow(workflow_id)
        return await self.aggregator.get_analytics(workflow_id)

    async def monitor_automation_workflows(self, site_id: str) -> List[WorkflowMonitor]:
        return await self.aggregator.monitor(site_id)

    # =========================
    # TEMPLATES
    # =========================

    async def get_automation_templates(self) -> List[AutomationTemplate]:
        return templates.get_automation_templates()

    async def create_automation_template(self, request: AutomationTemplateCreateRequest) -> AutomationTemplate:
        return templates.create_automation_template(request)

    async def create_workflow_from_template(self, template_id: str,
                                            request: TemplateWorkflowCreateRequest) -> AutomationWorkflow:
        template = templates.find_template(template_id)
        if not template:
            raise NotFoundError("Automation template not found")

        workflow_request = AutomationWorkflowCreateRequest(
            name=request.name or template.name,
            description=template.description,
            type=template.type,
            triggers=template.triggers,
            actions=template.actions,
            is_active=request.is_active
        )
        return await self.create_automation_workflow(request.site_id, workflow_request, request.created_by)

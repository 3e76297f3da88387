# conftest.py - In-memory collaborators for automation service tests

import asyncio
from collections import defaultdict
from unittest.mock import MagicMock

import pytest

from services.automation_service.automation_registry import WorkflowStore, ExecutionStore
from services.automation_service.action_dispatcher import ActionDispatcher
from services.automation_service.automation_engine import AutomationEngine
from services.automation_service.capabilities import (
    Capabilities, EmailSender, SMSSender, TaskCreator, LeadUpdater, SegmentManager,
    SocialPoster, CampaignCreator, WebhookCaller
)
from services.automation_service.event_publisher import AnalyticsEventPublisher
from services.automation_service.models import (
    AutomationWorkflowCreateRequest, AutomationStatus, AutomationType
)

class InMemoryAutomationStore(WorkflowStore, ExecutionStore):
    def __init__(self):
        self.workflows = {}
        self.executions = {}
        self.execution_writes = defaultdict(list)
        self.workflow_writes = 0

    async def create_workflow(self, workflow):
        self.workflow_writes += 1
        self.workflows[workflow.id] = workflow.model_copy(deep=True)
        return workflow

    async def get_workflow(self, workflow_id):
        workflow = self.workflows.get(workflow_id)
        return workflow.model_copy(deep=True) if workflow else None

    async def update_workflow(self, workflow):
        self.workflow_writes += 1
        self.workflows[workflow.id] = workflow.model_copy(deep=True)
        return workflow

    async def list_workflows(self, site_id, status=None):
        workflows = [
            w.model_copy(deep=True) for w in self.workflows.values()
            if w.site_id == site_id and (status is None or w.status == status)
        ]
        return sorted(workflows, key=lambda w: w.created_at, reverse=True)

    async def create_execution(self, execution):
        assert execution.id not in self.executions
        self.execution_writes[execution.id].append(execution.status)
        self.executions[execution.id] = execution.model_copy(deep=True)
        return execution

    async def get_execution(self, execution_id):
        execution = self.executions.get(execution_id)
        return execution.model_copy(deep=True) if execution else None

    async def update_execution(self, execution):
        assert execution.id in self.executions
        self.execution_writes[execution.id].append(execution.status)
        self.executions[execution.id] = execution.model_copy(deep=True)
        return execution

    async def list_executions(self, automation_id, limit=None):
        executions = sorted(
            (e.model_copy(deep=True) for e in self.executions.values() if e.automation_id == automation_id),
            key=lambda e: e.started_at,
            reverse=True
        )
        return executions if limit is None else executions[:limit]

class RecordingPublisher(AnalyticsEventPublisher):
    def __init__(self):
        super().__init__(sink_url="http://analytics.test", enabled=True, http_client=MagicMock())
        self.events = []

    async def _send_to_sink(self, event):
        self.events.append(event)

    @property
    def metrics(self):
        return [event.metric for event in self.events]

class RecordingProviders(EmailSender, SMSSender, TaskCreator, LeadUpdater, SegmentManager,
                         SocialPoster, CampaignCreator, WebhookCaller):
    """Every capability in one object, recording calls in order."""

    def __init__(self):
        self.calls = []
        self.failures = {}
        self.webhook_status = 200

    def _record(self, name, *args):
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]
        return f"{name}-{len(self.calls)}"

    async def send_email(self, recipient, subject, template, content=None):
        return self._record("send_email", recipient, subject, template)

    async def send_sms(self, phone_number, message):
        return self._record("send_sms", phone_number, message)

    async def create_task(self, title, description, assignee, due_date=None):
        return self._record("create_task", title, description, assignee)

    async def update_lead(self, lead_id, updates):
        return self._record("update_lead", lead_id, updates)

    async def add_to_segment(self, lead_id, segment_id):
        return self._record("add_to_segment", lead_id, segment_id)

    async def remove_from_segment(self, lead_id, segment_id):
        return self._record("remove_from_segment", lead_id, segment_id)

    async def post(self, platform, content, image=None):
        return self._record("post_social", platform, content)

    async def create_campaign(self, name, campaign_type, target_audience, budget):
        return self._record("create_campaign", name, campaign_type)

    async def call(self, url, method, headers, body):
        self._record("send_webhook", url, method, body)
        return self.webhook_status

    @property
    def call_names(self):
        return [name for name, _ in self.calls]

def run(coro):
    return asyncio.run(coro)

def workflow_request(**overrides):
    data = {
        "name": "Welcome Email Series",
        "description": "Automated welcome emails for new leads",
        "type": AutomationType.LEAD_NURTURING,
        "triggers": [{"type": "lead_created", "conditions": {"source": "website"}}],
        "actions": [{"type": "send_email", "parameters": {"template": "welcome-1"}}],
        "conditions": {},
        "is_active": True,
    }
    data.update(overrides)
    return AutomationWorkflowCreateRequest(**data)

@pytest.fixture
def store():
    return InMemoryAutomationStore()

@pytest.fixture
def publisher():
    return RecordingPublisher()

@pytest.fixture
def providers():
    return RecordingProviders()

@pytest.fixture
def dispatcher(providers):
    capabilities = Capabilities(
        email=providers, sms=providers, tasks=providers, leads=providers,
        segments=providers, social=providers, campaigns=providers, webhooks=providers
    )
    return ActionDispatcher(capabilities)

@pytest.fixture
def engine(store, dispatcher, publisher):
    return AutomationEngine(
        workflow_store=store,
        execution_store=store,
        dispatcher=dispatcher,
        publisher=publisher
    )

@pytest.fixture
def create_active_workflow(engine):
    """Create a workflow and activate it."""
    def _create(site_id="site-1", **overrides):
        workflow = run(engine.create_automation_workflow(site_id, workflow_request(**overrides), "user-1"))
        return run(engine.update_automation_status(workflow.id, AutomationStatus.ACTIVE))
    return _create
